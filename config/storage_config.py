# ============================================================================
# STORAGE CONFIGURATION
# ============================================================================
# STATUS: Config - Azure Blob Storage / local-only mode
# PURPOSE: Where feeds and artifacts are persisted
# EXPORTS: StorageConfig, parse_artifact_aliases
# PYDANTIC_MODELS: StorageConfig
# DEPENDENCIES: pydantic, os
# SOURCE: Environment variables (STORAGE_ACCOUNT_NAME, STORAGE_CONNECTION_STRING,
#         PACKAGE_CONTAINER, LOCAL_STORAGE_FOLDER, ARTIFACT_EXTENSION, ARTIFACT_ALIASES)
# ============================================================================

"""
Azure Storage Configuration - Remote vs Local-Only Persistence

Two deployment modes:

1. Remote (STORAGE_ACCOUNT_NAME or STORAGE_CONNECTION_STRING set):
   Feeds are mirrored to blob storage (plain + gzip), artifacts are uploaded
   to PACKAGE_CONTAINER.

2. Local-only (neither set):
   Feeds live only in their working copies; artifacts are copied into
   LOCAL_STORAGE_FOLDER, overwriting any existing file of the same name.
"""

import os
from typing import Dict, Optional
from pydantic import BaseModel, Field

from .defaults import StorageDefaults


def parse_artifact_aliases(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse "name=alias,name2=alias2" into {name.lower(): alias}.

    Entries without '=' or with an empty side are ignored.

    Example:
        parse_artifact_aliases("coapp=coapp.msi, coapp.devtools=coapp.devtools.msi")
        → {'coapp': 'coapp.msi', 'coapp.devtools': 'coapp.devtools.msi'}
    """
    aliases: Dict[str, str] = {}
    if not raw:
        return aliases
    for pair in raw.split(","):
        if "=" not in pair:
            continue
        name, alias = (part.strip() for part in pair.split("=", 1))
        if name and alias:
            aliases[name.lower()] = alias
    return aliases


class StorageConfig(BaseModel):
    """
    Blob storage coordinates and artifact naming.

    Attributes:
        account_name: Storage account for DefaultAzureCredential auth
        connection_string: Alternative to account_name (takes precedence)
        package_container: Container holding feeds and artifacts
        local_storage_folder: Artifact folder when running local-only
        artifact_extension: Suffix appended to canonical artifact names
        artifact_aliases: package name -> extra well-known blob name
    """
    account_name: Optional[str] = Field(
        default=None,
        description="Azure Storage account name (None = local-only mode)"
    )
    connection_string: Optional[str] = Field(
        default=None,
        description="Azure Storage connection string (overrides account_name)"
    )
    package_container: str = Field(
        default=StorageDefaults.PACKAGE_CONTAINER,
        description="Blob container for feed documents and package artifacts"
    )
    local_storage_folder: Optional[str] = Field(
        default=None,
        description="Local artifact folder used when no remote storage is configured"
    )
    artifact_extension: str = Field(
        default=StorageDefaults.ARTIFACT_EXTENSION,
        description="File extension for stored artifacts"
    )
    artifact_aliases: Dict[str, str] = Field(
        default_factory=dict,
        description="Package name → additional blob name (e.g. coapp → coapp.msi)"
    )

    @property
    def is_remote(self) -> bool:
        """True when feeds and artifacts go to blob storage."""
        return bool(self.account_name or self.connection_string)

    def debug_dict(self) -> dict:
        """Sanitized view for diagnostics."""
        return {
            'account_name': self.account_name,
            'connection_string': '***MASKED***' if self.connection_string else None,
            'package_container': self.package_container,
            'local_storage_folder': self.local_storage_folder,
            'artifact_extension': self.artifact_extension,
            'artifact_aliases': self.artifact_aliases,
            'mode': 'remote' if self.is_remote else 'local-only',
        }

    @classmethod
    def from_environment(cls) -> "StorageConfig":
        """Load storage settings from environment."""
        return cls(
            account_name=os.environ.get("STORAGE_ACCOUNT_NAME") or None,
            connection_string=os.environ.get("STORAGE_CONNECTION_STRING") or None,
            package_container=os.environ.get("PACKAGE_CONTAINER", StorageDefaults.PACKAGE_CONTAINER),
            local_storage_folder=os.environ.get("LOCAL_STORAGE_FOLDER") or None,
            artifact_extension=os.environ.get("ARTIFACT_EXTENSION", StorageDefaults.ARTIFACT_EXTENSION),
            artifact_aliases=parse_artifact_aliases(os.environ.get("ARTIFACT_ALIASES")),
        )
