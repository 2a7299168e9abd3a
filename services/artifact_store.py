# ============================================================================
# ARTIFACT STORE
# ============================================================================
# STATUS: Service - permanent package artifact storage
# PURPOSE: Derive the canonical artifact name and public URL, write the
#          artifact to blob storage (plus alias copies) or a local folder
# EXPORTS: ArtifactStore, StoredArtifact
# DEPENDENCIES: infrastructure.blob, shutil
# ============================================================================
"""
Artifact Store.

Destination name:  f"{name}{flavor}-{version}-{architecture}{extension}".lower()
Public location:   urljoin(package_prefix_url, destination name)

Remote mode uploads to the package container and, when the package name has
an entry in ARTIFACT_ALIASES, uploads the same bytes again under the alias.
Local-only mode copies into LOCAL_STORAGE_FOLDER, overwriting.
"""

import os
import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urljoin

from config import FeedHandlerConfig
from config.defaults import StorageDefaults
from core.models.catalog import CanonicalName
from infrastructure.blob import IBlobRepository
from util_logger import LoggerFactory, ComponentType, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ArtifactStore")


@dataclass
class StoredArtifact:
    name: str
    location: str
    blob_names: List[str] = field(default_factory=list)
    local_path: Optional[str] = None


class ArtifactStore:

    def __init__(
        self,
        blob_repo: Optional[IBlobRepository] = None,
        extension: str = StorageDefaults.ARTIFACT_EXTENSION,
        aliases: Optional[Dict[str, str]] = None
    ):
        self.blob_repo = blob_repo
        self.extension = extension
        self.aliases = {name.lower(): alias for name, alias in (aliases or {}).items()}

    def destination_name(self, canonical_name: CanonicalName) -> str:
        return canonical_name.artifact_name(self.extension)

    def location_for(self, config: FeedHandlerConfig, canonical_name: CanonicalName) -> str:
        return urljoin(config.package_prefix_url, self.destination_name(canonical_name))

    @log_exceptions(ComponentType.SERVICE, "ArtifactStore")
    def store(self, config: FeedHandlerConfig, canonical_name: CanonicalName, src_path: str) -> StoredArtifact:
        """
        Write the artifact at src_path to permanent storage.

        Raises:
            Exception: Blob upload or local copy failed (intake aborts)
        """
        name = self.destination_name(canonical_name)
        stored = StoredArtifact(name=name, location=self.location_for(config, canonical_name))

        if self.blob_repo is not None and config.is_remote:
            targets = [name]
            alias = self.aliases.get(canonical_name.name.lower())
            if alias:
                targets.append(alias)
            for blob_name in targets:
                self.blob_repo.upload_file(
                    config.container,
                    blob_name,
                    src_path,
                    content_type=StorageDefaults.ARTIFACT_CONTENT_TYPE,
                )
                stored.blob_names.append(blob_name)
            logger.info(f"Stored {canonical_name} as {stored.blob_names} in '{config.container}'")

        elif config.local_storage_folder:
            os.makedirs(config.local_storage_folder, exist_ok=True)
            dest = os.path.join(config.local_storage_folder, name)
            shutil.copyfile(src_path, dest)
            stored.local_path = dest
            logger.info(f"Stored {canonical_name} locally at {dest}")

        else:
            logger.warning(
                f"No blob storage or LOCAL_STORAGE_FOLDER configured; {name} not persisted"
            )

        return stored
