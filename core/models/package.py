"""
Package Models.

Outputs of the package validator and the transient upload record.

Exports:
    PackageIdentity: Recognized package (canonical name + source file)
    PackageMetadata: Full details fetched for a recognized package
    UploadedArtifact: Temp file owned by the intake pipeline
"""

from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, Field

from .catalog import CanonicalName


class PackageIdentity(BaseModel):
    """A file the validator recognized as a package."""
    canonical_name: CanonicalName
    source_path: Optional[str] = Field(default=None, description="File the identity was read from")


class PackageMetadata(BaseModel):
    """
    Package details used for the announcement text and catalog entry titles.
    """
    canonical_name: CanonicalName
    display_name: Optional[str] = None
    summary: str = Field(default="", description="One-line summary description")
    description: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or self.canonical_name.name


@dataclass
class UploadedArtifact:
    """
    Temp copy of an upload.

    Exclusively owned by the intake pipeline; deleted once intake finishes,
    whatever the outcome.
    """
    path: str
    size: int
    source: str = "upload"  # "upload" or the remote URL it was fetched from
