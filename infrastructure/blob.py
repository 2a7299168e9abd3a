# ============================================================================
# BLOB REPOSITORY
# ============================================================================
# STATUS: Infrastructure - Azure Blob Storage repository
# PURPOSE: Remote persistence for feed documents and package artifacts
# EXPORTS: IBlobRepository, BlobRepository
# INTERFACES: IBlobRepository for dependency injection
# DEPENDENCIES: azure-storage-blob, azure-identity, gzip
# PATTERNS: Repository, DefaultAzureCredential, container client cache
# ENTRY_POINTS: RepositoryFactory.create_blob_repository()
# ============================================================================

"""
Blob Storage Repository - Central Authentication Point

All blob traffic (feed documents in two encodings, package artifacts and
their alias copies) goes through this repository.

Authentication:
    1. STORAGE_CONNECTION_STRING, when set
    2. DefaultAzureCredential against https://<account>.blob.core.windows.net
       (environment, managed identity, Azure CLI, ...)

Usage:
    from infrastructure import RepositoryFactory

    blob_repo = RepositoryFactory.create_blob_repository(config.storage)
    blob_repo.upload_file('packages', 'current.feed.xml', '/tmp/current.feed.xml',
                          compressed=True)
"""

import gzip
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, Optional, Union

from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings
from azure.identity import DefaultAzureCredential
from azure.core.exceptions import AzureError, ResourceNotFoundError

from exceptions import TransientFault
from util_logger import LoggerFactory, ComponentType
from .local_files import atomic_write_bytes

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, __name__)


# ============================================================================
# BLOB REPOSITORY INTERFACE
# ============================================================================

class IBlobRepository(ABC):
    """
    Interface for blob storage operations.

    Enables dependency injection and in-memory fakes in tests.
    """

    @abstractmethod
    def read_blob(self, container: str, blob_path: str) -> bytes:
        """Read entire blob to memory"""
        pass

    @abstractmethod
    def write_blob(self, container: str, blob_path: str, data: Union[bytes, BinaryIO],
                   overwrite: bool = True, content_type: str = "application/octet-stream",
                   content_encoding: Optional[str] = None) -> Dict[str, Any]:
        """Write blob from bytes or stream"""
        pass

    def download_to_file(self, container: str, blob_path: str, dest_path: str) -> int:
        """
        Download a blob into a local file, replacing it.

        Returns:
            Number of bytes written

        Raises:
            ResourceNotFoundError: Blob does not exist (local file untouched)
        """
        data = self.read_blob(container, blob_path)
        atomic_write_bytes(dest_path, data)
        return len(data)

    def upload_file(self, container: str, blob_path: str, src_path: str,
                    compressed: bool = False,
                    content_type: str = "application/octet-stream") -> Dict[str, Any]:
        """
        Upload a local file, optionally gzip-compressed.

        Compressed uploads carry content_encoding="gzip" so HTTP clients can
        transparently decode them.
        """
        with open(src_path, "rb") as f:
            data = f.read()
        if compressed:
            data = gzip.compress(data)
        return self.write_blob(
            container,
            blob_path,
            data,
            overwrite=True,
            content_type=content_type,
            content_encoding="gzip" if compressed else None,
        )


# ============================================================================
# BLOB REPOSITORY IMPLEMENTATION
# ============================================================================

class BlobRepository(IBlobRepository):
    """
    Azure Blob Storage repository.

    One instance per process is built by RepositoryFactory and shared by
    every feed handler; container clients are cached per container name.
    """

    def __init__(self, connection_string: Optional[str] = None, storage_account: Optional[str] = None):
        """
        Args:
            connection_string: Connection string (takes precedence)
            storage_account: Storage account name for DefaultAzureCredential
        """
        try:
            if connection_string:
                logger.info("Initializing BlobRepository with connection string")
                self.blob_service = BlobServiceClient.from_connection_string(connection_string)
                self.storage_account = self.blob_service.account_name
            elif storage_account:
                self.storage_account = storage_account
                self.account_url = f"https://{storage_account}.blob.core.windows.net"
                logger.info(f"Initializing BlobRepository with DefaultAzureCredential for account: {storage_account}")
                self.credential = DefaultAzureCredential()
                self.blob_service = BlobServiceClient(
                    account_url=self.account_url,
                    credential=self.credential
                )
            else:
                raise ValueError("BlobRepository requires a connection string or a storage account name")

            self._container_clients: Dict[str, ContainerClient] = {}
            logger.info(f"✅ BlobRepository initialized for account: {self.storage_account}")

        except Exception as e:
            logger.error(f"Failed to initialize BlobRepository: {e}")
            raise

    def _get_container_client(self, container: str) -> ContainerClient:
        """Get or create cached container client."""
        if container not in self._container_clients:
            self._container_clients[container] = self.blob_service.get_container_client(container)
            logger.debug(f"Created new container client for: {container}")
        return self._container_clients[container]

    # ========================================================================
    # CORE BLOB OPERATIONS
    # ========================================================================

    def read_blob(self, container: str, blob_path: str) -> bytes:
        """
        Read entire blob to memory.

        Raises:
            ResourceNotFoundError: If blob doesn't exist
            TransientFault: Any other storage or transport failure
        """
        try:
            blob_client = self._get_container_client(container).get_blob_client(blob_path)
            logger.debug(f"Reading blob: {container}/{blob_path}")
            data = blob_client.download_blob().readall()
            logger.debug(f"Read {len(data)} bytes from {container}/{blob_path}")
            return data

        except ResourceNotFoundError:
            logger.warning(f"Blob not found: {container}/{blob_path}")
            raise
        except AzureError as e:
            logger.error(f"Failed to read blob {container}/{blob_path}: {e}")
            raise TransientFault(f"Blob read failed for {container}/{blob_path}: {e}") from e

    def write_blob(self, container: str, blob_path: str, data: Union[bytes, BinaryIO],
                   overwrite: bool = True, content_type: str = "application/octet-stream",
                   content_encoding: Optional[str] = None) -> Dict[str, Any]:
        """
        Write blob from bytes or stream.

        Returns:
            Dict with container, blob_path, size and etag

        Raises:
            TransientFault: Storage or transport failure
        """
        try:
            blob_client = self._get_container_client(container).get_blob_client(blob_path)
            logger.debug(f"Writing blob: {container}/{blob_path} (overwrite={overwrite})")

            upload = blob_client.upload_blob(
                data,
                overwrite=overwrite,
                content_settings=ContentSettings(
                    content_type=content_type,
                    content_encoding=content_encoding
                )
            )

            result = {
                'container': container,
                'blob_path': blob_path,
                'size': len(data) if isinstance(data, (bytes, bytearray)) else None,
                'etag': upload.get('etag') if upload else None,
            }
            logger.info(f"✅ Wrote blob: {container}/{blob_path}")
            return result

        except AzureError as e:
            logger.error(f"Failed to write blob {container}/{blob_path}: {e}")
            raise TransientFault(f"Blob write failed for {container}/{blob_path}: {e}") from e

    def upload_file(self, container: str, blob_path: str, src_path: str,
                    compressed: bool = False,
                    content_type: str = "application/octet-stream") -> Dict[str, Any]:
        """
        Upload a local file; uncompressed files are streamed from disk.
        """
        if compressed:
            return super().upload_file(container, blob_path, src_path,
                                       compressed=True, content_type=content_type)
        with open(src_path, "rb") as f:
            return self.write_blob(container, blob_path, f,
                                   overwrite=True, content_type=content_type)
