# ============================================================================
# UPLOAD INTAKE PIPELINE
# ============================================================================
# STATUS: Service - package upload orchestration
# PURPOSE: Turn uploaded or fetched bytes into a stored artifact plus a feed
#          entry, then announce it
# EXPORTS: UploadIntakePipeline
# DEPENDENCIES: requests, services.artifact_store, services.reconciliation,
#               infrastructure.package_validator, infrastructure.notification
# ============================================================================
"""
Upload Intake Pipeline.

    handle_upload(bytes) ─┐
                          ├─> temp file ─> handle_file(path)
    handle_remote(url) ───┘
                                  query_package      (None/fault/cancel -> 400)
                                  get_package_details
                                  artifact store     (temp file deleted after)
                                  insert_into_feed
                                  notify             (best-effort, off the request path)
                                  -> ACCEPTED

The temp file belongs to the pipeline and is deleted before the call returns,
whatever the outcome.
"""

import os
from concurrent.futures import Executor
from typing import Optional

import requests

from config import FeedHandlerConfig
from config.defaults import NetworkDefaults
from core.models.package import PackageMetadata, UploadedArtifact
from core.models.results import IntakeResult, IntakeStatus
from exceptions import (
    ConfigurationError,
    PackageValidationCancelled,
    PackageValidationError,
    TransientFault,
)
from infrastructure.liveness import ILivenessProber
from infrastructure.local_files import temp_upload_path, try_hard_delete
from infrastructure.notification import INotificationSink, compose_announcement
from infrastructure.package_validator import IPackageValidator
from util_logger import LoggerFactory, ComponentType
from .artifact_store import ArtifactStore
from .reconciliation import FeedReconciler


class UploadIntakePipeline:
    """
    Intake for one feed handler.
    """

    def __init__(
        self,
        config: FeedHandlerConfig,
        validator: Optional[IPackageValidator],
        artifact_store: ArtifactStore,
        reconciler: FeedReconciler,
        prober: ILivenessProber,
        notifier: Optional[INotificationSink] = None,
        download_timeout_seconds: float = NetworkDefaults.DOWNLOAD_TIMEOUT_SECONDS,
        announce_executor: Optional[Executor] = None,
    ):
        """
        Args:
            announce_executor: Runs announcements off the request path;
                announcements run inline when None
        """
        self.config = config
        self.validator = validator
        self.artifact_store = artifact_store
        self.reconciler = reconciler
        self.prober = prober
        self.notifier = notifier
        self.download_timeout_seconds = download_timeout_seconds
        self.announce_executor = announce_executor
        self.logger = LoggerFactory.create_with_context(
            ComponentType.SERVICE,
            f"UploadIntake.{config.feed_name}",
            feed_name=config.feed_name
        )

    def _result(self, status: IntakeStatus, message: str, **kwargs) -> IntakeResult:
        return IntakeResult(feed_name=self.config.feed_name, status=status, message=message, **kwargs)

    # ========================================================================
    # ENTRY POINTS
    # ========================================================================

    def handle_upload(self, data: bytes) -> IntakeResult:
        """Intake for a request body."""
        if not data:
            self.logger.warning("Rejected empty upload")
            return self._result(IntakeStatus.EMPTY_PAYLOAD, "Upload body is empty")

        path = temp_upload_path(self.config.work_dir)
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError:
            try_hard_delete(path)
            raise

        artifact = UploadedArtifact(path=path, size=len(data))
        self.logger.info(f"Received upload ({artifact.size} bytes) -> {os.path.basename(path)}")
        return self.handle_file(artifact.path)

    def handle_remote(self, location: str) -> IntakeResult:
        """Intake for a package fetched from a remote URL."""
        if not self.prober.is_live(location):
            self.logger.warning(f"Remote package not reachable: {location}")
            return self._result(IntakeStatus.FETCH_FAILED, f"Location is not reachable: {location}",
                                location=location)

        path = temp_upload_path(self.config.work_dir)
        try:
            size = self._download(location, path)
        except (TransientFault, OSError) as e:
            try_hard_delete(path)
            self.logger.error(f"Failed to fetch {location}: {e}")
            return self._result(IntakeStatus.FETCH_FAILED, f"Failed to fetch package: {e}",
                                location=location)

        if size == 0:
            try_hard_delete(path)
            return self._result(IntakeStatus.EMPTY_PAYLOAD, f"Remote package is empty: {location}",
                                location=location)

        artifact = UploadedArtifact(path=path, size=size, source=location)
        self.logger.info(f"Fetched {artifact.size} bytes from {artifact.source}")
        return self.handle_file(artifact.path)

    def _download(self, location: str, path: str) -> int:
        """
        Stream `location` into `path`.

        Raises:
            TransientFault: Transport failure or non-success status
        """
        size = 0
        try:
            with requests.get(location, stream=True, timeout=self.download_timeout_seconds) as response:
                response.raise_for_status()
                with open(path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=NetworkDefaults.DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            size += len(chunk)
        except requests.exceptions.RequestException as e:
            raise TransientFault(f"Download of {location} failed: {e}") from e
        return size

    # ========================================================================
    # COMMON PATH
    # ========================================================================

    def handle_file(self, path: str) -> IntakeResult:
        """
        Validate, store and reconcile the package at `path`; deletes `path`.

        Raises:
            ConfigurationError: No package validator configured
        """
        try:
            if self.validator is None:
                raise ConfigurationError("No package validator configured")

            try:
                identity = self.validator.query_package(path)
            except PackageValidationCancelled as e:
                self.logger.warning(f"Package validation cancelled: {e}")
                return self._result(IntakeStatus.VALIDATION_CANCELLED, "Package validation was cancelled")
            except PackageValidationError as e:
                self.logger.warning(f"Package validation faulted: {e}")
                return self._result(IntakeStatus.VALIDATION_FAULT, f"Package validation failed: {e}")

            if identity is None:
                self.logger.info("Upload is not a recognized package")
                return self._result(IntakeStatus.NOT_A_PACKAGE, "File is not a recognized package")

            canonical_name = identity.canonical_name
            metadata = self.validator.get_package_details(identity)
            stored = self.artifact_store.store(self.config, canonical_name, path)
        finally:
            try_hard_delete(path)

        reconcile = self.reconciler.insert_into_feed(canonical_name, stored.location)
        self._announce(metadata, stored.location)

        return self._result(
            IntakeStatus.ACCEPTED,
            f"Added {canonical_name} to '{self.config.feed_name}'",
            canonical_name=canonical_name,
            location=stored.location,
            reconcile=reconcile,
        )

    def _announce(self, metadata: PackageMetadata, location: str) -> None:
        if self.notifier is None:
            return
        if self.announce_executor is None:
            self._send_announcement(metadata, location)
            return
        try:
            self.announce_executor.submit(self._send_announcement, metadata, location)
        except RuntimeError as e:
            self.logger.warning(f"Announcement not scheduled for {location}: {e}")

    def _send_announcement(self, metadata: PackageMetadata, location: str) -> None:
        try:
            text = compose_announcement(metadata, self.notifier.shorten(location))
            self.notifier.notify(location, text)
        except Exception as e:
            self.logger.warning(f"Announcement failed for {location}: {type(e).__name__}: {e}")
