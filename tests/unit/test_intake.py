"""
UploadIntakePipeline tests.

Empty payloads, unrecognized files, validator faults, remote fetch failures,
the accepted path, and temp-file cleanup on every outcome.
"""

import os
from unittest.mock import MagicMock, patch

import pytest
import requests

from core.models.results import IntakeStatus
from exceptions import PackageValidationCancelled, PackageValidationError, TransientFault
from services.feed_store import FeedStore
from tests.factories.catalog_factories import make_canonical_name
from tests.factories.fakes import CONTAINER, FakePackageValidator, RecordingNotifier, package_bytes


def _temp_files(app, feed_name="current"):
    work_dir = app.registry.get(feed_name).config.work_dir
    if not os.path.isdir(work_dir):
        return []
    return [f for f in os.listdir(work_dir) if f.startswith("UploadedFile-")]


def _feed(app, feed_name="current"):
    return FeedStore(app.codec).load(app.registry.get(feed_name).config).document


class DeferredExecutor:
    """Executor that queues submitted work until run_pending()."""

    def __init__(self, shut_down=False):
        self.pending = []
        self.shut_down = shut_down

    def submit(self, fn, *args, **kwargs):
        if self.shut_down:
            raise RuntimeError("cannot schedule new futures after shutdown")
        self.pending.append((fn, args, kwargs))

    def run_pending(self):
        while self.pending:
            fn, args, kwargs = self.pending.pop(0)
            fn(*args, **kwargs)


class TestHandleUpload:

    def test_empty_payload_rejected_without_validation(self, make_app):
        app = make_app()
        result = app.registry.get("current").intake.handle_upload(b"")

        assert result.status == IntakeStatus.EMPTY_PAYLOAD
        assert result.http_status == 400
        assert app.validator.queried == []

    def test_unrecognized_file_rejected_and_removed(self, make_app):
        app = make_app()
        result = app.registry.get("current").intake.handle_upload(b"just some bytes")

        assert result.status == IntakeStatus.NOT_A_PACKAGE
        assert result.http_status == 400
        assert len(app.validator.queried) == 1
        assert not os.path.exists(app.validator.queried[0])
        assert _temp_files(app) == []
        assert _feed(app).is_empty

    @pytest.mark.parametrize("error, status", [
        (PackageValidationError("corrupt"), IntakeStatus.VALIDATION_FAULT),
        (PackageValidationCancelled("cancelled"), IntakeStatus.VALIDATION_CANCELLED),
    ])
    def test_validator_failures_are_client_errors(self, make_app, error, status):
        app = make_app(validator=FakePackageValidator(error=error))
        result = app.registry.get("current").intake.handle_upload(b"anything")

        assert result.status == status
        assert result.http_status == 400
        assert _temp_files(app) == []

    def test_accepted_upload_stored_and_reconciled(self, make_app):
        app = make_app()
        name = make_canonical_name(name="ZLib", version="1.2.5.0", flavor="[vc10]", architecture="x86")

        result = app.registry.get("current").intake.handle_upload(package_bytes(name))

        expected_location = "https://packages.example.test/pkgs/zlib[vc10]-1.2.5.0-x86.msi"
        assert result.accepted
        assert result.http_status == 200
        assert result.location == expected_location
        assert app.blob_repo.blob_exists(CONTAINER, "zlib[vc10]-1.2.5.0-x86.msi")
        assert _feed(app).find(name).locations == [expected_location]
        assert _temp_files(app) == []

    def test_artifact_bytes_preserved(self, make_app):
        app = make_app()
        name = make_canonical_name()
        payload = package_bytes(name, payload=os.urandom(256))

        app.registry.get("current").intake.handle_upload(payload)

        assert app.blob_repo.read_blob(CONTAINER, name.artifact_name(".msi")) == payload

    def test_storage_failure_propagates_and_removes_temp_file(self, make_app):
        app = make_app()
        app.blob_repo.fail_writes = True

        with pytest.raises(TransientFault):
            app.registry.get("current").intake.handle_upload(package_bytes(make_canonical_name()))
        assert _temp_files(app) == []

    def test_announcement_sent(self, make_app):
        notifier = RecordingNotifier()
        app = make_app(notifier=notifier)
        name = make_canonical_name()

        result = app.registry.get("current").intake.handle_upload(package_bytes(name))

        assert len(notifier.sent) == 1
        location, text = notifier.sent[0]
        assert location == result.location
        assert text.startswith(f"[{name.name}-{name.version}-{name.architecture}]")

    def test_announcement_failure_does_not_fail_intake(self, make_app):
        app = make_app(notifier=RecordingNotifier(error=RuntimeError("webhook down")))
        result = app.registry.get("current").intake.handle_upload(package_bytes(make_canonical_name()))
        assert result.accepted

    def test_announcement_runs_off_request_path(self, make_app):
        notifier = RecordingNotifier()
        app = make_app(notifier=notifier)
        executor = DeferredExecutor()
        intake = app.registry.get("current").intake
        intake.announce_executor = executor

        result = intake.handle_upload(package_bytes(make_canonical_name()))

        assert result.accepted
        assert notifier.sent == []
        assert len(executor.pending) == 1

        executor.run_pending()
        assert [location for location, _ in notifier.sent] == [result.location]

    def test_announcement_dropped_after_executor_shutdown(self, make_app):
        notifier = RecordingNotifier()
        app = make_app(notifier=notifier)
        intake = app.registry.get("current").intake
        intake.announce_executor = DeferredExecutor(shut_down=True)

        result = intake.handle_upload(package_bytes(make_canonical_name()))

        assert result.accepted
        assert notifier.sent == []


class TestHandleRemote:

    def test_unreachable_location_fails_without_mutation(self, make_app):
        location = "https://dead.example.test/pkg.msi"
        app = make_app(dead={location})

        with patch("services.intake.requests.get") as mock_get:
            result = app.registry.get("current").intake.handle_remote(location)

        assert result.status == IntakeStatus.FETCH_FAILED
        assert result.http_status == 500
        mock_get.assert_not_called()
        assert _feed(app).is_empty

    def test_http_error_fails_and_removes_temp_file(self, make_app):
        app = make_app()
        response = MagicMock()
        response.__enter__.return_value = response
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404")

        with patch("services.intake.requests.get", return_value=response):
            result = app.registry.get("current").intake.handle_remote("https://a.example.test/pkg.msi")

        assert result.status == IntakeStatus.FETCH_FAILED
        assert _temp_files(app) == []
        assert app.validator.queried == []

    def test_transport_error_fails(self, make_app):
        app = make_app()
        with patch("services.intake.requests.get",
                   side_effect=requests.exceptions.ConnectionError("reset")):
            result = app.registry.get("current").intake.handle_remote("https://a.example.test/pkg.msi")
        assert result.status == IntakeStatus.FETCH_FAILED
        assert _temp_files(app) == []

    def test_download_failure_is_transient_fault(self, make_app, tmp_path):
        intake = make_app().registry.get("current").intake
        with patch("services.intake.requests.get",
                   side_effect=requests.exceptions.Timeout("slow")):
            with pytest.raises(TransientFault) as exc_info:
                intake._download("https://a.example.test/pkg.msi", str(tmp_path / "pkg.bin"))
        assert isinstance(exc_info.value.__cause__, requests.exceptions.Timeout)

    def test_fetched_package_accepted(self, make_app):
        app = make_app()
        name = make_canonical_name()
        data = package_bytes(name)
        response = MagicMock()
        response.__enter__.return_value = response
        response.iter_content.return_value = [data[:5], data[5:]]

        with patch("services.intake.requests.get", return_value=response) as mock_get:
            result = app.registry.get("current").intake.handle_remote("https://a.example.test/pkg.msi")

        assert result.accepted
        assert mock_get.call_args.kwargs["stream"] is True
        assert app.blob_repo.read_blob(CONTAINER, name.artifact_name(".msi")) == data
        assert _feed(app).find(name) is not None
        assert _temp_files(app) == []
