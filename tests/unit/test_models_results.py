"""
Result model tests — intake status to HTTP status mapping and response shape.
"""

import pytest

from core.models.results import (
    FeedLoadOutcome,
    FeedLoadResult,
    FeedSaveResult,
    IntakeResult,
    IntakeStatus,
    ReconcileResult,
)
from tests.factories.catalog_factories import make_canonical_name


class TestIntakeStatus:

    @pytest.mark.parametrize("status, code", [
        (IntakeStatus.ACCEPTED, 200),
        (IntakeStatus.EMPTY_PAYLOAD, 400),
        (IntakeStatus.NOT_A_PACKAGE, 400),
        (IntakeStatus.VALIDATION_FAULT, 400),
        (IntakeStatus.VALIDATION_CANCELLED, 400),
        (IntakeStatus.FETCH_FAILED, 500),
    ])
    def test_http_status(self, status, code):
        assert status.http_status == code

    def test_every_status_mapped(self):
        for status in IntakeStatus:
            assert status.http_status in (200, 400, 500)


class TestIntakeResult:

    def test_rejection_omits_package_fields(self):
        result = IntakeResult(
            feed_name="current",
            status=IntakeStatus.NOT_A_PACKAGE,
            message="File is not a recognized package",
        )
        assert not result.accepted
        assert result.to_dict() == {
            "feed": "current",
            "status": "not_a_package",
            "message": "File is not a recognized package",
        }

    def test_accepted_includes_reconcile_summary(self):
        name = make_canonical_name()
        result = IntakeResult(
            feed_name="current",
            status=IntakeStatus.ACCEPTED,
            message="ok",
            canonical_name=name,
            location="https://packages.example.test/pkgs/x.msi",
            reconcile=ReconcileResult(
                feed_name="current",
                load_outcome=FeedLoadOutcome.LOADED,
                entry_count=3,
                migrated=["old"],
            ),
        )

        data = result.to_dict()
        assert result.accepted
        assert data["package"] == str(name)
        assert data["entries"] == 3
        assert data["migrated"] == ["old"]


class TestFeedResults:

    def test_failed_load_is_degraded(self):
        assert FeedLoadResult(feed_name="f", outcome=FeedLoadOutcome.FAILED).is_degraded
        assert not FeedLoadResult(feed_name="f", outcome=FeedLoadOutcome.EMPTY).is_degraded

    def test_remote_sync_reflects_error(self):
        ok = FeedSaveResult(feed_name="f", local_path="/tmp/f.feed.xml", entry_count=0,
                            uploaded_blobs=["f.feed.xml", "f.feed.xml.gz"])
        failed = ok.model_copy(update={"remote_error": "boom"})
        assert ok.remote_synced
        assert not failed.remote_synced
