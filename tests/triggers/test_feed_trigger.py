"""
FeedTrigger HTTP tests.

Drives the trigger with real azure.functions.HttpRequest objects against a
registry wired to in-memory fakes.
"""

import asyncio
import json
from unittest.mock import patch

import azure.functions as func
import pytest

from exceptions import ClientError
from tests.factories.catalog_factories import make_canonical_name, make_location
from tests.factories.fakes import package_bytes
from triggers.feed_trigger import FeedTrigger
from triggers.livez import livez_trigger


def _request(method, feed_name="current", body=b"", params=None):
    return func.HttpRequest(
        method=method,
        url=f"http://localhost/api/feeds/{feed_name}",
        route_params={"feed_name": feed_name},
        params=params or {},
        body=body,
    )


def _json(response):
    return json.loads(response.get_body())


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def trigger(app):
    return FeedTrigger(app.registry)


class TestUpload:

    @pytest.mark.parametrize("method", ["PUT", "POST"])
    def test_package_accepted(self, app, trigger, method):
        name = make_canonical_name()
        response = trigger.handle_request(_request(method, body=package_bytes(name)))

        body = _json(response)
        assert response.status_code == 200
        assert body["status"] == "accepted"
        assert body["package"] == str(name)
        assert body["location"].endswith(name.artifact_name(".msi"))
        assert response.headers["X-Request-ID"] == body["request_id"]

    def test_empty_body_is_bad_request(self, trigger):
        response = trigger.handle_request(_request("PUT"))
        assert response.status_code == 400

    def test_unrecognized_body_is_bad_request(self, trigger):
        response = trigger.handle_request(_request("POST", body=b"not a package"))
        assert response.status_code == 400
        assert _json(response)["status"] == "not_a_package"

    def test_unknown_feed_is_not_found(self, trigger):
        response = trigger.handle_request(_request("PUT", feed_name="nightly", body=b"x"))
        assert response.status_code == 404
        assert "nightly" in _json(response)["message"]

    def test_unexpected_failure_is_internal_error(self, app, trigger):
        app.blob_repo.fail_writes = True
        response = trigger.handle_request(_request("PUT", body=package_bytes(make_canonical_name())))
        assert response.status_code == 500
        assert _json(response)["error"] == "Internal server error"

    def test_async_entry_point(self, trigger):
        name = make_canonical_name()
        response = asyncio.run(trigger.handle_request_async(_request("PUT", body=package_bytes(name))))
        assert response.status_code == 200


class TestCommands:

    def test_add_requires_location(self, trigger):
        response = trigger.handle_request(_request("GET", params={"command": "add"}))
        assert response.status_code == 400
        assert "location" in _json(response)["message"]

    def test_add_unreachable_location_is_internal_error(self, app, trigger):
        location = "https://dead.example.test/pkg.msi"
        app.prober.dead.add(location)
        response = trigger.handle_request(
            _request("GET", params={"command": "add", "location": location})
        )
        assert response.status_code == 500
        assert _json(response)["status"] == "fetch_failed"

    def test_validate_reports_counts(self, app, trigger):
        reconciler = app.registry.get("current").reconciler
        name = make_canonical_name()
        location = make_location(canonical_name=name)
        reconciler.insert_into_feed(name, location)
        app.prober.dead.add(location)

        response = trigger.handle_request(_request("GET", params={"command": "validate"}))

        body = _json(response)
        assert response.status_code == 200
        assert body["status"] == "validated"
        assert body["entries"] == 0
        assert body["pruned"] == 1

    def test_unknown_command_is_bad_request(self, trigger):
        response = trigger.handle_request(_request("GET", params={"command": "explode"}))
        assert response.status_code == 400

    @pytest.mark.parametrize("params", [
        {"command": "explode"},
        {"command": "add"},
    ])
    def test_client_mistakes_raise_client_error(self, trigger, params):
        with pytest.raises(ClientError):
            trigger.process_request(_request("GET", params=params))

    def test_disallowed_method(self, trigger):
        response = trigger.handle_request(_request("DELETE"))
        assert response.status_code == 405

    def test_remote_add_accepted(self, app, trigger):
        name = make_canonical_name()
        data = package_bytes(name)
        with patch("services.intake.requests.get") as mock_get:
            response_mock = mock_get.return_value
            response_mock.__enter__.return_value = response_mock
            response_mock.iter_content.return_value = [data]
            response = trigger.handle_request(
                _request("GET", params={"command": "add", "location": "https://a.example.test/p.msi"})
            )
        assert response.status_code == 200
        assert _json(response)["package"] == str(name)


class TestLivez:

    def test_alive(self):
        req = func.HttpRequest(method="GET", url="http://localhost/api/livez", body=b"")
        response = livez_trigger.handle_request(req)
        assert response.status_code == 200
        assert _json(response)["status"] == "alive"
