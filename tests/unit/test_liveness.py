"""
LivenessProber tests.

HEAD probes with a mocked requests.Session: status < 400 is live, every
failure is "not live", the response is always closed.
"""

import threading
from unittest.mock import MagicMock

import pytest
import requests

from infrastructure.liveness import LivenessProber


def _session(status_code=None, error=None):
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    response = MagicMock()
    response.status_code = status_code
    if error is not None:
        session.head.side_effect = error
    else:
        session.head.return_value = response
    return session, response


class TestLivenessProber:

    @pytest.mark.parametrize("status", [200, 204, 301, 399])
    def test_success_and_redirect_statuses_live(self, status):
        session, response = _session(status_code=status)
        prober = LivenessProber(timeout_seconds=3, session=session)

        assert prober.is_live("https://a.test/x.msi") is True
        session.head.assert_called_once_with("https://a.test/x.msi", allow_redirects=True, timeout=3)
        response.close.assert_called_once()

    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    def test_error_statuses_not_live(self, status):
        session, response = _session(status_code=status)
        assert LivenessProber(session=session).is_live("https://a.test/x.msi") is False
        response.close.assert_called_once()

    @pytest.mark.parametrize("error", [
        requests.exceptions.Timeout("slow"),
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.InvalidURL("bad"),
        ValueError("weird"),
    ])
    def test_failures_not_live(self, error):
        session, _ = _session(error=error)
        assert LivenessProber(session=session).is_live("not a url") is False

    def test_filter_live_dedupes_and_keeps_order(self):
        session = MagicMock(spec=requests.Session)
        session.headers = {}

        def head(url, **kwargs):
            response = MagicMock()
            response.status_code = 404 if "dead" in url else 200
            return response

        session.head.side_effect = head
        prober = LivenessProber(session=session)

        urls = ["https://b.test", "https://dead.test", "https://a.test", "https://b.test"]
        assert prober.filter_live(urls) == ["https://b.test", "https://a.test"]
        assert session.head.call_count == 3


class TestSessionPerThread:

    def _factory(self, created):
        def make():
            session, _ = _session(status_code=200)
            created.append(session)
            return session
        return make

    def test_session_reused_within_thread(self):
        created = []
        prober = LivenessProber(session_factory=self._factory(created))

        prober.is_live("https://a.test")
        prober.is_live("https://b.test")

        assert len(created) == 1
        assert created[0].head.call_count == 2
        assert created[0].headers["User-Agent"]

    def test_each_thread_gets_own_session(self):
        created = []
        prober = LivenessProber(session_factory=self._factory(created))
        barrier = threading.Barrier(2)

        def run():
            barrier.wait()
            prober.is_live("https://a.test")

        threads = [threading.Thread(target=run) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(created) == 2
        assert created[0] is not created[1]
        assert all(session.head.call_count == 1 for session in created)
