"""
Tests for the page load waiter.
"""

import pytest

from hopcrawl.exceptions import LoadTimeoutError, NavigationError
from hopcrawl.loader import READY_STATE_SCRIPT, load_page, wait_for_page_load

from conftest import FakeSession


def _probes(session):
    return [js for js, _ in session.scripts if js == READY_STATE_SCRIPT]


class TestWaitSchedule:

    def test_ready_immediately_sleeps_initial_only(self, sleeps):
        session = FakeSession()
        session.navigate("https://x.com")
        wait_for_page_load(session, initial_wait_ms=1000, retry_wait_ms=100)
        assert sleeps == [1.0]
        assert len(_probes(session)) == 1

    def test_initial_wait_not_repeated_on_retries(self, sleeps):
        session = FakeSession(not_ready_probes=3)
        session.navigate("https://x.com")
        wait_for_page_load(session, initial_wait_ms=1000, retry_wait_ms=100)
        assert sleeps == [1.0, 0.1, 0.1, 0.1]
        assert len(_probes(session)) == 4

    def test_custom_timings(self, sleeps):
        session = FakeSession(not_ready_probes=1)
        session.navigate("https://x.com")
        wait_for_page_load(session, initial_wait_ms=0, retry_wait_ms=250)
        assert sleeps == [0.0, 0.25]


class TestBoundedRetry:

    def test_timeout_after_max_retries(self, sleeps):
        session = FakeSession()
        session.navigate("https://x.com/slow")
        session.never_ready.add("https://x.com/slow")
        with pytest.raises(LoadTimeoutError) as exc_info:
            wait_for_page_load(session, 1000, 100, max_retries=5, url="https://x.com/slow")
        assert exc_info.value.attempts == 6
        assert exc_info.value.url == "https://x.com/slow"
        assert len(_probes(session)) == 6
        assert sleeps == [1.0] + [0.1] * 5

    def test_timeout_is_a_navigation_error(self):
        assert issubclass(LoadTimeoutError, NavigationError)

    def test_zero_retries_probes_once(self):
        session = FakeSession(not_ready_probes=1)
        session.navigate("https://x.com")
        with pytest.raises(LoadTimeoutError):
            wait_for_page_load(session, 0, 0, max_retries=0)
        assert len(_probes(session)) == 1

    def test_unbounded_when_max_retries_is_none(self, sleeps):
        session = FakeSession(not_ready_probes=1000)
        session.navigate("https://x.com")
        wait_for_page_load(session, 0, 1, max_retries=None)
        assert len(_probes(session)) == 1001


class TestLoadPage:

    def test_navigates_then_waits(self, sleeps):
        session = FakeSession()
        load_page(session, "https://x.com/one", initial_wait_ms=500, retry_wait_ms=100)
        assert session.navigations == ["https://x.com/one"]
        assert session.current_url == "https://x.com/one"
        assert sleeps == [0.5]

    def test_does_not_touch_session_lifecycle(self):
        session = FakeSession()
        load_page(session, "https://x.com")
        assert session.open_calls == 0
        assert session.close_calls == 0

    def test_navigation_error_propagates(self):
        session = FakeSession()
        session.fail_navigate.add("https://x.com/missing")
        with pytest.raises(NavigationError):
            load_page(session, "https://x.com/missing")
