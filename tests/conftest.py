"""
Shared test doubles.

``FakeSession`` is an in-memory ``BrowserSession``: pages are described by a
dict of ``url -> {"html": ..., "links": [...], "fragments": {selector: html}}``
and every command is recorded for assertions.
"""

import time

import pytest

from hopcrawl.exceptions import NavigationError, SessionError
from hopcrawl.loader import READY_STATE_SCRIPT
from hopcrawl.scraper import DOCUMENT_HTML_SCRIPT, SELECTED_HTML_SCRIPT
from hopcrawl.session import BrowserSession


class FakeElement:
    def __init__(self, **attrs):
        self.attrs = attrs


class FakeSession(BrowserSession):

    def __init__(self, pages=None, not_ready_probes=0):
        self.pages = pages or {}
        self.not_ready_probes = not_ready_probes
        self.never_ready = set()
        self.fail_navigate = set()
        self.fail_find = False
        self.fail_script = set()
        self.fail_open = False
        self.fail_close = False

        self.current_url = None
        self.navigations = []
        self.scripts = []
        self.queries = []
        self.driver_starts = 0
        self.open_calls = 0
        self.close_calls = 0
        self._open = False
        self._pending_not_ready = 0

    @property
    def is_open(self):
        return self._open

    def start_driver(self):
        self.driver_starts += 1

    def open(self):
        self.open_calls += 1
        if self.fail_open:
            raise SessionError("driver refused connection")
        self._open = True

    def close(self):
        self.close_calls += 1
        self._open = False
        if self.fail_close:
            raise SessionError("session already gone")

    def navigate(self, url):
        self.navigations.append(url)
        if url in self.fail_navigate:
            raise NavigationError(f"net::ERR_NAME_NOT_RESOLVED at {url}", url=url)
        self.current_url = url
        self._pending_not_ready = self.not_ready_probes

    def _page(self):
        return self.pages.get(self.current_url, {})

    def execute_script(self, js, *args):
        self.scripts.append((js, args))
        if js == READY_STATE_SCRIPT:
            if self.current_url in self.never_ready:
                return False
            if self._pending_not_ready > 0:
                self._pending_not_ready -= 1
                return False
            return True
        if self.current_url in self.fail_script:
            raise NavigationError("Execution context was destroyed", url=self.current_url)
        if js == DOCUMENT_HTML_SCRIPT:
            return self._page().get("html", "<html></html>")
        if js == SELECTED_HTML_SCRIPT:
            return self._page().get("fragments", {}).get(args[0], "")
        raise AssertionError(f"unexpected script: {js}")

    def find_elements(self, strategy, selector):
        assert strategy == "css"
        self.queries.append(selector)
        if self.fail_find:
            raise NavigationError(f"Element query '{selector}' failed")
        return [FakeElement(href=href) for href in self._page().get("links", [])]

    def get_attribute(self, element, name):
        return element.attrs.get(name)


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    """Record every time.sleep() call instead of sleeping."""
    calls = []
    monkeypatch.setattr(time, "sleep", calls.append)
    return calls


@pytest.fixture
def site():
    """A root page linking to two pages, a duplicate, an anchor and an external site."""
    return {
        "https://x.com": {
            "html": "<html><body>root</body></html>",
            "links": ["/one", "#top", "/two#intro", "/one", "https://y.com/a", "https://sub.x.com/b"],
        },
        "https://x.com/one": {
            "html": "<html><body><main>one</main></body></html>",
            "fragments": {"main": "<main>one</main>"},
        },
        "https://x.com/two": {
            "html": "<html><body>two</body></html>",
        },
        "https://y.com/a": {"html": "<html>y</html>"},
        "https://sub.x.com/b": {"html": "<html>sub</html>"},
    }


@pytest.fixture
def session(site):
    return FakeSession(site)
