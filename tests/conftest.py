"""
Shared fixtures for engine tests.

FakePage stands in for a Playwright page showing a LinkedIn search or
profile page; FakeLauncher stands in for launch_browser() and records every
browser it hands out. No real browser or network is used.
"""
import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from opensdr.linkedin.automation import MESSAGE_BUTTON_SELECTOR, MUTUALS_LINK_SELECTOR
from opensdr.linkedin.browser import BrowserSessionRunner
from opensdr.linkedin.harvester import NOISE_SELECTORS, PROFILE_LINK_SELECTOR
from opensdr.linkedin.prospector import LinkedInProspector
from opensdr.linkedin.session import SessionManager


STORED_COOKIES = [
    {
        "name": "li_at",
        "value": "session-token",
        "domain": ".linkedin.com",
        "path": "/",
        "expires": 1893456000,
        "httpOnly": True,
        "secure": True,
        "sameSite": "None",
        "size": 13,
        "session": False,
    },
    {
        "name": "JSESSIONID",
        "value": "ajax:123",
        "domain": ".www.linkedin.com",
        "path": "/",
        "expires": -1,
        "secure": True,
    },
]


class FakePage:
    """Minimal async stand-in for playwright.async_api.Page."""

    def __init__(
        self,
        profile_hrefs=(),
        view_profile_links=(),
        facet_hrefs=(),
        message_buttons=0,
        goto_errors=(),
    ):
        self.url = "about:blank"
        self.profile_hrefs = list(profile_hrefs)
        self.view_profile_links = list(view_profile_links)
        self.facet_hrefs = list(facet_hrefs)
        self.buttons = [MagicMock(click=AsyncMock()) for _ in range(message_buttons)]
        self.goto_errors = list(goto_errors)
        self.visited = []
        self.screenshots = []
        self.noise_removed = False
        self.keyboard = MagicMock(type=AsyncMock())
        self.events = []
        self.goto_options = {}
        self.closed = False

    async def goto(self, url, **kwargs):
        self.events.append("goto")
        self.visited.append(url)
        self.goto_options = kwargs
        if self.goto_errors:
            raise self.goto_errors.pop(0)
        self.url = url

    async def wait_for_selector(self, selector, **kwargs):
        if selector == MESSAGE_BUTTON_SELECTOR and not self.buttons:
            raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")
        return None

    async def eval_on_selector_all(self, selector, script):
        if selector == PROFILE_LINK_SELECTOR:
            return list(self.profile_hrefs)
        if selector == MUTUALS_LINK_SELECTOR:
            return list(self.facet_hrefs)
        if selector in NOISE_SELECTORS:
            self.noise_removed = True
        return None

    async def evaluate(self, script, arg=None):
        return list(self.view_profile_links)

    async def screenshot(self, path, full_page=False):
        self.events.append("screenshot")
        self.screenshots.append((path, self.noise_removed))
        Path(path).write_bytes(b"\x89PNG fake")

    async def query_selector_all(self, selector):
        return list(self.buttons)

    async def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, page=None, cookies=None):
        self.page = page
        self.add_cookies = AsyncMock(side_effect=self._add_cookies)
        self.cookies = AsyncMock(return_value=list(cookies or []))
        self.new_page = AsyncMock(side_effect=lambda: self.page)

    async def _add_cookies(self, cookies):
        if self.page is not None:
            self.page.events.append("cookies")


class FakeLauncher:
    """Hands out one FakePage per launch, in order."""

    def __init__(self, *pages):
        self.pages = list(pages)
        self.handles = []

    async def __call__(self, headless=True):
        page = self.pages.pop(0)
        handle = MagicMock()
        handle.page = page
        handle.context = FakeContext(page)
        handle.close = AsyncMock()
        handle.browser.is_connected.return_value = True
        handle.headless = headless
        self.handles.append(handle)
        return handle

    @property
    def launch_count(self):
        return len(self.handles)


@pytest.fixture
def cookies_file(tmp_path):
    path = tmp_path / "cookies" / "linkedin_cookies.json"
    path.parent.mkdir()
    path.write_text(json.dumps(STORED_COOKIES), encoding="utf-8")
    return path


@pytest.fixture
def missing_cookies_file(tmp_path):
    return tmp_path / "cookies" / "missing.json"


@pytest.fixture
def screenshots_dir(tmp_path):
    return tmp_path / "search_screenshots"


@pytest.fixture
def reconciler():
    fake = MagicMock()
    fake.reconcile = AsyncMock(return_value=[])
    return fake


@pytest.fixture
def make_prospector(cookies_file, screenshots_dir, reconciler):
    """Build a LinkedInProspector wired to fake browsers and a fake reconciler."""

    def _make(*pages, cookies=None):
        launcher = FakeLauncher(*pages)
        path = cookies or cookies_file
        runner = BrowserSessionRunner(
            cookies_file=path,
            settle_timeout=0,
            navigation_retries=3,
            navigation_backoff=0,
            launcher=launcher,
        )
        prospector = LinkedInProspector(
            cookies_file=path,
            screenshots_dir=screenshots_dir,
            reconciler=reconciler,
            runner=runner,
            session_manager=SessionManager(path, launcher=launcher),
        )
        return prospector, launcher

    return _make
