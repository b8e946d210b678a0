"""
Tests for the interactive login flow and cookie capture.
"""
import asyncio
import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from opensdr.linkedin.session import LOGIN_PROMPT, SessionManager, is_logged_in_url
from opensdr.linkedin.urls import LINKEDIN_LOGIN_URL
from tests.conftest import FakeContext, FakePage

FRESH_COOKIES = [{"name": "li_at", "value": "fresh", "domain": ".linkedin.com", "path": "/"}]


class LoginLauncher:
    def __init__(self, wait_for_url):
        self.page = FakePage()
        self.page.wait_for_url = wait_for_url
        self.handle = MagicMock()
        self.handle.page = self.page
        self.handle.context = FakeContext(self.page, cookies=FRESH_COOKIES)
        self.handle.close = AsyncMock()
        self.headless = None

    async def __call__(self, headless=True):
        self.headless = headless
        return self.handle


def _manager(path, launcher, prompt=None, poll_interval=60):
    return SessionManager(
        cookies_file=path,
        poll_interval=poll_interval,
        exit_delay=0,
        launcher=launcher,
        prompt=prompt or MagicMock(),
    )


class TestLogin:
    async def test_first_login_prompts_and_saves_cookies(self, missing_cookies_file):
        launcher = LoginLauncher(AsyncMock())
        prompt = MagicMock()
        manager = _manager(missing_cookies_file, launcher, prompt)

        assert await manager.login() is True

        prompt.assert_called_once_with(LOGIN_PROMPT)
        assert launcher.headless is False
        assert launcher.page.visited == [LINKEDIN_LOGIN_URL]
        assert json.loads(missing_cookies_file.read_text(encoding="utf-8")) == FRESH_COOKIES
        assert manager.session.cookies == FRESH_COOKIES
        assert manager.session.last_refreshed_at is not None
        launcher.handle.close.assert_awaited_once()

    async def test_waits_for_feed_without_timeout(self, missing_cookies_file):
        wait_for_url = AsyncMock()
        manager = _manager(missing_cookies_file, LoginLauncher(wait_for_url))

        await manager.login()

        predicate = wait_for_url.await_args.args[0]
        assert wait_for_url.await_args.kwargs["timeout"] == 0
        assert predicate("https://www.linkedin.com/feed/?trk=login")
        assert not predicate("https://www.linkedin.com/checkpoint/challenge")

    async def test_existing_cookies_loaded_without_prompt(self, cookies_file):
        launcher = LoginLauncher(AsyncMock())
        prompt = MagicMock()
        manager = _manager(cookies_file, launcher, prompt)

        await manager.login()

        prompt.assert_not_called()
        launcher.handle.context.add_cookies.assert_awaited_once()

    async def test_corrupt_cookie_store_warns_and_continues(self, tmp_path, caplog):
        path = tmp_path / "cookies.json"
        path.write_text("[{broken", encoding="utf-8")
        launcher = LoginLauncher(AsyncMock())
        manager = _manager(path, launcher)

        with caplog.at_level(logging.WARNING, logger="opensdr"):
            assert await manager.login() is True

        assert "Failed to load cookies" in caplog.text
        assert json.loads(path.read_text(encoding="utf-8")) == FRESH_COOKIES

    async def test_cookies_captured_while_waiting(self, missing_cookies_file):
        async def slow_login(*args, **kwargs):
            await asyncio.sleep(0.05)

        launcher = LoginLauncher(slow_login)
        manager = _manager(missing_cookies_file, launcher, poll_interval=0.01)

        await manager.login()

        # periodic captures plus the final one
        assert launcher.handle.context.cookies.await_count >= 2

    async def test_login_page_waits_for_load(self, missing_cookies_file):
        launcher = LoginLauncher(AsyncMock())
        manager = _manager(missing_cookies_file, launcher)

        await manager.login()

        assert launcher.page.goto_options["wait_until"] == "load"

    async def test_cookie_write_failure_keeps_capturing(self, missing_cookies_file, caplog):
        async def slow_login(*args, **kwargs):
            await asyncio.sleep(0.1)

        launcher = LoginLauncher(slow_login)
        manager = _manager(missing_cookies_file, launcher, poll_interval=0.01)
        calls = []
        capture = manager.capture_cookies

        async def flaky_capture(context):
            calls.append(context)
            if len(calls) == 1:
                raise OSError("No space left on device")
            await capture(context)

        manager.capture_cookies = flaky_capture

        with caplog.at_level(logging.WARNING, logger="opensdr"):
            assert await manager.login() is True

        assert "No space left on device" in caplog.text
        # the loop survived the failed write: more periodic captures plus the final one
        assert len(calls) >= 3
        assert json.loads(missing_cookies_file.read_text(encoding="utf-8")) == FRESH_COOKIES

    async def test_detached_frame_is_swallowed(self, missing_cookies_file):
        launcher = LoginLauncher(
            AsyncMock(side_effect=PlaywrightError("Navigating frame was detached"))
        )
        manager = _manager(missing_cookies_file, launcher)

        assert await manager.login() is False
        launcher.handle.close.assert_awaited_once()

    async def test_other_errors_surface(self, missing_cookies_file):
        launcher = LoginLauncher(
            AsyncMock(side_effect=PlaywrightError("Target page, context or browser has been closed"))
        )
        manager = _manager(missing_cookies_file, launcher)

        with pytest.raises(PlaywrightError):
            await manager.login()

        launcher.handle.close.assert_awaited_once()


class TestIsAuthenticated:
    def test_reflects_cookie_store(self, cookies_file, missing_cookies_file):
        assert _manager(cookies_file, None).is_authenticated()
        assert not _manager(missing_cookies_file, None).is_authenticated()


def test_is_logged_in_url():
    assert is_logged_in_url("https://www.linkedin.com/feed/")
    assert not is_logged_in_url("https://www.linkedin.com/login")
