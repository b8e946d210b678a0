"""
Interactive LinkedIn login with periodic cookie capture.
"""
import asyncio
import contextlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

from playwright.async_api import BrowserContext, Error as PlaywrightError

from opensdr.config import settings
from opensdr.linkedin.browser import SessionHandle, launch_browser
from opensdr.linkedin.cookies import CookieManager
from opensdr.linkedin.errors import is_detached_frame_error
from opensdr.linkedin.urls import LINKEDIN_FEED_URL, LINKEDIN_LOGIN_URL
from opensdr.schemas.profile import Session

logger = logging.getLogger("opensdr")

LOGIN_PROMPT = (
    "A browser will open to LinkedIn, please sign in. This is the browser "
    "OpenSDR will use to access LinkedIn.\n\nPress [Enter] to proceed."
)


def is_logged_in_url(url: str) -> bool:
    return url.startswith(LINKEDIN_FEED_URL)


class SessionManager:
    """
    Owns the login flow and the cookie store it writes.

    Strategy:
      1. If there is no cookie store yet, ask the operator to proceed.
      2. Open a headed browser, apply any stored cookies, go to /login.
      3. Every poll interval, write the full cookie set to the store.
      4. Finish once the page lands on the feed. There is no timeout:
         the operator sets the pace (2FA, CAPTCHA, ...).
    """

    def __init__(
        self,
        cookies_file: Optional[Path] = None,
        poll_interval: Optional[float] = None,
        exit_delay: Optional[float] = None,
        launcher: Callable[..., Awaitable[SessionHandle]] = launch_browser,
        prompt: Callable[[str], str] = input,
    ):
        self.cookies_file = cookies_file or settings.cookies_file
        self.poll_interval = settings.login_poll_interval if poll_interval is None else poll_interval
        self.exit_delay = settings.login_exit_delay if exit_delay is None else exit_delay
        self.launcher = launcher
        self.prompt = prompt
        self.session = Session(cookie_store_path=self.cookies_file)

    def is_authenticated(self) -> bool:
        return CookieManager.cookies_exist(self.cookies_file)

    async def capture_cookies(self, context: BrowserContext) -> None:
        cookies = await CookieManager.save_cookies(context, self.cookies_file)
        if cookies:
            self.session.cookies = cookies
            self.session.last_refreshed_at = datetime.now()

    async def _capture_periodically(self, context: BrowserContext) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                await self.capture_cookies(context)
            except PlaywrightError as e:
                logger.debug(f"Cookie capture skipped: {e}")
                return
            except OSError as e:
                logger.warning(f"Failed to write cookies to {self.cookies_file}: {e}")

    async def login(self) -> bool:
        """
        Run the interactive login. Returns True once the feed was reached and
        cookies were saved; False if the page was torn down mid-navigation.
        """
        if not self.is_authenticated():
            await asyncio.to_thread(self.prompt, LOGIN_PROMPT)

        handle = await self.launcher(headless=False)
        try:
            await CookieManager.load_cookies(handle.context, self.cookies_file)
            logger.info("Opening LinkedIn login page...")
            await handle.page.goto(LINKEDIN_LOGIN_URL, wait_until="load")

            capture_task = asyncio.create_task(self._capture_periodically(handle.context))
            try:
                logger.info("Waiting for manual login...")
                await handle.page.wait_for_url(is_logged_in_url, timeout=0)
                logger.info("Successfully logged in")
                await asyncio.sleep(self.exit_delay)
            finally:
                capture_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await capture_task

            await self.capture_cookies(handle.context)
            logger.info(f"Cookies saved to {self.cookies_file}")
            return True
        except PlaywrightError as e:
            if not is_detached_frame_error(e):
                raise
            logger.debug(f"Ignoring navigation race during login teardown: {e}")
            return False
        finally:
            await handle.close()
