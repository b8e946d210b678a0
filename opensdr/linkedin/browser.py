"""
Playwright browser launch and the scoped session runner.

Every extraction runs inside BrowserSessionRunner.with_session(): cookies
are applied before navigation, navigation is retried with backoff, and the
page is given a bounded settle window before the callback reads it.
"""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from opensdr.config import settings
from opensdr.linkedin.cookies import CookieManager
from opensdr.linkedin.errors import (
    NavigationExhaustedError,
    NavigationTransientError,
    SessionMissingError,
    is_detached_frame_error,
)

logger = logging.getLogger("opensdr")

T = TypeVar("T")

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)


@dataclass
class SessionHandle:
    """One launched browser with the context and page the engine drives."""

    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page

    async def close(self) -> None:
        try:
            await self.browser.close()
        except PlaywrightError as e:
            logger.debug(f"Browser close failed: {e}")
        finally:
            await self.playwright.stop()


async def launch_browser(headless: bool = True) -> SessionHandle:
    """
    Launch Playwright Chromium with anti-detection settings.

    Headless sessions get a fixed 1280x800 viewport; headed sessions open
    maximized so the operator can work in the same window.
    """
    pw = await async_playwright().start()
    try:
        args = ["--disable-blink-features=AutomationControlled", "--no-sandbox"]
        if headless:
            args.append("--window-size=1280,800")
        else:
            args.append("--start-maximized")
        browser = await pw.chromium.launch(headless=headless, args=args)

        context_options = {
            "user_agent": USER_AGENT,
            "locale": "en-US",
        }
        if headless:
            context_options["viewport"] = {"width": 1280, "height": 800}
        else:
            context_options["no_viewport"] = True
        context = await browser.new_context(**context_options)
        # Mask the navigator.webdriver flag on every page of the context
        await context.add_init_script(
            "Object.defineProperty(navigator, 'webdriver', {get: () => undefined})"
        )
        page = await context.new_page()
    except Exception:
        await pw.stop()
        raise

    logger.info(f"Browser launched ({'headless' if headless else 'headed'}).")
    return SessionHandle(playwright=pw, browser=browser, context=context, page=page)


class BrowserSessionRunner:
    """
    Runs a callback against a freshly loaded, authenticated LinkedIn page.

    Two modes:
      - headless, ephemeral (default): a new browser per call, always closed.
      - persistent (use_existing_browser=True): reuses the one browser held in
        self._handle. It is closed if the callback raises or on close(), and
        otherwise left open for the operator. A window the operator closed
        is relaunched on the next call. Access is serialized by a lock.
    """

    def __init__(
        self,
        cookies_file: Optional[Path] = None,
        settle_timeout: Optional[float] = None,
        navigation_timeout: Optional[int] = None,
        navigation_retries: Optional[int] = None,
        navigation_backoff: Optional[float] = None,
        launcher: Callable[..., Awaitable[SessionHandle]] = launch_browser,
    ):
        self.cookies_file = cookies_file or settings.cookies_file
        self.settle_timeout = (
            settings.settle_timeout if settle_timeout is None else settle_timeout
        )
        self.navigation_timeout = navigation_timeout or settings.navigation_timeout
        self.navigation_retries = max(1, navigation_retries or settings.navigation_retries)
        self.navigation_backoff = (
            settings.navigation_backoff if navigation_backoff is None else navigation_backoff
        )
        self.launcher = launcher
        self._handle: Optional[SessionHandle] = None
        self._lock = asyncio.Lock()

    @property
    def has_open_browser(self) -> bool:
        return self._handle is not None

    async def with_session(
        self,
        url: str,
        fn: Callable[[Page], Awaitable[T]],
        headless: bool = True,
        use_existing_browser: bool = False,
        ready_selector: Optional[str] = None,
    ) -> T:
        """
        Load `url` in an authenticated page and return `await fn(page)`.

        Raises SessionMissingError before launching anything if there is no
        cookie store.
        """
        if not CookieManager.cookies_exist(self.cookies_file):
            logger.error("No cookies found. Please run the login command first.")
            raise SessionMissingError(self.cookies_file)

        if use_existing_browser:
            async with self._lock:
                return await self._run_persistent(url, fn, headless, ready_selector)

        handle = await self.launcher(headless=headless)
        try:
            return await self._run(handle.context, handle.page, url, fn, ready_selector)
        finally:
            await handle.close()

    async def _open_persistent_page(self, headless: bool) -> Page:
        """
        Return a fresh page in the persistent browser, relaunching it if the
        operator closed the window since the last call. The previous page is
        closed so reuse never accumulates tabs.
        """
        if self._handle is not None and not self._handle.browser.is_connected():
            logger.warning("Open browser was closed. Relaunching.")
            await self.close()

        if self._handle is None:
            self._handle = await self.launcher(headless=headless)
            return self._handle.page

        logger.debug("Reusing open browser.")
        try:
            await self._handle.page.close()
            self._handle.page = await self._handle.context.new_page()
        except PlaywrightError as e:
            logger.warning(f"Open browser is no longer usable ({e}). Relaunching.")
            await self.close()
            self._handle = await self.launcher(headless=headless)
        return self._handle.page

    async def _run_persistent(self, url, fn, headless, ready_selector):
        page = await self._open_persistent_page(headless)
        try:
            return await self._run(self._handle.context, page, url, fn, ready_selector)
        except BaseException:
            await self.close()
            raise

    async def _run(self, context, page, url, fn, ready_selector):
        await CookieManager.load_cookies(context, self.cookies_file)
        await self.navigate(page, url)
        await self.settle(page, ready_selector)
        try:
            return await fn(page)
        except PlaywrightError as e:
            if is_detached_frame_error(e):
                raise NavigationTransientError(str(e)) from e
            raise

    async def navigate(self, page: Page, url: str) -> None:
        """goto() with bounded retries and exponential backoff."""
        attempts = 0
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.navigation_retries),
                wait=wait_exponential(multiplier=self.navigation_backoff, max=10),
                retry=retry_if_exception_type(PlaywrightError),
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    logger.debug(f"Navigating to {url} (attempt {attempts})")
                    await page.goto(
                        url, wait_until="load", timeout=self.navigation_timeout
                    )
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(f"Navigation failed for {url}: {last_error}")
            raise NavigationExhaustedError(url, attempts, last_error) from last_error

        current_url = (page.url or "").lower()
        if "linkedin.com/login" in current_url or "linkedin.com/authwall" in current_url:
            logger.warning("Redirected to login page. Session may have expired.")

    async def settle(self, page: Page, ready_selector: Optional[str] = None) -> None:
        """
        Give client-side rendering time to finish.

        With a selector this polls for it and returns as soon as it is
        attached; the timeout equals the fixed delay used without one.
        """
        if not ready_selector:
            await asyncio.sleep(self.settle_timeout)
            return
        try:
            await page.wait_for_selector(
                ready_selector, state="attached", timeout=self.settle_timeout * 1000
            )
        except PlaywrightTimeoutError:
            logger.debug(f"'{ready_selector}' not found within {self.settle_timeout}s")

    async def close(self) -> None:
        """Close the persistent browser, if one is open."""
        handle, self._handle = self._handle, None
        if handle is not None:
            await handle.close()
            logger.info("Browser closed.")
