"""
Cookie persistence for LinkedIn sessions.
"""
import json
import logging
from pathlib import Path

from playwright.async_api import BrowserContext, Error as PlaywrightError

logger = logging.getLogger("opensdr")

# Keys Playwright's add_cookies() accepts
COOKIE_KEYS = {"name", "value", "url", "domain", "path", "expires", "httpOnly", "secure", "sameSite"}
SAME_SITE_VALUES = {"Strict", "Lax", "None"}


def normalize_cookie(cookie: dict) -> dict:
    """
    Reduce a stored cookie to the fields Playwright accepts.

    Older stores use 'expiry' instead of 'expires'; session cookies carry
    expires=-1, which is dropped along with any unknown sameSite value.
    """
    cookie = dict(cookie)
    if "expiry" in cookie and "expires" not in cookie:
        cookie["expires"] = cookie.pop("expiry")
    item = {k: v for k, v in cookie.items() if k in COOKIE_KEYS and v is not None}
    if item.get("sameSite") not in SAME_SITE_VALUES:
        item.pop("sameSite", None)
    expires = item.get("expires")
    if expires is not None and (not isinstance(expires, (int, float)) or expires < 0):
        item.pop("expires")
    return item


class CookieManager:
    """
    Handles Playwright cookie persistence for LinkedIn sessions.

    Strategy:
      - While the operator logs in, the full cookie set is serialized to a
        JSON file on a timer, overwriting the previous set.
      - Every later call loads those cookies into the browser context
        BEFORE navigating to LinkedIn, which restores the session.
      - The critical cookie is 'li_at' which typically lasts 1-3 months.
    """

    @staticmethod
    async def save_cookies(context: BrowserContext, filepath: Path) -> list[dict]:
        """Extract all cookies from the browser context and save to JSON."""
        cookies = await context.cookies()
        if not cookies:
            return []
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(json.dumps(cookies, indent=2), encoding="utf-8")
        logger.debug(f"Saved {len(cookies)} cookies to {filepath}")
        return cookies

    @staticmethod
    def read_cookies(filepath: Path) -> list[dict]:
        """
        Read the stored cookie list.
        Raises ValueError if the file does not hold a JSON array.
        """
        cookies = json.loads(filepath.read_text(encoding="utf-8"))
        if not isinstance(cookies, list):
            raise ValueError("cookie store is not a JSON array")
        return cookies

    @staticmethod
    async def load_cookies(context: BrowserContext, filepath: Path) -> bool:
        """
        Load cookies from JSON into the browser context.
        Returns True on success, False if file is missing or corrupt.
        """
        if not CookieManager.cookies_exist(filepath):
            logger.debug("No cookie file found.")
            return False
        try:
            cookies = CookieManager.read_cookies(filepath)
            await context.add_cookies([normalize_cookie(c) for c in cookies])
            logger.info("Cookies loaded from file.")
            return True
        except (OSError, ValueError, TypeError, PlaywrightError) as e:
            logger.warning(f"Failed to load cookies: {e}")
            return False

    @staticmethod
    def cookies_exist(filepath: Path) -> bool:
        """Check if a cookie file exists and is non-empty."""
        return filepath.exists() and filepath.stat().st_size > 0
