"""
Page-level LinkedIn interactions via Playwright.

SELECTOR STRATEGY (LinkedIn changes DOM frequently):
  1. Visible text or aria-label matches first.
  2. URL markers inside hrefs second.
  3. CSS class fragments last resort.
"""
import logging
from typing import Optional

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from opensdr.linkedin.urls import absolute_url

VIEW_FULL_PROFILE_TEXT = "View full profile"
MUTUALS_LINK_SELECTOR = 'a[href*="facetNetwork"]'
MUTUALS_NETWORK_MARKER = "facetNetwork=%22F%22"
MUTUALS_CONNECTION_MARKER = "facetConnectionOf="
MESSAGE_BUTTON_SELECTOR = 'button[aria-label*="Message"]'
MESSAGE_BOX_SELECTOR = "div[role='textbox'][contenteditable='true']"


class LinkedInAutomation:
    """Reads and drives a single loaded LinkedIn page."""

    def __init__(self, page: Page):
        self.page = page
        self.logger = logging.getLogger("opensdr")

    # --- Search Page ---

    async def view_full_profile_links(self) -> list[str]:
        """Hrefs of every anchor whose text is exactly 'View full profile'."""
        return await self.page.evaluate(
            """(text) => Array.from(document.querySelectorAll('a'))
                .filter(a => (a.textContent || '').trim() === text)
                .map(a => a.getAttribute('href'))
                .filter(href => href !== null)""",
            VIEW_FULL_PROFILE_TEXT,
        )

    async def single_profile_link(self) -> Optional[str]:
        """The 'View full profile' href when the search narrowed to one person."""
        links = await self.view_full_profile_links()
        if len(links) == 1:
            self.logger.debug(f"Single profile link found: {links[0]}")
            return links[0]
        return None

    # --- Profile Page ---

    async def mutual_connections_url(self) -> Optional[str]:
        """Link to 'first-degree connections of this person', if the page has one."""
        hrefs = await self.page.eval_on_selector_all(
            MUTUALS_LINK_SELECTOR, "els => els.map(el => el.getAttribute('href'))"
        )
        for href in hrefs:
            if (
                href
                and MUTUALS_NETWORK_MARKER in href
                and MUTUALS_CONNECTION_MARKER in href
            ):
                return absolute_url(href)
        self.logger.info("No mutual connections link on profile.")
        return None

    # --- Messaging ---

    async def draft_message(
        self, message: str, button_timeout: int = 5000, type_delay: float = 2.0
    ) -> bool:
        """
        Open the message overlay and type `message` without sending it.

        LinkedIn renders an inert duplicate of the Message button, so the
        second match wins when there are two. Returns False when no button
        shows up within `button_timeout` ms.
        """
        try:
            await self.page.wait_for_selector(
                MESSAGE_BUTTON_SELECTOR, timeout=button_timeout
            )
        except PlaywrightTimeoutError:
            self.logger.error(f"No message button found on {self.page.url}")
            return False

        buttons = await self.page.query_selector_all(MESSAGE_BUTTON_SELECTOR)
        if not buttons:
            self.logger.error(f"No message button found on {self.page.url}")
            return False

        button = buttons[1] if len(buttons) >= 2 else buttons[0]
        await button.click()

        # Wait for the compose box, bounded by the same delay as before
        try:
            await self.page.wait_for_selector(
                MESSAGE_BOX_SELECTOR, timeout=type_delay * 1000
            )
        except PlaywrightTimeoutError:
            self.logger.debug("Message box not detected. Typing anyway...")

        await self.page.keyboard.type(message)
        self.logger.info(f"Drafted message ({len(message)} chars).")
        return True
