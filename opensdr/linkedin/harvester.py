"""
Candidate harvesting from a loaded LinkedIn search page.

Harvesting order matters: noise nodes are removed before the screenshot is
taken so the reconciliation model never sees them.
"""
import logging
from pathlib import Path

from playwright.async_api import Page

from opensdr.linkedin.urls import filter_candidate_urls
from opensdr.schemas.profile import ExtractionJob

logger = logging.getLogger("opensdr")

PROFILE_LINK_SELECTOR = 'a[href*="linkedin.com/in/"]'

# Free-text result summaries; they carry names of unrelated people.
NOISE_SELECTORS = [
    'p[class*="entity-result__summary--2-lines"]',
]


class CandidateHarvester:
    """Extracts candidate profile URLs and a full-page screenshot."""

    def __init__(self, page: Page, screenshots_dir: Path):
        self.page = page
        self.screenshots_dir = screenshots_dir

    async def remove_noise(self) -> None:
        for selector in NOISE_SELECTORS:
            await self.page.eval_on_selector_all(
                selector, "els => els.forEach(el => el.remove())"
            )

    async def take_screenshot(self, name: str) -> Path:
        self.screenshots_dir.mkdir(parents=True, exist_ok=True)
        path = self.screenshots_dir / f"{name}.png"
        await self.page.screenshot(path=str(path), full_page=True)
        logger.debug(f"Search results screenshot saved to {path}")
        return path

    async def collect_profile_links(self) -> list[str]:
        hrefs = await self.page.eval_on_selector_all(
            PROFILE_LINK_SELECTOR, "els => els.map(el => el.getAttribute('href'))"
        )
        return filter_candidate_urls(hrefs)

    async def harvest(self, name: str) -> ExtractionJob:
        await self.remove_noise()
        screenshot_path = await self.take_screenshot(name)
        candidates = await self.collect_profile_links()
        logger.info(f"Harvested {len(candidates)} candidate profile(s) from {self.page.url}")
        return ExtractionJob(
            url=self.page.url,
            screenshot_path=screenshot_path,
            candidate_urls=candidates,
        )
