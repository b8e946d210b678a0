"""
Relationship traversals built on the extraction pipeline:

    navigate -> (direct shortcut) -> harvest -> reconcile -> filter

Nothing here retries a whole traversal; navigation retries live in the
session runner and everything else propagates to the caller.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from playwright.async_api import Page

from opensdr.config import settings
from opensdr.linkedin.automation import (
    LinkedInAutomation,
    MESSAGE_BUTTON_SELECTOR,
    MUTUALS_LINK_SELECTOR,
)
from opensdr.linkedin.browser import BrowserSessionRunner
from opensdr.linkedin.errors import ProfileNotFoundError
from opensdr.linkedin.harvester import CandidateHarvester, PROFILE_LINK_SELECTOR
from opensdr.linkedin.queries import ByCompany, ByPerson, Degree, MutualsOf
from opensdr.linkedin.reconciler import GeminiReconciler
from opensdr.linkedin.session import SessionManager
from opensdr.linkedin.urls import absolute_url
from opensdr.schemas.profile import ExtractionJob, MutualConnections, Profile

logger = logging.getLogger("opensdr")

COMPANY_ONLY_INSTRUCTIONS = (
    "VERY IMPORTANT: Only include profiles of people that work at the company "
    "'{company}' and be sure this is correct, ignore other profiles."
)


class LinkedInProspector:
    """
    Caller-facing LinkedIn operations.

    The persistent headed browser used by draft_message() is a single-writer
    resource; concurrent callers on one instance are serialized by the runner.
    """

    def __init__(
        self,
        cookies_file: Optional[Path] = None,
        screenshots_dir: Optional[Path] = None,
        reconciler=None,
        runner: Optional[BrowserSessionRunner] = None,
        session_manager: Optional[SessionManager] = None,
    ):
        self.cookies_file = cookies_file or settings.cookies_file
        self.screenshots_dir = screenshots_dir or settings.screenshots_dir
        self.runner = runner or BrowserSessionRunner(cookies_file=self.cookies_file)
        self.session_manager = session_manager or SessionManager(self.cookies_file)
        self._reconciler = reconciler

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        await self.runner.close()

    @property
    def reconciler(self):
        if self._reconciler is None:
            settings.validate()
            self._reconciler = GeminiReconciler(settings.gemini_api_key, settings.gemini_model)
        return self._reconciler

    def is_authenticated(self) -> bool:
        return self.session_manager.is_authenticated()

    async def login(self) -> bool:
        return await self.session_manager.login()

    # --- Pipeline ---

    async def _harvest(self, page: Page, name: str) -> ExtractionJob:
        return await CandidateHarvester(page, self.screenshots_dir).harvest(name)

    async def _reconcile(self, job: ExtractionJob, instructions: str = "") -> list[Profile]:
        return await self.reconciler.reconcile(
            job.screenshot_path, job.candidate_urls, instructions
        )

    async def extract_profiles(
        self, url: str, name: str, instructions: str = ""
    ) -> list[Profile]:
        """Harvest `url` in a headless session, then reconcile the screenshot."""
        job = await self.runner.with_session(
            url,
            lambda page: self._harvest(page, name),
            ready_selector=PROFILE_LINK_SELECTOR,
        )
        return await self._reconcile(job, instructions)

    # --- Traversals ---

    async def find_connections_at_company(
        self, company_name: str, degree: Union[Degree, str] = Degree.FIRST
    ) -> list[Profile]:
        """
        First- or second-degree connections who work at `company_name`.

        Results are post-filtered by a case-insensitive substring match on the
        company field. That is a best-effort filter, not a guarantee.
        """
        query = ByCompany(company_name, Degree(degree))
        profiles = await self.extract_profiles(
            query.search_url(),
            query.screenshot_name(),
            COMPANY_ONLY_INSTRUCTIONS.format(company=company_name),
        )
        wanted = company_name.lower()
        matches = [p for p in profiles if wanted in p.company.lower()]
        logger.info(
            f"{len(matches)} {query.degree.value}-degree connection(s) at {company_name}"
        )
        return matches

    async def find_profile(
        self, person_name: str, company_name: Optional[str] = None
    ) -> Profile:
        """
        Locate one person. Uses the 'View full profile' link when the search
        narrows to exactly one result; otherwise reconciles the results page.
        """
        query = ByPerson(person_name, company_name)

        async def search(page: Page):
            link = await LinkedInAutomation(page).single_profile_link()
            if link:
                return link
            return await self._harvest(page, query.screenshot_name())

        result = await self.runner.with_session(
            query.search_url(), search, ready_selector=PROFILE_LINK_SELECTOR
        )

        if isinstance(result, str):
            logger.info(f"Found {person_name} via direct profile link.")
            return Profile(
                name=person_name, role="", company="", profile_url=absolute_url(result)
            )

        profiles = await self._reconcile(result)
        wanted = person_name.lower()
        for profile in profiles:
            if wanted in profile.name.lower():
                return profile
        raise ProfileNotFoundError(person_name)

    async def find_mutual_connections(
        self, person_name: str, company_name: Optional[str] = None
    ) -> MutualConnections:
        """People I am connected to who are also connected to `person_name`."""
        query = MutualsOf(person_name, company_name)
        person = await self.find_profile(person_name, company_name)

        mutuals_url = await self.runner.with_session(
            person.profile_url,
            lambda page: LinkedInAutomation(page).mutual_connections_url(),
            ready_selector=MUTUALS_LINK_SELECTOR,
        )
        if not mutuals_url:
            return MutualConnections(mutuals=[], person=person)

        mutuals = await self.extract_profiles(mutuals_url, query.screenshot_name())
        return MutualConnections(mutuals=mutuals, person=person)

    async def draft_message(self, profile_url: str, message: str) -> bool:
        """
        Open the profile in the operator's visible browser with `message` typed
        into a new conversation. Best-effort: False when there is no Message button.
        """
        return await self.runner.with_session(
            profile_url,
            lambda page: LinkedInAutomation(page).draft_message(
                message,
                button_timeout=settings.message_button_timeout,
                type_delay=settings.message_type_delay,
            ),
            headless=False,
            use_existing_browser=True,
            ready_selector=MESSAGE_BUTTON_SELECTOR,
        )
