"""
Gemini-based reconciliation of a search-page screenshot with the profile
URLs harvested from the same page.
"""
import json
import logging
from pathlib import Path
from typing import TypedDict

import google.generativeai as genai
from pydantic import ValidationError

from opensdr.linkedin.errors import ReconciliationError
from opensdr.linkedin.urls import canonicalize_url
from opensdr.schemas.profile import Profile

logger = logging.getLogger("opensdr")


class ProfileEntry(TypedDict):
    """Wire shape of one profile in the model response."""

    name: str
    role: str
    company: str
    profileUrl: str


RESPONSE_SCHEMA = list[ProfileEntry]


def build_prompt(candidate_urls: list[str], instructions: str = "") -> str:
    prompt = (
        "Here is a screenshot of a LinkedIn search results page and some urls that "
        "appear on that page. Match the urls to the profiles in the screenshot. "
        "Return a JSON list of profiles with the following fields: name, role, "
        "company, profileUrl. Only use urls from the list below. If no profiles "
        "are found, return an empty list."
    )
    if instructions:
        prompt += " " + instructions
    return prompt + "\n\n" + "\n".join(candidate_urls)


def parse_profiles(text: str, candidate_urls: list[str]) -> list[Profile]:
    """
    Validate a raw model response against the Profile schema.

    Malformed entries and entries whose URL is not one of the candidates are
    dropped. Duplicate URLs keep their first entry. Raises ReconciliationError
    when the response is not a JSON list.
    """
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise ReconciliationError(f"Reconciliation response is not JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("profiles"), list):
        data = data["profiles"]
    if not isinstance(data, list):
        raise ReconciliationError(
            f"Reconciliation response is not a list (got {type(data).__name__})"
        )

    allowed = {canonicalize_url(url) for url in candidate_urls}
    seen = set()
    profiles = []
    for entry in data:
        try:
            profile = Profile.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Dropping malformed profile entry {entry!r}: {e.errors()}")
            continue

        url = canonicalize_url(profile.profile_url)
        if url not in allowed:
            logger.warning(f"Dropping profile with unknown url: {profile.profile_url}")
            continue
        if url in seen:
            continue
        seen.add(url)
        profiles.append(profile.model_copy(update={"profile_url": url}))
    return profiles


class GeminiReconciler:
    """
    Sends a screenshot plus candidate URLs to Gemini and gets Profile records back.

    Uses gemini-2.0-flash by default for speed and cost efficiency.
    """

    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash"):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)

    async def reconcile(
        self,
        screenshot_path: Path,
        candidate_urls: list[str],
        instructions: str = "",
    ) -> list[Profile]:
        if not screenshot_path.exists():
            raise ReconciliationError(f"Image not found at path: {screenshot_path}")
        if not candidate_urls:
            logger.info("No candidate urls to reconcile.")
            return []

        prompt = build_prompt(candidate_urls, instructions)
        image = {"mime_type": "image/png", "data": screenshot_path.read_bytes()}

        try:
            logger.debug(
                f"Sending reconciliation request to Gemini "
                f"({len(candidate_urls)} candidates, {screenshot_path.name})"
            )
            response = await self.model.generate_content_async(
                [prompt, image],
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                    temperature=0.0,
                ),
            )
            text = response.text
        except Exception as e:
            raise ReconciliationError(f"Gemini API error: {e}") from e

        profiles = parse_profiles(text, candidate_urls)
        logger.info(f"Gemini reconciled {len(profiles)} profile(s).")
        return profiles
