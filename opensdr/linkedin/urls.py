"""
URL helpers for LinkedIn profile and search pages.

Profile URLs are compared in canonical form: scheme, host and path only.
"""
import logging
import re
from urllib.parse import quote, urljoin, urlsplit

logger = logging.getLogger("opensdr")

LINKEDIN_BASE_URL = "https://www.linkedin.com"
LINKEDIN_LOGIN_URL = f"{LINKEDIN_BASE_URL}/login"
LINKEDIN_FEED_URL = f"{LINKEDIN_BASE_URL}/feed/"
LINKEDIN_SEARCH_URL = f"{LINKEDIN_BASE_URL}/search/results/people/"

PROFILE_URL_PATTERN = re.compile(r"https://www\.linkedin\.com/in/[\w-]+")
PROFILE_SLUG_PATTERN = re.compile(r"linkedin\.com/in/([\w-]+)")

# Slugs longer than this that also contain a digit are auto-generated ids.
MAX_SLUG_LENGTH = 38


def canonicalize_url(url: str) -> str:
    """Strip query string and fragment. Unparseable input is returned as-is."""
    if not url:
        return url
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        logger.warning(f"Failed to clean URL: {url}")
        return url
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


def absolute_url(href: str) -> str:
    """Resolve a relative LinkedIn href against the site root."""
    return urljoin(LINKEDIN_BASE_URL, href)


def encode_uri_component(value: str) -> str:
    """Percent-encode like JavaScript's encodeURIComponent."""
    return quote(value, safe="-_.!~*'()")


def profile_slug(url: str) -> str:
    match = PROFILE_SLUG_PATTERN.search(url)
    return match.group(1) if match else ""


def is_low_value_slug(url: str) -> bool:
    """True when the /in/ slug is longer than MAX_SLUG_LENGTH and has a digit."""
    slug = profile_slug(url)
    return len(slug) > MAX_SLUG_LENGTH and any(c.isdigit() for c in slug)


def filter_candidate_urls(hrefs) -> list[str]:
    """
    Turn raw anchor hrefs into an ordered list of unique canonical profile URLs.

    Keeps hrefs that contain a profile URL, canonicalizes them, drops
    auto-generated slugs and collapses duplicates on first sight.
    """
    seen = set()
    candidates = []
    for href in hrefs:
        if not href or not PROFILE_URL_PATTERN.search(href):
            continue
        url = canonicalize_url(href)
        if not profile_slug(url) or is_low_value_slug(url):
            continue
        if url in seen:
            continue
        seen.add(url)
        candidates.append(url)
    return candidates


def slugify(text: str) -> str:
    """File-name-safe form of a query subject."""
    text = re.sub(r"\s+", "_", text.strip())
    return re.sub(r"[^\w\-.]", "", text)


def people_search_url(keywords: str, network: str = None) -> str:
    url = f"{LINKEDIN_SEARCH_URL}?keywords={encode_uri_component(keywords)}"
    if network:
        url += f'&network=["{network}"]'
    return url
