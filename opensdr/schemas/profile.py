from datetime import datetime
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field


class Profile(BaseModel):
    """A person located on LinkedIn. Immutable once returned."""

    name: str
    role: str
    company: str
    profile_url: str = Field(alias="profileUrl")

    class Config:
        frozen = True
        populate_by_name = True


class MutualConnections(BaseModel):
    mutuals: list[Profile]
    person: Profile


@dataclass
class Session:
    """Authenticated browser context, represented by its persisted cookie set."""

    cookie_store_path: Path
    cookies: list[dict] = field(default_factory=list)
    last_refreshed_at: Optional[datetime] = None


@dataclass
class ExtractionJob:
    """One navigation worth of harvested candidates plus its screenshot."""

    url: str
    screenshot_path: Path
    candidate_urls: list[str] = field(default_factory=list)
