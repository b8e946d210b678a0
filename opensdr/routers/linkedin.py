from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from opensdr.linkedin import Degree, LinkedInProspector
from opensdr.schemas.profile import MutualConnections, Profile

router = APIRouter()

_prospector: Optional[LinkedInProspector] = None


def get_prospector() -> LinkedInProspector:
    """FastAPI dependency returning the process-wide prospector."""
    global _prospector
    if _prospector is None:
        _prospector = LinkedInProspector()
    return _prospector


class ConnectionsRequest(BaseModel):
    company: str
    degree: Degree = Degree.FIRST


class PersonRequest(BaseModel):
    person: str
    company: Optional[str] = None


class DraftRequest(BaseModel):
    profile_url: str
    message: str


@router.get("/status")
def get_status(prospector: LinkedInProspector = Depends(get_prospector)):
    """Check whether a LinkedIn cookie store exists."""
    return {"authenticated": prospector.is_authenticated()}


@router.post("/connections", response_model=list[Profile])
async def find_connections(
    req: ConnectionsRequest, prospector: LinkedInProspector = Depends(get_prospector)
):
    return await prospector.find_connections_at_company(req.company, req.degree)


@router.post("/profile", response_model=Profile)
async def find_profile(
    req: PersonRequest, prospector: LinkedInProspector = Depends(get_prospector)
):
    return await prospector.find_profile(req.person, req.company)


@router.post("/mutuals", response_model=MutualConnections)
async def find_mutuals(
    req: PersonRequest, prospector: LinkedInProspector = Depends(get_prospector)
):
    return await prospector.find_mutual_connections(req.person, req.company)


@router.post("/draft")
async def draft_message(
    req: DraftRequest, prospector: LinkedInProspector = Depends(get_prospector)
):
    drafted = await prospector.draft_message(req.profile_url, req.message)
    return {"drafted": drafted}
