from opensdr.schemas.profile import Profile, MutualConnections, Session, ExtractionJob

__all__ = ["Profile", "MutualConnections", "Session", "ExtractionJob"]
