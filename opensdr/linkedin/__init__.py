from opensdr.linkedin.prospector import LinkedInProspector
from opensdr.linkedin.cookies import CookieManager
from opensdr.linkedin.reconciler import GeminiReconciler
from opensdr.linkedin.session import SessionManager
from opensdr.linkedin.queries import Degree

__all__ = [
    "LinkedInProspector",
    "CookieManager",
    "GeminiReconciler",
    "SessionManager",
    "Degree",
]
