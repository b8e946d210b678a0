"""Exceptions raised by the LinkedIn extraction engine."""


class LinkedInError(Exception):
    """Base exception for LinkedIn engine errors."""
    pass


class SessionMissingError(LinkedInError):
    """Raised when no cookie store exists. Run the login command first."""

    def __init__(self, cookies_file):
        self.cookies_file = cookies_file
        super().__init__(
            f"No cookies found at {cookies_file}. Please run the login command first."
        )


class ProfileNotFoundError(LinkedInError):
    """Raised when no profile matches the requested person."""

    def __init__(self, person_name: str):
        self.person_name = person_name
        super().__init__(f"No profile found for {person_name}")


class NavigationTransientError(LinkedInError):
    """Raised for frame-detached races while the page is being torn down."""
    pass


class NavigationExhaustedError(LinkedInError):
    """Raised when navigation to a URL keeps failing after every retry."""

    def __init__(self, url: str, attempts: int, last_error: Exception = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Navigation to {url} failed after {attempts} attempt(s): {last_error}"
        )


class ReconciliationError(LinkedInError):
    """Raised when the screenshot reconciliation call fails or returns garbage."""
    pass


def is_detached_frame_error(error: Exception) -> bool:
    """True for Playwright's 'frame was detached' navigation races."""
    return "frame was detached" in str(error).lower()
