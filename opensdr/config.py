import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


class Settings:
    """Application settings loaded from environment variables."""

    # --- Paths ---
    base_dir: Path = Path(__file__).resolve().parent.parent
    cookies_file: Path = Path(
        os.getenv("COOKIES_FILE", str(base_dir / "cookies" / "linkedin_cookies.json"))
    )
    screenshots_dir: Path = Path(
        os.getenv("SCREENSHOTS_DIR", str(base_dir / "search_screenshots"))
    )
    logs_dir: Path = base_dir / "logs"

    # --- API Keys ---
    gemini_api_key: str = os.getenv("GEMINI_API_KEY") or os.getenv(
        "GOOGLE_GENERATIVE_AI_API_KEY", ""
    )
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

    # --- Navigation ---
    settle_timeout: float = float(os.getenv("SETTLE_TIMEOUT", "5"))
    navigation_timeout: int = int(os.getenv("NAVIGATION_TIMEOUT", "30000"))
    navigation_retries: int = int(os.getenv("NAVIGATION_RETRIES", "3"))
    navigation_backoff: float = float(os.getenv("NAVIGATION_BACKOFF", "1"))

    # --- Login ---
    login_poll_interval: float = float(os.getenv("LOGIN_POLL_INTERVAL", "5"))
    login_exit_delay: float = float(os.getenv("LOGIN_EXIT_DELAY", "3"))

    # --- Messaging ---
    message_button_timeout: int = int(os.getenv("MESSAGE_BUTTON_TIMEOUT", "5000"))
    message_type_delay: float = float(os.getenv("MESSAGE_TYPE_DELAY", "2"))

    def validate(self):
        if not self.gemini_api_key:
            raise EnvironmentError(
                "GEMINI_API_KEY (or GOOGLE_GENERATIVE_AI_API_KEY) is required in .env"
            )


settings = Settings()
