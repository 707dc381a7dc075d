import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv

DEFAULT_PORTAL_URL = "https://portal.booncoaching.com"
DEFAULT_SLACK_API_BASE = "https://slack.com/api"


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_key: str
    slack_signing_secret: str = ""
    portal_url: str = DEFAULT_PORTAL_URL
    slack_api_base: str = DEFAULT_SLACK_API_BASE
    http_timeout: float = 10.0
    max_workers: int = 1
    signature_tolerance: int = 300
    log_level: str = "INFO"


def _env(name: str, default: str = "") -> str:
    # Strip any quotes that might be included
    value = os.getenv(name, default) or default
    return value.strip().strip('"').strip("'")


def load_settings() -> Settings:
    """
    Build Settings from the environment (and .env, if present).
    Raises ValueError when the store credentials are missing.
    """
    load_dotenv(find_dotenv(usecwd=True))

    supabase_url = _env("SUPABASE_URL")
    supabase_key = _env("SUPABASE_SERVICE_ROLE_KEY")
    if not supabase_url or not supabase_key:
        raise ValueError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY. Put them in your .env file")

    try:
        http_timeout = float(_env("HTTP_TIMEOUT_SECONDS", "10"))
        max_workers = int(_env("NUDGE_MAX_WORKERS", "1"))
        tolerance = int(_env("SLACK_SIGNATURE_TOLERANCE_SECONDS", "300"))
    except ValueError as e:
        raise ValueError(f"Invalid numeric setting: {e}") from e

    return Settings(
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        slack_signing_secret=_env("SLACK_SIGNING_SECRET"),
        portal_url=_env("PORTAL_URL", DEFAULT_PORTAL_URL),
        slack_api_base=_env("SLACK_API_BASE", DEFAULT_SLACK_API_BASE).rstrip("/"),
        http_timeout=http_timeout,
        max_workers=max(1, max_workers),
        signature_tolerance=tolerance,
        log_level=_env("LOG_LEVEL", "INFO"),
    )
