import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CALLBACK_URI = "http://localhost:8888/"
DEFAULT_LOG_DIR = "logs"


@dataclass(frozen=True)
class Settings:
    consumer_key: str = ""
    consumer_secret: str = ""
    access_token: str = ""
    access_token_secret: str = ""
    callback_uri: str = DEFAULT_CALLBACK_URI
    callback_timeout: Optional[float] = None
    browser: Optional[str] = None
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    log_level: str = "INFO"


def _parse_timeout(raw):
    """Seconds to wait for the browser redirect; empty means wait forever."""
    if not raw:
        return None
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"OAUTH_CALLBACK_TIMEOUT must be a number of seconds, got '{raw}'")
    if timeout <= 0:
        raise ValueError(f"OAUTH_CALLBACK_TIMEOUT must be positive, got '{raw}'")
    return timeout


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment (and .env, loaded on import)."""
    env = os.environ if environ is None else environ

    return Settings(
        consumer_key=env.get("LINKEDIN_CONSUMER_KEY", "").strip(),
        consumer_secret=env.get("LINKEDIN_CONSUMER_SECRET", "").strip(),
        access_token=env.get("LINKEDIN_ACCESS_TOKEN", "").strip(),
        access_token_secret=env.get("LINKEDIN_ACCESS_TOKEN_SECRET", "").strip(),
        callback_uri=env.get("OAUTH_CALLBACK_URI", "").strip() or DEFAULT_CALLBACK_URI,
        callback_timeout=_parse_timeout(env.get("OAUTH_CALLBACK_TIMEOUT", "").strip()),
        browser=env.get("BROWSER_LAUNCHER", "").strip() or None,
        log_dir=Path(env.get("LOG_DIR", "").strip() or DEFAULT_LOG_DIR),
        log_level=env.get("LOG_LEVEL", "").strip().upper() or "INFO",
    )
