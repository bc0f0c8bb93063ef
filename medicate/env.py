import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_PORT = 10000
DEFAULT_SEARCH_TIMEOUT = 20.0


def load_env(env_path: Optional[Path] = None) -> bool:
    """Load .env from the working directory if present.

    Variables already set in the environment win over the file.
    """
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    google_api_key: Optional[str] = None
    google_cse_id: Optional[str] = None
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    search_timeout: float = DEFAULT_SEARCH_TIMEOUT
    # Console only when unset
    log_dir: Optional[Path] = None

    @property
    def has_search_credentials(self) -> bool:
        return bool(self.google_api_key and self.google_cse_id)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            google_api_key=os.getenv("GOOGLE_API_KEY") or None,
            google_cse_id=os.getenv("GOOGLE_CSE_ID") or None,
            port=_int_env("PORT", DEFAULT_PORT),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            search_timeout=_float_env("SEARCH_TIMEOUT", DEFAULT_SEARCH_TIMEOUT),
            log_dir=Path(os.environ["LOG_DIR"].strip()) if os.getenv("LOG_DIR", "").strip() else None,
        )
