"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root; real environment variables take precedence
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


_DATA_DIR = Path(os.environ.get("MYVOCAB_DATA_DIR", Path.home() / ".myvocab")).expanduser()


@dataclass
class Config:
    """Application-wide configuration."""

    # Cross-platform paths using pathlib
    # PACKAGE_DIR holds the bundled (read-only) template dataset
    PACKAGE_DIR: Path = Path(__file__).parent.parent.resolve()
    BASE_DIR: Path = PACKAGE_DIR.parent

    # Writable storage
    DATA_DIR: str = str(_DATA_DIR)
    DATA_FILE_NAME: str = "zdata.json"
    DATA_FILE: str = str(_DATA_DIR / DATA_FILE_NAME)
    TEMPLATE_FILE: str = str(PACKAGE_DIR / "data" / DATA_FILE_NAME)
    AUDIO_CACHE_DIR: str = str(_DATA_DIR / "audio")
    EXPORT_DIR: str = str(_DATA_DIR / "export")

    # Speech
    VOICE: str = os.environ.get("MYVOCAB_VOICE", "en-US-AriaNeural")

    # Quiz
    SESSION_SIZE: int = _env_int("MYVOCAB_SESSION_SIZE", 10)
    OPTION_COUNT: int = 4
    REWARD: int = 10

    # Logging
    LOG_LEVEL: str = os.environ.get("MYVOCAB_LOG_LEVEL", "INFO")
    LOG_FILE: str = os.environ.get("MYVOCAB_LOG_FILE", "")

    # Invalid quiz calls raise when strict, are logged otherwise
    STRICT_MODE: bool = _env_flag("MYVOCAB_STRICT", True)
