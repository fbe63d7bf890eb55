"""Utility functions."""

from datetime import date
from pathlib import Path
from typing import Optional


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)


def today_iso(today: Optional[date] = None) -> str:
    """Date stamp used for lastReviewed / lastStudyDate fields."""
    return (today or date.today()).isoformat()
