"""Utils module."""

from .helpers import ensure_dir, today_iso
from .parsing import TextParser
from .logger import setup_logger

__all__ = [
    'ensure_dir',
    'today_iso',
    'TextParser',
    'setup_logger'
]
