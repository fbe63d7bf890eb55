"""Data models for MyVocab."""

from .vocabulary import (
    Category,
    Dataset,
    Definition,
    UserProfile,
    UserProgress,
    UserSettings,
    UserWordStatus,
    Word,
)

__all__ = [
    'Category',
    'Dataset',
    'Definition',
    'UserProfile',
    'UserProgress',
    'UserSettings',
    'UserWordStatus',
    'Word',
]
