"""Text parsing utilities for consistent text processing across the application."""

import hashlib
import html
import re
import unicodedata


class TextParser:
    """
    Centralized text helpers.

    Single place for Unicode normalization, search folding and the
    cleanup applied before text is sent to speech synthesis.
    """

    # HTML tag removal pattern
    HTML_TAG_PATTERN = re.compile(r'<[^>]+>')

    # Whitespace normalization pattern
    WHITESPACE_PATTERN = re.compile(r'\s+')

    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.

        Prevents issues with characters like é being represented as
        either a single codepoint (NFC) or base + combining accent (NFD).
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))

    @classmethod
    def fold(cls, text: str) -> str:
        """Case-fold and normalize text for search comparisons."""
        return cls.WHITESPACE_PATTERN.sub(' ', cls.normalize_unicode(text)).strip().casefold()

    @classmethod
    def clean_for_tts(cls, text: str) -> str:
        """
        Clean text for TTS processing.

        Removes HTML and normalizes whitespace.

        Args:
            text: Raw text

        Returns:
            Cleaned text ready for TTS
        """
        if not text:
            return ""

        text = html.unescape(str(text))
        text = cls.HTML_TAG_PATTERN.sub('', text)
        text = cls.WHITESPACE_PATTERN.sub(' ', text).strip()
        return cls.normalize_unicode(text)

    @classmethod
    def slugify(cls, text: str, max_length: int = 40) -> str:
        """
        Build a filesystem-safe name for text.

        A short content hash keeps names unique when different texts
        reduce to the same slug.
        """
        digest = hashlib.sha1(text.encode("utf-8")).hexdigest()[:10]
        safe = "".join(ch if ch.isalnum() else "_" for ch in cls.normalize_unicode(text)).strip("_")
        if safe:
            return f"{safe[:max_length].lower()}_{digest}"
        return digest
