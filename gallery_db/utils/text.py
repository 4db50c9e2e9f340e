"""
Tag extraction from image descriptions.
"""

import re

from ..constants import TAG_MARKER

_TAG_PATTERN = re.compile(re.escape(TAG_MARKER) + r"\w+")


def normalize(tag: str) -> str:
    """Lowercase a tag and strip every tag marker from it."""
    return tag.lower().replace(TAG_MARKER, "")


def extract_tags(text: str | None) -> list[str]:
    """
    Extract normalized tags from free text, in order of appearance.

    Duplicates are kept. Missing or empty text yields an empty list.

    >>> extract_tags("hello #World #world!")
    ['world', 'world']
    """
    if not text:
        return []
    return [normalize(match) for match in _TAG_PATTERN.findall(text)]


class TextNormalizer:
    """Injectable wrapper around extract_tags()/normalize()."""

    @staticmethod
    def extract_tags(text: str | None) -> list[str]:
        return extract_tags(text)

    @staticmethod
    def normalize(tag: str) -> str:
        return normalize(tag)
