"""Shared text normalization helpers.

This module centralizes the strip-set policy so every call site (categorical
lookup, whitespace integrity checks, record normalization) removes the same
invisible characters before comparing values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_STRIP_CHARACTERS: Final[tuple[str, ...]] = (
    "\u00a0",  # non-breaking space
    "\t",
    "\n",
    "\r",
)


@dataclass(frozen=True)
class NormalizedText:
    """Normalized text pair.

    Attributes:
        display: Cleaned value preserving source casing.
        comparison: Upper-cased value used for lookups and equality checks.
    """

    display: str
    comparison: str


class TextNormalizer:
    """Strip-set text normalizer shared across engine layers."""

    def __init__(self, strip_characters: tuple[str, ...] | None = None):
        """Initialize normalizer with one strip set.

        Args:
            strip_characters: Characters removed anywhere in the value. Defaults to
                `DEFAULT_STRIP_CHARACTERS`.

        Raises:
            ValueError: Raised when the strip set contains an empty or multi-character entry.
        """

        resolved_characters = DEFAULT_STRIP_CHARACTERS if strip_characters is None else strip_characters
        for character in resolved_characters:
            if not isinstance(character, str) or len(character) != 1:
                raise ValueError(f"strip characters must be single characters, got {character!r}")

        self._strip_characters = tuple(dict.fromkeys(resolved_characters))
        self._translation_table = str.maketrans({character: None for character in self._strip_characters})

    @property
    def strip_characters(self) -> tuple[str, ...]:
        """Return the configured strip set."""

        return self._strip_characters

    def domain_text_normalize(self, value: str | None) -> str | None:
        """Remove strip-set characters and trim surrounding whitespace.

        Args:
            value: Raw text value.

        Returns:
            str | None: Normalized text, or None when input is None. Values made
            only of invisible characters normalize to an empty string.
        """

        if value is None:
            return None
        return value.translate(self._translation_table).strip()

    def domain_text_normalize_for_comparison(self, value: str | None) -> NormalizedText | None:
        """Normalize text and build its comparison form.

        Args:
            value: Raw text value.

        Returns:
            NormalizedText | None: Display and upper-cased comparison values, or None.
        """

        display_value = self.domain_text_normalize(value)
        if display_value is None:
            return None
        return NormalizedText(display=display_value, comparison=display_value.upper())

    def domain_text_comparison_key(self, value: str | None) -> str | None:
        """Return only the upper-cased comparison form of one value."""

        normalized_text = self.domain_text_normalize_for_comparison(value)
        if normalized_text is None:
            return None
        return normalized_text.comparison


def domain_text_build_normalizer(extra_strip_characters: str = "") -> TextNormalizer:
    """Build a normalizer from the default strip set plus extra characters.

    Args:
        extra_strip_characters: Additional characters, each removed anywhere in values.

    Returns:
        TextNormalizer: Configured normalizer.
    """

    return TextNormalizer(strip_characters=DEFAULT_STRIP_CHARACTERS + tuple(extra_strip_characters))


__all__ = [
    "DEFAULT_STRIP_CHARACTERS",
    "NormalizedText",
    "TextNormalizer",
    "domain_text_build_normalizer",
]
