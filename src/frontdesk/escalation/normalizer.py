"""Question canonicalization."""

from __future__ import annotations

from frontdesk.core.types import CanonicalText


def canonicalize(text: str) -> CanonicalText:
    """Case-fold and trim outer whitespace.

    Internal whitespace and punctuation are kept, so "what are your hours?"
    and "what are  your hours" are different questions.
    """
    return text.strip().casefold()


def mentions(question: str, key: CanonicalText) -> bool:
    """True when the canonical question contains a non-empty key."""
    return bool(key) and key in canonicalize(question)
