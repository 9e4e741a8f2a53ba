"""Ingredient name normalization and the correspondence rule shared by
recipe matching and shopping-list derivation.

Two names correspond when, after normalization, either one contains the
other ("milk" corresponds to "coconut milk" and vice versa). This is loose on
purpose and kept for compatibility with existing match results; there is no
stemming, no synonym table and no edit distance.
"""

import re
from typing import Iterable

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Lowercase, trim and collapse inner whitespace."""
    return _WHITESPACE.sub(" ", (name or "").strip()).lower()


def display_name(name: str) -> str:
    """Title-case a name for display ("olive  oil" -> "Olive Oil")."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in normalize_name(name).split(" ") if word)


def names_correspond(first: str, second: str) -> bool:
    """Case-insensitive substring containment in either direction."""
    a = normalize_name(first)
    b = normalize_name(second)
    if not a or not b:
        return False
    return a in b or b in a


def corresponds_to_any(name: str, candidates: Iterable[str]) -> bool:
    return any(names_correspond(name, candidate) for candidate in candidates)
