"""Levenshtein distance and the similarity derived from it."""

from typing import Optional
import Levenshtein


def distance(s1: Optional[str], s2: Optional[str]) -> int:
    """
    Minimum number of single-character edits turning one string into another.

    Args:
        s1: First string, may be None
        s2: Second string, may be None

    Returns:
        int: Edit distance; a missing side counts as the empty string
    """
    if s1 is None and s2 is None:
        return 0
    if s1 is None:
        return len(s2)
    if s2 is None:
        return len(s1)
    return Levenshtein.distance(s1, s2)


def similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Return 1 - distance / longer length, in [0, 1]."""
    if s1 is None and s2 is None:
        return 1.0
    if s1 is None or s2 is None:
        return 0.0

    max_length = max(len(s1), len(s2))
    if max_length == 0:
        return 1.0
    return 1.0 - distance(s1, s2) / max_length


def normalized_similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Case-insensitive, whitespace-trimmed similarity."""
    if s1 is None and s2 is None:
        return 1.0
    if s1 is None or s2 is None:
        return 0.0
    return similarity(s1.lower().strip(), s2.lower().strip())
