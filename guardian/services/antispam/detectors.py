"""
Anti-Spam Detection Helpers
===========================

Text similarity scoring for burst detection.
"""

from difflib import SequenceMatcher
from typing import Iterable


def similarity(text1: str, text2: str) -> float:
    """
    Fuzzy similarity of two texts, 0.0 to 1.0.

    Symmetric: the pair is ordered before matching, since SequenceMatcher's
    junk heuristics depend on argument order. Identical texts score 1.0;
    otherwise empty or single-character texts score 0.0.
    """
    if text1 == text2:
        return 1.0
    if len(text1) <= 1 or len(text2) <= 1:
        return 0.0
    a, b = sorted((text1, text2))
    return SequenceMatcher(None, a, b).ratio()


def count_similar(current: str, texts: Iterable[str], threshold: float) -> int:
    """Number of `texts` whose similarity to `current` reaches `threshold`."""
    return sum(1 for text in texts if similarity(current, text) >= threshold)
