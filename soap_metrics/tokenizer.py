"""
Tokenization for lexical metrics.
Lower-cases and splits on whitespace; BLEU uses a stricter normalization.
"""

import re
from typing import List

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def tokenize(text: str) -> List[str]:
    """
    Lower-case and split on runs of whitespace.

    Uses regex split semantics: an empty string gives [''] and
    leading/trailing whitespace leaves empty tokens at the edges.
    """
    return _WHITESPACE.split(text.lower())


def normalize_for_bleu(text: str) -> str:
    """Lower-case, strip punctuation and symbols, collapse whitespace and trim."""
    stripped = _NON_ALNUM.sub('', text.lower())
    return _WHITESPACE.sub(' ', stripped).strip()


def tokenize_for_bleu(text: str) -> List[str]:
    """Tokens of the normalized text (empty list for blank input)."""
    normalized = normalize_for_bleu(text)
    if not normalized:
        return []
    return normalized.split(' ')
