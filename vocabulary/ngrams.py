from __future__ import annotations
import re
from typing import FrozenSet, Optional

# Words carrying these characters are left out of the n-gram indexes
EXCLUDED_CHARS = re.compile(r"['-]")


def cut(word: str) -> Optional[FrozenSet[str]]:
    """Split a word into its distinct 2- and 3-letter substrings.

    Returns None for words containing an apostrophe or a hyphen.
    """
    if EXCLUDED_CHARS.search(word):
        return None
    lower = word.lower()
    length = len(lower)
    grams = set()
    for i in range(length - 1):
        grams.add(lower[i:i + 2])
        if i < length - 2:
            grams.add(lower[i:i + 3])
    return frozenset(grams)
