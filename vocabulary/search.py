from __future__ import annotations
import logging
import math
import random
import re
import time
from typing import Any, Callable, List, Optional

from .dictionary import Snapshot
from .schemas import DictionaryEntry, SearchParams, SearchResult

logger = logging.getLogger(__name__)

SEARCH_BUDGET_MS = 200
CHECK_EVERY = 64
WORD_LIMIT = 20
OBJECT_LIMIT = 50
SYLLABLE_LIMIT = 20


class Deadline:
    """Wall-clock budget polled once every CHECK_EVERY iterations."""

    def __init__(self, budget_ms: float = SEARCH_BUDGET_MS):
        self.budget = budget_ms / 1000.0
        self.started = time.perf_counter()

    def expired(self, i: int) -> bool:
        if i & (CHECK_EVERY - 1):
            return False
        return time.perf_counter() - self.started > self.budget


def compile_pattern(pattern: str) -> Optional[re.Pattern]:
    try:
        return re.compile(pattern)
    except re.error:
        return None


def _scan_entries(
    snapshot: Snapshot,
    params: SearchParams,
    regex: re.Pattern,
    project: Callable[[DictionaryEntry], Any],
    limit: int,
    budget_ms: float,
) -> SearchResult:
    entries = snapshot.entries
    deadline = Deadline(budget_ms)
    matches: List[Any] = []
    exact = None
    for i, entry in enumerate(entries):
        if deadline.expired(i):
            logger.info("Entry search for %r stopped after %d of %d entries", params.pattern, i, len(entries))
            break
        if entry.in_list(params.listname) and regex.search(entry.word):
            if entry.word == params.pattern:
                exact = project(entry)
            else:
                matches.append(project(entry))
    if exact is not None:
        matches.insert(0, exact)
    data = matches[:limit]
    return SearchResult(data=data, total=len(matches), hasMore=len(matches) - len(data), global_=len(entries))


def search_words(snapshot: Optional[Snapshot], params: SearchParams, budget_ms: float = SEARCH_BUDGET_MS) -> SearchResult:
    """Find words of a list matching a regular expression, exact match first."""
    if snapshot is None:
        return SearchResult()
    regex = compile_pattern(params.pattern)
    if regex is None:
        return SearchResult(global_=len(snapshot.entries))
    return _scan_entries(snapshot, params, regex, lambda e: e.word, WORD_LIMIT, budget_ms)


def search_word_objects(snapshot: Optional[Snapshot], params: SearchParams, budget_ms: float = SEARCH_BUDGET_MS) -> SearchResult:
    """Same as search_words but returns whole entries, up to OBJECT_LIMIT."""
    if snapshot is None:
        return SearchResult()
    regex = compile_pattern(params.pattern)
    if regex is None:
        return SearchResult()
    return _scan_entries(snapshot, params, regex, lambda e: e, OBJECT_LIMIT, budget_ms)


def numeric_pattern(pattern: str) -> Optional[float]:
    if not pattern.strip():
        return None
    try:
        value = float(pattern)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def search_syllables(
    snapshot: Optional[Snapshot],
    params: SearchParams,
    rng: Optional[random.Random] = None,
    budget_ms: float = SEARCH_BUDGET_MS,
) -> SearchResult:
    """Match n-grams of a list by regular expression or by exact occurrence count.

    Results come back in random order.
    """
    if snapshot is None:
        return SearchResult()
    occurrences = snapshot.indexes.occurrences.get(params.listname)
    if not occurrences:
        return SearchResult()

    keys = list(occurrences)
    target = numeric_pattern(params.pattern)
    if target is not None:
        accept = lambda key: occurrences[key] == target
    else:
        regex = compile_pattern(params.pattern)
        if regex is None:
            return SearchResult(global_=len(keys))
        accept = lambda key: regex.search(key) is not None

    deadline = Deadline(budget_ms)
    matches: List[str] = []
    for i, key in enumerate(keys):
        if deadline.expired(i):
            logger.info("Syllable search for %r stopped after %d of %d keys", params.pattern, i, len(keys))
            break
        if accept(key):
            matches.append(key)

    (rng or random).shuffle(matches)
    return SearchResult(
        data=matches[:SYLLABLE_LIMIT],
        total=len(matches),
        hasMore=max(0, len(matches) - SYLLABLE_LIMIT),
        global_=len(keys),
    )
