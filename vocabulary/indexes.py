from __future__ import annotations
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from .ngrams import cut
from .schemas import (
    ALL_WORDS,
    AlphabetItem,
    ChartData,
    DictionaryEntry,
    LengthItem,
    OccurrenceBucket,
    OccurrenceCharts,
    UniqueLettersItem,
)

logger = logging.getLogger(__name__)

CHART_OCC_LIMIT = 50


@dataclass(frozen=True)
class ChartSeries:
    occ: Dict[str, List[OccurrenceBucket]] = field(default_factory=dict)
    alphabet: Dict[str, List[AlphabetItem]] = field(default_factory=dict)
    lengths: Dict[str, List[LengthItem]] = field(default_factory=dict)
    unique_letters: Dict[str, List[UniqueLettersItem]] = field(default_factory=dict)


@dataclass(frozen=True)
class DictionaryIndexes:
    """Aggregates derived from one dictionary snapshot, keyed by list name."""
    occurrences: Dict[str, Dict[str, int]]
    alphabet: Dict[str, Dict[str, int]]
    lengths: Dict[str, Dict[int, int]]
    unique_letters: Dict[str, Dict[int, int]]
    counts: Dict[str, int]
    charts: ChartSeries

    @property
    def list_names(self) -> List[str]:
        return list(self.counts)


def ordered_list_names(list_names: Iterable[str]) -> List[str]:
    names = [ALL_WORDS]
    for name in list_names:
        if name not in names:
            names.append(name)
    return names


def build_indexes(entries: Sequence[DictionaryEntry], list_names: Iterable[str]) -> DictionaryIndexes:
    started = time.perf_counter()
    names = ordered_list_names(list_names)
    tag_names = names[1:]

    occurrences: Dict[str, Counter] = {name: Counter() for name in names}
    alphabet: Dict[str, Counter] = {name: Counter() for name in names}
    lengths: Dict[str, Counter] = {name: Counter() for name in names}
    unique_letters: Dict[str, Counter] = {name: Counter() for name in names}
    counts: Dict[str, int] = {name: 0 for name in names}

    for entry in entries:
        word = entry.word
        grams = cut(word)
        first_letter = word[:1].upper()
        length = len(word)
        unique = len(set(word.lower()))

        targets = [ALL_WORDS]
        targets.extend(name for name in tag_names if entry.flags.get(name))
        for name in targets:
            counts[name] += 1
            alphabet[name][first_letter] += 1
            lengths[name][length] += 1
            unique_letters[name][unique] += 1
            if grams:
                occurrences[name].update(grams)

    indexes = DictionaryIndexes(
        occurrences={name: dict(c) for name, c in occurrences.items()},
        alphabet={name: dict(c) for name, c in alphabet.items()},
        lengths={name: dict(c) for name, c in lengths.items()},
        unique_letters={name: dict(c) for name, c in unique_letters.items()},
        counts=counts,
        charts=build_chart_series(names, occurrences, alphabet, lengths, unique_letters),
    )
    logger.info(
        "Indexed %d entries across %d lists in %.1fms",
        len(entries), len(names), (time.perf_counter() - started) * 1000,
    )
    return indexes


def occurrence_buckets(occurrences: Dict[str, int]) -> List[OccurrenceBucket]:
    """Count how many n-grams are shared by exactly N entries, for every N."""
    buckets = Counter(occurrences.values())
    return [
        OccurrenceBucket(wordsPerSyllable=n, syllablesWithCount=k)
        for n, k in sorted(buckets.items())
    ]


def build_chart_series(names, occurrences, alphabet, lengths, unique_letters) -> ChartSeries:
    series = ChartSeries()
    for name in names:
        series.occ[name] = occurrence_buckets(occurrences[name])
        series.alphabet[name] = [
            AlphabetItem(letter=letter, count=count)
            for letter, count in sorted(alphabet[name].items())
        ]
        series.lengths[name] = [
            LengthItem(length=length, count=count)
            for length, count in sorted(lengths[name].items())
        ]
        series.unique_letters[name] = [
            UniqueLettersItem(uniqueLetters=unique, count=count)
            for unique, count in sorted(unique_letters[name].items())
        ]
    return series


def chart_data(indexes: DictionaryIndexes, limit: int = CHART_OCC_LIMIT) -> ChartData:
    charts = indexes.charts
    return ChartData(
        alphabet=charts.alphabet,
        lengths=charts.lengths,
        uniqueLetters=charts.unique_letters,
        occ=OccurrenceCharts(bottom={name: rows[:limit] for name, rows in charts.occ.items()}),
    )
