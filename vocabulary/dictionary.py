from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from pydantic import ValidationError

from .indexes import DictionaryIndexes, build_indexes, ordered_list_names
from .schemas import ALL_WORDS, DictionaryEntry, ListMetadata

logger = logging.getLogger(__name__)

AUTHOR_FIELDS = ('creator_id', 'created_at', 'username', 'role', 'image_path')


def is_tag_column(name: str) -> bool:
    return name.startswith('is_')


def flag_value(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes')
    return bool(value)


def entry_from_row(row: Mapping[str, Any], list_names: Iterable[str]) -> DictionaryEntry:
    """Build an entry from a storage row whose tag flags are `is_*` columns."""
    flags = {name: flag_value(row.get(name)) for name in list_names if name != ALL_WORDS}
    fields = {key: row.get(key) for key in AUTHOR_FIELDS if row.get(key) is not None}
    return DictionaryEntry(id=row['id'], word=row['word'], flags=flags, **fields)


def entries_from_rows(rows: Iterable[Mapping[str, Any]], list_names: Iterable[str]) -> List[DictionaryEntry]:
    names = list(list_names)
    entries: List[DictionaryEntry] = []
    for row in rows:
        try:
            entries.append(entry_from_row(row, names))
        except (KeyError, ValidationError) as exc:
            logger.warning("Skipping malformed dictionary row %r: %s", row.get('id'), exc)
    return entries


@dataclass(frozen=True)
class Snapshot:
    """Entries, list metadata and the indexes derived from them.

    A snapshot is never modified; mutations produce a new one marked stale
    until its indexes are rebuilt.
    """
    entries: Tuple[DictionaryEntry, ...]
    metadata: ListMetadata
    indexes: DictionaryIndexes
    version: int = 1
    # bumped by every entry mutation within a version
    revision: int = 0
    stale: bool = False

    @property
    def list_names(self) -> List[str]:
        return ordered_list_names(self.metadata.listNames)

    @property
    def counts(self) -> Dict[str, int]:
        return dict(self.indexes.counts)

    def with_entries(self, entries: Iterable[DictionaryEntry]) -> 'Snapshot':
        return replace(self, entries=tuple(entries), revision=self.revision + 1, stale=True)

    def reindexed(self) -> 'Snapshot':
        indexes = build_indexes(self.entries, self.list_names)
        return replace(self, indexes=indexes, stale=False)


def build_snapshot(
    rows: Iterable[Mapping[str, Any]],
    metadata: ListMetadata,
    version: int = 1,
) -> Snapshot:
    names = ordered_list_names(metadata.listNames)
    entries = tuple(entries_from_rows(rows, names))
    indexes = build_indexes(entries, names)
    return Snapshot(entries=entries, metadata=metadata, indexes=indexes, version=version)
