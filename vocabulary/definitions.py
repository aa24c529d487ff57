from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from .managers.cache import CacheController
from .schemas import Definition, DefinitionSource, DictionaryEntry, WordDefinitions, WordSummary
from .words import NOT_LOADED, WordServiceError

logger = logging.getLogger(__name__)

SOURCE_NAMES: Dict[int, str] = {
    1: 'Wiktionnaire',
    2: 'Universalis',
    3: 'Cordial',
    5: 'Larousse',
    6: 'LeDictionnaire',
    7: 'Robert',
}

# Most trusted first
SOURCE_PRIORITY_ORDER = (7, 5, 2, 1, 3, 6)
UNRANKED = 999


def source_rank(source_id: int) -> int:
    try:
        return SOURCE_PRIORITY_ORDER.index(source_id)
    except ValueError:
        return UNRANKED


def sort_by_priority(definitions: Iterable[Definition]) -> List[Definition]:
    return sorted(definitions, key=lambda d: source_rank(d.source_id))


def definition_from_row(row: Dict[str, Any]) -> Definition:
    return Definition(**{**row, 'source_name': SOURCE_NAMES.get(row['source_id'])})


class DefinitionService:
    """Definitions of cached words, most trusted source first."""

    def __init__(self, cache: CacheController):
        self.cache = cache

    def _source(self, source_id: Optional[int]) -> Optional[DefinitionSource]:
        if source_id is None:
            return None
        if source_id not in SOURCE_NAMES:
            raise WordServiceError('Invalid source ID')
        return DefinitionSource(id=source_id, name=SOURCE_NAMES[source_id])

    def _entry(self, word_id: Optional[int] = None, word: Optional[str] = None) -> DictionaryEntry:
        snapshot = self.cache.current()
        if snapshot is None:
            raise WordServiceError(NOT_LOADED)
        for entry in snapshot.entries:
            if entry.id == word_id or entry.word == word:
                return entry
        raise WordServiceError('Word not found')

    async def _collect(self, entry: DictionaryEntry, source: Optional[DefinitionSource]) -> WordDefinitions:
        rows = await asyncio.to_thread(self.cache.store.load_definitions, entry.id)
        definitions = sort_by_priority(definition_from_row(row) for row in rows)
        if source is not None:
            definitions = [d for d in definitions if d.source_id == source.id]
        logger.debug("Loaded %d definitions for word %d", len(definitions), entry.id)
        return WordDefinitions(
            word_details=WordSummary(
                id=entry.id, word=entry.word, created_at=entry.created_at, creator_id=entry.creator_id,
            ),
            definitions=definitions,
            has_definitions=bool(definitions),
            definitions_count=len(definitions),
            source_requested=source,
        )

    async def for_word_id(self, word_id: int, source_id: Optional[int] = None) -> WordDefinitions:
        if word_id < 1:
            raise WordServiceError('Invalid word ID')
        source = self._source(source_id)
        return await self._collect(self._entry(word_id=word_id), source)

    async def for_word(self, word: str, source_id: Optional[int] = None) -> WordDefinitions:
        name = (word or '').strip().lower()
        if not name:
            raise WordServiceError('Required fields missing')
        source = self._source(source_id)
        return await self._collect(self._entry(word=name), source)
