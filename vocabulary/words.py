from __future__ import annotations
import asyncio
import logging
from typing import Dict, Iterable, List, Tuple

from .dictionary import entry_from_row
from .managers.cache import CacheController
from .schemas import ALL_WORDS, AddWordsResult, Author, SearchParams, WordDetails
from .storage import DuplicateWordError

logger = logging.getLogger(__name__)

NOT_LOADED = 'Dictionary cache is not loaded'

ERROR_STATUS = {
    'No valid words provided': 400,
    'Required fields missing': 400,
    'Invalid word ID': 400,
    'Invalid source ID': 400,
    'Invalid search parameters': 400,
    'Word not found': 404,
    'Some words already exist': 409,
    'Server error while adding words': 500,
    NOT_LOADED: 503,
}


class WordServiceError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status(self) -> int:
        return status_for(self.message)


def status_for(message: str) -> int:
    if message in ERROR_STATUS:
        return ERROR_STATUS[message]
    if 'duplicate' in message.lower():
        return 409
    return 500


def process_words(details: Iterable[WordDetails]) -> Dict[str, List[str]]:
    """Normalize names and merge the tags of duplicates, keeping first-seen order."""
    merged: Dict[str, List[str]] = {}
    for item in details:
        name = (item.name or '').strip().lower()
        if not name:
            continue
        tags = merged.setdefault(name, [])
        tags.extend(t for t in item.tags if t not in tags)
    return merged


def filter_new_words(processed: Dict[str, List[str]], existing: Iterable[str]) -> List[Tuple[str, List[str]]]:
    known = set(existing)
    return [(name, tags) for name, tags in processed.items() if name not in known]


def tag_flags(tags: Iterable[str], list_names: Iterable[str]) -> Dict[str, bool]:
    wanted = set(tags)
    return {name: name in wanted for name in list_names if name != ALL_WORDS}


def checked_search_params(params: SearchParams) -> SearchParams:
    if not params.pattern.strip() or not params.listname.strip():
        raise WordServiceError('Invalid search parameters')
    return params


class WordService:
    """Storage writes followed by the matching cache hook.

    Each write and its hook run under the cache's mutation lock so a
    concurrent refresh cannot publish rows fetched before the write. The
    index rebuild happens after the lock is released.
    """

    def __init__(self, cache: CacheController):
        self.cache = cache

    @property
    def store(self):
        return self.cache.store

    async def add_words(self, details: List[WordDetails], author: Author) -> AddWordsResult:
        processed = process_words(details)
        if not processed:
            raise WordServiceError('No valid words provided')

        async with self.cache.mutating():
            existing = await asyncio.to_thread(self.store.existing_words, list(processed))
            new_words = filter_new_words(processed, existing)
            if not new_words:
                return AddWordsResult(message='All words already exist', skipped=len(processed))

            list_names = self.cache.list_names()
            rows = [
                {
                    'word': name,
                    'creator_id': author.creator_id,
                    'username': author.username,
                    'role': author.role,
                    'image_path': author.image_path,
                    **{k: int(v) for k, v in tag_flags(tags, list_names).items()},
                }
                for name, tags in new_words
            ]
            try:
                inserted = await asyncio.to_thread(self.store.insert_words, rows)
            except DuplicateWordError as exc:
                logger.warning("Insert rejected: %s", exc)
                raise WordServiceError('Some words already exist') from exc
            except Exception as exc:
                logger.exception("Inserting %d words failed", len(rows))
                raise WordServiceError('Server error while adding words') from exc

            for row in inserted:
                self.cache.add(entry_from_row(row, list_names))

        await self.cache.reindex()
        await self.cache.publish('words:added', [row['word'] for row in inserted])
        logger.info("Added %d words", len(inserted))

        return AddWordsResult(
            message=f"{len(inserted)} word(s) added successfully",
            words=[WordDetails(name=name, tags=tags) for name, tags in new_words],
            inserted=len(inserted),
            skipped=len(processed) - len(new_words),
        )

    async def update_word(self, word_id: int, details: WordDetails) -> WordDetails:
        name = (details.name or '').strip()
        if word_id < 1 or not name:
            raise WordServiceError('Required fields missing')

        async with self.cache.mutating():
            flags = tag_flags(details.tags, self.cache.list_names())
            found = await asyncio.to_thread(
                self.store.update_word, word_id, {'word': name, **{k: int(v) for k, v in flags.items()}},
            )
            if not found:
                raise WordServiceError('Word not found')
            self.cache.update(word_id, {'word': name, 'flags': flags})

        await self.cache.reindex()
        await self.cache.publish('words:updated', {'id': word_id, 'word': name})
        logger.info("Updated word %d", word_id)
        return details

    async def delete_word(self, word_id: int) -> int:
        if word_id < 1:
            raise WordServiceError('Invalid word ID')

        async with self.cache.mutating():
            deleted = await asyncio.to_thread(self.store.delete_word, word_id)
            if deleted is None:
                raise WordServiceError('Word not found')
            self.cache.remove(word_id)

        await self.cache.reindex()
        await self.cache.publish('words:deleted', {'id': word_id})
        logger.info("Deleted word %d", word_id)
        return word_id
