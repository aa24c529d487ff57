from __future__ import annotations
import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .dictionary import flag_value, is_tag_column
from .schemas import ALL_WORDS

logger = logging.getLogger(__name__)

DEFAULT_TAGS = ('is_adverb', 'is_animal', 'is_demonym', 'is_verb')

# Small seed dictionary for development/demo.
# In production, point DICTIONARY_PATH at an exported word table.
DEFAULT_WORDS: Dict[str, tuple] = {
    'cat': ('is_animal',), 'dog': ('is_animal',), 'fish': ('is_animal', 'is_verb'),
    'bird': ('is_animal',), 'mouse': ('is_animal',), 'zebra': ('is_animal',),
    'play': ('is_verb',), 'jump': ('is_verb',), 'echo': ('is_verb',), 'quiz': ('is_verb',),
    'quickly': ('is_adverb',), 'slowly': ('is_adverb',), 'often': ('is_adverb',),
    'parisian': ('is_demonym',), 'roman': ('is_demonym',),
    'hello': (), 'world': (), 'board': (), 'puzzle': (), 'rhythm': (), 'jazz': (),
    "o'clock": ('is_adverb',), 'well-being': (),
}

# word -> [(source_id, text), ...]
DEFAULT_DEFINITIONS: Dict[str, List[tuple]] = {
    'cat': [
        (1, 'Small domesticated carnivorous mammal with soft fur.'),
        (7, 'Feline kept as a pet or for catching mice.'),
    ],
    'dog': [
        (5, 'Domesticated carnivorous mammal descended from the wolf.'),
        (1, 'A loyal companion animal.'),
    ],
    'jump': [(2, 'To push oneself off a surface into the air.')],
}


class DuplicateWordError(ValueError):
    """Raised by insert_words when a row's word is already stored."""

    def __init__(self, words: Iterable[str]):
        self.words = sorted(words)
        super().__init__(f"duplicate word(s): {', '.join(self.words)}")


class DictionaryStore(Protocol):
    def load_dictionary(self) -> Optional[List[Dict[str, Any]]]: ...

    def load_list_metadata(self) -> Dict[str, Any]: ...

    def load_definitions(self, word_id: int) -> List[Dict[str, Any]]: ...

    def existing_words(self, names: Iterable[str]) -> List[str]: ...

    def insert_words(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]: ...

    def update_word(self, word_id: int, fields: Dict[str, Any]) -> bool: ...

    def delete_word(self, word_id: int) -> Optional[Dict[str, Any]]: ...


def seed_rows(words: Optional[Dict[str, tuple]] = None, tags: Iterable[str] = DEFAULT_TAGS) -> List[Dict[str, Any]]:
    tags = list(tags)
    now = datetime.now(timezone.utc).isoformat()
    rows = []
    for i, (word, word_tags) in enumerate((words or DEFAULT_WORDS).items(), start=1):
        row = {
            'id': i, 'word': word, 'creator_id': 1, 'created_at': now,
            'username': 'admin', 'role': 'admin', 'image_path': None,
        }
        row.update({tag: int(tag in word_tags) for tag in tags})
        rows.append(row)
    return rows


def seed_definitions(rows: Iterable[Dict[str, Any]], definitions: Optional[Dict[str, List[tuple]]] = None) -> List[Dict[str, Any]]:
    now = datetime.now(timezone.utc).isoformat()
    ids = {row['word']: row['id'] for row in rows}
    seeded = []
    for word, items in (definitions or DEFAULT_DEFINITIONS).items():
        if word not in ids:
            continue
        for source_id, text in items:
            seeded.append({
                'id': len(seeded) + 1, 'word_id': ids[word], 'definition': text,
                'source_id': source_id, 'created_at': now,
            })
    return seeded


class MemoryDictionaryStore:
    """Row store kept in process memory, shaped like the WORDS table."""

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        tags: Iterable[str] = (),
        definitions: Optional[List[Dict[str, Any]]] = None,
    ):
        self._rows: List[Dict[str, Any]] = [dict(r) for r in (rows if rows is not None else seed_rows())]
        self._tags: List[str] = list(tags)
        if definitions is None:
            definitions = seed_definitions(self._rows) if rows is None else []
        self._definitions: List[Dict[str, Any]] = [dict(d) for d in definitions]
        self._lock = threading.Lock()

    def _tag_columns(self) -> List[str]:
        columns = list(self._tags)
        for row in self._rows[:1]:
            columns.extend(key for key in row if is_tag_column(key) and key not in columns)
        return columns

    def load_dictionary(self) -> Optional[List[Dict[str, Any]]]:
        with self._lock:
            return [dict(r) for r in self._rows]

    def load_list_metadata(self) -> Dict[str, Any]:
        with self._lock:
            tags = self._tag_columns()
            if not self._rows and not tags:
                return {'listNames': [], 'counts': {}}
            counts = {ALL_WORDS: len(self._rows)}
            for tag in tags:
                counts[tag] = sum(1 for r in self._rows if flag_value(r.get(tag)))
            return {'listNames': [ALL_WORDS, *tags], 'counts': counts}

    def load_definitions(self, word_id: int) -> List[Dict[str, Any]]:
        with self._lock:
            found = [dict(d) for d in self._definitions if d['word_id'] == word_id]
        return sorted(found, key=lambda d: d['id'])

    def existing_words(self, names: Iterable[str]) -> List[str]:
        wanted = set(names)
        with self._lock:
            return [r['word'] for r in self._rows if r['word'] in wanted]

    def insert_words(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        now = datetime.now(timezone.utc).isoformat()
        inserted = []
        with self._lock:
            # all-or-nothing, like a unique index on WORDS.word
            taken = {r['word'] for r in self._rows} & {row['word'] for row in rows}
            if taken:
                raise DuplicateWordError(taken)
            next_id = max((r['id'] for r in self._rows), default=0) + 1
            for row in rows:
                stored = {**row, 'id': next_id, 'created_at': row.get('created_at') or now}
                self._rows.append(stored)
                inserted.append(dict(stored))
                next_id += 1
        self._persist()
        return inserted

    def update_word(self, word_id: int, fields: Dict[str, Any]) -> bool:
        with self._lock:
            row = next((r for r in self._rows if r['id'] == word_id), None)
            if row is None:
                return False
            row.update(fields)
        self._persist()
        return True

    def delete_word(self, word_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            for i, row in enumerate(self._rows):
                if row['id'] == word_id:
                    del self._rows[i]
                    break
            else:
                return None
            self._definitions = [d for d in self._definitions if d['word_id'] != word_id]
        self._persist()
        return row

    def _persist(self):
        pass


class JsonDictionaryStore(MemoryDictionaryStore):
    """Rows read from (and written back to) a JSON file.

    The file holds either a list of rows or
    {"tags": [...], "words": [...], "definitions": [...]}.
    Every load re-reads the file, so it stays the source of truth.
    """

    def __init__(self, path: Path | str):
        super().__init__(rows=[])
        self.path = Path(path)
        if self.path.exists():
            self._read()

    def _read(self) -> bool:
        try:
            raw = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as exc:
            logger.error("Cannot read dictionary file %s: %s", self.path, exc)
            return False
        if isinstance(raw, dict):
            rows, tags = raw.get('words', []), raw.get('tags', [])
            definitions = raw.get('definitions', [])
        else:
            rows, tags, definitions = raw, [], []
        with self._lock:
            self._rows = [dict(r) for r in rows]
            self._tags = list(tags)
            self._definitions = [dict(d) for d in definitions]
        return True

    def load_dictionary(self) -> Optional[List[Dict[str, Any]]]:
        if not self._read():
            return None
        return super().load_dictionary()

    def load_list_metadata(self) -> Dict[str, Any]:
        if not self._read():
            return {'listNames': [], 'counts': {}}
        return super().load_list_metadata()

    def load_definitions(self, word_id: int) -> List[Dict[str, Any]]:
        if not self._read():
            return []
        return super().load_definitions(word_id)

    def _persist(self):
        """Write to a temp file next to the target, then swap it in."""
        with self._lock:
            payload = {'tags': self._tag_columns(), 'words': self._rows, 'definitions': self._definitions}
            tmp_fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix='.tmp', dir=self.path.parent,
            )
            try:
                with os.fdopen(tmp_fd, 'w', encoding='utf-8') as fh:
                    json.dump(payload, fh, indent=2, default=str)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
