from __future__ import annotations
import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..dictionary import Snapshot, build_snapshot
from ..schemas import DictionaryEntry, ListMetadata
from ..storage import DictionaryStore

logger = logging.getLogger(__name__)


class CacheController:
    """Owns the published dictionary snapshots.

    Two references are kept: the latest entries (``current``) and the last
    snapshot whose indexes match its entries (``read``). Readers take either
    reference without locking. Refresh and storage mutations share one
    asyncio lock, so a refresh can never swap in rows fetched before a
    mutation that has already reached storage. Indexes are rebuilt off the
    event loop by ``reindex``.
    """

    def __init__(self, store: DictionaryStore, sio=None):
        self.store = store
        self.sio = sio
        self._snapshot: Optional[Snapshot] = None
        self._indexed: Optional[Snapshot] = None
        self._write_lock = threading.Lock()
        self._lock = asyncio.Lock()
        self._generation = 0

    async def refresh(self) -> bool:
        async with self._lock:
            try:
                rows, raw_metadata = await asyncio.gather(
                    asyncio.to_thread(self.store.load_dictionary),
                    asyncio.to_thread(self.store.load_list_metadata),
                )
            except Exception:
                logger.exception("Dictionary fetch failed; keeping previous snapshot")
                return False
            if rows is None or not raw_metadata or not raw_metadata.get('listNames'):
                logger.error("Dictionary or list metadata unavailable; keeping previous snapshot")
                return False
            try:
                metadata = ListMetadata.model_validate(raw_metadata)
            except ValidationError as exc:
                logger.error("Invalid list metadata %r: %s", raw_metadata, exc)
                return False

            snapshot = await asyncio.to_thread(build_snapshot, rows, metadata, self._generation + 1)
            with self._write_lock:
                self._generation = snapshot.version
                self._snapshot = snapshot
                self._indexed = snapshot

        logger.info("Dictionary snapshot v%d published with %d entries", snapshot.version, len(snapshot.entries))
        await self.publish('dictionary:refreshed', {
            'version': snapshot.version,
            'total': len(snapshot.entries),
            'counts': snapshot.counts,
        })
        return True

    @asynccontextmanager
    async def mutating(self):
        """Hold off refreshes while a storage write and its cache hook run."""
        async with self._lock:
            yield self

    async def reindex(self) -> Optional[Snapshot]:
        """Rebuild the indexes of the latest entries in a worker thread.

        ``read()`` keeps returning the previous consistent snapshot until the
        rebuilt one is swapped in.
        """
        while True:
            snapshot = self._snapshot
            if snapshot is None or not snapshot.stale:
                return snapshot
            fresh = await asyncio.to_thread(snapshot.reindexed)
            with self._write_lock:
                if self._snapshot is snapshot:
                    self._snapshot = fresh
                    self._indexed = fresh
                    return fresh
                # entries moved on while building; keep the newer of the two consistent views
                latest, indexed = self._snapshot, self._indexed
                if latest is not None and indexed is not None and fresh.version == latest.version \
                        and (fresh.version, fresh.revision) > (indexed.version, indexed.revision):
                    self._indexed = fresh

    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def current(self) -> Optional[Snapshot]:
        # entries are always current; indexes may lag behind mutations
        return self._snapshot

    def read(self) -> Optional[Snapshot]:
        return self._indexed

    def clear(self):
        with self._write_lock:
            self._snapshot = None
            self._indexed = None

    def list_names(self) -> List[str]:
        snapshot = self.current()
        return snapshot.list_names if snapshot else []

    def list_counts(self) -> Dict[str, int]:
        snapshot = self.read()
        return snapshot.counts if snapshot else {}

    # Mutation hooks. Storage writes happen before these are called.

    def add(self, entry: DictionaryEntry) -> bool:
        with self._write_lock:
            snapshot = self._snapshot
            if snapshot is None:
                return False
            self._snapshot = snapshot.with_entries((*snapshot.entries, entry))
        return True

    def update(self, entry_id: int, patch: Dict[str, Any]) -> Optional[DictionaryEntry]:
        with self._write_lock:
            snapshot = self._snapshot
            if snapshot is None:
                return None
            entries = list(snapshot.entries)
            for i, entry in enumerate(entries):
                if entry.id == entry_id:
                    changes = dict(patch)
                    if 'flags' in changes:
                        changes['flags'] = {**entry.flags, **changes['flags']}
                    entries[i] = entry.model_copy(update=changes)
                    self._snapshot = snapshot.with_entries(entries)
                    return entries[i]
        return None

    def remove(self, entry_id: int) -> Optional[DictionaryEntry]:
        with self._write_lock:
            snapshot = self._snapshot
            if snapshot is None:
                return None
            entries = list(snapshot.entries)
            for i, entry in enumerate(entries):
                if entry.id == entry_id:
                    del entries[i]
                    self._snapshot = snapshot.with_entries(entries)
                    return entry
        return None

    async def publish(self, event: str, data: Any):
        if self.sio is not None:
            await self.sio.emit(event, data)
