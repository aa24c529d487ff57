"""
Shared fixtures: small dictionaries, stores, loaded caches and an HTTP client.
"""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from vocabulary.config import Settings
from vocabulary.dictionary import build_snapshot
from vocabulary.main import create_app
from vocabulary.managers.cache import CacheController
from vocabulary.schemas import ListMetadata
from vocabulary.storage import MemoryDictionaryStore

TAGS = ['is_animal', 'is_verb']


def make_rows(words):
    """words: iterable of (word, tags) pairs."""
    rows = []
    for i, (word, tags) in enumerate(words, start=1):
        row = {
            'id': i,
            'word': word,
            'creator_id': 7,
            'created_at': '2024-05-01T12:00:00+00:00',
            'username': 'ana',
            'role': 'user',
            'image_path': None,
        }
        row.update({tag: int(tag in tags) for tag in TAGS})
        rows.append(row)
    return rows


def metadata_for(rows):
    counts = {'word': len(rows)}
    for tag in TAGS:
        counts[tag] = sum(r[tag] for r in rows)
    return ListMetadata(listNames=['word', *TAGS], counts=counts)


CAT_CAR = [('cat', ['is_animal']), ('car', [])]

ZOO = [
    ('cat', ['is_animal']),
    ('car', []),
    ('cattle', ['is_animal']),
    ('catalog', []),
    ('concat', []),
    ('dog', ['is_animal']),
    ('dodge', ['is_verb']),
    ('run', ['is_verb']),
    ('running', ['is_verb']),
    ('rabbit', ['is_animal']),
    ("don't", ['is_verb']),
    ('well-being', []),
    ('a', []),
]


@pytest.fixture
def cat_car_rows():
    return make_rows(CAT_CAR)


@pytest.fixture
def zoo_rows():
    return make_rows(ZOO)


@pytest.fixture
def cat_car_snapshot(cat_car_rows):
    return build_snapshot(cat_car_rows, metadata_for(cat_car_rows))


@pytest.fixture
def zoo_snapshot(zoo_rows):
    return build_snapshot(zoo_rows, metadata_for(zoo_rows))


@pytest.fixture
def zoo_store(zoo_rows):
    return MemoryDictionaryStore(zoo_rows)


@pytest.fixture
def loaded_cache(zoo_store):
    cache = CacheController(zoo_store)
    assert asyncio.run(cache.refresh())
    return cache


@pytest.fixture
def client(zoo_store):
    app = create_app(Settings(), zoo_store)
    with TestClient(app) as test_client:
        yield test_client
