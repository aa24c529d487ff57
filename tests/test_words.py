import pytest

from vocabulary.managers.cache import CacheController
from vocabulary.schemas import Author, SearchParams, WordDetails
from vocabulary.storage import MemoryDictionaryStore
from vocabulary.words import (
    WordService,
    WordServiceError,
    checked_search_params,
    filter_new_words,
    process_words,
    status_for,
    tag_flags,
)

AUTHOR = Author(creator_id=3, username='lea', role='admin')


def test_process_words_normalizes_and_merges_tags():
    processed = process_words([
        WordDetails(name='  Cat ', tags=['is_animal']),
        WordDetails(name='cat', tags=['is_verb', 'is_animal']),
        WordDetails(name='   ', tags=['is_verb']),
        WordDetails(name='Run', tags=[]),
    ])
    assert processed == {'cat': ['is_animal', 'is_verb'], 'run': []}


def test_filter_new_words():
    processed = {'cat': ['is_animal'], 'lion': ['is_animal']}
    assert filter_new_words(processed, ['cat']) == [('lion', ['is_animal'])]


def test_tag_flags_cover_every_list():
    flags = tag_flags(['is_verb', 'is_unknown'], ['word', 'is_animal', 'is_verb'])
    assert flags == {'is_animal': False, 'is_verb': True}


@pytest.mark.parametrize("message, status", [
    ('Word not found', 404),
    ('No valid words provided', 400),
    ('Invalid search parameters', 400),
    ('Invalid source ID', 400),
    ('Some words already exist', 409),
    ('duplicate key value', 409),
    ('Something else', 500),
    ('Dictionary cache is not loaded', 503),
])
def test_status_for(message, status):
    assert status_for(message) == status


@pytest.mark.asyncio
async def test_add_words_inserts_and_patches_cache(loaded_cache, zoo_store):
    service = WordService(loaded_cache)
    result = await service.add_words([
        WordDetails(name='Lion', tags=['is_animal']),
        WordDetails(name='cat', tags=['is_animal']),
        WordDetails(name='lion', tags=['is_verb']),
    ], AUTHOR)

    assert result.inserted == 1
    assert result.skipped == 1
    assert result.words == [WordDetails(name='lion', tags=['is_animal', 'is_verb'])]

    assert zoo_store.existing_words(['lion']) == ['lion']
    entry = loaded_cache.read().entries[-1]
    assert entry.word == 'lion'
    assert entry.flags == {'is_animal': True, 'is_verb': True}
    assert entry.username == 'lea'
    assert entry.id == 14
    assert loaded_cache.list_counts()['is_animal'] == 5


@pytest.mark.asyncio
async def test_add_words_when_all_exist(loaded_cache):
    result = await WordService(loaded_cache).add_words([WordDetails(name='dog')], AUTHOR)
    assert result.inserted == 0
    assert result.skipped == 1
    assert result.message == 'All words already exist'


@pytest.mark.asyncio
async def test_add_words_rejects_empty_input(loaded_cache):
    with pytest.raises(WordServiceError) as exc:
        await WordService(loaded_cache).add_words([WordDetails(name=' ')], AUTHOR)
    assert exc.value.status == 400


@pytest.mark.asyncio
async def test_update_word(loaded_cache, zoo_store):
    service = WordService(loaded_cache)
    await service.update_word(6, WordDetails(name='wolf', tags=['is_animal']))
    entry = next(e for e in loaded_cache.read().entries if e.id == 6)
    assert entry.word == 'wolf'
    assert zoo_store.existing_words(['wolf']) == ['wolf']

    with pytest.raises(WordServiceError) as exc:
        await service.update_word(404, WordDetails(name='ghost'))
    assert exc.value.status == 404

    with pytest.raises(WordServiceError) as exc:
        await service.update_word(6, WordDetails(name=''))
    assert exc.value.status == 400


@pytest.mark.asyncio
async def test_delete_word(loaded_cache, zoo_store):
    service = WordService(loaded_cache)
    assert await service.delete_word(6) == 6
    assert zoo_store.existing_words(['dog']) == []
    assert all(e.id != 6 for e in loaded_cache.current().entries)

    with pytest.raises(WordServiceError) as exc:
        await service.delete_word(6)
    assert exc.value.status == 404

    with pytest.raises(WordServiceError) as exc:
        await service.delete_word(0)
    assert exc.value.status == 400


@pytest.mark.parametrize("pattern, listname", [('   ', 'word'), ('cat', ' ')])
def test_blank_search_params_are_rejected(pattern, listname):
    with pytest.raises(WordServiceError) as exc:
        checked_search_params(SearchParams(pattern=pattern, listname=listname))
    assert exc.value.message == 'Invalid search parameters'
    assert exc.value.status == 400


def test_search_params_pass_through():
    params = SearchParams(pattern='^ca', listname='is_animal')
    assert checked_search_params(params) is params


class StaleLookupStore(MemoryDictionaryStore):
    """Reports no existing words, as if another writer got there first."""

    def existing_words(self, names):
        return []


@pytest.mark.asyncio
async def test_add_words_conflicting_at_insert(zoo_rows):
    cache = CacheController(StaleLookupStore(zoo_rows))
    assert await cache.refresh()
    with pytest.raises(WordServiceError) as exc:
        await WordService(cache).add_words([WordDetails(name='lion'), WordDetails(name='dog')], AUTHOR)
    assert exc.value.message == 'Some words already exist'
    assert exc.value.status == 409
    assert len(cache.current().entries) == 13
    assert [r['word'] for r in cache.store.load_dictionary()].count('lion') == 0


@pytest.mark.asyncio
async def test_mutations_leave_consistent_indexes(loaded_cache):
    service = WordService(loaded_cache)
    await service.add_words([WordDetails(name='lion', tags=['is_animal'])], AUTHOR)
    await service.delete_word(6)
    snapshot = loaded_cache.read()
    assert snapshot is loaded_cache.current()
    assert not snapshot.stale
    assert snapshot.counts == {'word': 13, 'is_animal': 4, 'is_verb': 4}
