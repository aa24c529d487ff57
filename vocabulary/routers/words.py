from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from ..definitions import DefinitionService
from ..schemas import (
    ALL_WORDS,
    AddWordsRequest,
    FindWordListRequest,
    FindWordsRequest,
    SearchParams,
    UpdateWordRequest,
    WordDefinitions,
)
from ..search import search_word_objects, search_words
from ..words import WordService, WordServiceError, checked_search_params

router = APIRouter(prefix='/words', tags=['words'])


def _service(request: Request) -> WordService:
    return WordService(request.app.state.cache)


def _search_response(result, params: SearchParams):
    return {**result.model_dump(by_alias=True), 'pattern': params.pattern, 'listname': params.listname}


def _checked(params: SearchParams) -> SearchParams:
    try:
        return checked_search_params(params)
    except WordServiceError as exc:
        raise HTTPException(status_code=exc.status, detail=exc.message)


@router.post('/find')
async def find_words(request: Request, body: FindWordsRequest):
    params = _checked(body.searchParams)
    budget = request.app.state.settings.search_budget_ms
    result = search_words(request.app.state.cache.current(), params, budget_ms=budget)
    return _search_response(result, params)


@router.post('/list')
async def find_word_list(request: Request, body: FindWordListRequest):
    params = _checked(SearchParams(pattern=body.pattern, listname=body.listname or ALL_WORDS))
    budget = request.app.state.settings.search_budget_ms
    result = search_word_objects(request.app.state.cache.current(), params, budget_ms=budget)
    return _search_response(result, params)


@router.get('/{word_id}/definitions', response_model=WordDefinitions)
async def word_definitions(request: Request, word_id: int, source: Optional[int] = None):
    try:
        return await DefinitionService(request.app.state.cache).for_word_id(word_id, source)
    except WordServiceError as exc:
        raise HTTPException(status_code=exc.status, detail=exc.message)


@router.post('', status_code=201)
async def add_words(request: Request, body: AddWordsRequest):
    try:
        result = await _service(request).add_words(body.wordsDetails, body.creator)
    except WordServiceError as exc:
        raise HTTPException(status_code=exc.status, detail=exc.message)
    return result.model_dump()


@router.put('/{word_id}')
async def update_word(request: Request, word_id: int, body: UpdateWordRequest):
    try:
        details = await _service(request).update_word(word_id, body.wordWithTags)
    except WordServiceError as exc:
        raise HTTPException(status_code=exc.status, detail=exc.message)
    return {'message': 'Word updated successfully', 'wordWithTags': details.model_dump()}


@router.delete('/{word_id}')
async def delete_word(request: Request, word_id: int):
    try:
        deleted = await _service(request).delete_word(word_id)
    except WordServiceError as exc:
        raise HTTPException(status_code=exc.status, detail=exc.message)
    return {'message': 'Word deleted successfully', 'wordId': deleted}
