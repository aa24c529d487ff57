from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from ..indexes import chart_data
from ..schemas import ChartData, SearchParams, SearchResult, SyllablesRequest
from ..search import search_syllables
from ..views import syllables_view
from ..words import NOT_LOADED, WordServiceError, checked_search_params

router = APIRouter(prefix='/lists', tags=['lists'])


@router.get('')
async def list_details(request: Request):
    cache = request.app.state.cache
    return {
        'loaded': cache.is_loaded(),
        'listNames': cache.list_names(),
        'counts': cache.list_counts(),
    }


@router.post('/refresh')
async def refresh_lists(request: Request):
    ok = await request.app.state.refresher.refresh_now()
    if not ok:
        raise HTTPException(status_code=503, detail='Dictionary refresh failed')
    snapshot = request.app.state.cache.current()
    return {'ok': True, 'version': snapshot.version, 'total': len(snapshot.entries)}


@router.get('/charts', response_model=ChartData)
async def charts(request: Request):
    snapshot = request.app.state.cache.read()
    if snapshot is None:
        raise HTTPException(status_code=503, detail=NOT_LOADED)
    return chart_data(snapshot.indexes)


@router.post('/syllables')
async def syllables(request: Request, body: SyllablesRequest):
    snapshot = request.app.state.cache.read()
    result = syllables_view(snapshot.indexes if snapshot else None, body)
    if result is None:
        raise HTTPException(status_code=503, detail=NOT_LOADED)
    return result.model_dump()


@router.post('/syllables/search', response_model=SearchResult)
async def find_syllables(request: Request, body: SearchParams):
    try:
        params = checked_search_params(body)
    except WordServiceError as exc:
        raise HTTPException(status_code=exc.status, detail=exc.message)
    budget = request.app.state.settings.search_budget_ms
    return search_syllables(request.app.state.cache.read(), params, budget_ms=budget)
