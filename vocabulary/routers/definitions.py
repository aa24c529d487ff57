from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from ..definitions import DefinitionService
from ..schemas import WordDefinitions
from ..words import WordServiceError

router = APIRouter(prefix='/definitions', tags=['definitions'])


@router.get('', response_model=WordDefinitions)
async def definitions_by_word(request: Request, word: str = Query(..., min_length=1), source: Optional[int] = None):
    try:
        return await DefinitionService(request.app.state.cache).for_word(word, source)
    except WordServiceError as exc:
        raise HTTPException(status_code=exc.status, detail=exc.message)
