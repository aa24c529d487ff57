from __future__ import annotations
import math
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .indexes import DictionaryIndexes
from .schemas import (
    ALL_WORDS,
    AllListsResponse,
    ComparativeResponse,
    Order,
    PieDataPoint,
    PieResponse,
    SingleListResponse,
    SyllableDataPoint,
    SyllablesRequest,
)

SyllablesResponse = Union[SingleListResponse, AllListsResponse, ComparativeResponse, PieResponse]


def syllables_view(indexes: Optional[DictionaryIndexes], params: SyllablesRequest) -> Optional[SyllablesResponse]:
    """Render the occurrence maps in the shape requested by `params.format`.

    Returns None when no indexes are loaded.
    """
    if indexes is None:
        return None
    occ = indexes.occurrences
    if params.format == 'comparative':
        return comparative_view(occ, params.page, params.limit, params.lists)
    if params.format == 'pie':
        return pie_view(occ, params.limit, params.listName or ALL_WORDS)
    return single_view(occ, params.page, params.limit, params.order, params.listName)


def sorted_series(occurrences: Dict[str, int], order: Order) -> List[Tuple[str, int]]:
    return sorted(occurrences.items(), key=lambda item: item[1], reverse=order == 'desc')


def page_bounds(total: int, page: int, limit: int) -> Tuple[int, int, int, bool]:
    start = (page - 1) * limit
    end = start + limit
    return start, end, math.ceil(total / limit), end < total


def single_view(occ, page: int, limit: int, order: Order, list_name: Optional[str] = None):
    if list_name is not None:
        if list_name not in occ:
            return SingleListResponse(
                data=[], total=0, page=page, limit=limit, totalPages=0, hasMore=False, lists=[list_name],
            )
        return paginate_single(sorted_series(occ[list_name], order), page, limit, list_name)

    return AllListsResponse(
        data={
            name: paginate_single(sorted_series(counts, order), page, limit, name)
            for name, counts in occ.items()
        },
        total=len(occ),
        page=page,
        limit=limit,
        totalPages=1,
        hasMore=False,
    )


def paginate_single(series: Sequence[Tuple[str, int]], page: int, limit: int, list_name: str) -> SingleListResponse:
    total = len(series)
    start, end, total_pages, has_more = page_bounds(total, page, limit)
    data = [
        SyllableDataPoint(name=syllable, value=count, syllable=syllable, count=count)
        for syllable, count in series[start:end]
    ]
    return SingleListResponse(
        data=data, total=total, page=page, limit=limit,
        totalPages=total_pages, hasMore=has_more, lists=[list_name],
    )


def comparative_view(occ, page: int, limit: int, requested: Sequence[str]) -> ComparativeResponse:
    lists = list(requested) if requested else list(occ)
    syllables = set()
    for name in lists:
        syllables.update(occ.get(name, {}))

    rows = []
    for syllable in syllables:
        row = {'name': syllable, 'syllable': syllable}
        for name in lists:
            row[name] = occ.get(name, {}).get(syllable, 0)
        rows.append(row)
    rows.sort(key=lambda row: (-sum(row[name] for name in lists), row['syllable']))

    total = len(rows)
    start, end, total_pages, has_more = page_bounds(total, page, limit)
    return ComparativeResponse(
        data=rows[start:end], total=total, page=page, limit=limit,
        totalPages=total_pages, hasMore=has_more, lists=lists,
    )


def pie_view(occ, limit: int, list_name: str) -> PieResponse:
    if list_name not in occ:
        return PieResponse(data=[], total=0, page=1, limit=limit, totalPages=0, hasMore=False, lists=[list_name])

    top = sorted_series(occ[list_name], 'desc')[:limit]
    top_sum = sum(count for _, count in top)
    data = [
        PieDataPoint(
            name=syllable,
            value=count,
            percentage=round(count / top_sum * 100, 1),
            syllable=syllable,
            count=count,
        )
        for syllable, count in top
    ]
    return PieResponse(
        data=data, total=len(occ[list_name]), page=1, limit=limit,
        totalPages=1, hasMore=False, lists=[list_name],
    )
