from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Distinguished list containing every dictionary entry
ALL_WORDS = 'word'

Order = Literal['asc', 'desc']
ChartFormat = Literal['single', 'comparative', 'pie']


class DictionaryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    word: str
    creator_id: Optional[int] = None
    created_at: Optional[datetime] = None
    username: Optional[str] = None
    role: Optional[str] = None
    image_path: Optional[str] = None
    flags: Dict[str, bool] = {}

    def in_list(self, list_name: str) -> bool:
        if list_name == ALL_WORDS:
            return True
        return self.flags.get(list_name, False)


class ListMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    listNames: List[str]
    counts: Dict[str, int] = {}


# Search

class SearchParams(BaseModel):
    pattern: str = Field(..., min_length=1)
    listname: str = ALL_WORDS


class SearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[Any] = []
    total: int = 0
    hasMore: int = 0
    global_: int = Field(0, alias='global')


class FindWordsRequest(BaseModel):
    searchParams: SearchParams


class FindWordListRequest(BaseModel):
    pattern: str = Field(..., min_length=1)
    listname: Optional[str] = None


# Syllable views

class SyllablesRequest(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    order: Order = 'desc'
    listName: Optional[str] = None
    format: ChartFormat = 'single'
    lists: List[str] = []


class SyllableDataPoint(BaseModel):
    name: str
    value: int
    syllable: str
    count: int


class PieDataPoint(SyllableDataPoint):
    percentage: float


class PageInfo(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int
    hasMore: bool


class SingleListResponse(PageInfo):
    data: List[SyllableDataPoint]
    format: Literal['single'] = 'single'
    lists: Optional[List[str]] = None


class AllListsResponse(PageInfo):
    data: Dict[str, SingleListResponse]
    format: Literal['single'] = 'single'


class ComparativeResponse(PageInfo):
    # rows are {name, syllable, <listName>: count, ...}
    data: List[Dict[str, Any]]
    format: Literal['comparative'] = 'comparative'
    lists: List[str]


class PieResponse(PageInfo):
    data: List[PieDataPoint]
    format: Literal['pie'] = 'pie'
    lists: List[str]


# Chart data

class OccurrenceBucket(BaseModel):
    # number of n-grams shared by exactly `wordsPerSyllable` entries
    wordsPerSyllable: int
    syllablesWithCount: int


class AlphabetItem(BaseModel):
    letter: str
    count: int


class LengthItem(BaseModel):
    length: int
    count: int


class UniqueLettersItem(BaseModel):
    uniqueLetters: int
    count: int


class OccurrenceCharts(BaseModel):
    bottom: Dict[str, List[OccurrenceBucket]]


class ChartData(BaseModel):
    alphabet: Dict[str, List[AlphabetItem]]
    lengths: Dict[str, List[LengthItem]]
    uniqueLetters: Dict[str, List[UniqueLettersItem]]
    occ: OccurrenceCharts


# Word management

class WordDetails(BaseModel):
    name: str
    tags: List[str] = []


class Author(BaseModel):
    creator_id: int = Field(..., ge=1)
    username: str
    role: str = 'user'
    image_path: Optional[str] = None


class AddWordsRequest(BaseModel):
    wordsDetails: List[WordDetails]
    creator: Author


class AddWordsResult(BaseModel):
    message: str
    words: List[WordDetails] = []
    inserted: int = 0
    skipped: int = 0


class UpdateWordRequest(BaseModel):
    wordWithTags: WordDetails


# Definitions

class Definition(BaseModel):
    id: int
    word_id: int
    definition: str
    source_id: int
    source_name: Optional[str] = None
    created_at: Optional[datetime] = None


class WordSummary(BaseModel):
    id: int
    word: str
    created_at: Optional[datetime] = None
    creator_id: Optional[int] = None


class DefinitionSource(BaseModel):
    id: int
    name: str


class WordDefinitions(BaseModel):
    word_details: WordSummary
    definitions: List[Definition] = []
    has_definitions: bool = False
    definitions_count: int = 0
    source_requested: Optional[DefinitionSource] = None
