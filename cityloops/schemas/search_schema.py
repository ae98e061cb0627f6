from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cityloops.schemas.common import PaginationMeta
from cityloops.schemas.loop_schema import LoopSummaryResponse

SortOrder = Literal["newest", "oldest", "most-liked", "most-commented"]


class SearchParams(BaseModel):
    """
    루프 검색 조건
    - 모든 필터는 AND 결합, tags 내부는 OR
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    query: Optional[str] = Field(None, description="제목/설명/도시/태그 검색어")
    city: Optional[str] = Field(None, description="도시 (대소문자 무시 정확히 일치)")
    tags: List[str] = Field(default_factory=list, description="하나 이상 포함해야 할 태그")
    sort_by: SortOrder = Field("newest", alias="sortBy")
    page: int = Field(1, ge=1)
    limit: int = Field(12, ge=1)

    @field_validator("tags")
    @classmethod
    def _drop_blank_tags(cls, v: List[str]) -> List[str]:
        return [tag for tag in v if tag]


SEARCH_MESSAGES = {
    "sortBy": {"*": "Sort order must be one of newest, oldest, most-liked, most-commented"},
    "sort_by": {"*": "Sort order must be one of newest, oldest, most-liked, most-commented"},
    "page": {"*": "Page must be a positive integer"},
    "limit": {"*": "Limit must be a positive integer"},
    "tags": {"*": "Tags must be a list of strings"},
}


class LoopSearchResponse(BaseModel):
    success: bool
    loops: List[LoopSummaryResponse] = Field(default_factory=list)
    pagination: PaginationMeta
    message: Optional[str] = None


class FilterOptionsResponse(BaseModel):
    success: bool
    cities: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class StatsResponse(BaseModel):
    total_loops: int
    total_users: int
    total_places: int
    total_comments: int
