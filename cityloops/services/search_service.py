import logging
import math
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.config import settings
from cityloops.models.loop import Loop, LoopTag
from cityloops.repositories.comment_repository import CommentRepository
from cityloops.repositories.loop_repository import (
    LoopRepository, LoopWithCounts, comment_count_column, like_count_column
)
from cityloops.repositories.place_repository import PlaceRepository
from cityloops.repositories.user_repository import UserRepository
from cityloops.schemas.search_schema import SEARCH_MESSAGES, SearchParams
from cityloops.schemas.validation import parse_payload

logger = logging.getLogger(__name__)


class SearchResult(NamedTuple):
    loops: List[LoopWithCounts]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class Stats(NamedTuple):
    total_loops: int
    total_users: int
    total_places: int
    total_comments: int


def build_conditions(params: SearchParams) -> List[ColumnElement[bool]]:
    """
    검색 조건 조합 (모두 AND)
    - query: 제목/설명/도시 부분 일치 또는 태그 일치 (대소문자 무시)
    - city: 대소문자 무시 정확히 일치
    - tags: 지정 태그 중 하나 이상 포함
    - 공개된 루프만 대상
    """
    conditions: List[ColumnElement[bool]] = [Loop.published.is_(True)]

    if params.query:
        conditions.append(
            or_(
                Loop.title.icontains(params.query, autoescape=True),
                Loop.description.icontains(params.query, autoescape=True),
                Loop.city.icontains(params.query, autoescape=True),
                Loop.tag_rows.any(func.lower(LoopTag.name) == params.query.lower()),
            )
        )

    if params.city:
        conditions.append(func.lower(Loop.city) == params.city.lower())

    if params.tags:
        conditions.append(Loop.tag_rows.any(LoopTag.name.in_(params.tags)))

    return conditions


def build_order_by(sort_by: str) -> List[Any]:
    """
    정렬 기준 - 동률일 때는 최신순, 마지막으로 ID
    """
    newest = [Loop.created_at.desc(), Loop.id.desc()]
    if sort_by == "oldest":
        return [Loop.created_at.asc(), Loop.id.asc()]
    if sort_by == "most-liked":
        return [like_count_column().desc(), *newest]
    if sort_by == "most-commented":
        return [comment_count_column().desc(), *newest]
    return newest


class SearchService:
    """
    공개 루프 검색/필터 서비스 (읽기 전용, 권한 검사 없음)
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.loops = LoopRepository(db)

    async def search_loops(
        self,
        query: Optional[str] = None,
        city: Optional[str] = None,
        tags: Sequence[str] = (),
        sort_by: str = "newest",
        page: int = 1,
        limit: Optional[int] = None,
        viewer_id: Optional[int] = None,
    ) -> SearchResult:
        """
        루프 검색 - 현재 페이지 목록과 전체 건수를 함께 반환
        Raises:
            ValidationFailedError: 잘못된 정렬 기준/페이지 값
        """
        raw: Dict[str, Any] = {
            "query": query,
            "city": city,
            "tags": list(tags),
            "sort_by": sort_by,
            "page": page,
            "limit": settings.DEFAULT_PAGE_SIZE if limit is None else limit,
        }
        params = parse_payload(SearchParams, raw, SEARCH_MESSAGES)
        page_size = min(params.limit, settings.MAX_PAGE_SIZE)

        conditions = build_conditions(params)
        rows = await self.loops.list_with_counts(
            conditions=conditions,
            order_by=build_order_by(params.sort_by),
            offset=(params.page - 1) * page_size,
            limit=page_size,
            viewer_id=viewer_id,
        )
        total = await self.loops.count(conditions)
        logger.debug("검색: %s → %d건", params.model_dump(), total)
        return SearchResult(loops=rows, total=total, page=params.page, limit=page_size)

    async def filter_options(self) -> Tuple[List[str], List[str]]:
        """
        공개 루프 기준 도시/태그 목록 (중복 제거, 정렬)
        """
        cities = await self.loops.distinct_published_cities()
        tags = await self.loops.distinct_published_tags()
        return cities, tags

    async def featured_loops(self, limit: int = 6) -> List[LoopWithCounts]:
        return await self.loops.list_with_counts(
            conditions=[Loop.published.is_(True), Loop.featured.is_(True)],
            order_by=[Loop.created_at.desc(), Loop.id.desc()],
            limit=limit,
        )

    async def popular_loops(self, limit: int = 6) -> List[LoopWithCounts]:
        return await self.loops.list_with_counts(
            conditions=[Loop.published.is_(True)],
            order_by=build_order_by("most-liked"),
            limit=limit,
        )

    async def stats(self) -> Stats:
        return Stats(
            total_loops=await self.loops.count([Loop.published.is_(True)]),
            total_users=await UserRepository(self.db).count(),
            total_places=await PlaceRepository(self.db).count(),
            total_comments=await CommentRepository(self.db).count(),
        )
