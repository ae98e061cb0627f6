from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.database import get_db_session
from cityloops.dependencies import get_caller_id
from cityloops.routers.action import run_action
from cityloops.schemas.common import PaginationMeta
from cityloops.schemas.loop_schema import LoopSummaryResponse
from cityloops.schemas.search_schema import (
    FilterOptionsResponse, LoopSearchResponse, StatsResponse
)
from cityloops.services.search_service import SearchService

router = APIRouter(
    prefix="/search",
    tags=["Search"],
)


@router.get("/loops", response_model=LoopSearchResponse)
async def search_loops(
    query: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    tags: List[str] = Query([]),
    sort_by: str = Query("newest", alias="sortBy"),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> LoopSearchResponse:
    """
    공개 루프 검색 - 실패 시 빈 목록과 success=False
    """
    result, error = await run_action(
        SearchService(db).search_loops(
            query=query,
            city=city,
            tags=tags,
            sort_by=sort_by,
            page=page,
            limit=limit,
            viewer_id=caller_id,
        )
    )
    if error:
        return LoopSearchResponse(
            success=False,
            message=error,
            pagination=PaginationMeta(page=1, limit=limit or 0, total=0, pages=0),
        )
    return LoopSearchResponse(
        success=True,
        loops=[LoopSummaryResponse.from_projection(r) for r in result.loops],
        pagination=PaginationMeta(
            page=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
    )


@router.get("/filters", response_model=FilterOptionsResponse)
async def filter_options(
    db: AsyncSession = Depends(get_db_session),
) -> FilterOptionsResponse:
    """
    검색 화면의 도시/태그 선택지
    """
    cities, tags = await SearchService(db).filter_options()
    return FilterOptionsResponse(success=True, cities=cities, tags=tags)


@router.get("/featured", response_model=List[LoopSummaryResponse])
async def featured_loops(
    limit: int = Query(6, ge=1, le=24),
    db: AsyncSession = Depends(get_db_session),
) -> List[LoopSummaryResponse]:
    rows = await SearchService(db).featured_loops(limit)
    return [LoopSummaryResponse.from_projection(r) for r in rows]


@router.get("/popular", response_model=List[LoopSummaryResponse])
async def popular_loops(
    limit: int = Query(6, ge=1, le=24),
    db: AsyncSession = Depends(get_db_session),
) -> List[LoopSummaryResponse]:
    rows = await SearchService(db).popular_loops(limit)
    return [LoopSummaryResponse.from_projection(r) for r in rows]


@router.get("/stats", response_model=StatsResponse)
async def stats(db: AsyncSession = Depends(get_db_session)) -> StatsResponse:
    return StatsResponse(**(await SearchService(db).stats())._asdict())
