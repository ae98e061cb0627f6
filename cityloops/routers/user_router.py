import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.config import settings
from cityloops.core.database import get_db_session
from cityloops.dependencies import get_caller_id
from cityloops.schemas.common import PaginationMeta
from cityloops.schemas.loop_schema import (
    DashboardResponse, LoopListResponse, LoopSummaryResponse
)
from cityloops.services.loop_service import LoopService

router = APIRouter(
    prefix="/users",
    tags=["User"],
)


@router.get("/me/loops", response_model=DashboardResponse)
async def dashboard(
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> DashboardResponse:
    """
    로그인 사용자 대시보드 - 비공개 루프 포함 전체 목록과 합계
    """
    board = await LoopService(db).list_dashboard_loops(caller_id)
    return DashboardResponse(
        loops=[LoopSummaryResponse.from_projection(r) for r in board.loops],
        total_loops=board.total_loops,
        published_loops=board.published_loops,
        total_likes=board.total_likes,
        total_comments=board.total_comments,
    )


@router.get("/{user_id}/loops", response_model=LoopListResponse)
async def list_user_loops(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> LoopListResponse:
    """
    사용자 프로필 루프 목록 - 다른 사용자가 보면 공개 루프만
    """
    rows, total = await LoopService(db).list_user_loops(
        user_id, viewer_id=caller_id, page=page, limit=limit
    )
    return LoopListResponse(
        loops=[LoopSummaryResponse.from_projection(r) for r in rows],
        pagination=PaginationMeta(
            page=page, limit=limit, total=total, pages=math.ceil(total / limit)
        ),
    )
