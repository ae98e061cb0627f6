from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.config import settings
from cityloops.core.database import get_db_session
from cityloops.dependencies import get_caller_id
from cityloops.routers.action import run_action
from cityloops.schemas.comment_schema import (
    CommentActionResponse, CommentLikeToggleResponse, CommentListResponse,
    CommentResponse, LikeToggleResponse,
)
from cityloops.services.engagement_service import EngagementService

router = APIRouter(tags=["Engagement"])


@router.post("/loops/{loop_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    loop_id: int,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> LikeToggleResponse:
    """
    루프 좋아요 토글
    """
    liked, error = await run_action(EngagementService(db).toggle_like(caller_id, loop_id))
    if error:
        return LikeToggleResponse(success=False, liked=False, message=error)
    return LikeToggleResponse(
        success=True,
        liked=liked,
        message="Loop liked" if liked else "Like removed",
    )


@router.get("/loops/{loop_id}/comments", response_model=CommentListResponse)
async def list_comments(
    loop_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.COMMENT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> CommentListResponse:
    """
    루프 댓글 목록 (최신순)
    """
    rows, error = await run_action(
        EngagementService(db).list_comments(loop_id, viewer_id=caller_id, page=page, limit=limit)
    )
    if error:
        return CommentListResponse(success=False, message="Failed to load comments")
    return CommentListResponse(
        success=True,
        comments=[CommentResponse.from_projection(r) for r in rows],
    )


@router.post("/comments", response_model=CommentActionResponse)
async def create_comment(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> CommentActionResponse:
    """
    댓글 작성 - 공개된 루프에만 가능
    """
    row, error = await run_action(EngagementService(db).create_comment(caller_id, payload))
    if error:
        return CommentActionResponse(success=False, message=error)
    return CommentActionResponse(
        success=True,
        message="Comment created successfully",
        comment=CommentResponse.from_projection(row),
    )


@router.delete("/comments/{comment_id}", response_model=CommentActionResponse)
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> CommentActionResponse:
    """
    댓글 삭제 - 댓글 작성자만 가능
    """
    _, error = await run_action(EngagementService(db).delete_comment(caller_id, comment_id))
    if error:
        return CommentActionResponse(success=False, message=error)
    return CommentActionResponse(success=True, message="Comment deleted successfully")


@router.post("/comments/{comment_id}/like", response_model=CommentLikeToggleResponse)
async def toggle_comment_like(
    comment_id: int,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> CommentLikeToggleResponse:
    """
    댓글 좋아요 토글 - 갱신된 좋아요 수 포함
    """
    result, error = await run_action(
        EngagementService(db).toggle_comment_like(caller_id, comment_id)
    )
    if error:
        return CommentLikeToggleResponse(success=False, liked=False, count=0, message=error)
    liked, count = result
    return CommentLikeToggleResponse(
        success=True,
        liked=liked,
        count=count,
        message="Comment liked" if liked else "Like removed",
    )
