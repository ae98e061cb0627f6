from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.database import get_db_session
from cityloops.dependencies import get_caller_id
from cityloops.repositories.loop_repository import LoopWithCounts
from cityloops.routers.action import run_action
from cityloops.schemas.auth_schema import MessageResponse
from cityloops.schemas.loop_schema import (
    LoopActionResponse, LoopDetailResponse, PlaceResponse, ReorderPlacesRequest
)
from cityloops.services.loop_metrics import calculate_loop_metrics
from cityloops.services.loop_service import LoopService

router = APIRouter(
    prefix="/loops",
    tags=["Loop"],
)


def to_loop_detail(row: LoopWithCounts) -> LoopDetailResponse:
    """
    루프 투영을 상세 응답으로 변환 (예상 소요 지표 포함)
    """
    metrics = calculate_loop_metrics(p.category for p in row.loop.places)
    return LoopDetailResponse.from_projection(row, metrics)


@router.post("", response_model=LoopActionResponse)
async def create_loop(
    response: Response,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> LoopActionResponse:
    """
    새 루프 생성 - 실패 시 success=False 와 사유 메시지
    """
    loop, error = await run_action(LoopService(db).create_loop(caller_id, payload))
    if error:
        return LoopActionResponse(success=False, message=error)
    response.status_code = status.HTTP_201_CREATED
    return LoopActionResponse(
        success=True,
        message="Loop created successfully",
        loop_id=loop.id,
        slug=loop.slug,
    )


@router.put("/{loop_id}", response_model=LoopActionResponse)
async def update_loop(
    loop_id: int,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> LoopActionResponse:
    """
    루프 수정 - 제목이 바뀌면 slug도 바뀔 수 있음
    """
    loop, error = await run_action(LoopService(db).update_loop(caller_id, loop_id, payload))
    if error:
        return LoopActionResponse(success=False, message=error, loop_id=loop_id)
    return LoopActionResponse(
        success=True,
        message="Loop updated successfully",
        loop_id=loop.id,
        slug=loop.slug,
    )


@router.delete("/{loop_id}", response_model=MessageResponse)
async def delete_loop(
    loop_id: int,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> MessageResponse:
    """
    루프 삭제 - 권한/존재 오류는 예외 핸들러가 상태 코드로 변환
    """
    await LoopService(db).delete_loop(caller_id, loop_id)
    return MessageResponse(message="Loop deleted")


@router.put("/{loop_id}/places/order", response_model=List[PlaceResponse])
async def reorder_places(
    loop_id: int,
    req: ReorderPlacesRequest,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> List[PlaceResponse]:
    """
    장소 순서 변경 - 새 순서대로 나열한 장소 ID 전체를 전달
    """
    places = await LoopService(db).reorder_places(caller_id, loop_id, req.place_ids)
    return [PlaceResponse.model_validate(p) for p in places]


@router.get("/slug/{slug}", response_model=LoopDetailResponse)
async def get_loop_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> LoopDetailResponse:
    """
    루프 상세 조회 - 비공개 루프는 작성자만 볼 수 있음
    """
    row = await LoopService(db).get_loop_by_slug(slug, viewer_id=caller_id)
    return to_loop_detail(row)


@router.get("/{loop_id}/edit", response_model=LoopDetailResponse)
async def get_loop_for_edit(
    loop_id: int,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> LoopDetailResponse:
    """
    수정 화면용 루프 조회 (작성자 전용)
    """
    service = LoopService(db)
    loop = await service.get_loop_for_edit(caller_id, loop_id)
    row = await service.get_loop_by_slug(loop.slug, viewer_id=caller_id)
    return to_loop_detail(row)


@router.get("/{loop_id}/places", response_model=List[PlaceResponse])
async def list_places(
    loop_id: int,
    db: AsyncSession = Depends(get_db_session),
    caller_id: Optional[int] = Depends(get_caller_id),
) -> List[PlaceResponse]:
    places = await LoopService(db).list_places(loop_id, viewer_id=caller_id)
    return [PlaceResponse.model_validate(p) for p in places]
