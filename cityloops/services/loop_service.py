import logging
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.models.loop import Loop
from cityloops.models.place import Place
from cityloops.repositories.loop_repository import LoopRepository, LoopWithCounts
from cityloops.repositories.place_repository import PlaceRepository
from cityloops.repositories.transaction import commit_session
from cityloops.repositories.user_repository import UserRepository
from cityloops.schemas.loop_schema import LOOP_MESSAGES, LoopInput, PlaceInput
from cityloops.schemas.validation import parse_payload
from cityloops.services.authorization import require_owner, require_session
from cityloops.services.slug_service import allocate_slug
from cityloops.utils.exceptions import NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

SLUG_CONFLICT_MESSAGE = "A loop with this title was created at the same time, please retry"


class Dashboard(NamedTuple):
    """
    작성자 대시보드 - 본인 루프 전체(비공개 포함) + 합계
    """
    loops: List[LoopWithCounts]
    total_loops: int
    published_loops: int
    total_likes: int
    total_comments: int


def _build_places(places: Sequence[PlaceInput]) -> List[Place]:
    return [
        Place(
            name=p.name,
            description=p.description,
            category=p.category,
            map_url=p.map_url,
            address=p.address or "",
            image=p.image or "",
            latitude=p.latitude,
            longitude=p.longitude,
        )
        for p in places
    ]


class LoopService:
    """
    루프 생성/수정/삭제 및 장소 순서 관리 서비스
    - 루프와 장소 목록은 하나의 트랜잭션으로 함께 저장
    - 수정 시 장소는 diff 없이 전체 삭제 후 재삽입 (장소 ID는 매번 새로 발급)
    """
    def __init__(self, db: AsyncSession):
        """
        - db: 비동기 DB 세션
        """
        self.db = db
        self.loops = LoopRepository(db)
        self.places = PlaceRepository(db)
        self.users = UserRepository(db)

    async def _get_loop(self, loop_id: int) -> Loop:
        loop = await self.loops.find_by_id(loop_id)
        if not loop:
            raise NotFoundError("Loop not found")
        return loop

    async def _get_owned_loop(self, caller_id: Optional[int], loop_id: int) -> Loop:
        """
        세션 확인 → 루프 조회 → 소유자 확인
        """
        user_id = require_session(caller_id)
        loop = await self._get_loop(loop_id)
        require_owner(loop.user_id, user_id)
        return loop

    async def _save_children(self, loop: Loop, data: LoopInput) -> None:
        """
        태그/장소를 교체하고 커밋. 실패 시 루프 행까지 모두 롤백
        - 루프 행은 첫 flush에서 INSERT/UPDATE 되므로 slug 유니크 위반도 여기서 발생
        """
        try:
            await self.loops.replace_tags(loop, data.tags, SLUG_CONFLICT_MESSAGE)
            await self.loops.replace_places(
                loop, _build_places(data.places), SLUG_CONFLICT_MESSAGE
            )
            await commit_session(self.db, conflict_message=SLUG_CONFLICT_MESSAGE)
        except Exception:
            await self.db.rollback()
            raise

    # ─── 생성 / 수정 / 삭제 ───────────────────────────────────────────
    async def create_loop(
        self,
        caller_id: Optional[int],
        payload: Mapping[str, Any],
    ) -> Loop:
        """
        새 루프 생성
        1) 입력 검증 (첫 번째 위반만 보고)
        2) 세션 확인
        3) 제목으로 slug 할당
        4) 루프 + 장소(order = 1..N) 저장 후 커밋
        """
        data = parse_payload(LoopInput, payload, LOOP_MESSAGES)
        user_id = require_session(caller_id)

        slug = await allocate_slug(data.title, self.loops.slug_exists)
        loop = Loop(
            title=data.title,
            slug=slug,
            description=data.description,
            city=data.city,
            cover_image=data.cover_image,
            published=data.published,
            featured=False,
            user_id=user_id,
            tag_rows=[],
            places=[],
        )
        self.loops.add(loop)
        await self._save_children(loop, data)

        logger.info("루프 생성: id=%s slug=%s user=%s", loop.id, loop.slug, user_id)
        return loop

    async def update_loop(
        self,
        caller_id: Optional[int],
        loop_id: int,
        payload: Mapping[str, Any],
    ) -> Loop:
        """
        기존 루프 수정
        1) 세션 확인 → 루프 조회 → 소유자 확인
        2) 입력 검증
        3) 제목이 바뀌었으면 slug 재할당 (자기 자신의 slug는 사용 중으로 보지 않음)
        4) 필드 갱신 + 장소 전체 교체 후 커밋
        """
        loop = await self._get_owned_loop(caller_id, loop_id)
        data = parse_payload(LoopInput, payload, LOOP_MESSAGES)

        slug = loop.slug
        if data.title != loop.title:
            slug = await allocate_slug(
                data.title, self.loops.slug_exists, exclude_slug=loop.slug
            )

        loop.title = data.title
        loop.slug = slug
        loop.description = data.description
        loop.city = data.city
        loop.cover_image = data.cover_image
        loop.published = data.published
        await self._save_children(loop, data)

        logger.info("루프 수정: id=%s slug=%s", loop.id, loop.slug)
        return loop

    async def delete_loop(self, caller_id: Optional[int], loop_id: int) -> None:
        """
        루프 삭제 - 장소/댓글/좋아요는 연쇄 삭제
        Raises:
            AuthenticationRequiredError, NotFoundError, UnauthorizedError
        """
        loop = await self._get_owned_loop(caller_id, loop_id)
        await self.loops.delete(loop)
        await commit_session(self.db)
        logger.info("루프 삭제: id=%s", loop_id)

    async def reorder_places(
        self,
        caller_id: Optional[int],
        loop_id: int,
        place_ids: Sequence[int],
    ) -> List[Place]:
        """
        장소 내용은 그대로 두고 순서만 변경
        - place_ids 는 루프의 장소 전체를 정확히 한 번씩 포함해야 함 (order 연속성 유지)
        """
        loop = await self._get_owned_loop(caller_id, loop_id)

        by_id = {place.id: place for place in loop.places}
        if len(place_ids) != len(by_id) or set(place_ids) != set(by_id):
            raise ValidationFailedError("Place list does not match the loop's places")

        for index, place_id in enumerate(place_ids):
            by_id[place_id].order = index + 1
        await commit_session(self.db)

        loop.places.sort(key=lambda p: p.order)
        logger.info("장소 순서 변경: loop=%s", loop_id)
        return list(loop.places)

    # ─── 조회 ─────────────────────────────────────────────────────────
    async def get_loop_by_slug(
        self,
        slug: str,
        viewer_id: Optional[int] = None,
    ) -> LoopWithCounts:
        """
        slug로 루프 상세 조회 - 비공개 루프는 작성자 본인에게만 보임
        """
        row = await self.loops.find_with_counts_by_slug(slug, viewer_id=viewer_id)
        if not row or (not row.loop.published and row.loop.user_id != viewer_id):
            raise NotFoundError("Loop not found")
        return row

    async def get_loop_for_edit(self, caller_id: Optional[int], loop_id: int) -> Loop:
        return await self._get_owned_loop(caller_id, loop_id)

    async def list_places(
        self,
        loop_id: int,
        viewer_id: Optional[int] = None,
    ) -> List[Place]:
        loop = await self._get_loop(loop_id)
        if not loop.published and loop.user_id != viewer_id:
            raise NotFoundError("Loop not found")
        return await self.places.list_by_loop_id(loop_id)

    async def list_dashboard_loops(self, caller_id: Optional[int]) -> Dashboard:
        """
        로그인 사용자의 루프 전체(비공개 포함)를 최신순으로 반환
        """
        user_id = require_session(caller_id)
        rows = await self.loops.list_with_counts(
            conditions=[Loop.user_id == user_id],
            order_by=[Loop.created_at.desc(), Loop.id.desc()],
            viewer_id=user_id,
        )
        return Dashboard(
            loops=rows,
            total_loops=len(rows),
            published_loops=sum(1 for r in rows if r.loop.published),
            total_likes=sum(r.like_count for r in rows),
            total_comments=sum(r.comment_count for r in rows),
        )

    async def list_user_loops(
        self,
        user_id: int,
        viewer_id: Optional[int] = None,
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[LoopWithCounts], int]:
        """
        프로필 화면용 사용자 루프 목록
        - 본인이 보는 경우에만 비공개 루프 포함
        """
        if not await self.users.find_by_id(user_id):
            raise NotFoundError("User not found")

        conditions = [Loop.user_id == user_id]
        if viewer_id != user_id:
            conditions.append(Loop.published.is_(True))

        rows = await self.loops.list_with_counts(
            conditions=conditions,
            order_by=[Loop.created_at.desc(), Loop.id.desc()],
            offset=(page - 1) * limit,
            limit=limit,
            viewer_id=viewer_id,
        )
        total = await self.loops.count(conditions)
        return rows, total

