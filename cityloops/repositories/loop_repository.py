from typing import Any, List, NamedTuple, Optional, Sequence

from sqlalchemy import ColumnElement, and_, func, literal, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.models.comment import Comment
from cityloops.models.like import Like
from cityloops.models.loop import Loop, LoopTag
from cityloops.models.place import Place
from cityloops.repositories.transaction import flush_session


class LoopWithCounts(NamedTuple):
    """
    루프 + 집계 값 투영 (목록/상세 화면용)
    """
    loop: Loop
    like_count: int
    comment_count: int
    place_count: int
    is_liked: bool = False


def like_count_column():
    return (
        select(func.count(Like.id))
        .where(Like.loop_id == Loop.id)
        .correlate(Loop)
        .scalar_subquery()
    )


def comment_count_column():
    return (
        select(func.count(Comment.id))
        .where(Comment.loop_id == Loop.id)
        .correlate(Loop)
        .scalar_subquery()
    )


def place_count_column():
    return (
        select(func.count(Place.id))
        .where(Place.loop_id == Loop.id)
        .correlate(Loop)
        .scalar_subquery()
    )


class LoopRepository:
    """
    루프(Loop) 및 소속 장소/태그에 대한 데이터 액세스 Repository
    - 비즈니스 규칙 없음 (검증/권한은 서비스 계층 담당)
    """
    def __init__(self, session: AsyncSession):
        self.session = session

    # ─── 단건 조회 ─────────────────────────────────────────────────────
    async def find_by_id(self, loop_id: int) -> Optional[Loop]:
        return await self.session.get(Loop, loop_id)

    async def slug_exists(self, slug: str) -> bool:
        """
        주어진 slug를 사용하는 루프가 있는지 확인
        """
        query = select(Loop.id).where(Loop.slug == slug).limit(1)
        result = await self.session.execute(query)
        return result.first() is not None

    # ─── 변경 ─────────────────────────────────────────────────────────
    def add(self, loop: Loop) -> None:
        self.session.add(loop)

    async def delete(self, loop: Loop) -> None:
        """
        루프 삭제 - 장소/댓글/좋아요는 FK ON DELETE CASCADE로 함께 삭제
        """
        await self.session.delete(loop)

    async def replace_places(
        self,
        loop: Loop,
        places: Sequence[Place],
        conflict_message: str = "Conflicting update",
    ) -> None:
        """
        기존 장소를 모두 삭제한 뒤 새 목록을 1부터 순서대로 다시 삽입
        """
        loop.places.clear()
        await flush_session(self.session, conflict_message)
        for index, place in enumerate(places):
            place.order = index + 1
            loop.places.append(place)
        await flush_session(self.session, conflict_message)

    async def replace_tags(
        self,
        loop: Loop,
        tags: Sequence[str],
        conflict_message: str = "Conflicting update",
    ) -> None:
        """
        태그 집합 교체 (삭제를 먼저 flush 해야 (loop_id, name) 유니크 제약과 충돌하지 않음)
        """
        loop.tag_rows.clear()
        await flush_session(self.session, conflict_message)
        loop.tag_rows.extend(LoopTag(name=name) for name in tags)

    # ─── 집계 포함 목록 조회 ───────────────────────────────────────────
    async def list_with_counts(
        self,
        conditions: Sequence[ColumnElement[bool]] = (),
        order_by: Sequence[Any] = (),
        offset: int = 0,
        limit: Optional[int] = None,
        viewer_id: Optional[int] = None,
    ) -> List[LoopWithCounts]:
        """
        조건에 맞는 루프를 좋아요/댓글/장소 수와 함께 조회
        - viewer_id가 주어지면 해당 사용자의 좋아요 여부도 함께 반환
        """
        if viewer_id is not None:
            liked_column = (
                select(Like.id)
                .where(Like.loop_id == Loop.id, Like.user_id == viewer_id)
                .correlate(Loop)
                .exists()
            )
        else:
            liked_column = literal(False)

        query = (
            select(
                Loop,
                like_count_column().label("like_count"),
                comment_count_column().label("comment_count"),
                place_count_column().label("place_count"),
                liked_column.label("is_liked"),
            )
            .where(and_(true(), *conditions))
            .order_by(*order_by)
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return [
            LoopWithCounts(
                loop=row[0],
                like_count=row.like_count or 0,
                comment_count=row.comment_count or 0,
                place_count=row.place_count or 0,
                is_liked=bool(row.is_liked),
            )
            for row in result.all()
        ]

    async def count(self, conditions: Sequence[ColumnElement[bool]] = ()) -> int:
        query = select(func.count(Loop.id)).where(and_(true(), *conditions))
        result = await self.session.execute(query)
        return result.scalar_one()

    async def find_with_counts_by_slug(
        self,
        slug: str,
        viewer_id: Optional[int] = None,
    ) -> Optional[LoopWithCounts]:
        rows = await self.list_with_counts(
            conditions=[Loop.slug == slug],
            limit=1,
            viewer_id=viewer_id,
        )
        return rows[0] if rows else None

    # ─── 필터 옵션 ─────────────────────────────────────────────────────
    async def distinct_published_cities(self) -> List[str]:
        query = (
            select(Loop.city)
            .where(Loop.published.is_(True), Loop.city != "")
            .distinct()
            .order_by(Loop.city)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def distinct_published_tags(self) -> List[str]:
        query = (
            select(LoopTag.name)
            .join(Loop, Loop.id == LoopTag.loop_id)
            .where(Loop.published.is_(True))
            .distinct()
            .order_by(LoopTag.name)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
