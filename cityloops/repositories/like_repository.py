from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.models.like import CommentLike, Like


class LikeRepository:
    """
    루프 좋아요(Like) 데이터 액세스 Repository
    """
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, user_id: int, loop_id: int) -> Optional[Like]:
        query = select(Like).where(Like.user_id == user_id, Like.loop_id == loop_id)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def is_liked(self, user_id: int, loop_id: int) -> bool:
        return await self.find(user_id, loop_id) is not None

    def add(self, like: Like) -> None:
        self.session.add(like)

    async def delete(self, like: Like) -> None:
        await self.session.delete(like)

    async def count_by_loop_id(self, loop_id: int) -> int:
        query = select(func.count(Like.id)).where(Like.loop_id == loop_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_pair(self, user_id: int, loop_id: int) -> int:
        """
        (user_id, loop_id) 쌍의 행 수 - 유니크 제약 하에서는 항상 0 또는 1
        """
        query = select(func.count(Like.id)).where(
            Like.user_id == user_id, Like.loop_id == loop_id
        )
        result = await self.session.execute(query)
        return result.scalar_one()


class CommentLikeRepository:
    """
    댓글 좋아요(CommentLike) 데이터 액세스 Repository
    """
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, user_id: int, comment_id: int) -> Optional[CommentLike]:
        query = select(CommentLike).where(
            CommentLike.user_id == user_id,
            CommentLike.comment_id == comment_id,
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    def add(self, like: CommentLike) -> None:
        self.session.add(like)

    async def delete(self, like: CommentLike) -> None:
        await self.session.delete(like)

    async def count_by_comment_id(self, comment_id: int) -> int:
        query = select(func.count(CommentLike.id)).where(
            CommentLike.comment_id == comment_id
        )
        result = await self.session.execute(query)
        return result.scalar_one()
