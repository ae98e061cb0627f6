from typing import List, NamedTuple, Optional

from sqlalchemy import func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.models.comment import Comment
from cityloops.models.like import CommentLike


class CommentWithLikes(NamedTuple):
    """
    댓글 + 좋아요 수 / 조회자 좋아요 여부
    """
    comment: Comment
    like_count: int
    is_liked: bool = False


class CommentRepository:
    """
    댓글(Comment) 데이터 액세스 Repository
    """
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, comment_id: int) -> Optional[Comment]:
        return await self.session.get(Comment, comment_id)

    def add(self, comment: Comment) -> None:
        self.session.add(comment)

    async def delete(self, comment: Comment) -> None:
        """
        댓글 삭제 - 댓글 좋아요는 FK ON DELETE CASCADE로 함께 삭제
        """
        await self.session.delete(comment)

    async def list_by_loop_id(
        self,
        loop_id: int,
        viewer_id: Optional[int] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> List[CommentWithLikes]:
        """
        루프의 댓글을 최신순으로 좋아요 수와 함께 조회
        """
        like_count = (
            select(func.count(CommentLike.id))
            .where(CommentLike.comment_id == Comment.id)
            .correlate(Comment)
            .scalar_subquery()
        )
        if viewer_id is not None:
            liked = (
                select(CommentLike.id)
                .where(
                    CommentLike.comment_id == Comment.id,
                    CommentLike.user_id == viewer_id,
                )
                .correlate(Comment)
                .exists()
            )
        else:
            liked = literal(False)

        query = (
            select(Comment, like_count.label("like_count"), liked.label("is_liked"))
            .where(Comment.loop_id == loop_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [
            CommentWithLikes(
                comment=row[0],
                like_count=row.like_count or 0,
                is_liked=bool(row.is_liked),
            )
            for row in result.all()
        ]

    async def count_by_loop_id(self, loop_id: int) -> int:
        query = select(func.count(Comment.id)).where(Comment.loop_id == loop_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Comment.id)))
        return result.scalar_one()
