import logging
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.models.comment import Comment
from cityloops.models.like import CommentLike, Like
from cityloops.models.loop import Loop
from cityloops.repositories.comment_repository import CommentRepository, CommentWithLikes
from cityloops.repositories.like_repository import CommentLikeRepository, LikeRepository
from cityloops.repositories.loop_repository import LoopRepository
from cityloops.repositories.transaction import commit_session
from cityloops.schemas.comment_schema import COMMENT_MESSAGES, CommentInput
from cityloops.schemas.validation import parse_payload
from cityloops.services.authorization import require_owner, require_session
from cityloops.utils.exceptions import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


class EngagementService:
    """
    좋아요/댓글 관리 서비스
    - 좋아요는 조회 후 삽입/삭제하는 토글 방식
    - 동시에 같은 토글이 들어와 둘 다 '없음'을 본 경우, 두 번째 INSERT는
      (user_id, loop_id) 유니크 제약에 걸려 ConflictError 로 거절됨
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.loops = LoopRepository(db)
        self.comments = CommentRepository(db)
        self.likes = LikeRepository(db)
        self.comment_likes = CommentLikeRepository(db)

    async def _get_visible_loop(self, loop_id: int, viewer_id: Optional[int]) -> Loop:
        loop = await self.loops.find_by_id(loop_id)
        if not loop or (not loop.published and loop.user_id != viewer_id):
            raise NotFoundError("Loop not found")
        return loop

    async def _get_comment(self, comment_id: int) -> Comment:
        comment = await self.comments.find_by_id(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        return comment

    # ─── 루프 좋아요 ───────────────────────────────────────────────────
    async def toggle_like(self, caller_id: Optional[int], loop_id: int) -> bool:
        """
        루프 좋아요 토글
        Returns:
            토글 후 좋아요 상태 (True = 좋아요)
        """
        user_id = require_session(caller_id)
        await self._get_visible_loop(loop_id, user_id)

        existing = await self.likes.find(user_id, loop_id)
        if existing:
            await self.likes.delete(existing)
            liked = False
        else:
            self.likes.add(Like(user_id=user_id, loop_id=loop_id))
            liked = True

        await commit_session(self.db, conflict_message="Like was already recorded")
        logger.info("좋아요 토글: loop=%s user=%s liked=%s", loop_id, user_id, liked)
        return liked

    async def is_liked(self, user_id: int, loop_id: int) -> bool:
        return await self.likes.is_liked(user_id, loop_id)

    async def like_count(self, loop_id: int) -> int:
        return await self.likes.count_by_loop_id(loop_id)

    # ─── 댓글 ─────────────────────────────────────────────────────────
    async def create_comment(
        self,
        caller_id: Optional[int],
        payload: Mapping[str, Any],
    ) -> CommentWithLikes:
        """
        댓글 작성
        1) 세션 확인
        2) 입력 검증
        3) 요청의 userId 와 세션 사용자 일치 확인
        4) 대상 루프가 존재하고 공개 상태인지 확인 (작성자 본인이라도 비공개면 거절)
        5) 저장 후 작성자 요약 + 좋아요 0 으로 반환
        """
        user_id = require_session(caller_id)
        data = parse_payload(CommentInput, payload, COMMENT_MESSAGES)

        if data.user_id != user_id:
            logger.warning("댓글 작성자 불일치: payload=%s session=%s", data.user_id, user_id)
            raise UnauthorizedError("Unauthorized")

        loop = await self.loops.find_by_id(data.loop_id)
        if not loop or not loop.published:
            raise NotFoundError("Loop not found or not published")

        comment = Comment(content=data.content, loop_id=data.loop_id, user_id=user_id)
        self.comments.add(comment)
        await commit_session(self.db)
        await self.db.refresh(comment, attribute_names=["user"])

        logger.info("댓글 작성: id=%s loop=%s user=%s", comment.id, loop.id, user_id)
        return CommentWithLikes(comment=comment, like_count=0, is_liked=False)

    async def delete_comment(self, caller_id: Optional[int], comment_id: int) -> None:
        """
        댓글 삭제 - 댓글 작성자만 가능 (루프 작성자도 불가)
        """
        user_id = require_session(caller_id)
        comment = await self._get_comment(comment_id)
        require_owner(comment.user_id, user_id)

        await self.comments.delete(comment)
        await commit_session(self.db)
        logger.info("댓글 삭제: id=%s", comment_id)

    async def list_comments(
        self,
        loop_id: int,
        viewer_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> List[CommentWithLikes]:
        """
        루프 댓글 목록 (최신순, 조회자의 좋아요 여부 포함)
        """
        await self._get_visible_loop(loop_id, viewer_id)
        return await self.comments.list_by_loop_id(
            loop_id,
            viewer_id=viewer_id,
            offset=(page - 1) * limit,
            limit=limit,
        )

    # ─── 댓글 좋아요 ───────────────────────────────────────────────────
    async def toggle_comment_like(
        self,
        caller_id: Optional[int],
        comment_id: int,
    ) -> Tuple[bool, int]:
        """
        댓글 좋아요 토글
        Returns:
            (토글 후 좋아요 상태, 갱신된 좋아요 수)
        """
        user_id = require_session(caller_id)
        await self._get_comment(comment_id)

        existing = await self.comment_likes.find(user_id, comment_id)
        if existing:
            await self.comment_likes.delete(existing)
            liked = False
        else:
            self.comment_likes.add(CommentLike(user_id=user_id, comment_id=comment_id))
            liked = True

        await commit_session(self.db, conflict_message="Like was already recorded")
        count = await self.comment_likes.count_by_comment_id(comment_id)
        return liked, count
