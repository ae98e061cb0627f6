from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cityloops.repositories.comment_repository import CommentWithLikes
from cityloops.schemas.common import UserSummary

# ─── 댓글 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class CommentInput(BaseModel):
    """
    댓글 작성 입력 모델
    - content: 1~500자
    - loopId / userId: 필수
    """
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {"content": "Great loop!", "loopId": 1, "userId": 42}
        },
    )

    content: str = Field(..., min_length=1, max_length=500, description="댓글 본문")
    loop_id: int = Field(..., alias="loopId", description="대상 루프 ID")
    user_id: int = Field(..., alias="userId", description="작성자 ID")


COMMENT_MESSAGES = {
    "content": {
        "string_too_long": "Comment too long",
        "*": "Comment cannot be empty",
    },
    "loopId": {"*": "Loop ID is required"},
    "loop_id": {"*": "Loop ID is required"},
    "userId": {"*": "User ID is required"},
    "user_id": {"*": "User ID is required"},
}


class CommentResponse(BaseModel):
    id: int
    content: str
    loop_id: int
    created_at: datetime
    updated_at: datetime
    user: UserSummary
    like_count: int = 0
    is_liked: bool = False

    @classmethod
    def from_projection(cls, row: CommentWithLikes) -> "CommentResponse":
        comment = row.comment
        return cls(
            id=comment.id,
            content=comment.content,
            loop_id=comment.loop_id,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            user=UserSummary.model_validate(comment.user),
            like_count=row.like_count,
            is_liked=row.is_liked,
        )


class CommentActionResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    comment: Optional[CommentResponse] = None


class CommentListResponse(BaseModel):
    success: bool
    comments: List[CommentResponse] = Field(default_factory=list)
    message: Optional[str] = None


class LikeToggleResponse(BaseModel):
    success: bool
    liked: bool
    message: Optional[str] = None


class CommentLikeToggleResponse(BaseModel):
    success: bool
    liked: bool
    count: int
    message: Optional[str] = None
