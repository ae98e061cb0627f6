from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from cityloops.core.database import Base
from cityloops.utils.timeutils import utcnow


class Like(Base):
    """
    루프 좋아요(Like) 모델
    - (user_id, loop_id) 쌍은 유일 - 행의 존재 = 좋아요 상태
    """
    __tablename__ = "loop_like"
    __table_args__ = (
        UniqueConstraint("user_id", "loop_id", name="uq_like_user_loop"),
    )

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="좋아요 기록 고유 ID"
    )
    user_id: int = Column(
        Integer,
        ForeignKey(
            "user.id",
            ondelete="CASCADE"  # 사용자 삭제 시 연관 좋아요도 삭제
        ),
        nullable=False,
        doc="좋아요를 누른 사용자(User) ID"
    )
    loop_id: int = Column(
        Integer,
        ForeignKey(
            "loop.id",
            ondelete="CASCADE"  # 루프 삭제 시 연관 좋아요도 삭제
        ),
        nullable=False,
        index=True,
        doc="좋아요 대상 루프(Loop) ID"
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    loop = relationship("Loop", back_populates="likes")


class CommentLike(Base):
    """
    댓글 좋아요(CommentLike) 모델
    - (user_id, comment_id) 쌍은 유일
    """
    __tablename__ = "comment_like"
    __table_args__ = (
        UniqueConstraint("user_id", "comment_id", name="uq_comment_like_user_comment"),
    )

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    comment_id: int = Column(
        Integer,
        ForeignKey("comment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    comment = relationship("Comment", back_populates="likes")
