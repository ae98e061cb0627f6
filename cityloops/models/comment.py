from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from cityloops.core.database import Base
from cityloops.utils.timeutils import utcnow


class Comment(Base):
    """
    댓글(Comment) 모델
    - 공개된 루프에만 작성 가능 (서비스 계층에서 검사)
    - 작성자만 삭제 가능
    """
    __tablename__ = "comment"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="댓글 고유 ID"
    )
    content: str = Column(
        String(500),
        nullable=False,
        doc="댓글 본문 (1~500자)"
    )
    user_id: int = Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="작성자(User) ID"
    )
    loop_id: int = Column(
        Integer,
        ForeignKey("loop.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="대상 루프(Loop) ID"
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship(
        "User",
        back_populates="comments",
        lazy="selectin",
        doc="작성자 User 객체"
    )
    loop = relationship(
        "Loop",
        back_populates="comments",
    )

    # Comment ↔ CommentLike (1:N)
    likes = relationship(
        "CommentLike",
        back_populates="comment",
        cascade="all, delete-orphan",  # 댓글 삭제 시 좋아요도 삭제
        passive_deletes=True,
    )
