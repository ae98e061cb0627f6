from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

from cityloops.core.database import Base
from cityloops.utils.timeutils import utcnow


class Loop(Base):
    """
    루프(Loop) 모델
    - 한 도시의 장소(Place)들을 순서대로 묶은 큐레이션
    - slug는 제목에서 파생되며 전역적으로 유일
    """
    __tablename__ = "loop"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="루프 고유 ID"
    )
    title: str = Column(
        String(100),
        nullable=False,
        doc="루프 제목"
    )
    slug: str = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        doc="URL용 고유 식별자"
    )
    description: str = Column(
        Text,
        nullable=False,
        doc="루프 설명"
    )
    city: str = Column(
        String(120),
        nullable=False,
        index=True,
        doc="도시명"
    )
    cover_image: str = Column(
        String(500),
        nullable=False,
        default="",
        doc="커버 이미지 URL (외부 미디어 호스팅)"
    )
    published: bool = Column(
        Boolean,
        nullable=False,
        default=False,
        doc="공개 여부"
    )
    featured: bool = Column(
        Boolean,
        nullable=False,
        default=False,
        doc="추천 여부 (관리자 지정)"
    )
    user_id: int = Column(
        Integer,
        ForeignKey(
            "user.id",
            ondelete="CASCADE"  # 작성자 삭제 시 루프도 삭제
        ),
        nullable=False,
        index=True,
        doc="작성자(User) ID - 생성 후 변경 불가"
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # User ↔ Loop (N:1)
    user = relationship(
        "User",
        back_populates="loops",
        lazy="selectin",
        doc="작성자 User 객체"
    )

    # Loop ↔ Place (1:N), 표시 순서대로 정렬
    places = relationship(
        "Place",
        back_populates="loop",
        order_by="Place.order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        doc="순서가 지정된 장소 목록"
    )

    # Loop ↔ LoopTag (1:N)
    tag_rows = relationship(
        "LoopTag",
        back_populates="loop",
        order_by="LoopTag.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    tags = association_proxy(
        "tag_rows",
        "name",
        creator=lambda name: LoopTag(name=name),
    )

    # Loop ↔ Comment (1:N)
    comments = relationship(
        "Comment",
        back_populates="loop",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="댓글 목록"
    )

    # Loop ↔ Like (1:N)
    likes = relationship(
        "Like",
        back_populates="loop",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="좋아요 목록"
    )


class LoopTag(Base):
    """
    루프 태그 - 루프별로 중복 없는 문자열 집합
    """
    __tablename__ = "loop_tag"
    __table_args__ = (
        UniqueConstraint("loop_id", "name", name="uq_loop_tag"),
    )

    id: int = Column(Integer, primary_key=True)
    loop_id: int = Column(
        Integer,
        ForeignKey("loop.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: str = Column(String(50), nullable=False, index=True)

    loop = relationship("Loop", back_populates="tag_rows")
