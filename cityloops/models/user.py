import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from cityloops.core.database import Base
from cityloops.utils.timeutils import utcnow


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """
    서비스 사용자(User) 모델
    - 애플리케이션의 기본 사용자 정보를 저장
    - 작성한 루프, 댓글, 좋아요와의 관계 관리
    """
    __tablename__ = "user"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="사용자 고유 ID"
    )
    name: str = Column(
        String(50),
        nullable=False,
        doc="표시 이름"
    )
    email: str = Column(
        String(120),
        unique=True,
        nullable=False,
        doc="사용자 이메일(로그인 ID)"
    )
    password: str = Column(
        String(255),
        nullable=True,
        doc="해시 처리된 비밀번호 (소셜 계정은 NULL)"
    )
    image: str = Column(
        String(500),
        nullable=True,
        doc="프로필 이미지 URL"
    )
    role: Role = Column(
        Enum(Role),
        nullable=False,
        default=Role.USER,
        doc="권한 (USER/ADMIN)"
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # User ↔ Loop (1:N)
    loops = relationship(
        "Loop",
        back_populates="user",
        cascade="all, delete-orphan",  # 사용자 삭제 시 루프도 삭제
        passive_deletes=True,
        doc="이 사용자가 작성한 루프 목록"
    )

    # User ↔ Comment (1:N)
    comments = relationship(
        "Comment",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="이 사용자가 작성한 댓글 목록"
    )
