from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from cityloops.core.database import Base


class Place(Base):
    """
    장소(Place) 모델
    - 하나의 루프에 속하는 방문 지점
    - order: 루프 내 표시 순서 (1부터 연속된 정수)
    """
    __tablename__ = "place"

    id: int = Column(
        Integer,
        primary_key=True,
        index=True,
        doc="장소 고유 ID"
    )
    name: str = Column(
        String(200),
        nullable=False,
        doc="장소 이름"
    )
    description: str = Column(
        Text,
        nullable=False,
        doc="장소 설명"
    )
    category: str = Column(
        String(100),
        nullable=False,
        doc="분류 (예: 'Restaurant', 'Cafe' 등)"
    )
    map_url: str = Column(
        String(1000),
        nullable=False,
        doc="지도 링크 URL"
    )
    address: str = Column(
        String(500),
        nullable=True,
        doc="주소"
    )
    image: str = Column(
        String(500),
        nullable=True,
        doc="장소 이미지 URL"
    )
    latitude: float = Column(Float, nullable=True)
    longitude: float = Column(Float, nullable=True)
    order: int = Column(
        Integer,
        nullable=False,
        doc="루프 내 표시 순서"
    )
    loop_id: int = Column(
        Integer,
        ForeignKey(
            "loop.id",
            ondelete="CASCADE"  # 루프 삭제 시 장소도 삭제
        ),
        nullable=False,
        index=True,
        doc="소속 루프(Loop) ID"
    )

    loop = relationship(
        "Loop",
        back_populates="places",
        doc="소속 Loop 객체"
    )
