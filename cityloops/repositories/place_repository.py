from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.models.place import Place


class PlaceRepository:
    """
    장소(Place) 조회 Repository
    - 장소 생성/교체는 LoopRepository.replace_places 를 통해 루프 단위로 수행
    """
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_by_loop_id(self, loop_id: int) -> List[Place]:
        """
        루프의 장소 목록을 표시 순서(order) 오름차순으로 반환
        """
        query = (
            select(Place)
            .where(Place.loop_id == loop_id)
            .order_by(Place.order, Place.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Place.id)))
        return result.scalar_one()
