from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.models.user import User


class UserRepository:
    """
    사용자 관련 데이터 액세스 담당 Repository 클래스
    """
    def __init__(self, session: AsyncSession):
        """
        session: 비동기 SQLAlchemy 세션
        """
        self.session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        주어진 이메일과 일치하는 User 객체 반환 (대소문자 구분 없음)
        """
        query = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def create_user(self, user: User) -> None:
        """
        새 User 엔티티를 세션에 추가
        """
        self.session.add(user)

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(User.id)))
        return result.scalar_one()
