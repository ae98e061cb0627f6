from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy.orm import declarative_base

from cityloops.core.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """
    SQLite는 기본적으로 FK 제약을 검사하지 않으므로 연결마다 활성화
    (Loop 삭제 시 Place/Comment/Like 연쇄 삭제에 필요)
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    DB URL 종류에 맞는 비동기 엔진을 생성
    - MySQL(asyncmy): utf8mb4 문자셋 + 커넥션 재활용 설정
    - SQLite(aiosqlite): 개발/테스트용, FK 제약 활성화
    """
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        engine = create_async_engine(url, echo=echo, future=True)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        future=True,
        connect_args={
            "charset": "utf8mb4",
            "init_command": "SET NAMES utf8mb4 COLLATE utf8mb4_unicode_ci",
        },
        pool_recycle=1800,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# 비동기 엔진 및 세션 팩토리 생성
async_engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
async_session_factory = build_session_factory(async_engine)

# ORM 베이스
Base = declarative_base()


async def init_db(engine: AsyncEngine = async_engine) -> None:
    """
    애플리케이션 시작 시 호출하여 메타데이터 기반 테이블을 생성
    """
    # 모델 import로 메타데이터 등록
    from cityloops.models import (  # noqa: F401
        user, loop, place, comment, like
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 종속성: 요청마다 새로운 DB 세션을 생성 후 반환
    """
    async with async_session_factory() as session:
        yield session
