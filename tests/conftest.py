import os

# 앱 모듈 import 전에 테스트용 설정 주입 (MySQL 드라이버 불필요)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from typing import Any, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from cityloops.core.database import build_engine, build_session_factory, get_db_session, init_db
from cityloops.main import app
from cityloops.models.user import User


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'cityloops.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    """
    비밀번호 없는 사용자를 바로 저장하는 팩토리
    """
    counter = {"n": 0}

    async def _make(name: Optional[str] = None, email: Optional[str] = None) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
        )
        db.add(user)
        await db.commit()
        return user

    return _make


def place_payload(name: str, category: str = "Cafe", **extra: Any) -> Dict[str, Any]:
    return {
        "name": name,
        "description": f"{name} description",
        "category": category,
        "mapUrl": f"https://maps.google.com/?q={name.replace(' ', '+')}",
        **extra,
    }


@pytest.fixture
def loop_payload():
    """
    루프 생성/수정 요청 본문 빌더
    """
    def _build(
        title: str = "Best Coffee Shops in Brooklyn",
        places: Optional[List[Dict[str, Any]]] = None,
        **overrides: Any,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": title,
            "description": "A morning walk through the best roasters.",
            "city": "New York",
            "tags": ["coffee", "walking"],
            "published": True,
            "places": places if places is not None else [place_payload("A"), place_payload("B")],
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture
def place():
    return place_payload


@pytest.fixture
async def client(session_factory):
    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
