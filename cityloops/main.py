import logging
from contextlib import asynccontextmanager
from typing import Type

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cityloops.core.config import settings
from cityloops.core.database import init_db
from cityloops.repositories.exceptions import StoreUnavailableError
from cityloops.routers.auth_router import router as auth_router
from cityloops.routers.engagement_router import router as engagement_router
from cityloops.routers.loop_router import router as loop_router
from cityloops.routers.search_router import router as search_router
from cityloops.routers.user_router import router as user_router
from cityloops.utils.exceptions import (
    ApiError, AuthenticationRequiredError, BadRequestError, ConflictError,
    NotFoundError, UnauthorizedError,
)

logger = logging.getLogger(__name__)

# ─── 애플리케이션 수명 주기 이벤트 핸들러 정의 ─────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    앱 시작 시 DB 테이블 생성
    """
    await init_db()
    yield

# ─── FastAPI 애플리케이션 인스턴스 생성 ─────────────────────────────────────
app = FastAPI(
    title="CityLoops API",
    description="도시별 장소 루프 작성/공유, 검색, 댓글 및 좋아요 기능 제공",
    version="1.0.0",
    lifespan=lifespan,
)

# ─── 로그 설정 ─────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# ─── CORS 설정 ─────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─── 예외 클래스 → Status Code 매핑 ───────────────────────────────────────
EXCEPTION_STATUS_MAP: dict[Type[Exception], int] = {
    BadRequestError: 400,
    AuthenticationRequiredError: 401,
    UnauthorizedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    StoreUnavailableError: 503,
}

@app.get("/health")
async def health_check() -> dict:
    """
    서비스 상태 확인용 엔드포인트
    """
    return {"status": "ok"}

# ─── 예외 처리 핸들러 등록───────────────────────────────────────────────────
def status_for(exc: Exception) -> int:
    """
    예외의 MRO를 따라 가장 가까운 매핑 상태 코드를 찾고, 없으면 500
    """
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return 500

async def handle_api_error(request: Request, exc: ApiError) -> ORJSONResponse:
    """
    커스텀 ApiError 예외를 일괄 처리
    """
    return ORJSONResponse(status_code=status_for(exc), content={"detail": exc.message})

async def handle_db_error(request: Request, exc: SQLAlchemyError) -> ORJSONResponse:
    """
    처리되지 않은 DB 예외 → 503
    """
    logger.error("DB 오류: %s %s - %s", request.method, request.url.path, exc)
    return ORJSONResponse(status_code=503, content={"detail": "Database unavailable"})

app.add_exception_handler(ApiError, handle_api_error)
app.add_exception_handler(SQLAlchemyError, handle_db_error)

# ─── 라우터 등록 ───────────────────────────────────────────────────────
app.include_router(auth_router,       prefix="/api")
app.include_router(loop_router,       prefix="/api")
app.include_router(engagement_router, prefix="/api")
app.include_router(user_router,       prefix="/api")
app.include_router(search_router,     prefix="/api")

if __name__ == "__main__":
    uvicorn.run(
        "cityloops.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
