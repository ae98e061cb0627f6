from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

# cityloops 패키지의 상위 디렉토리 (config/settings.env 위치 기준)
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """
    CityLoops 설정
    - 우선순위: 환경 변수 > config/settings.env > 기본값
    - DATABASE_URL 을 직접 주지 않으면 DB_* 값으로 MySQL(asyncmy) URL 을 만든다
    """
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / "config" / "settings.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ─── 인증 ───────────────────────────────────────────
    SECRET_KEY: str = "dev-secret-key"
    JWT_SECRET_KEY: str = "dev-jwt-secret-key"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES: int = Field(60, description="액세스 토큰 유효 기간(분)")
    JWT_REFRESH_TOKEN_EXPIRES_DAYS: int = Field(7, description="리프레시 토큰 유효 기간(일)")
    BCRYPT_ROUNDS: int = Field(12, ge=4, le=31, description="bcrypt cost factor")

    # ─── 저장소 ─────────────────────────────────────────
    DB_USER: str = "cityloops"
    DB_PASSWORD: str = "cityloops_pw"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "cityloops"
    DB_ECHO: bool = False
    DATABASE_URL: Optional[str] = Field(
        None,
        validate_default=True,
        description="예: sqlite+aiosqlite:///./dev.db (없으면 DB_* 로 조합)",
    )

    # ─── 웹 ─────────────────────────────────────────────
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    COOKIE_SECURE: bool = Field(True, description="로컬 http 개발 시 False")
    COOKIE_SAMESITE: str = "none"

    # ─── 목록 페이지 크기 ────────────────────────────────
    DEFAULT_PAGE_SIZE: int = 12
    MAX_PAGE_SIZE: int = 50
    COMMENT_PAGE_SIZE: int = 20

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _default_mysql_url(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v:
            return v
        url = URL.create(
            "mysql+asyncmy",
            username=info.data.get("DB_USER"),
            password=info.data.get("DB_PASSWORD"),
            host=info.data.get("DB_HOST"),
            port=info.data.get("DB_PORT"),
            database=info.data.get("DB_NAME"),
            query={"charset": "utf8mb4"},
        )
        return url.render_as_string(hide_password=False)


@lru_cache()
def get_settings() -> Settings:
    """
    프로세스당 한 번만 읽어서 재사용
    """
    return Settings()


settings = get_settings()
