import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.config import settings
from cityloops.core.database import get_db_session
from cityloops.dependencies import ACCESS_COOKIE_NAME, extract_token, get_current_user
from cityloops.models.user import User
from cityloops.routers.action import run_action
from cityloops.schemas.auth_schema import (
    LoginRequest, MessageResponse, RegisterResponse, TokenResponse
)
from cityloops.services.auth_service import AuthService
from cityloops.utils.exceptions import AuthenticationRequiredError

# 로거 설정
logger = logging.getLogger(__name__)

# 토큰 쿠키 설정 (Secure/SameSite 는 환경 설정 값)
class CookieConfig:
    ACCESS_NAME = ACCESS_COOKIE_NAME
    REFRESH_NAME = "refresh_token"
    PATH = "/"
    SAMESITE = settings.COOKIE_SAMESITE
    SECURE = settings.COOKIE_SECURE
    HTTPONLY = True
    ACCESS_MAX_AGE = 60 * settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES
    REFRESH_MAX_AGE = 60 * 60 * 24 * settings.JWT_REFRESH_TOKEN_EXPIRES_DAYS

    @classmethod
    def set_cookies(cls, response: Response, access: str, refresh: str) -> None:
        """
        응답에 액세스 및 리프레시 토큰 쿠키를 설정
        """
        for name, token, max_age in [
            (cls.ACCESS_NAME, access, cls.ACCESS_MAX_AGE),
            (cls.REFRESH_NAME, refresh, cls.REFRESH_MAX_AGE),
        ]:
            response.set_cookie(
                key=name,
                value=token,
                httponly=cls.HTTPONLY,
                secure=cls.SECURE,
                samesite=cls.SAMESITE,
                max_age=max_age,
                path=cls.PATH,
            )

# 라우터 인스턴스
router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/register", response_model=RegisterResponse)
async def register(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    """
    회원가입 - 실패 시 success=False 와 첫 번째 검증 메시지 반환
    """
    _, error = await run_action(AuthService(db).register(payload))
    if error:
        return RegisterResponse(success=False, error=error)
    return RegisterResponse(success=True, message="Account created successfully")

@router.post("/login", response_model=TokenResponse)
async def login(
    req: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    """
    이메일 로그인 처리 후 JWT 쿠키를 설정
    """
    tokens = await AuthService(db).login(req.email, req.password)
    CookieConfig.set_cookies(response, tokens["access_token"], tokens["refresh_token"])
    return TokenResponse(message="Logged in", **tokens)

@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    """
    리프레시 토큰 검증 후 새로운 토큰을 발급
    """
    token = request.cookies.get(CookieConfig.REFRESH_NAME)
    if not token:
        raise AuthenticationRequiredError("Refresh token missing")
    tokens = await AuthService(db).refresh(token)
    CookieConfig.set_cookies(response, tokens["access_token"], tokens["refresh_token"])
    return TokenResponse(message="Token refreshed", **tokens)

@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    토큰 블랙리스트 등록 및 쿠키 삭제로 로그아웃 처리를 수행
    """
    token = extract_token(request)
    if token:
        AuthService(db).logout(token)

    # 쿠키 삭제
    for name in [CookieConfig.ACCESS_NAME, CookieConfig.REFRESH_NAME]:
        response.delete_cookie(name, path=CookieConfig.PATH)
    return MessageResponse(message="Logged out")

@router.get("/me", response_model=MessageResponse)
async def check_login(current_user: User = Depends(get_current_user)) -> MessageResponse:
    """
    현재 JWT로 인증된 사용자의 이메일을 반환
    """
    return MessageResponse(message=f"Logged in as {current_user.email}")
