import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.database import get_db_session
from cityloops.models.user import User
from cityloops.services.auth_service import AuthService
from cityloops.utils.exceptions import ApiError, AuthenticationRequiredError

logger = logging.getLogger(__name__)

ACCESS_COOKIE_NAME = "jwt_token"


def extract_token(request: Request) -> Optional[str]:
    """
    요청에서 액세스 토큰 추출
    1) Authorization 헤더의 Bearer 토큰 우선
    2) 없으면 쿠키의 'jwt_token'
    """
    auth_header = request.headers.get("authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return request.cookies.get(ACCESS_COOKIE_NAME)


async def get_current_user_optional(
    request: Request,
    db_session: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """
    선택적 사용자 조회 - 토큰이 없거나 유효하지 않으면 None
    """
    token = extract_token(request)
    if not token:
        return None
    try:
        return await AuthService.get_current_user(token, db_session)
    except ApiError as exc:
        logger.debug("토큰 무시: %s", exc.message)
        return None


async def get_current_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """
    로그인 필수 종속성
    Raises:
        AuthenticationRequiredError (401)
    """
    if user is None:
        raise AuthenticationRequiredError("Authentication required")
    return user


async def get_caller_id(
    user: Optional[User] = Depends(get_current_user_optional),
) -> Optional[int]:
    """
    서비스 계층에 명시적으로 넘길 호출자 ID (비로그인 시 None)
    """
    return user.id if user else None
