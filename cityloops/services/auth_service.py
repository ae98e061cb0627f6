import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping
from uuid import uuid4

from passlib.context import CryptContext
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.core.config import settings
from cityloops.jwt import blocklist
from cityloops.models.user import Role, User
from cityloops.repositories.transaction import commit_session
from cityloops.repositories.user_repository import UserRepository
from cityloops.schemas.auth_schema import REGISTER_MESSAGES, RegisterRequest
from cityloops.schemas.validation import parse_payload
from cityloops.utils.exceptions import (
    AuthenticationRequiredError, ConflictError, NotFoundError
)

logger = logging.getLogger(__name__)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


class AuthService:
    """
    인증 관련 서비스 클래스
    - 회원가입, 로그인, 로그아웃, 토큰 재발급
    - 토큰으로 현재 사용자 조회
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def register(self, payload: Mapping[str, Any]) -> User:
        """
        이메일/비밀번호 회원가입
        1) 입력 검증 (첫 번째 위반만 보고)
        2) 이메일 중복 체크
        3) bcrypt 해시 후 저장
        """
        data = parse_payload(RegisterRequest, payload, REGISTER_MESSAGES)

        if await self.user_repo.find_by_email(data.email):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        user = User(
            name=data.name,
            email=data.email,
            password=pwd_context.hash(data.password),
            role=Role.USER,
        )
        await self.user_repo.create_user(user)
        await commit_session(self.db, conflict_message=DUPLICATE_EMAIL_MESSAGE)

        logger.info("회원가입 완료: user=%s", user.id)
        return user

    def _issue_tokens(self, user: User) -> dict:
        now = datetime.now(timezone.utc)
        access_exp = now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES)
        refresh_exp = now + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRES_DAYS)
        jti = uuid4().hex

        access_payload = {"sub": user.email, "exp": access_exp, "jti": jti, "type": "access"}
        refresh_payload = {"sub": user.email, "exp": refresh_exp, "jti": jti, "type": "refresh"}

        return {
            "access_token": jwt.encode(access_payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM),
            "refresh_token": jwt.encode(refresh_payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM),
            "token_type": "bearer",
        }

    async def login(self, email: str, password: str) -> dict:
        """
        이메일/비밀번호 로그인
        """
        user = await self.user_repo.find_by_email(email)
        if not user or not user.password or not pwd_context.verify(password, user.password):
            raise AuthenticationRequiredError("Invalid email or password")
        return self._issue_tokens(user)

    async def refresh(self, refresh_token: str) -> dict:
        """
        리프레시 토큰 검증 후 새 토큰 쌍 발급
        """
        try:
            payload = jwt.decode(refresh_token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except JWTError:
            raise AuthenticationRequiredError("Invalid refresh token")
        if payload.get("type") != "refresh" or blocklist.is_revoked(payload.get("jti")):
            raise AuthenticationRequiredError("Invalid refresh token")

        user = await self.user_repo.find_by_email(payload.get("sub", ""))
        if not user:
            raise AuthenticationRequiredError("Invalid refresh token")
        return self._issue_tokens(user)

    def logout(self, token: str) -> None:
        """
        로그아웃 + 토큰 블랙리스트 등록
        """
        try:
            decoded = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
            blocklist.revoke(decoded.get("jti"))
        except JWTError:
            logger.warning("토큰 디코딩 실패 (로그아웃 중 무시됨)")

    @staticmethod
    async def get_current_user(token: str, db: AsyncSession) -> User:
        """
        현재 로그인 사용자를 액세스 토큰으로 찾아 반환
        Raises:
            AuthenticationRequiredError: 토큰 인증 실패 또는 블랙리스트 등록된 토큰일 때
            NotFoundError: 이메일로 사용자를 찾지 못할 때
        """
        try:
            payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except JWTError:
            raise AuthenticationRequiredError("Authentication required")

        email = payload.get("sub")
        jti = payload.get("jti")
        if not email or not jti or payload.get("type") != "access":
            raise AuthenticationRequiredError("Authentication required")
        if blocklist.is_revoked(jti):
            raise AuthenticationRequiredError("Session has been logged out")

        user = await UserRepository(db).find_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        return user
