import re
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic import ConfigDict

# ─── 인증 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class RegisterRequest(BaseModel):
    """
    회원가입 요청 모델
    - 이름(2~50자), 이메일, 비밀번호(8자 이상, 대/소문자 및 숫자 포함)
    """
    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name":     "Jane Doe",
                "email":    "jane@example.com",
                "password": "Secretpass1",
            }
        },
    )

    name:     str      = Field(..., min_length=2, max_length=50, description="사용자 이름")
    email:    EmailStr = Field(..., description="이메일 주소")
    password: str      = Field(..., min_length=8, description="비밀번호")

    @field_validator("password")
    @classmethod
    def _check_password_strength(cls, v: str) -> str:
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one number")
        return v


REGISTER_MESSAGES = {
    "name": {
        "string_too_long": "Name must be at most 50 characters",
        "*": "Name must be at least 2 characters",
    },
    "email": {"*": "Invalid email address"},
    "password": {
        "string_too_short": "Password must be at least 8 characters",
        "missing": "Password must be at least 8 characters",
        "string_type": "Password must be at least 8 characters",
    },
}


class LoginRequest(BaseModel):
    """
    로그인 요청 모델
    - 이메일과 비밀번호를 사용하여 인증 수행
    """
    model_config = ConfigDict(extra="ignore")
    email:    EmailStr = Field(..., description="로그인용 이메일 주소")
    password: str      = Field(..., min_length=1, description="비밀번호")


class TokenResponse(BaseModel):
    """
    인증 토큰 응답 모델
    - access_token과 refresh_token, 토큰 타입 포함
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "message": "Logged in",
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer"
            }
        },
    )

    message: str = Field(..., description="응답 메시지")
    access_token: str = Field(..., description="Access Token")
    refresh_token: str = Field(..., description="Refresh Token")
    token_type: str = Field(default="bearer", description="토큰 타입 (기본 bearer)")


class RegisterResponse(BaseModel):
    """
    회원가입 결과 - 실패 시 error 에 첫 번째 검증 메시지
    """
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


class MessageResponse(BaseModel):
    """
    단순 메시지 응답 모델
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"message": "Operation successful"}
        },
    )

    message: str = Field(..., description="응답 메시지")
