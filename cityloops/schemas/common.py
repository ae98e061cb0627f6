from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserSummary(BaseModel):
    """
    작성자 요약 정보 (목록/댓글 표시용)
    """
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="사용자 ID")
    name: str = Field(..., description="표시 이름")
    image: Optional[str] = Field(None, description="프로필 이미지 URL")


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
