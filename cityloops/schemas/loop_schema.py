from datetime import datetime
from typing import Any, List, Optional

import orjson
from pydantic import (
    AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError,
    field_validator,
)

from cityloops.repositories.loop_repository import LoopWithCounts
from cityloops.schemas.common import PaginationMeta, UserSummary

_URL_ADAPTER = TypeAdapter(AnyUrl)

MAX_TAG_LENGTH = 50


def _decode_json_field(value: Any, label: str) -> Any:
    """
    폼 전송 시 문자열로 직렬화된 배열 필드(tags, places)를 디코딩
    """
    if isinstance(value, (str, bytes)):
        if not value.strip():
            return []
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            raise ValueError(f"{label} must be a JSON array") from None
    return value


# ─── 요청(입력) 스키마 ────────────────────────────────────────────────────

class PlaceInput(BaseModel):
    """
    루프에 포함될 장소 입력 모델
    - 필수: 이름, 설명, 분류, 지도 URL
    - 선택: 주소, 이미지, 좌표
    """
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name:        str = Field(..., min_length=1, max_length=200, description="장소 이름")
    description: str = Field(..., min_length=1, description="장소 설명")
    category:    str = Field(..., min_length=1, max_length=100, description="분류 (예: Restaurant)")
    map_url:     str = Field(..., alias="mapUrl", description="지도 링크 URL")
    address:   Optional[str] = Field(None, description="주소")
    image:     Optional[str] = Field(None, description="장소 이미지 URL")
    latitude:  Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("map_url")
    @classmethod
    def _check_map_url(cls, v: str) -> str:
        try:
            _URL_ADAPTER.validate_python(v)
        except ValidationError:
            raise ValueError("Valid Google Maps URL is required") from None
        return v


class LoopInput(BaseModel):
    """
    루프 생성/수정 입력 모델
    - tags, places 는 JSON 문자열로 들어와도 허용 (폼 전송)
    """
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "title": "Best Coffee Shops in Brooklyn",
                "description": "A morning walk through Brooklyn's best roasters.",
                "city": "New York",
                "coverImage": "https://res.cloudinary.com/demo/image/upload/cover.jpg",
                "tags": ["coffee", "walking"],
                "published": True,
                "places": [
                    {
                        "name": "Devoción",
                        "description": "Fresh Colombian beans roasted on site.",
                        "category": "Cafe",
                        "mapUrl": "https://maps.google.com/?q=Devocion",
                    }
                ],
            }
        },
    )

    title:       str = Field(..., min_length=1, max_length=100, description="루프 제목")
    description: str = Field(..., min_length=1, max_length=500, description="루프 설명")
    city:        str = Field(..., min_length=1, max_length=120, description="도시명")
    cover_image: str = Field("", alias="coverImage", description="커버 이미지 URL")
    tags:      List[str] = Field(default_factory=list, description="태그 목록")
    published: bool = Field(False, description="공개 여부")
    places:    List[PlaceInput] = Field(..., min_length=1, description="순서가 있는 장소 목록")

    @field_validator("cover_image", mode="before")
    @classmethod
    def _none_cover_image(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("published", mode="before")
    @classmethod
    def _none_published(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _decode_tags(cls, v: Any) -> Any:
        if v is None:
            return []
        return _decode_json_field(v, "Tags")

    @field_validator("places", mode="before")
    @classmethod
    def _decode_places(cls, v: Any) -> Any:
        return _decode_json_field(v, "Places")

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, v: List[str]) -> List[str]:
        # 순서는 유지하되 공백/중복 태그 제거
        tags: List[str] = []
        for tag in v:
            if not tag or tag in tags:
                continue
            if len(tag) > MAX_TAG_LENGTH:
                raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
            tags.append(tag)
        return tags


LOOP_MESSAGES = {
    "title": {
        "string_too_long": "Title must be at most 100 characters",
        "*": "Title is required",
    },
    "description": {
        "string_too_long": "Description must be at most 500 characters",
        "*": "Description is required",
    },
    "city": {
        "string_too_long": "City must be at most 120 characters",
        "*": "City is required",
    },
    "coverImage": {"*": "Cover image must be a string"},
    "cover_image": {"*": "Cover image must be a string"},
    "tags": {
        "list_type": "Tags must be a list of strings",
        "string_type": "Tags must be a list of strings",
    },
    "published": {"*": "Published must be a boolean"},
    "places": {
        "missing": "At least one place is required",
        "too_short": "At least one place is required",
        "list_type": "At least one place is required",
    },
    "places.name": {
        "string_too_long": "Place name must be at most 200 characters",
        "*": "Place name is required",
    },
    "places.description": {"*": "Place description is required"},
    "places.category": {
        "string_too_long": "Category must be at most 100 characters",
        "*": "Category is required",
    },
    "places.mapUrl": {"*": "Valid Google Maps URL is required"},
    "places.map_url": {"*": "Valid Google Maps URL is required"},
    "places.latitude": {"*": "Latitude must be a number"},
    "places.longitude": {"*": "Longitude must be a number"},
}


class ReorderPlacesRequest(BaseModel):
    """
    장소 순서 변경 요청 - 새 순서대로 나열한 장소 ID 목록
    """
    model_config = ConfigDict(populate_by_name=True)

    place_ids: List[int] = Field(..., alias="placeIds", min_length=1)


# ─── 응답 스키마 ──────────────────────────────────────────────────────────

class PlaceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    category: str
    map_url: str
    address: Optional[str] = None
    image: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    order: int


class LoopMetricsResponse(BaseModel):
    estimated_duration: str
    recommended_transport: str
    difficulty: str


class LoopSummaryResponse(BaseModel):
    """
    루프 목록 항목 (검색/대시보드/프로필)
    """
    id: int
    title: str
    slug: str
    description: str
    city: str
    cover_image: str
    tags: List[str]
    published: bool
    featured: bool
    created_at: datetime
    updated_at: datetime
    user: UserSummary
    like_count: int = 0
    comment_count: int = 0
    place_count: int = 0

    @classmethod
    def from_projection(cls, row: LoopWithCounts) -> "LoopSummaryResponse":
        loop = row.loop
        return cls(
            id=loop.id,
            title=loop.title,
            slug=loop.slug,
            description=loop.description,
            city=loop.city,
            cover_image=loop.cover_image or "",
            tags=list(loop.tags),
            published=loop.published,
            featured=loop.featured,
            created_at=loop.created_at,
            updated_at=loop.updated_at,
            user=UserSummary.model_validate(loop.user),
            like_count=row.like_count,
            comment_count=row.comment_count,
            place_count=row.place_count,
        )


class LoopDetailResponse(LoopSummaryResponse):
    """
    루프 상세 - 순서대로 정렬된 장소, 조회자 좋아요 여부, 예상 소요 정보 포함
    """
    places: List[PlaceResponse]
    is_liked: bool = False
    metrics: LoopMetricsResponse

    @classmethod
    def from_projection(cls, row: LoopWithCounts, metrics: Any = None) -> "LoopDetailResponse":
        summary = LoopSummaryResponse.from_projection(row)
        return cls(
            **summary.model_dump(),
            places=[PlaceResponse.model_validate(p) for p in row.loop.places],
            is_liked=row.is_liked,
            metrics=LoopMetricsResponse.model_validate(metrics, from_attributes=True),
        )


class LoopActionResponse(BaseModel):
    """
    루프 생성/수정 결과
    """
    success: bool
    message: Optional[str] = None
    loop_id: Optional[int] = None
    slug: Optional[str] = None


class DashboardResponse(BaseModel):
    loops: List[LoopSummaryResponse]
    total_loops: int
    published_loops: int
    total_likes: int
    total_comments: int


class LoopListResponse(BaseModel):
    success: bool = True
    loops: List[LoopSummaryResponse]
    pagination: Optional[PaginationMeta] = None
    message: Optional[str] = None
