"""
입력 검증 공통 유틸

pydantic ValidationError 중 첫 번째 위반 항목만 사용자 메시지로 변환한다.
- 메시지 테이블 키: 문자열 loc 요소를 '.'으로 이은 경로 (리스트 인덱스 제외)
  예) ("places", 0, "name") → "places.name"
- 값: {pydantic 오류 type: 메시지}, "*" 는 해당 필드의 기본 메시지
"""

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cityloops.utils.exceptions import ValidationFailedError

ModelT = TypeVar("ModelT", bound=BaseModel)
MessageTable = Mapping[str, Mapping[str, str]]


def first_violation(exc: ValidationError, messages: MessageTable) -> str:
    error = exc.errors()[0]
    path = ".".join(part for part in error["loc"] if isinstance(part, str))
    by_type = messages.get(path, {})

    if error["type"] in by_type:
        return by_type[error["type"]]
    if "*" in by_type:
        return by_type["*"]
    if error["type"] == "value_error" and "error" in error.get("ctx", {}):
        return str(error["ctx"]["error"])
    return f"{path}: {error['msg']}" if path else error["msg"]


def parse_payload(
    model: Type[ModelT],
    raw: Mapping[str, Any],
    messages: MessageTable,
) -> ModelT:
    """
    원시 페이로드(폼/JSON dict)를 모델로 변환
    Raises:
        ValidationFailedError: 첫 번째 위반 메시지 그대로
    """
    try:
        return model.model_validate(dict(raw))
    except ValidationError as exc:
        raise ValidationFailedError(first_violation(exc, messages)) from None
