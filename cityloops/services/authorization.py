"""
권한 검사 (Authorization Guard)

세션 정보는 전역 조회 대신 호출자 ID(caller_id)로 명시적으로 전달된다.
- require_session: 로그인 여부 확인
- require_owner: 리소스 소유자 확인
"""

import logging
from typing import Optional

from cityloops.utils.exceptions import AuthenticationRequiredError, UnauthorizedError

logger = logging.getLogger(__name__)


def require_session(caller_id: Optional[int]) -> int:
    """
    호출자 ID가 없으면 AuthenticationRequiredError
    """
    if caller_id is None:
        raise AuthenticationRequiredError("Authentication required")
    return caller_id


def require_owner(resource_owner_id: int, caller_id: int) -> None:
    """
    호출자가 리소스 소유자가 아니면 UnauthorizedError
    """
    if resource_owner_id != caller_id:
        logger.warning(
            "소유자 불일치: owner=%s caller=%s", resource_owner_id, caller_id
        )
        raise UnauthorizedError("Unauthorized")
