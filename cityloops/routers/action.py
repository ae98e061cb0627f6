"""
라우터 공통 - 변경 작업 결과를 {success, message} 형태로 변환하기 위한 헬퍼
"""

import logging
from typing import Awaitable, Optional, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from cityloops.utils.exceptions import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_FAILURE_MESSAGE = "Something went wrong"


async def run_action(action: Awaitable[T]) -> Tuple[Optional[T], Optional[str]]:
    """
    서비스 호출을 실행하고 (결과, None) 또는 (None, 실패 메시지)를 반환
    - ApiError: 예외 메시지 그대로
    - 그 밖의 DB 예외: 일반 실패 메시지 (원인은 로그로만 남김)
    """
    try:
        return await action, None
    except ApiError as exc:
        logger.info("요청 거절: %s (%s)", exc.message, type(exc).__name__)
        return None, exc.message
    except SQLAlchemyError:
        logger.exception("DB 처리 중 오류")
        return None, GENERIC_FAILURE_MESSAGE
