"""
로그아웃된 토큰(jti) 관리

- 로그아웃 시 revoke(jti) 로 등록
- 인증/재발급 시 is_revoked(jti) 이면 거부
- 서버 메모리 기반이라 프로세스 재시작 시 초기화됨

TODO: 여러 인스턴스로 배포할 때는 Redis 등 외부 저장소로 옮겨야 함
"""

import logging
from typing import Optional, Set

logger = logging.getLogger(__name__)

_revoked_jtis: Set[str] = set()


def revoke(jti: Optional[str]) -> None:
    if not jti:
        return
    _revoked_jtis.add(jti)
    logger.info("토큰 폐기: jti=%s", jti)


def is_revoked(jti: Optional[str]) -> bool:
    return bool(jti) and jti in _revoked_jtis


def clear() -> None:
    """
    폐기 목록 초기화 (테스트 격리용)
    """
    _revoked_jtis.clear()
