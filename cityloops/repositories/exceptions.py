"""
Repository 계층 예외 클래스들
"""

from cityloops.utils.exceptions import ApiError


class RepositoryError(ApiError):
    """Repository 관련 기본 예외"""
    pass


class StoreUnavailableError(RepositoryError):
    """DB 호출 실패 (커밋/쿼리 실행 중 SQLAlchemy 예외)"""
    pass
