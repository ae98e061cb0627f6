import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cityloops.repositories.exceptions import StoreUnavailableError
from cityloops.utils.exceptions import ConflictError

logger = logging.getLogger(__name__)


async def flush_session(
    session: AsyncSession,
    conflict_message: str = "Conflicting update",
) -> None:
    """
    세션 변경 사항을 flush
    - 유니크 제약 위반 → ConflictError
    - 그 밖의 DB 예외 → StoreUnavailableError
    두 경우 모두 롤백 후 예외 전파
    """
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("제약 조건 위반으로 flush 실패: %s", exc.orig)
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("flush 실패: %s", exc)
        raise StoreUnavailableError("Database unavailable") from exc


async def commit_session(
    session: AsyncSession,
    conflict_message: str = "Conflicting update",
) -> None:
    """
    세션 변경 사항을 커밋 (flush_session과 동일한 예외 변환 규칙)
    """
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("제약 조건 위반으로 커밋 실패: %s", exc.orig)
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("커밋 실패: %s", exc)
        raise StoreUnavailableError("Database unavailable") from exc
