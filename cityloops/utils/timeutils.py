from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    현재 UTC 시각 (모델 타임스탬프 기본값)
    """
    return datetime.now(timezone.utc)
