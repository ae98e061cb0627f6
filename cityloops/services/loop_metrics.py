"""
루프 예상 소요 시간 / 추천 이동 수단 / 난이도 계산
"""

from dataclasses import dataclass
from typing import Iterable

# 분류별 체류 시간(분)
TIME_BY_CATEGORY = {
    "Museum": 90,
    "Restaurant": 60,
    "Cafe": 30,
    "Park": 45,
    "Shopping": 45,
    "Attraction": 60,
    "Landmark": 20,
    "Gallery": 45,
    "Market": 30,
    "Viewpoint": 15,
}
DEFAULT_CATEGORY_MINUTES = 30

# 장소 사이 도보 이동 시간(분)
TRAVEL_MINUTES_BETWEEN_PLACES = 10


@dataclass(frozen=True)
class LoopMetrics:
    estimated_duration: str
    recommended_transport: str
    difficulty: str


def format_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes}min"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}min"


def calculate_loop_metrics(categories: Iterable[str]) -> LoopMetrics:
    """
    장소 분류 목록(표시 순서)으로 루프 지표를 계산
    """
    categories = list(categories)
    if not categories:
        return LoopMetrics("0h", "Walking", "Easy")

    place_count = len(categories)
    total = sum(TIME_BY_CATEGORY.get(c, DEFAULT_CATEGORY_MINUTES) for c in categories)
    total += (place_count - 1) * TRAVEL_MINUTES_BETWEEN_PLACES

    if place_count <= 3 and total <= 180:
        transport = "Walking"
    elif place_count <= 6 and total <= 360:
        transport = "Walking / Public Transport"
    else:
        transport = "Public Transport / Car"

    if place_count <= 3 and total <= 120:
        difficulty = "Easy"
    elif place_count <= 6 and total <= 300:
        difficulty = "Moderate"
    else:
        difficulty = "Challenging"

    return LoopMetrics(format_minutes(total), transport, difficulty)
