"""
루프 slug 생성 및 중복 회피 (Identifier Allocator)

제목 → 소문자 → 영숫자가 아닌 문자 구간을 '-' 하나로 치환 → 양끝 '-' 제거.
이미 사용 중이면 '-1', '-2', ... 를 붙여 빈 slug를 찾는다.

조회와 INSERT 사이의 경쟁 조건은 loop.slug 유니크 제약이 최종적으로 막는다
(동시에 같은 제목으로 생성하면 두 번째 요청은 ConflictError).
"""

import re
from typing import Awaitable, Callable, Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# 제목에 영숫자가 하나도 없을 때 사용할 기본 slug
FALLBACK_SLUG = "loop"


def slugify(title: str) -> str:
    slug = _NON_ALNUM.sub("-", title.lower()).strip("-")
    return slug or FALLBACK_SLUG


async def allocate_slug(
    title: str,
    is_taken: Callable[[str], Awaitable[bool]],
    exclude_slug: Optional[str] = None,
) -> str:
    """
    제목에서 유일한 slug를 할당
    - is_taken: slug 사용 여부를 저장소에서 확인하는 비동기 함수
    - exclude_slug: 수정 중인 루프 자신의 slug (사용 중으로 보지 않음)
    """
    base = slugify(title)
    candidate = base
    counter = 1
    while candidate != exclude_slug and await is_taken(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate
