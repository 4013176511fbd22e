"""
탄막 통계 집계 모듈입니다.

레인 배정과 무관하게 검증된 이벤트 목록만으로 분류별 개수를 계산합니다.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from danmaku_ass.danmaku import Category, CommentEvent


@dataclass(frozen=True)
class DanmakuStats:
    """
    분류별 탄막 개수입니다.

    항상 total == scroll + top + bottom 을 만족합니다.
    """
    total: int = 0
    scroll: int = 0
    top: int = 0
    bottom: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def get_stats(events: Iterable[CommentEvent]) -> DanmakuStats:
    """이벤트 목록의 분류별 개수를 집계합니다. 빈 목록이면 모두 0입니다."""
    counts = {category: 0 for category in Category}
    for event in events:
        counts[event.category] += 1

    return DanmakuStats(
        total=sum(counts.values()),
        scroll=counts[Category.SCROLL],
        top=counts[Category.TOP],
        bottom=counts[Category.BOTTOM],
    )
