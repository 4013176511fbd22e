"""
탄막 레인 배정 모듈입니다.

역할:
- 분류(scroll/bottom/top)별로 독립적인 LaneTracker 유지
- 표시 구간 [start, start + lifetime)이 겹치는 탄막이 같은 레인을 쓰지 않도록
  탐욕적(greedy) 구간 재사용 방식으로 레인 번호 배정
- 충돌 회피가 꺼져 있으면 모든 탄막을 레인 0에 배치

LaneTracker는 변환 호출 한 번, 분류 하나에만 속합니다.
호출 간이나 분류 간에 공유하지 않습니다.

사용 예시:
    >>> allocator = LaneAllocator(layout)
    >>> for event in sorted_events:
    ...     lane = allocator.assign(event)
"""

from __future__ import annotations

import logging

from danmaku_ass.config.schema import LayoutConfig
from danmaku_ass.danmaku import Category, CommentEvent

logger = logging.getLogger(__name__)


class LaneTracker:
    """
    한 분류의 레인 점유 상태입니다.

    레인 번호를 인덱스로 하는 리스트에 각 레인의 점유 종료 시각을 보관합니다.
    레인은 0부터 순서대로만 열리며 건너뛰지 않습니다.
    """

    def __init__(self) -> None:
        self._occupied_until: list[float] = []

    def __len__(self) -> int:
        return len(self._occupied_until)

    def acquire(self, start_time: float, lifetime: float) -> int:
        """
        start_time에 비어 있는 레인을 점유하고 레인 번호를 반환합니다.

        occupied_until <= start_time 인 레인 중 가장 낮은 번호를 재사용하고,
        없으면 현재 레인 수를 번호로 하는 새 레인을 엽니다.

        파라미터:
            start_time: 탄막 표시 시작 시각 (초)
            lifetime: 탄막 표시 시간 (초)

        반환값:
            int: 배정된 레인 번호
        """
        release_at = start_time + lifetime
        for lane, occupied_until in enumerate(self._occupied_until):
            if occupied_until <= start_time:
                self._occupied_until[lane] = release_at
                return lane

        self._occupied_until.append(release_at)
        return len(self._occupied_until) - 1

    def occupied_until(self, lane: int) -> float:
        """레인의 점유 종료 시각을 반환합니다."""
        return self._occupied_until[lane]


class LaneAllocator:
    """
    변환 호출 한 번 동안 분류별 레인을 배정하는 클래스입니다.

    이벤트는 start_time 오름차순으로 assign()에 전달되어야 합니다.
    """

    def __init__(self, layout: LayoutConfig) -> None:
        self._layout = layout
        self._trackers: dict[Category, LaneTracker] = {
            category: LaneTracker() for category in Category
        }

    def lifetime(self, category: Category) -> float:
        """분류별 화면 표시 시간(초)을 반환합니다."""
        if category is Category.SCROLL:
            return self._layout.scroll_duration
        return self._layout.static_duration

    def assign(self, event: CommentEvent) -> int:
        """
        이벤트에 레인 번호를 배정합니다.

        collision_avoidance=False면 트래커를 건드리지 않고 항상 0을 반환합니다.
        """
        if not self._layout.collision_avoidance:
            return 0
        tracker = self._trackers[event.category]
        return tracker.acquire(event.start_time, self.lifetime(event.category))

    def lane_counts(self) -> dict[str, int]:
        """분류별로 열린 레인 수를 반환합니다 (로그/진단용)."""
        return {category.value: len(tracker) for category, tracker in self._trackers.items()}
