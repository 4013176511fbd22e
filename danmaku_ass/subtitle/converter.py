"""
탄막 → ASS 변환 엔진 모듈입니다.

역할:
- 배치 설정(LayoutConfig)을 처리 시작 전에 검증
- 원본 레코드 정규화 → start_time 안정 정렬 → 분류별 레인 배정
  → 좌표/색상 계산 → ASS 문서 생성
- 검증된 이벤트 목록으로 통계 집계

변환은 순수 동기 함수처럼 동작합니다. 레인 상태는 호출마다 새로 만들어지고
호출이 끝나면 버려지므로, 서로 다른 입력으로 동시에 호출해도 간섭이 없습니다.
결과는 완전한 (문서, 통계) 쌍이거나 LayoutConfigError 중 하나입니다.

사용 예시:
    >>> converter = DanmakuConverter()
    >>> result = converter.convert(records, {"collision_avoidance": True})
    >>> print(result.stats.total)
    >>> Path("out.ass").write_text(result.ass_text, encoding="utf-8")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from danmaku_ass.config.config_manager import validate_layout
from danmaku_ass.config.schema import LayoutConfig
from danmaku_ass.danmaku import CommentEvent
from danmaku_ass.danmaku.ingest import RawRecord, normalize_records
from danmaku_ass.danmaku.stats import DanmakuStats, get_stats
from danmaku_ass.subtitle import PositionedEvent, SubtitleDocument
from danmaku_ass.subtitle.ass_exporter import AssExporter
from danmaku_ass.subtitle.geometry import color_tag, default_color, placement_tag
from danmaku_ass.subtitle.lane_allocator import LaneAllocator

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """
    변환 결과 컨테이너입니다.

    필드:
        document: 배치 완료된 SubtitleDocument
        stats: 분류별 탄막 통계
        ass_text: 직렬화된 ASS 문서 텍스트
    """
    document: SubtitleDocument
    stats: DanmakuStats
    ass_text: str


class DanmakuConverter:
    """탄막 레코드 묶음을 ASS 문서와 통계로 변환하는 엔진입니다."""

    def __init__(self, exporter: Optional[AssExporter] = None) -> None:
        self._exporter = exporter or AssExporter()

    def convert(
        self,
        records: Iterable[Union[RawRecord, CommentEvent]],
        layout: LayoutConfig | dict | None = None,
        *,
        title: Optional[str] = None,
    ) -> ConversionResult:
        """
        레코드 묶음을 ASS 문서로 변환합니다.

        파라미터:
            records: RawComment, (속성, 본문) 튜플, 또는 CommentEvent의 iterable
            layout: 배치 설정 (LayoutConfig, 딕셔너리, None이면 기본값)
            title: [Script Info] Title 값 (None이면 기본 제목)

        반환값:
            ConversionResult: 문서, 통계, ASS 텍스트

        에러:
            LayoutConfigError: 배치 설정이 유효하지 않을 때 (레코드 처리 전)
        """
        validated_layout = validate_layout(layout)

        events = normalize_records(records)
        stats = get_stats(events)

        document = SubtitleDocument(
            layout=validated_layout,
            default_color=default_color(validated_layout.opacity),
            events=self.layout_events(events, validated_layout),
        )
        if title:
            document.title = title

        ass_text = self._exporter.render(document)

        logger.info(
            f"탄막 변환 완료: total={stats.total}, scroll={stats.scroll}, "
            f"top={stats.top}, bottom={stats.bottom}, "
            f"collision_avoidance={validated_layout.collision_avoidance}, "
            f"coverage={validated_layout.coverage}"
        )
        return ConversionResult(document=document, stats=stats, ass_text=ass_text)

    def layout_events(
        self,
        events: list[CommentEvent],
        layout: LayoutConfig,
    ) -> list[PositionedEvent]:
        """
        검증된 이벤트에 레인, 좌표, 색상을 배정합니다.

        start_time 기준 안정 정렬(동률은 입력 순서 유지) 후 순서대로 처리하며,
        레인 상태는 이 호출 안에서만 존재합니다.
        """
        allocator = LaneAllocator(layout)
        positioned: list[PositionedEvent] = []

        for event in sorted(events, key=lambda e: e.start_time):
            lane = allocator.assign(event)
            lifetime = allocator.lifetime(event.category)
            positioned.append(
                PositionedEvent(
                    event=event,
                    lane=lane,
                    start_time=event.start_time,
                    end_time=event.start_time + lifetime,
                    placement_tag=placement_tag(event, lane, layout),
                    color_tag=color_tag(event.color, layout),
                )
            )

        logger.debug(f"레인 배정 완료: {allocator.lane_counts()}")
        return positioned
