"""
자막 모듈 패키지

공통 데이터 타입:
- PositionedEvent: 레인/좌표/색상이 결정된 ASS 대화(Dialogue) 이벤트
- SubtitleDocument: ASS 문서 한 개 (헤더 파라미터 + 스타일 + 이벤트 목록)
"""

from dataclasses import dataclass, field

from danmaku_ass.config.schema import LayoutConfig
from danmaku_ass.danmaku import CommentEvent


@dataclass(frozen=True)
class PositionedEvent:
    """
    배치가 완료된 탄막 이벤트입니다.

    필드:
        event: 원본 CommentEvent
        lane: 분류 내 레인 번호 (0부터 시작)
        start_time: 표시 시작 시각 (초)
        end_time: 표시 종료 시각 (초, start_time + 분류별 표시 시간)
        placement_tag: 위치/이동 오버라이드 블록 (예: "{\\move(...)}")
        color_tag: 색상 오버라이드 블록 (기본 색상이면 빈 문자열)
    """
    event: CommentEvent
    lane: int
    start_time: float
    end_time: float
    placement_tag: str
    color_tag: str = ""

    @property
    def text(self) -> str:
        return self.event.text


@dataclass
class SubtitleDocument:
    """
    ASS 문서 한 개를 표현하는 컨테이너입니다.

    필드:
        layout: 헤더(PlayResX/Y)와 스타일(폰트, 색상)을 결정하는 배치 설정
        default_color: 스타일 기본 색상 (&HAAFFFFFF)
        events: start_time 오름차순(동률은 입력 순서 유지)의 배치 완료 이벤트
        title: [Script Info]의 Title 값
    """
    layout: LayoutConfig
    default_color: str
    events: list[PositionedEvent] = field(default_factory=list)
    title: str = "Bilibili Danmaku"
