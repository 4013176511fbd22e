"""
탄막 좌표/스타일 계산 모듈입니다.

역할:
- 레인 번호, 폰트 크기, coverage 설정으로 세로 좌표 계산
- 스크롤 탄막의 이동 궤적(\\move), 고정 탄막의 위치(\\an, \\pos) 태그 생성
- 24비트 RGB 색상을 ASS 색상(&HAABBGGRR)으로 변환
- 초 단위 시각을 ASS 타임코드(H:MM:SS.CC)로 변환

레인이 coverage 범위를 넘으면 마지막 레인 위치로 고정(clamp)되어 겹쳐 보입니다.
캔버스를 벗어나지는 않습니다.
"""

from __future__ import annotations

import math
import sys

from danmaku_ass.config.schema import COVERAGE_DIVISORS, LayoutConfig
from danmaku_ass.danmaku import Category, CommentEvent

# 스타일 기본 텍스트 색상 (흰색)
DEFAULT_RGB = 0xFFFFFF

# 센티초 버림 시 부동소수점 오차 보정값
CENTISECOND_EPSILON = 1e-7


def available_height(layout: LayoutConfig) -> int:
    """레인 배치에 사용할 수 있는 세로 영역(px)을 반환합니다."""
    return layout.canvas_height // COVERAGE_DIVISORS[layout.coverage]


def lane_y(category: Category, lane: int, layout: LayoutConfig) -> int:
    """
    분류와 레인 번호로 세로 좌표를 계산합니다.

    계산식 (fs=font_size, row=fs+4, avail=available_height, H=canvas_height):
        scroll: min(lane * row + fs, avail - fs)
        top:    min((lane + 1) * row, avail)              (상단 기준)
        bottom: H - min((lane + 1) * row, H - avail)      (하단 기준)
    """
    font_size = layout.font_size
    row_height = layout.row_height
    avail = available_height(layout)

    if category is Category.SCROLL:
        return min(lane * row_height + font_size, avail - font_size)
    if category is Category.TOP:
        return min((lane + 1) * row_height, avail)
    return layout.canvas_height - min((lane + 1) * row_height, layout.canvas_height - avail)


def placement_tag(event: CommentEvent, lane: int, layout: LayoutConfig) -> str:
    """
    위치/이동 오버라이드 블록을 생성합니다.

    scroll: 캔버스 오른쪽 밖(x=W)에서 왼쪽 밖(x=-len(text)*fs)까지 직선 이동
    top:    \\an8 (상단 중앙 정렬), x=W/2
    bottom: \\an2 (하단 중앙 정렬), x=W/2
    """
    y = lane_y(event.category, lane, layout)

    if event.category is Category.SCROLL:
        end_x = -(text_length(event.text) * layout.font_size)
        return f"{{\\move({layout.canvas_width},{y},{end_x},{y})}}"

    center_x = _format_number(layout.canvas_width / 2)
    alignment = 8 if event.category is Category.TOP else 2
    return f"{{\\an{alignment}\\pos({center_x},{y})}}"


def text_length(text: str) -> int:
    """
    스크롤 거리 계산용 본문 길이를 반환합니다.

    UTF-16 코드 유닛 수로 셉니다. BMP 밖 문자(이모지 등)는 2로 계산됩니다.
    """
    return len(text.encode("utf-16-le")) // 2


def alpha_byte(opacity: float) -> int:
    """
    불투명도(0~1)를 ASS 알파 값(0=불투명, 255=투명)으로 변환합니다.

    반올림은 0.5에서 올림(half-up)입니다.
    """
    return int(math.floor((1 - opacity) * 255 + 0.5))


def ass_color(rgb: int, opacity: float) -> str:
    """
    0xRRGGBB 색상을 ASS 색상 문자열 &HAABBGGRR 로 변환합니다 (대문자 16진수).

    예: ass_color(0xFF0000, 0.8) == "&H330000FF"
    """
    red = (rgb >> 16) & 0xFF
    green = (rgb >> 8) & 0xFF
    blue = rgb & 0xFF
    return f"&H{alpha_byte(opacity):02X}{blue:02X}{green:02X}{red:02X}"


def default_color(opacity: float) -> str:
    """스타일 기본 색상(불투명도가 적용된 흰색)을 반환합니다."""
    return ass_color(DEFAULT_RGB, opacity)


def color_tag(rgb: int, layout: LayoutConfig) -> str:
    """
    이벤트별 색상 오버라이드 블록을 생성합니다.

    변환된 색상이 스타일 기본 색상과 같으면 빈 문자열을 반환합니다.
    """
    color = ass_color(rgb, layout.opacity)
    if color == default_color(layout.opacity):
        return ""
    return f"{{\\c{color}}}"


def format_ass_time(seconds: float) -> str:
    """
    초 단위 시각을 ASS 타임코드 H:MM:SS.CC 로 변환합니다.

    시(hour)는 자리수 패딩 없음, 분/초/센티초는 2자리.
    센티초는 반올림하지 않고 버립니다. 0.29 * 100 이 28.999999999999996 이 되는
    부동소수점 오차만 작은 허용치(1e-7 센티초)로 보정합니다.

    예: 10.5 -> "0:00:10.50", 3661.239 -> "1:01:01.23"
    """
    return format_centiseconds(to_centiseconds(seconds))


def format_centiseconds(total_cs: int) -> str:
    """센티초 정수를 ASS 타임코드 H:MM:SS.CC 로 변환합니다."""
    cs = total_cs % 100
    total_seconds = total_cs // 100
    s = total_seconds % 60
    total_minutes = total_seconds // 60
    m = total_minutes % 60
    h = total_minutes // 60
    return f"{h:d}:{m:02d}:{s:02d}.{cs:02d}"


def to_centiseconds(seconds: float) -> int:
    """초 단위 시각을 센티초 정수로 변환합니다 (음수는 0, 버림)."""
    if seconds < 0:
        seconds = 0.0
    # 표현 가능한 최대 실수로 제한 (start + duration 합이 inf가 되는 경우)
    scaled = min(seconds * 100 + CENTISECOND_EPSILON, sys.float_info.max)
    return math.floor(scaled)


def _format_number(value: float) -> str:
    """정수 값은 소수점 없이, 그 외는 최소 자리수로 표기합니다."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
