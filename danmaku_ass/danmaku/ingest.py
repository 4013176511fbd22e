"""
탄막 레코드 수집/정규화 모듈입니다.

역할:
- 댓글 XML 문서에서 <d p="...">본문</d> 레코드 추출
- 원본 레코드를 검증하여 CommentEvent로 변환
- 형식이 잘못된 레코드는 조용히 제외 (전체 변환을 실패시키지 않음)

사용 예시:
    >>> records = parse_comment_xml(xml_text)
    >>> events = normalize_records(records)
"""

from __future__ import annotations

import html
import logging
import math
import re
from typing import Iterable, Optional, Union

from danmaku_ass.danmaku import Category, CommentEvent, RawComment

logger = logging.getLogger(__name__)

# 유효 레코드가 가져야 하는 최소 구조화 필드 수
MIN_FIELD_COUNT = 8

# <d p="...">본문</d> 패턴 (본문에는 '<'가 올 수 없음)
_RECORD_PATTERN = re.compile(r'<d p="([^"]+)">([^<]*)</d>')

RawRecord = Union[RawComment, tuple[str, str]]


def parse_comment_xml(xml_text: str) -> list[RawComment]:
    """
    댓글 XML 문서에서 원본 레코드 목록을 추출합니다.

    XML 문자 엔티티(&amp; 등)는 속성과 본문 모두 디코딩합니다.
    레코드 필드 자체의 검증은 normalize_records()가 담당합니다.

    파라미터:
        xml_text: 댓글 XML 문서 문자열

    반환값:
        list[RawComment]: 문서 등장 순서의 원본 레코드 목록
    """
    records = [
        RawComment(attributes=html.unescape(attrs), body=html.unescape(body))
        for attrs, body in _RECORD_PATTERN.findall(xml_text)
    ]
    logger.debug(f"XML 레코드 추출: {len(records)}건")
    return records


def parse_record(raw: RawRecord) -> Optional[CommentEvent]:
    """
    원본 레코드 하나를 CommentEvent로 변환합니다.

    유효 조건:
    - 콤마 구분 필드가 8개 이상
    - 앞 5개 필드가 각각 실수(시간), 정수(mode), 정수(폰트크기),
      정수(색상), 정수(타임스탬프)로 파싱됨
    - 시간이 0 이상이고 센티초로 변환해도 유한한 값
    - mode가 1~5 범위

    파라미터:
        raw: RawComment 또는 (속성 문자열, 본문) 튜플

    반환값:
        Optional[CommentEvent]: 유효하면 이벤트, 아니면 None
    """
    attributes, body = (raw.attributes, raw.body) if isinstance(raw, RawComment) else raw
    fields = attributes.split(",")
    if len(fields) < MIN_FIELD_COUNT:
        return None

    try:
        start_time = float(fields[0])
        mode = int(fields[1])
        font_size = int(fields[2])
        color = int(fields[3])
        timestamp = int(fields[4])
    except ValueError:
        return None

    # 센티초 변환(x100)이 inf가 되는 시각도 표현 불가로 제외
    if not math.isfinite(start_time * 100) or start_time < 0:
        return None

    category = Category.from_mode(mode)
    if category is None:
        return None

    return CommentEvent(
        start_time=start_time,
        category=category,
        font_size=font_size,
        color=color,
        timestamp=timestamp,
        pool=fields[5],
        author_id=fields[6],
        record_id=fields[7],
        text=body,
    )


def normalize_records(
    records: Iterable[Union[RawRecord, CommentEvent]],
) -> list[CommentEvent]:
    """
    원본 레코드 목록을 등장 순서대로 검증하여 CommentEvent 목록으로 변환합니다.

    이미 검증된 CommentEvent는 그 자리 그대로 유지됩니다.
    잘못된 레코드는 오류 없이 제외되며, 제외 건수만 DEBUG 로그로 남깁니다.

    파라미터:
        records: 원본 레코드 또는 CommentEvent의 iterable

    반환값:
        list[CommentEvent]: 유효한 이벤트 목록
    """
    events: list[CommentEvent] = []
    dropped = 0
    for raw in records:
        event = raw if isinstance(raw, CommentEvent) else parse_record(raw)
        if event is None:
            dropped += 1
            continue
        events.append(event)

    if dropped:
        logger.debug(f"잘못된 레코드 제외: {dropped}건 (유효 {len(events)}건)")
    return events
