"""
탄막(danmaku) 모듈 패키지

공통 데이터 타입:
- Category: 탄막 표시 분류 (scroll | bottom | top)
- RawComment: 정규화 전 원본 레코드 (p 속성 문자열 + 본문)
- CommentEvent: 검증 완료된 탄막 이벤트
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Category(str, Enum):
    """
    탄막 표시 분류입니다.

    원본 mode 코드 매핑:
        1~3: scroll (우→좌, 좌→우, 고정속도 스크롤 모두 동일 취급)
        4: bottom (하단 고정)
        5: top (상단 고정)
    """
    SCROLL = "scroll"
    BOTTOM = "bottom"
    TOP = "top"

    @classmethod
    def from_mode(cls, mode: int) -> Optional["Category"]:
        """mode 코드를 분류로 변환합니다. 알 수 없는 코드는 None을 반환합니다."""
        if 1 <= mode <= 3:
            return cls.SCROLL
        if mode == 4:
            return cls.BOTTOM
        if mode == 5:
            return cls.TOP
        return None


@dataclass(frozen=True)
class RawComment:
    """
    정규화 전 원본 탄막 레코드입니다.

    필드:
        attributes: 콤마로 구분된 구조화 필드 문자열
            (시간,mode,폰트크기,색상,타임스탬프,pool,작성자ID,레코드ID,...)
        body: 탄막 본문
    """
    attributes: str
    body: str


@dataclass(frozen=True)
class CommentEvent:
    """
    검증 완료된 탄막 이벤트입니다.

    필드:
        start_time: 영상 시작 기준 표시 시각 (초, 0 이상)
        category: 표시 분류
        font_size: 작성자가 요청한 폰트 크기 (참고용, 렌더링은 설정값 사용)
        color: 24비트 RGB 값 (0xRRGGBB)
        timestamp: 작성 시각 (unix timestamp)
        pool: 탄막 풀 식별자 (해석하지 않음)
        author_id: 작성자 식별자 (해석하지 않음)
        record_id: 레코드 식별자 (해석하지 않음)
        text: 탄막 본문 (이스케이프 없이 그대로 출력됨)
    """
    start_time: float
    category: Category
    font_size: int
    color: int
    timestamp: int
    pool: str
    author_id: str
    record_id: str
    text: str
