"""
danmaku-ass 설정 스키마 정의 모듈입니다.

역할:
- Pydantic v2 BaseModel 기반으로 config.yaml의 전체 구조를 타입 안전하게 정의
- 각 섹션(system, layout, export)을 독립적인 중첩 모델로 분리
- 필드별 기본값, 허용 범위, 유효성 검증(validator)을 포함

사용 예시:
    >>> from danmaku_ass.config.schema import AppConfig
    >>> config = AppConfig(**yaml_data)
    >>> print(config.layout.font_size)
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, Field, field_validator

# 모듈 로거 설정
logger = logging.getLogger(__name__)

# coverage 값 → 세로 캔버스 분할 제수 (full=1, half=1/2, quarter=1/4)
COVERAGE_DIVISORS: dict[str, int] = {
    "full": 1,
    "half": 2,
    "quarter": 4,
}


# =============================================================================
# system 섹션: 시스템 전역 설정
# =============================================================================

class SystemConfig(BaseModel):
    """
    시스템 전역 설정을 정의하는 모델입니다.

    역할:
    - 로깅 레벨 및 포맷 지정
    - 세션 식별자 관리
    """
    # 로그 출력 레벨
    log_level: str = Field(default="INFO", description="로그 레벨 (DEBUG | INFO | WARNING | ERROR)")
    # 로그 출력 포맷
    log_format: str = Field(default="text", description="로그 포맷 (json | text)")
    # 로그 파일 저장 디렉토리 경로
    log_dir: str = Field(default="output/logs", description="로그 저장 디렉토리")
    # 세션 고유 식별자 (빈 문자열이면 UUID로 자동 생성)
    session_id: str = Field(default="", description="세션 ID (비어있으면 UUID 자동생성)")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """로그 레벨이 유효한 Python 로깅 레벨인지 검증합니다."""
        allowed_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            error_message = f"log_level은 {allowed_levels} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return upper_value

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """로그 포맷이 지원되는 형식인지 검증합니다."""
        allowed_formats = ("json", "text")
        if value not in allowed_formats:
            error_message = f"log_format은 {allowed_formats} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value


# =============================================================================
# layout 섹션: 탄막 배치 및 스타일 설정
# =============================================================================

class LayoutConfig(BaseModel):
    """
    한 번의 변환 요청에 적용되는 배치/스타일 파라미터입니다.

    역할:
    - ASS 좌표계(PlayResX/PlayResY) 크기 지정
    - 폰트 이름/크기 및 불투명도 지정
    - 스크롤/고정 탄막의 화면 표시 시간 지정
    - 충돌 회피(레인 배정) 여부와 표시 영역(coverage) 지정

    레인 간격(row height)은 font_size + 4 픽셀입니다.
    """
    # ASS 좌표계 가로 크기
    canvas_width: int = Field(default=1920, description="캔버스 가로 크기 (px)")
    # ASS 좌표계 세로 크기
    canvas_height: int = Field(default=1080, description="캔버스 세로 크기 (px)")
    # 표시 폰트 이름
    font_name: str = Field(default="Arial", description="폰트 이름")
    # 렌더링 폰트 크기 (모든 탄막 공통, 레인 간격 계산에도 사용)
    font_size: int = Field(default=25, description="폰트 크기 (px)")
    # 불투명도 (0=완전 투명, 1=완전 불투명)
    opacity: float = Field(default=0.8, description="불투명도 (0.0~1.0)")
    # 스크롤 탄막 표시 시간 (초)
    scroll_duration: float = Field(default=5.0, description="스크롤 탄막 표시 시간 (초)")
    # 상단/하단 고정 탄막 표시 시간 (초)
    static_duration: float = Field(default=5.0, description="고정 탄막 표시 시간 (초)")
    # 충돌 회피 여부 (False면 모든 탄막이 레인 0)
    collision_avoidance: bool = Field(default=False, description="레인 충돌 회피 여부")
    # 레인 배치에 사용할 세로 영역 비율
    coverage: str = Field(default="full", description="표시 영역 (full | half | quarter)")

    @field_validator("canvas_width", "canvas_height", "font_size")
    @classmethod
    def validate_positive_int(cls, value: int) -> int:
        """캔버스 크기와 폰트 크기가 양의 정수인지 검증합니다."""
        if value <= 0:
            error_message = f"캔버스/폰트 크기는 양수여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("font_name")
    @classmethod
    def validate_font_name(cls, value: str) -> str:
        """폰트 이름이 비어있지 않은지 검증합니다."""
        if not value.strip():
            raise ValueError("font_name은 비어 있을 수 없습니다.")
        return value

    @field_validator("opacity")
    @classmethod
    def validate_opacity(cls, value: float) -> float:
        """불투명도가 0.0~1.0 범위인지 검증합니다."""
        if not 0.0 <= value <= 1.0:
            error_message = f"opacity는 0.0~1.0 범위여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("scroll_duration", "static_duration")
    @classmethod
    def validate_duration(cls, value: float) -> float:
        """표시 시간이 유한한 양수인지 검증합니다."""
        if not (math.isfinite(value) and value > 0):
            error_message = f"표시 시간은 유한한 양수여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("coverage")
    @classmethod
    def validate_coverage(cls, value: str) -> str:
        """표시 영역 값이 허용된 값인지 검증합니다 (대소문자 무관)."""
        lower_value = value.lower()
        if lower_value not in COVERAGE_DIVISORS:
            error_message = (
                f"coverage는 {tuple(COVERAGE_DIVISORS)} 중 하나여야 합니다. "
                f"입력값: '{value}'"
            )
            raise ValueError(error_message)
        return lower_value

    @property
    def row_height(self) -> int:
        """레인 하나의 세로 간격(px)입니다."""
        return self.font_size + 4


# =============================================================================
# export 섹션: 파일 출력 및 내보내기 이력 설정
# =============================================================================

class ExportConfig(BaseModel):
    """
    ASS 파일 출력 및 내보내기 이력 기록 설정입니다.

    역할:
    - 출력 디렉토리 지정
    - 내보내기 이력(JSON Lines) 기록 활성화 및 경로 지정
    """
    # ASS 파일 출력 디렉토리
    output_dir: str = Field(default="output/subtitles", description="ASS 파일 출력 디렉토리")
    # 내보내기 이력 기록 여부 (실패해도 변환 결과에는 영향 없음)
    history_enabled: bool = Field(default=True, description="내보내기 이력 기록 여부")
    # 내보내기 이력 파일 경로
    history_path: str = Field(default="output/export_history.jsonl", description="이력 파일 경로")


# =============================================================================
# 최상위 AppConfig: 모든 섹션을 통합하는 루트 모델
# =============================================================================

class AppConfig(BaseModel):
    """
    애플리케이션 전체 설정을 통합하는 최상위 모델입니다.

    역할:
    - config.yaml의 모든 섹션을 하나의 타입 안전한 객체로 통합
    - 각 섹션이 누락된 경우 기본값으로 자동 생성

    사용 예시:
        >>> import yaml
        >>> with open("config.yaml") as f:
        ...     raw = yaml.safe_load(f)
        >>> config = AppConfig(**raw)
        >>> print(config.layout.coverage)
        'full'
    """
    # 시스템 전역 설정
    system: SystemConfig = Field(default_factory=SystemConfig, description="시스템 설정")
    # 탄막 배치/스타일 설정
    layout: LayoutConfig = Field(default_factory=LayoutConfig, description="배치 설정")
    # 출력 및 이력 설정
    export: ExportConfig = Field(default_factory=ExportConfig, description="내보내기 설정")
