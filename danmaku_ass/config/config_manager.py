"""
danmaku-ass 설정 관리 모듈입니다.

역할:
- YAML 설정 파일을 로드하고 Pydantic 스키마로 유효성 검증
- 환경변수 오버라이드 지원 (접두사: DMK_)
- dot-notation 기반 설정값 조회 (예: "layout.font_size")
- 배치 설정(LayoutConfig) 단독 검증 (변환 직전 재검증용)

사용 예시:
    >>> manager = ConfigManager()
    >>> config = manager.load("config.yaml")
    >>> font_size = manager.get("layout.font_size")
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from danmaku_ass.config.schema import AppConfig, LayoutConfig

# 모듈 로거 설정
logger = logging.getLogger(__name__)

# 환경변수 오버라이드 접두사
ENV_PREFIX = "DMK_"


class ConfigLoadError(Exception):
    """설정 파일 로드 중 발생하는 에러의 기본 클래스입니다."""
    pass


class ConfigValidationError(ConfigLoadError):
    """설정 스키마 검증 실패 시 발생하는 에러입니다."""
    pass


class ConfigFileNotFoundError(ConfigLoadError):
    """설정 파일을 찾을 수 없을 때 발생하는 에러입니다."""
    pass


class LayoutConfigError(ConfigValidationError):
    """변환 요청의 배치 설정이 유효하지 않을 때 발생하는 에러입니다."""
    pass


def validate_layout(layout: LayoutConfig | dict | None) -> LayoutConfig:
    """
    배치 설정을 검증하여 새 LayoutConfig 객체로 반환합니다.

    Pydantic 모델은 할당 시 재검증하지 않으므로, 이미 생성된 LayoutConfig도
    덤프 후 다시 검증합니다. 변환 처리가 시작되기 전에 호출되어야 합니다.

    파라미터:
        layout: LayoutConfig, 필드 딕셔너리, 또는 None(기본값 사용)

    반환값:
        LayoutConfig: 검증 완료된 배치 설정

    에러:
        LayoutConfigError: 검증 실패 시
    """
    if layout is None:
        return LayoutConfig()

    raw_layout = layout.model_dump() if isinstance(layout, LayoutConfig) else dict(layout)

    try:
        return LayoutConfig(**raw_layout)
    except ValidationError as validation_error:
        error_details = validation_error.errors()
        for error_detail in error_details:
            field_path = " -> ".join(str(loc) for loc in error_detail["loc"])
            logger.error(
                f"배치 설정 검증 실패 - 필드: {field_path}, "
                f"에러: {error_detail['msg']}, "
                f"입력값: {error_detail.get('input', 'N/A')}"
            )
        error_message = f"배치 설정 검증 실패: {len(error_details)}개 에러 발생"
        raise LayoutConfigError(error_message) from validation_error


class ConfigManager:
    """
    YAML 설정 파일을 로드하고 관리하는 매니저 클래스입니다.

    역할:
    - YAML 파일 파싱 및 Pydantic 유효성 검증
    - 환경변수 오버라이드 (DMK_ 접두사)
    - dot-notation 설정값 조회

    사용 예시:
        >>> manager = ConfigManager()
        >>> config = manager.load("config.yaml")
        >>> print(manager.get("layout.coverage"))
        'full'
    """

    def __init__(self) -> None:
        """ConfigManager를 초기화합니다."""
        # 현재 활성 설정 객체 (로드 전에는 None)
        self._config: Optional[AppConfig] = None
        # 설정 파일 경로 (로드 시 설정됨)
        self._config_filepath: Optional[Path] = None
        self._lock: threading.RLock = threading.RLock()

        logger.debug("ConfigManager 인스턴스 생성 완료")

    @property
    def config(self) -> Optional[AppConfig]:
        """현재 활성 설정 객체를 반환합니다."""
        with self._lock:
            return self._config

    def load(self, filepath: str | Path) -> AppConfig:
        """
        YAML 설정 파일을 로드하고 Pydantic 스키마로 검증합니다.

        처리 순서:
        1. 파일 존재 여부 확인
        2. YAML 파싱
        3. 환경변수 오버라이드 적용
        4. Pydantic 스키마 검증
        5. 검증 통과 시 활성 설정으로 교체

        파라미터:
            filepath (str | Path): YAML 설정 파일 경로

        반환값:
            AppConfig: 검증 완료된 설정 객체

        에러:
            ConfigFileNotFoundError: 파일이 존재하지 않을 때
            ConfigValidationError: 스키마 검증 실패 시
            ConfigLoadError: YAML 파싱 실패 등 기타 에러
        """
        filepath = Path(filepath)
        logger.info(f"설정 파일 로드 시작: {filepath}")

        if not filepath.exists():
            error_message = f"설정 파일을 찾을 수 없습니다: {filepath}"
            logger.error(error_message)
            raise ConfigFileNotFoundError(error_message)

        raw_config = self._parse_yaml_file(filepath)
        logger.debug(f"YAML 파싱 완료: {len(raw_config)} 개 최상위 키")

        validated_config = self.load_dict(raw_config)
        with self._lock:
            self._config_filepath = filepath
        return validated_config

    def load_dict(self, raw_config: dict) -> AppConfig:
        """
        딕셔너리 설정에 환경변수 오버라이드를 적용하고 검증합니다.

        설정 파일 없이 실행할 때(main.py --config 미지정)도 이 경로로
        DMK_ 환경변수가 반영됩니다.

        파라미터:
            raw_config (dict): 설정 딕셔너리 (빈 딕셔너리면 전부 기본값)

        반환값:
            AppConfig: 검증 완료된 설정 객체
        """
        raw_config = self._apply_env_overrides(dict(raw_config))
        validated_config = self._validate_config(raw_config)

        with self._lock:
            self._config = validated_config

        logger.info(
            f"설정 로드 성공: "
            f"log_level={validated_config.system.log_level}, "
            f"canvas={validated_config.layout.canvas_width}x{validated_config.layout.canvas_height}, "
            f"coverage={validated_config.layout.coverage}"
        )
        return validated_config

    def get(self, key: str, default: Any = None) -> Any:
        """
        dot-notation으로 설정값을 조회합니다.

        예: "layout.font_size" -> config.layout.font_size

        파라미터:
            key (str): dot-notation 설정 키
            default (Any): 키가 존재하지 않을 때 반환할 기본값

        반환값:
            Any: 설정값 또는 기본값

        에러:
            RuntimeError: 설정이 로드되지 않은 상태에서 호출 시
        """
        with self._lock:
            if self._config is None:
                error_message = "설정이 아직 로드되지 않았습니다. load()를 먼저 호출하세요."
                logger.error(error_message)
                raise RuntimeError(error_message)

            current_value: Any = self._config
            for part in key.split("."):
                if isinstance(current_value, dict) and part in current_value:
                    current_value = current_value[part]
                elif not isinstance(current_value, dict) and hasattr(current_value, part):
                    current_value = getattr(current_value, part)
                else:
                    logger.debug(f"설정 키 '{key}'에서 '{part}' 부분을 찾을 수 없음, 기본값 반환")
                    return default

            return current_value

    def validate_schema(self, raw_config: dict) -> bool:
        """
        딕셔너리 데이터가 AppConfig 스키마를 만족하는지 검증합니다.

        반환값:
            bool: 검증 통과 시 True, 실패 시 False
        """
        try:
            AppConfig(**raw_config)
            logger.debug("스키마 검증 통과")
            return True
        except ValidationError as validation_error:
            logger.warning(f"스키마 검증 실패: {validation_error}")
            return False

    # =========================================================================
    # 내부 메서드 (private)
    # =========================================================================

    def _parse_yaml_file(self, filepath: Path) -> dict:
        """
        YAML 파일을 읽어서 딕셔너리로 파싱합니다.

        에러:
            ConfigLoadError: 파일 읽기 또는 파싱 실패 시
        """
        try:
            with open(filepath, "r", encoding="utf-8") as config_file:
                raw_data = yaml.safe_load(config_file)
        except yaml.YAMLError as yaml_error:
            error_message = f"YAML 파싱 에러: {yaml_error}"
            logger.error(error_message, exc_info=True)
            raise ConfigLoadError(error_message) from yaml_error
        except OSError as file_error:
            error_message = f"파일 읽기 에러: {file_error}"
            logger.error(error_message, exc_info=True)
            raise ConfigLoadError(error_message) from file_error

        # YAML 파일이 비어있으면 전부 기본값
        if raw_data is None:
            logger.warning(f"설정 파일이 비어있습니다: {filepath}")
            return {}

        if not isinstance(raw_data, dict):
            error_message = f"설정 파일의 최상위 구조가 딕셔너리가 아닙니다: {type(raw_data)}"
            raise ConfigLoadError(error_message)

        return raw_data

    def _apply_env_overrides(self, raw_config: dict) -> dict:
        """
        DMK_ 접두사 환경변수로 설정값을 오버라이드합니다.

        환경변수 매핑 규칙:
        - 접두사 제거 후 소문자 변환, 첫 번째 언더스코어가 섹션 구분자
        - 예: DMK_LAYOUT_FONT_SIZE -> layout.font_size
        - 예: DMK_SYSTEM_LOG_LEVEL -> system.log_level
        """
        override_count = 0

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            config_path = env_key[len(ENV_PREFIX):].lower()
            path_parts = config_path.split("_", 1)

            if len(path_parts) < 2:
                logger.debug(f"환경변수 '{env_key}' 무시 (키 경로 부족)")
                continue

            section_name, field_name = path_parts

            # 섹션이 없거나 딕셔너리가 아니면 새로 생성
            section = raw_config.get(section_name)
            if not isinstance(section, dict):
                section = {}
            else:
                section = dict(section)
            raw_config[section_name] = section

            section[field_name] = self._convert_env_value(env_value)
            logger.info(
                f"환경변수 오버라이드: {env_key} -> "
                f"{section_name}.{field_name} = {section[field_name]}"
            )
            override_count += 1

        if override_count > 0:
            logger.info(f"환경변수 오버라이드 적용 완료: {override_count}건")

        return raw_config

    def _convert_env_value(self, value: str) -> Any:
        """
        환경변수 문자열 값을 적절한 Python 타입으로 변환합니다.

        변환 규칙:
        - "true"/"false" (대소문자 무관) -> bool
        - 정수 형식 문자열 -> int
        - 부동소수점 형식 문자열 -> float
        - 그 외 -> str (원본 유지)
        """
        if value.lower() == "true":
            return True
        if value.lower() == "false":
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def _validate_config(self, raw_config: dict) -> AppConfig:
        """
        딕셔너리를 Pydantic AppConfig 모델로 검증하고 변환합니다.

        에러:
            ConfigValidationError: Pydantic 검증 실패 시
        """
        try:
            return AppConfig(**raw_config)

        except ValidationError as validation_error:
            error_details = validation_error.errors()
            for error_detail in error_details:
                field_path = " -> ".join(str(loc) for loc in error_detail["loc"])
                logger.error(
                    f"설정 검증 실패 - 필드: {field_path}, "
                    f"에러: {error_detail['msg']}, "
                    f"입력값: {error_detail.get('input', 'N/A')}"
                )

            error_message = f"설정 스키마 검증 실패: {len(error_details)}개 에러 발생"
            raise ConfigValidationError(error_message) from validation_error
