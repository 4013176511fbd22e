"""
ConfigManager 단위 테스트

검증 항목:
- YAML 로드 및 기본값 채움
- 파일 없음 / YAML 문법 오류 / 스키마 위반 에러
- DMK_ 환경변수 오버라이드
- dot-notation 조회
- validate_layout 단독 검증
"""

from __future__ import annotations

import pytest

from danmaku_ass.config.config_manager import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigManager,
    ConfigValidationError,
    LayoutConfigError,
    validate_layout,
)
from danmaku_ass.config.schema import LayoutConfig


@pytest.fixture(autouse=True)
def clear_dmk_env(monkeypatch):
    """호스트 환경의 DMK_ 변수가 테스트에 섞이지 않도록 제거합니다."""
    import os

    for key in list(os.environ):
        if key.startswith("DMK_"):
            monkeypatch.delenv(key, raising=False)


def _write_yaml(tmp_path, content: str):
    filepath = tmp_path / "config.yaml"
    filepath.write_text(content, encoding="utf-8")
    return filepath


# =============================================================================
# 파일 로드 테스트
# =============================================================================

class TestLoad:
    def test_load_yaml(self, tmp_path):
        filepath = _write_yaml(tmp_path, """
system:
  log_level: debug
layout:
  font_size: 30
  collision_avoidance: true
  coverage: half
export:
  history_enabled: false
""")
        config = ConfigManager().load(filepath)

        assert config.system.log_level == "DEBUG"
        assert config.layout.font_size == 30
        assert config.layout.collision_avoidance is True
        assert config.layout.coverage == "half"
        assert config.layout.canvas_width == 1920
        assert config.export.history_enabled is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            ConfigManager().load(tmp_path / "nope.yaml")

    def test_bad_yaml(self, tmp_path):
        filepath = _write_yaml(tmp_path, "layout: [unclosed\n")
        with pytest.raises(ConfigLoadError):
            ConfigManager().load(filepath)

    def test_non_mapping_root(self, tmp_path):
        filepath = _write_yaml(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigLoadError):
            ConfigManager().load(filepath)

    def test_empty_file_uses_defaults(self, tmp_path):
        config = ConfigManager().load(_write_yaml(tmp_path, ""))
        assert config.layout == LayoutConfig()

    @pytest.mark.parametrize("content", [
        "layout:\n  opacity: 2.0\n",
        "layout:\n  coverage: most\n",
        "layout:\n  font_size: 0\n",
        "system:\n  log_format: xml\n",
        "layout:\n  scroll_duration: .inf\n",
    ])
    def test_invalid_values(self, tmp_path, content):
        with pytest.raises(ConfigValidationError):
            ConfigManager().load(_write_yaml(tmp_path, content))


# =============================================================================
# 환경변수 오버라이드 테스트
# =============================================================================

class TestEnvOverrides:
    def test_layout_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DMK_LAYOUT_FONT_SIZE", "40")
        monkeypatch.setenv("DMK_LAYOUT_COLLISION_AVOIDANCE", "true")
        monkeypatch.setenv("DMK_LAYOUT_OPACITY", "0.5")

        config = ConfigManager().load(_write_yaml(tmp_path, "layout:\n  font_size: 30\n"))

        assert config.layout.font_size == 40
        assert config.layout.collision_avoidance is True
        assert config.layout.opacity == 0.5

    def test_override_without_file(self, monkeypatch):
        monkeypatch.setenv("DMK_EXPORT_OUTPUT_DIR", "/tmp/ass")
        config = ConfigManager().load_dict({})
        assert config.export.output_dir == "/tmp/ass"

    def test_key_without_field_ignored(self, monkeypatch):
        monkeypatch.setenv("DMK_LAYOUT", "x")
        config = ConfigManager().load_dict({})
        assert config.layout == LayoutConfig()

    def test_invalid_override_rejected(self, monkeypatch):
        monkeypatch.setenv("DMK_LAYOUT_COVERAGE", "everything")
        with pytest.raises(ConfigValidationError):
            ConfigManager().load_dict({})


# =============================================================================
# 조회 테스트
# =============================================================================

class TestGet:
    def test_dot_notation(self):
        manager = ConfigManager()
        manager.load_dict({"layout": {"font_name": "SimHei"}})
        assert manager.get("layout.font_name") == "SimHei"
        assert manager.get("layout.row_height") == 29

    def test_missing_key_returns_default(self):
        manager = ConfigManager()
        manager.load_dict({})
        assert manager.get("layout.missing", "fallback") == "fallback"

    def test_get_before_load(self):
        with pytest.raises(RuntimeError):
            ConfigManager().get("layout.font_size")

    def test_validate_schema(self):
        manager = ConfigManager()
        assert manager.validate_schema({"layout": {"coverage": "Quarter"}}) is True
        assert manager.validate_schema({"layout": {"opacity": -1}}) is False


# =============================================================================
# validate_layout 테스트
# =============================================================================

class TestValidateLayout:
    def test_none_is_default(self):
        assert validate_layout(None) == LayoutConfig()

    def test_dict_is_validated(self):
        layout = validate_layout({"coverage": "QUARTER", "font_size": 18})
        assert layout.coverage == "quarter"
        assert layout.row_height == 22

    def test_returns_new_object(self):
        original = LayoutConfig()
        assert validate_layout(original) is not original

    def test_error_is_config_validation_error(self):
        with pytest.raises(ConfigValidationError):
            validate_layout({"static_duration": 0})

    def test_mutated_instance_rejected(self):
        layout = LayoutConfig()
        layout.opacity = 3.0
        with pytest.raises(LayoutConfigError):
            validate_layout(layout)
