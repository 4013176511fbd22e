"""
DanmakuExportService / XmlFileCommentSource 단위 테스트

검증 항목:
- XML 파일 → ASS 파일 저장 및 이력 기록
- 이력 기록 실패는 변환 결과에 영향 없음
- 원본 조회 실패(CommentSourceError)는 호출자에게 전파
- 잘못된 배치 설정이면 파일/이력 모두 남기지 않음
"""

from __future__ import annotations

import logging

import pytest

from danmaku_ass.config.config_manager import LayoutConfigError
from danmaku_ass.config.schema import AppConfig
from danmaku_ass.danmaku import RawComment
from danmaku_ass.service import CommentSourceError
from danmaku_ass.service.export_history import ExportHistoryStore
from danmaku_ass.service.export_service import DanmakuExportService
from danmaku_ass.service.xml_source import XmlFileCommentSource

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<i>
  <d p="1.5,1,25,16777215,1600000000,0,u1,101">第一条</d>
  <d p="2.0,5,25,16711680,1600000001,0,u2,102">顶部</d>
  <d p="3.0,4,25,16777215,1600000002,0,u3,103">底部</d>
  <d p="x,4,25,16777215,1600000002,0,u3,104">坏</d>
</i>
"""


# =============================================================================
# 테스트 헬퍼
# =============================================================================

class _ListSource:
    """메모리 목록을 반환하는 CommentSource 테스트 더블입니다."""

    def __init__(self, records):
        self.records = records
        self.calls: list[str] = []

    def fetch_comments(self, track_id):
        self.calls.append(track_id)
        return self.records


class _FailingSource:
    def fetch_comments(self, track_id):
        raise CommentSourceError(f"조회 실패: {track_id}")


class _FailingRecorder:
    def record_export(self, video_id, title, count):
        raise OSError("디스크 가득 참")


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        export={
            "output_dir": str(tmp_path / "subs"),
            "history_path": str(tmp_path / "history.jsonl"),
        }
    )


@pytest.fixture
def xml_dir(tmp_path):
    comments = tmp_path / "comments"
    comments.mkdir()
    (comments / "170001.xml").write_text(SAMPLE_XML, encoding="utf-8")
    return comments


# =============================================================================
# XmlFileCommentSource
# =============================================================================

class TestXmlFileCommentSource:
    def test_fetch_by_track_id(self, xml_dir):
        records = XmlFileCommentSource(xml_dir).fetch_comments("170001")
        assert len(records) == 4
        assert records[0] == RawComment(
            attributes="1.5,1,25,16777215,1600000000,0,u1,101", body="第一条"
        )

    def test_fetch_by_path(self, xml_dir):
        source = XmlFileCommentSource("elsewhere")
        assert len(source.fetch_comments(str(xml_dir / "170001.xml"))) == 4

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(CommentSourceError):
            XmlFileCommentSource(tmp_path).fetch_comments("404")


# =============================================================================
# DanmakuExportService
# =============================================================================

class TestExportService:
    def test_export_writes_file_and_history(self, config, xml_dir):
        service = DanmakuExportService(config, XmlFileCommentSource(xml_dir))
        output_path = service.default_output_path("av170001")

        result = service.export("170001", "av170001", title="测试", output_path=output_path)

        assert result.stats.as_dict() == {"total": 3, "scroll": 1, "top": 1, "bottom": 1}
        assert output_path.read_text(encoding="utf-8") == result.ass_text
        assert "Title: 测试" in result.ass_text

        history = ExportHistoryStore(config.export.history_path).list_exports()
        assert len(history) == 1
        assert history[0].video_id == "av170001"
        assert history[0].video_title == "测试"
        assert history[0].danmaku_count == 3

    def test_default_output_path(self, config, tmp_path):
        service = DanmakuExportService(config, _ListSource([]))
        assert service.default_output_path("BV1") == tmp_path / "subs" / "BV1.ass"

    def test_without_output_path_no_file_written(self, config, tmp_path):
        service = DanmakuExportService(config, _ListSource([("1,1,25,0,0,0,u,r", "x")]))
        result = service.export("t", "v")
        assert result.stats.total == 1
        assert not (tmp_path / "subs").exists()

    def test_layout_argument_overrides_config(self, config):
        source = _ListSource([("0,1,25,16777215,0,0,u,a", "a"), ("1,1,25,16777215,0,0,u,b", "b")])
        service = DanmakuExportService(config, source)

        result = service.export("t", "v", layout={"collision_avoidance": True})

        assert [e.lane for e in result.document.events] == [0, 1]
        assert source.calls == ["t"]

    def test_recorder_failure_is_ignored(self, config, caplog):
        service = DanmakuExportService(
            config, _ListSource([("1,1,25,0,0,0,u,r", "x")]), recorder=_FailingRecorder()
        )
        with caplog.at_level(logging.ERROR):
            result = service.export("t", "v")

        assert result.stats.total == 1
        assert "이력 저장 실패" in caplog.text

    def test_history_disabled(self, config, tmp_path):
        config.export.history_enabled = False
        service = DanmakuExportService(config, _ListSource([]))
        service.export("t", "v")
        assert not (tmp_path / "history.jsonl").exists()

    def test_source_error_propagates(self, config, tmp_path):
        service = DanmakuExportService(config, _FailingSource())
        with pytest.raises(CommentSourceError):
            service.export("t", "v", output_path=tmp_path / "out.ass")
        assert not (tmp_path / "out.ass").exists()
        assert not (tmp_path / "history.jsonl").exists()

    def test_invalid_layout_leaves_nothing_behind(self, config, tmp_path):
        service = DanmakuExportService(config, _ListSource([("1,1,25,0,0,0,u,r", "x")]))
        with pytest.raises(LayoutConfigError):
            service.export("t", "v", output_path=tmp_path / "out.ass", layout={"opacity": 7})
        assert not (tmp_path / "out.ass").exists()
        assert not (tmp_path / "history.jsonl").exists()

    def test_stats_without_export(self, config, xml_dir, tmp_path):
        service = DanmakuExportService(config, XmlFileCommentSource(xml_dir))

        stats = service.stats("170001")

        assert stats.as_dict() == {"total": 3, "scroll": 1, "top": 1, "bottom": 1}
        assert not (tmp_path / "subs").exists()
        assert not (tmp_path / "history.jsonl").exists()

    def test_stats_source_error_propagates(self, config):
        with pytest.raises(CommentSourceError):
            DanmakuExportService(config, _FailingSource()).stats("t")
