"""
탄막 내보내기 서비스 모듈입니다.

역할:
- CommentSource에서 원본 레코드 조회 → 변환 엔진 실행 → ASS 파일 저장
- 내보내기 이력 기록 (best-effort: 실패는 로그만 남기고 무시)
- 내보내기 없이 분류별 통계만 조회

원본 데이터 조회 실패(CommentSourceError)와 배치 설정 오류(LayoutConfigError)는
그대로 호출자에게 전파됩니다. 재시도나 캐시는 하지 않습니다.

사용 예시:
    >>> service = DanmakuExportService(config, XmlFileCommentSource("comments"))
    >>> result = service.export("170001", video_id="av170001", output_path="out.ass")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from danmaku_ass.config.schema import AppConfig, LayoutConfig
from danmaku_ass.danmaku.ingest import normalize_records
from danmaku_ass.danmaku.stats import DanmakuStats, get_stats
from danmaku_ass.service import CommentSource, ExportRecorder
from danmaku_ass.service.export_history import ExportHistoryStore
from danmaku_ass.subtitle.ass_exporter import AssExporter
from danmaku_ass.subtitle.converter import ConversionResult, DanmakuConverter

logger = logging.getLogger(__name__)


class DanmakuExportService:
    """원본 조회, 변환, 파일 저장, 이력 기록을 묶는 서비스 클래스입니다."""

    def __init__(
        self,
        config: AppConfig,
        source: CommentSource,
        recorder: Optional[ExportRecorder] = None,
    ) -> None:
        """
        파라미터:
            config: 전체 애플리케이션 설정
            source: 원본 탄막 레코드 제공자
            recorder: 이력 기록자. None이고 export.history_enabled면
                export.history_path의 ExportHistoryStore를 사용
        """
        self._config = config
        self._source = source
        self._exporter = AssExporter()
        self._converter = DanmakuConverter(self._exporter)

        if recorder is None and config.export.history_enabled:
            recorder = ExportHistoryStore(config.export.history_path)
        self._recorder = recorder

    def export(
        self,
        track_id: str,
        video_id: str,
        title: Optional[str] = None,
        output_path: str | Path | None = None,
        layout: LayoutConfig | dict | None = None,
    ) -> ConversionResult:
        """
        트랙 하나의 탄막을 ASS로 변환하고 (선택적으로) 파일로 저장합니다.

        파라미터:
            track_id: 원본 레코드 조회 키
            video_id: 이력에 남길 영상 식별자
            title: 영상 제목 (ASS Title 및 이력에 사용)
            output_path: ASS 저장 경로. None이면 파일로 저장하지 않음
            layout: 배치 설정. None이면 config.layout 사용

        반환값:
            ConversionResult: 변환 결과
        """
        records = self._source.fetch_comments(track_id)

        result = self._converter.convert(
            records,
            layout if layout is not None else self._config.layout,
            title=title,
        )

        if output_path is not None:
            self._exporter.export(result.document, output_path)

        self._record_export(video_id, title, result.stats.total)
        return result

    def stats(self, track_id: str) -> DanmakuStats:
        """
        트랙 하나의 분류별 탄막 통계만 계산합니다.

        문서 생성, 파일 저장, 이력 기록을 하지 않습니다.
        원본 조회 실패(CommentSourceError)는 그대로 전파됩니다.
        """
        stats = get_stats(normalize_records(self._source.fetch_comments(track_id)))
        logger.info(f"탄막 통계 조회: track_id={track_id}, {stats.as_dict()}")
        return stats

    def default_output_path(self, video_id: str) -> Path:
        """export.output_dir 기준 기본 ASS 저장 경로를 반환합니다."""
        return Path(self._config.export.output_dir) / f"{video_id}.ass"

    def _record_export(self, video_id: str, title: Optional[str], count: int) -> None:
        """이력을 기록합니다. 실패해도 변환 결과에 영향을 주지 않습니다."""
        if self._recorder is None:
            return
        try:
            self._recorder.record_export(video_id, title, count)
        except Exception as exc:
            logger.error(f"내보내기 이력 저장 실패 (무시): video_id={video_id}, 오류: {exc}")
