"""
내보내기 이력 저장소 모듈입니다.

역할:
- 내보내기(영상 ID, 제목, 탄막 수, 시각)를 JSON Lines 파일에 추가 기록
- 최근 이력 조회

모든 공개 메서드는 RLock으로 보호되어 멀티스레드 환경에서 안전합니다.

사용 예시:
    >>> store = ExportHistoryStore("output/export_history.jsonl")
    >>> store.record_export("BV1xx411c7mD", "제목", 1234)
    >>> store.list_exports(limit=10)
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class ExportRecord:
    """내보내기 이력 한 건입니다."""
    video_id: str
    video_title: Optional[str]
    danmaku_count: int
    exported_at_ns: int


class ExportHistoryStore:
    """JSON Lines 파일 기반 ExportRecorder 구현입니다."""

    def __init__(self, filepath: str | Path) -> None:
        self._filepath = Path(filepath)
        self._lock = threading.RLock()

    @property
    def filepath(self) -> Path:
        return self._filepath

    def record_export(self, video_id: str, title: Optional[str], count: int) -> None:
        """
        내보내기 이력 한 건을 파일 끝에 추가합니다.

        에러:
            OSError: 파일 쓰기 실패 시 (호출 측에서 무시 여부 결정)
        """
        record = ExportRecord(
            video_id=video_id,
            video_title=title,
            danmaku_count=count,
            exported_at_ns=time.time_ns(),
        )
        line = json.dumps(asdict(record), ensure_ascii=False)

        with self._lock:
            self._filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(self._filepath, "a", encoding="utf-8") as f:
                f.write(line + "\n")

        logger.debug(f"내보내기 이력 기록: video_id={video_id}, count={count}")

    def list_exports(self, limit: Optional[int] = None) -> list[ExportRecord]:
        """
        기록된 이력을 최신순으로 반환합니다.

        파일이 없으면 빈 목록을 반환하고, 깨진 줄은 건너뜁니다.
        """
        with self._lock:
            if not self._filepath.exists():
                return []
            raw_lines = self._filepath.read_text(encoding="utf-8").splitlines()

        records: list[ExportRecord] = []
        for raw_line in raw_lines:
            if not raw_line.strip():
                continue
            try:
                records.append(ExportRecord(**json.loads(raw_line)))
            except (json.JSONDecodeError, TypeError) as exc:
                logger.warning(f"내보내기 이력 줄 파싱 실패, 건너뜀: {exc}")

        records.reverse()
        if limit is not None:
            return records[:limit]
        return records
