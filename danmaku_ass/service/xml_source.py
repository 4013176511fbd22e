"""
로컬 댓글 XML 파일 기반 CommentSource 구현입니다.

원격 서비스가 내려주는 것과 같은 형태(<d p="...">본문</d>)의 XML 파일을
디스크에서 읽습니다. track_id가 파일 경로이면 그대로 읽고, 아니면
root_dir/<track_id>.xml 을 읽습니다.
"""

from __future__ import annotations

import logging
from pathlib import Path

from danmaku_ass.danmaku import RawComment
from danmaku_ass.danmaku.ingest import parse_comment_xml
from danmaku_ass.service import CommentSourceError

logger = logging.getLogger(__name__)


class XmlFileCommentSource:
    """디스크의 댓글 XML 파일에서 원본 레코드를 읽는 CommentSource입니다."""

    def __init__(self, root_dir: str | Path = ".") -> None:
        self._root_dir = Path(root_dir)

    def resolve_path(self, track_id: str) -> Path:
        """track_id에 해당하는 XML 파일 경로를 반환합니다."""
        candidate = Path(track_id)
        if candidate.suffix.lower() == ".xml" or candidate.is_file():
            return candidate
        return self._root_dir / f"{track_id}.xml"

    def fetch_comments(self, track_id: str) -> list[RawComment]:
        """
        XML 파일을 읽어 원본 레코드 목록을 반환합니다.

        에러:
            CommentSourceError: 파일이 없거나 읽을 수 없을 때
        """
        filepath = self.resolve_path(track_id)
        try:
            xml_text = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            error_message = f"댓글 XML 읽기 실패: {filepath}, 오류: {exc}"
            logger.error(error_message)
            raise CommentSourceError(error_message) from exc

        records = parse_comment_xml(xml_text)
        logger.info(f"댓글 XML 로드 완료: {filepath} ({len(records)}개 레코드)")
        return records
