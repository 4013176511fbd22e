"""
외부 협력자(collaborator) 인터페이스 패키지

변환 엔진이 사용하지만 직접 구현하지 않는 계약:
- CommentSource: 트랙 ID로 원본 탄막 레코드 조회
- ExportRecorder: 내보내기 이력 기록 (best-effort, 실패해도 변환 결과 불변)
"""

from typing import Optional, Protocol

from danmaku_ass.danmaku import RawComment


class CommentSourceError(Exception):
    """원본 탄막 데이터에 접근할 수 없을 때 발생하는 에러입니다."""
    pass


class CommentSource(Protocol):
    """원본 탄막 레코드 제공자입니다."""

    def fetch_comments(self, track_id: str) -> list[RawComment]:
        ...


class ExportRecorder(Protocol):
    """내보내기 이력 기록자입니다."""

    def record_export(self, video_id: str, title: Optional[str], count: int) -> None:
        ...
