"""
ASS 자막 문서 출력 모듈입니다.

역할:
- SubtitleDocument를 ASS(v4.00+) 텍스트로 직렬화
  ([Script Info] 헤더, [V4+ Styles] 단일 Default 스타일, [Events] Dialogue 목록)
- ASS 텍스트를 UTF-8 파일로 저장

탄막 본문은 이스케이프 없이 그대로 출력합니다. 본문에 '{...}' 오버라이드
블록이나 줄바꿈이 있으면 렌더링이 깨질 수 있습니다.

사용 예시:
    >>> exporter = AssExporter()
    >>> ass_text = exporter.render(document)
    >>> exporter.export(document, "output/subtitles/BV1xx411c7mD.ass")
"""

from __future__ import annotations

import logging
from pathlib import Path

from danmaku_ass.subtitle import PositionedEvent, SubtitleDocument
from danmaku_ass.subtitle.geometry import format_centiseconds, to_centiseconds

logger = logging.getLogger(__name__)

STYLE_FORMAT = (
    "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, "
    "OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, "
    "ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, "
    "Alignment, MarginL, MarginR, MarginV, Encoding"
)
EVENTS_FORMAT = "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text"


class AssExporter:
    """
    SubtitleDocument를 ASS 텍스트/파일로 내보내는 클래스입니다.

    파일 저장 실패 시 OSError를 상위로 전파합니다.
    """

    def render(self, document: SubtitleDocument) -> str:
        """
        ASS 문서 전체를 문자열로 생성합니다.

        이벤트가 없어도 헤더, 스타일 한 개, 빈 [Events] 섹션을 가진
        올바른 문서를 반환합니다.

        파라미터:
            document: 출력할 SubtitleDocument

        반환값:
            str: ASS 문서 텍스트 (마지막 줄 개행 포함)
        """
        lines = self._header_lines(document)
        lines.extend(self._dialogue_line(event) for event in document.events)
        return "\n".join(lines) + "\n"

    def export(self, document: SubtitleDocument, filepath: str | Path) -> Path:
        """
        ASS 문서를 UTF-8 파일로 저장합니다.

        파라미터:
            document: 저장할 SubtitleDocument
            filepath: 저장할 .ass 파일 경로

        반환값:
            Path: 저장된 파일 경로
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(self.render(document))

            logger.info(f"ASS 파일 저장 완료: {filepath} ({len(document.events)}개 탄막)")

        except OSError as exc:
            logger.error(f"ASS 파일 저장 실패: {filepath}, 오류: {exc}")
            raise

        return filepath

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _header_lines(self, document: SubtitleDocument) -> list[str]:
        """[Script Info], [V4+ Styles], [Events] 헤더 줄 목록을 생성합니다."""
        layout = document.layout
        # 기본 색상 &HAAFFFFFF 의 알파 바이트 (외곽선/배경에도 동일 적용)
        alpha = document.default_color[2:4]

        style_line = (
            f"Style: Default,{layout.font_name},{layout.font_size},"
            f"{document.default_color},&H{alpha}FFFFFF,&H{alpha}000000,&H{alpha}000000,"
            "0,0,0,0,100,100,0,0,1,2,0,2,20,20,20,1"
        )

        return [
            "[Script Info]",
            f"Title: {document.title}",
            "ScriptType: v4.00+",
            f"PlayResX: {layout.canvas_width}",
            f"PlayResY: {layout.canvas_height}",
            "WrapStyle: 0",
            "ScaledBorderAndShadow: yes",
            "",
            "[V4+ Styles]",
            STYLE_FORMAT,
            style_line,
            "",
            "[Events]",
            EVENTS_FORMAT,
        ]

    def _dialogue_line(self, event: PositionedEvent) -> str:
        """
        Dialogue 줄 하나를 생성합니다.

        종료 타임코드는 항상 시작 타임코드보다 최소 1센티초 뒤입니다.
        """
        start_cs = to_centiseconds(event.start_time)
        end_cs = max(to_centiseconds(event.end_time), start_cs + 1)

        return (
            f"Dialogue: 0,{format_centiseconds(start_cs)},{format_centiseconds(end_cs)},"
            f"Default,,0,0,0,,{event.placement_tag}{event.color_tag}{event.text}"
        )
