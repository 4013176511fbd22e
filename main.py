"""
danmaku-ass 실행 진입점

역할:
- 설정 로드 (config.yaml + DMK_ 환경변수 + 커맨드라인 오버라이드)
- 구조화 로깅 초기화
- 로컬 댓글 XML 파일을 ASS 자막으로 변환하여 저장하고 통계 출력

실행 예시:
    기본 설정으로 변환:
        python main.py comments/170001.xml --video-id av170001

    충돌 회피 + 화면 절반 영역:
        python main.py comments/170001.xml -o out.ass --collision-avoidance --coverage half

    설정 파일 지정:
        python main.py comments/170001.xml --config config.yaml

    통계만 출력 (파일 저장/이력 기록 없음):
        python main.py comments/170001.xml --stats-only
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from danmaku_ass.config.config_manager import ConfigLoadError, ConfigManager
from danmaku_ass.logging import setup_logging
from danmaku_ass.service import CommentSourceError
from danmaku_ass.service.export_service import DanmakuExportService
from danmaku_ass.service.xml_source import XmlFileCommentSource

logger = logging.getLogger(__name__)

# 커맨드라인 인자 → layout 필드 매핑
_LAYOUT_ARGS = {
    "width": "canvas_width",
    "height": "canvas_height",
    "font_name": "font_name",
    "font_size": "font_size",
    "opacity": "opacity",
    "scroll_duration": "scroll_duration",
    "static_duration": "static_duration",
    "coverage": "coverage",
}


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="danmaku-ass: 탄막 댓글 XML을 ASS 자막으로 변환"
    )
    parser.add_argument("input", help="댓글 XML 파일 경로")
    parser.add_argument(
        "-o", "--output", help="ASS 저장 경로 (기본: export.output_dir/<video-id>.ass)"
    )
    parser.add_argument("--config", help="설정 파일 경로 (미지정 시 기본값 + 환경변수)")
    parser.add_argument("--video-id", help="이력에 남길 영상 ID (기본: 입력 파일 이름)")
    parser.add_argument("--title", help="영상 제목 (ASS Title 및 이력에 사용)")
    parser.add_argument("--width", type=int, help="캔버스 가로 크기")
    parser.add_argument("--height", type=int, help="캔버스 세로 크기")
    parser.add_argument("--font-name", help="폰트 이름")
    parser.add_argument("--font-size", type=int, help="폰트 크기")
    parser.add_argument("--opacity", type=float, help="불투명도 (0.0~1.0)")
    parser.add_argument("--scroll-duration", type=float, help="스크롤 탄막 표시 시간 (초)")
    parser.add_argument("--static-duration", type=float, help="고정 탄막 표시 시간 (초)")
    parser.add_argument(
        "--collision-avoidance", action="store_true", help="레인 충돌 회피 활성화"
    )
    parser.add_argument(
        "--coverage", choices=["full", "half", "quarter"], help="탄막 표시 영역"
    )
    parser.add_argument(
        "--no-history", action="store_true", help="내보내기 이력 기록 안 함"
    )
    parser.add_argument(
        "--stats-only", action="store_true", help="ASS 파일 없이 분류별 통계만 출력"
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """변환을 실행하고 종료 코드를 반환합니다."""
    args = _parse_args(argv)

    manager = ConfigManager()
    try:
        config = manager.load(args.config) if args.config else manager.load_dict({})

        # 커맨드라인 오버라이드 (Pydantic 재생성으로 재검증)
        config_dict = config.model_dump()
        for arg_name, field_name in _LAYOUT_ARGS.items():
            value = getattr(args, arg_name)
            if value is not None:
                config_dict["layout"][field_name] = value
        if args.collision_avoidance:
            config_dict["layout"]["collision_avoidance"] = True
        if args.no_history:
            config_dict["export"]["history_enabled"] = False
        config = manager.load_dict(config_dict)
    except ConfigLoadError as exc:
        print(f"설정 오류: {exc}", file=sys.stderr)
        return 2

    setup_logging(config)

    input_path = Path(args.input)
    video_id = args.video_id or input_path.stem

    service = DanmakuExportService(config, XmlFileCommentSource(input_path.parent))
    output_path = Path(args.output) if args.output else service.default_output_path(video_id)

    try:
        if args.stats_only:
            stats = service.stats(str(input_path))
        else:
            stats = service.export(
                str(input_path),
                video_id=video_id,
                title=args.title,
                output_path=output_path,
            ).stats
            logger.info(f"변환 완료: {output_path}")
    except CommentSourceError as exc:
        logger.error(f"변환 실패: {exc}")
        return 1
    except OSError as exc:
        logger.error(f"ASS 파일 저장 실패: {output_path}, 오류: {exc}")
        return 1

    print(json.dumps(stats.as_dict(), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
