"""
탄막 통계 집계 단위 테스트
"""

from __future__ import annotations

from danmaku_ass.danmaku.ingest import normalize_records
from danmaku_ass.danmaku.stats import DanmakuStats, get_stats


def test_counts_by_category():
    events = normalize_records([
        ("10,1,25,16777215,0,0,1,1", "滚动1"),
        ("20,2,25,16777215,0,0,2,2", "滚动2"),
        ("30,4,25,16777215,0,0,3,3", "底部"),
        ("40,5,25,16777215,0,0,4,4", "顶部"),
    ])

    assert get_stats(events) == DanmakuStats(total=4, scroll=2, top=1, bottom=1)


def test_empty_list_is_all_zero():
    assert get_stats([]) == DanmakuStats(total=0, scroll=0, top=0, bottom=0)


def test_total_equals_sum_of_categories():
    events = normalize_records(
        [(f"{i},{(i % 5) + 1},25,0,0,0,u,{i}", "x") for i in range(37)]
    )
    stats = get_stats(events)
    assert stats.total == 37
    assert stats.total == stats.scroll + stats.top + stats.bottom


def test_as_dict():
    stats = DanmakuStats(total=3, scroll=1, top=1, bottom=1)
    assert stats.as_dict() == {"total": 3, "scroll": 1, "top": 1, "bottom": 1}
