from datetime import date, timedelta

import pytest

from clock import FixedClock
from conftest import START
from models import Tag, Task, Timer
from services.aggregate import (
    DayAggregator, TagIndex, filter_by_type, tag_breakdown, tag_types, total_elapsed,
)
from services.timers import RunningTimers

DAY = date(2026, 3, 2)


def make_task(task_id, tags=(), duration=None, running_for=None):
    """构造任务：duration 为空表示没有计时器，running_for 为运行中已过秒数"""
    timer = None
    if duration is not None:
        start_time = START - timedelta(seconds=running_for) if running_for is not None else None
        timer = Timer(id=f"timer-{task_id}", task_id=task_id, duration=duration, start_time=start_time)
    return Task(
        id=task_id,
        title=f"task {task_id}",
        date=DAY,
        user_id="ana",
        tags=[
            Tag(id=f"{task_id}-{i}", task_id=task_id, type=t, value=v, color=c)
            for i, (t, v, c) in enumerate(tags)
        ],
        timer=timer,
    )


PESSOA_ANA = ("pessoa", "Ana", "#f59e0b")
PESSOA_BIA = ("pessoa", "Bia", "#f59e0b")
TIPO_REUNIAO = ("tipo", "reunião", "#3b82f6")


class TestTotalElapsed:
    def test_idle_and_running(self):
        tasks = [
            make_task("a", duration=120),
            make_task("b", duration=30, running_for=45),
        ]
        running = RunningTimers(["timer-b"])
        assert total_elapsed(tasks, running, START) == 195

    def test_task_without_timer_counts_zero(self):
        tasks = [make_task("a"), make_task("b", duration=10)]
        assert total_elapsed(tasks, RunningTimers(), START) == 10

    def test_empty_day(self):
        assert total_elapsed([], RunningTimers(), START) == 0

    def test_not_in_running_set_counts_duration_only(self):
        tasks = [make_task("a", duration=50, running_for=100)]
        assert total_elapsed(tasks, RunningTimers(), START) == 50

    def test_each_timer_uses_its_own_start(self):
        tasks = [
            make_task("a", duration=0, running_for=300),
            make_task("b", duration=0, running_for=5),
        ]
        running = RunningTimers(["timer-a", "timer-b"])
        assert total_elapsed(tasks, running, START) == 305
        assert total_elapsed(tasks, running, START + timedelta(seconds=10)) == 325


class TestTagBreakdown:
    def test_time_counted_in_every_tag(self):
        tasks = [make_task("a", tags=[PESSOA_ANA, TIPO_REUNIAO], duration=100)]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert [(s.type, s.value, s.seconds) for s in breakdown] == [
            ("pessoa", "Ana", 100),
            ("tipo", "reunião", 100),
        ]
        # 各标签之和大于当天总时长
        assert sum(s.seconds for s in breakdown) == 200

    def test_sorted_descending(self):
        tasks = [
            make_task("a", tags=[PESSOA_ANA], duration=10),
            make_task("b", tags=[PESSOA_BIA], duration=50),
            make_task("c", tags=[PESSOA_ANA], duration=5),
        ]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert [(s.value, s.seconds) for s in breakdown] == [("Bia", 50), ("Ana", 15)]

    def test_ties_keep_input_order(self):
        tasks = [
            make_task("a", tags=[TIPO_REUNIAO], duration=30),
            make_task("b", tags=[PESSOA_BIA], duration=30),
            make_task("c", tags=[PESSOA_ANA], duration=30),
        ]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert [s.value for s in breakdown] == ["reunião", "Bia", "Ana"]

    def test_single_bucket_is_full_percentage(self):
        tasks = [make_task("a", tags=[PESSOA_ANA], duration=42)]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert breakdown[0].percentage == 100.0

    def test_percentage_of_day_total(self):
        tasks = [
            make_task("a", tags=[PESSOA_ANA], duration=25),
            make_task("b", duration=75),
        ]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert breakdown[0].percentage == pytest.approx(25.0)

    def test_zero_total_gives_zero_percentages(self):
        tasks = [make_task("a", tags=[PESSOA_ANA, TIPO_REUNIAO], duration=0), make_task("b", tags=[PESSOA_BIA])]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert [s.percentage for s in breakdown] == [0.0, 0.0, 0.0]

    def test_running_timer_included(self):
        tasks = [make_task("a", tags=[PESSOA_ANA], duration=60, running_for=40)]
        breakdown = tag_breakdown(tasks, RunningTimers(["timer-a"]), START)
        assert breakdown[0].seconds == 100

    def test_same_type_values_stay_separate(self):
        tasks = [make_task("a", tags=[PESSOA_ANA, PESSOA_BIA], duration=20)]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert [(s.value, s.seconds) for s in breakdown] == [("Ana", 20), ("Bia", 20)]

    def test_duplicate_tag_on_one_task_counted_per_tag(self):
        tasks = [make_task("a", tags=[PESSOA_ANA, PESSOA_ANA], duration=20)]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert len(breakdown) == 1
        assert breakdown[0].seconds == 40
        assert breakdown[0].percentage == 200.0

    def test_uses_stored_color(self):
        tasks = [make_task("a", tags=[("pessoa", "Ana", "#000000")], duration=5)]
        breakdown = tag_breakdown(tasks, RunningTimers(), START)
        assert breakdown[0].color == "#000000"


class TestTagIndex:
    def test_accumulates_per_key(self):
        index = TagIndex()
        tag = Tag(id="1", task_id="a", type="chat", value="geral", color="#10b981")
        index.add(tag, 10)
        index.add(tag, 15)
        [stat] = index.stats(50)
        assert stat.seconds == 25
        assert stat.percentage == 50.0


class TestFilterByType:
    def setup_method(self):
        tasks = [make_task("a", tags=[PESSOA_ANA, TIPO_REUNIAO, PESSOA_BIA], duration=10)]
        self.breakdown = tag_breakdown(tasks, RunningTimers(), START)

    def test_none_returns_everything(self):
        assert filter_by_type(self.breakdown, None) == self.breakdown

    def test_filters_by_type(self):
        assert [s.value for s in filter_by_type(self.breakdown, "pessoa")] == ["Ana", "Bia"]

    def test_unknown_type(self):
        assert filter_by_type(self.breakdown, "urgencia") == []

    def test_tag_types_unique(self):
        assert tag_types(self.breakdown) == ["pessoa", "tipo"]


class TestDayAggregator:
    def test_summary_with_running_timer(self):
        clock = FixedClock(START)
        tasks = [
            make_task("a", tags=[PESSOA_ANA], duration=3600),
            make_task("b", tags=[TIPO_REUNIAO], duration=0, running_for=61),
        ]
        summary = DayAggregator(clock).summarize(DAY, tasks)
        assert summary.task_count == 2
        assert summary.total_seconds == 3661
        assert summary.total_display == "1h 1m"
        assert summary.running_timer_ids == ["timer-b"]
        assert summary.tick_seconds == 1
        assert summary.server_time == START

    def test_summary_advances_with_clock(self):
        clock = FixedClock(START)
        tasks = [make_task("b", duration=0, running_for=0)]
        aggregator = DayAggregator(clock)
        assert aggregator.summarize(DAY, tasks).total_seconds == 0
        clock.advance(120)
        assert aggregator.summarize(DAY, tasks).total_seconds == 120

    def test_idle_day_has_no_tick(self):
        summary = DayAggregator(FixedClock(START)).summarize(DAY, [make_task("a", duration=5)])
        assert summary.tick_seconds is None
        assert summary.running_timer_ids == []

    def test_filter_keeps_all_tag_types(self):
        tasks = [make_task("a", tags=[PESSOA_ANA, TIPO_REUNIAO], duration=10)]
        summary = DayAggregator(FixedClock(START)).summarize(DAY, tasks, tag_type="tipo")
        assert [s.type for s in summary.tags] == ["tipo"]
        assert summary.tag_types == ["pessoa", "tipo"]

    def test_explicit_running_set(self):
        tasks = [make_task("a", duration=10, running_for=30)]
        summary = DayAggregator(FixedClock(START)).summarize(DAY, tasks, running=RunningTimers())
        assert summary.total_seconds == 10
