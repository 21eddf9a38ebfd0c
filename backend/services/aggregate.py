"""按天汇总任务时长

每个任务的时长会完整计入它的每一个标签（标签之间不互斥，不做拆分），
所以各标签时长之和可以大于当天总时长，百分比之和也可以超过100。
"""
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from clock import TimeSource
from config import TICK_SECONDS
from models import DaySummary, Tag, TagStat, Task
from services.formatting import format_duration
from services.timers import RunningTimers, elapsed


def task_elapsed(task: Task, running: RunningTimers, now: datetime) -> int:
    """单个任务的时长；没有计时器的任务为0"""
    timer = task.timer
    if timer is None:
        return 0
    return elapsed(timer, timer.id in running, now)


def total_elapsed(tasks: Iterable[Task], running: RunningTimers, now: datetime) -> int:
    return sum(task_elapsed(task, running, now) for task in tasks)


class TagIndex:
    """以 (type, value) 为键累计时长，保留首次出现的顺序"""

    def __init__(self):
        self._buckets: Dict[Tuple[str, str], dict] = {}

    def add(self, tag: Tag, seconds: int):
        bucket = self._buckets.setdefault((tag.type, tag.value), {"color": tag.color, "seconds": 0})
        bucket["seconds"] += seconds
        bucket["color"] = tag.color

    def add_task(self, task: Task, seconds: int):
        # 任务的每个标签都计入完整时长，重复的标签也各计一次
        for tag in task.tags:
            self.add(tag, seconds)

    def stats(self, total_seconds: int) -> List[TagStat]:
        """按秒数降序，秒数相同时保持首次出现的顺序"""
        result = []
        for (tag_type, value), bucket in self._buckets.items():
            seconds = bucket["seconds"]
            percentage = 100 * seconds / total_seconds if total_seconds > 0 else 0.0
            result.append(TagStat(
                type=tag_type,
                value=value,
                color=bucket["color"],
                seconds=seconds,
                percentage=percentage,
            ))
        return sorted(result, key=lambda s: s.seconds, reverse=True)


def tag_breakdown(tasks: Sequence[Task], running: RunningTimers, now: datetime) -> List[TagStat]:
    index = TagIndex()
    total = 0
    for task in tasks:
        seconds = task_elapsed(task, running, now)
        total += seconds
        index.add_task(task, seconds)
    return index.stats(total)


def filter_by_type(breakdown: List[TagStat], tag_type: Optional[str] = None) -> List[TagStat]:
    if tag_type is None:
        return list(breakdown)
    return [stat for stat in breakdown if stat.type == tag_type]


def tag_types(breakdown: Iterable[TagStat]) -> List[str]:
    """去重后的标签类型，保持顺序"""
    return list(dict.fromkeys(stat.type for stat in breakdown))


class DayAggregator:
    def __init__(self, clock: TimeSource):
        self.clock = clock

    def summarize(
        self,
        day: date,
        tasks: Sequence[Task],
        running: Optional[RunningTimers] = None,
        tag_type: Optional[str] = None,
    ) -> DaySummary:
        """生成当日汇总；只读取一次当前时间，保证总数和各标签一致"""
        if running is None:
            running = RunningTimers.from_tasks(tasks)
        now = self.clock.now()

        total = total_elapsed(tasks, running, now)
        breakdown = tag_breakdown(tasks, running, now)
        return DaySummary(
            date=day,
            task_count=len(tasks),
            total_seconds=total,
            total_display=format_duration(total),
            tags=filter_by_type(breakdown, tag_type),
            tag_types=tag_types(breakdown),
            running_timer_ids=list(running),
            server_time=now,
            tick_seconds=running.tick_interval(TICK_SECONDS),
        )
