"""计时器状态机

计时器只有两个状态：空闲（start_time 为空）和运行中（start_time 为本次开始时间）。
duration 是已持久化的累计秒数，只在停止时增加，开始时从不写入。
运行中的显示时长始终由 start_time 和当前时间重新计算，不依赖前端的 tick 计数。
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from clock import TimeSource, to_naive_utc
from config import DURATION_HINT_TOLERANCE
from errors import ConflictError, NotFoundError, ValidationError, storage_errors
from models import Timer
from services.ids import parse_object_id

logger = logging.getLogger(__name__)


def seconds_between(start: datetime, end: datetime) -> int:
    """两个时间点之间的整秒数（向下取整）"""
    return int((to_naive_utc(end) - to_naive_utc(start)).total_seconds())


def elapsed(timer: Timer, is_running: bool, now: datetime) -> int:
    """计时器总时长：空闲时为 duration，运行中再加上本段已过时间"""
    if not is_running or timer.start_time is None:
        return timer.duration
    return timer.duration + max(0, seconds_between(timer.start_time, now))


class RunningTimers:
    """正在运行的计时器ID集合，作为显式状态传给汇总逻辑"""

    def __init__(self, timer_ids: Iterable[str] = ()):
        self._ids = set(timer_ids)

    @classmethod
    def from_tasks(cls, tasks) -> "RunningTimers":
        return cls(t.timer.id for t in tasks if t.timer is not None and t.timer.is_running)

    def add(self, timer_id: str):
        self._ids.add(timer_id)

    def discard(self, timer_id: str):
        self._ids.discard(timer_id)

    def tick_interval(self, seconds: int) -> Optional[int]:
        """有计时器运行时返回刷新间隔，否则返回 None（不需要刷新）"""
        return seconds if self._ids else None

    def __contains__(self, timer_id) -> bool:
        return timer_id in self._ids

    def __iter__(self):
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)


class TimerStore:
    def __init__(self, db: Database, clock: TimeSource):
        self.timers = db["timers"]
        self.tasks = db["tasks"]
        self.clock = clock

    def _owned_task(self, task_id: str, user_id: str) -> dict:
        task = self.tasks.find_one(
            {"_id": parse_object_id(task_id, "任务"), "user_id": user_id},
            {"_id": 1},
        )
        if not task:
            raise NotFoundError("任务不存在")
        return task

    def _owned_timer(self, timer_id: str, user_id: str) -> dict:
        """查找计时器并确认其任务属于该用户；不属于时同样报不存在"""
        doc = self.timers.find_one({"_id": parse_object_id(timer_id, "计时器")})
        if not doc:
            raise NotFoundError("计时器不存在")
        try:
            self._owned_task(doc["task_id"], user_id)
        except NotFoundError:
            raise NotFoundError("计时器不存在") from None
        return doc

    @storage_errors
    def create(self, task_id: str, user_id: str) -> Timer:
        """为任务创建计时器，初始为空闲状态"""
        # 统一使用任务文档的ID字符串，大小写不同的同一ID不能绕过唯一约束
        task_id = str(self._owned_task(task_id, user_id)["_id"])
        if self.timers.find_one({"task_id": task_id}, {"_id": 1}):
            raise ConflictError("该任务已有计时器")

        now = self.clock.now()
        doc = {
            "task_id": task_id,
            "start_time": None,
            "end_time": None,
            "duration": 0,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = self.timers.insert_one(doc)
        except DuplicateKeyError:
            # 并发创建时由唯一索引兜底
            raise ConflictError("该任务已有计时器")
        doc["_id"] = result.inserted_id
        logger.info("timer %s created for task %s", result.inserted_id, task_id)
        return Timer.from_mongo(doc)

    @storage_errors
    def get(self, timer_id: str, user_id: str) -> Timer:
        return Timer.from_mongo(self._owned_timer(timer_id, user_id))

    @storage_errors
    def start(self, timer_id: str, user_id: str, now: Optional[datetime] = None) -> Timer:
        """开始计时；已在运行时不做任何修改（幂等）"""
        doc = self._owned_timer(timer_id, user_id)
        now = to_naive_utc(now or self.clock.now())

        # 只有空闲的计时器才会被写入 start_time，并发的重复开始只有一个生效
        updated = self.timers.find_one_and_update(
            {"_id": doc["_id"], "start_time": None},
            {"$set": {"start_time": now, "end_time": None, "updated_at": now}},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            logger.debug("timer %s already running, start ignored", timer_id)
            updated = self.timers.find_one({"_id": doc["_id"]})
        else:
            logger.info("timer %s started at %s", timer_id, now.isoformat())
        return Timer.from_mongo(updated)

    @storage_errors
    def stop(
        self,
        timer_id: str,
        user_id: str,
        now: Optional[datetime] = None,
        reported_duration: Optional[int] = None,
    ) -> Timer:
        """停止计时，时长由服务器根据 start_time 计算

        reported_duration 是客户端算出的总时长，只用于比对记录日志，不会写入。
        """
        doc = self._owned_timer(timer_id, user_id)
        start_time = doc.get("start_time")
        if start_time is None:
            raise ConflictError("计时器未在运行")

        now = to_naive_utc(now or self.clock.now())
        final_elapsed = seconds_between(start_time, now)
        if final_elapsed < 0:
            raise ValidationError("无效的计时时长：结束时间早于开始时间")

        # 以读到的 start_time 为条件更新，保证读-改-写是原子的
        updated = self.timers.find_one_and_update(
            {"_id": doc["_id"], "start_time": start_time},
            {
                "$inc": {"duration": final_elapsed},
                "$set": {"start_time": None, "end_time": now, "updated_at": now},
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            raise ConflictError("计时器已被停止")

        timer = Timer.from_mongo(updated)
        if reported_duration is not None and abs(reported_duration - timer.duration) > DURATION_HINT_TOLERANCE:
            logger.warning(
                "timer %s: client reported %ss, server computed %ss; keeping server value",
                timer_id, reported_duration, timer.duration,
            )
        logger.info("timer %s stopped after %ss (total %ss)", timer_id, final_elapsed, timer.duration)
        return timer
