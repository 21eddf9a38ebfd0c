from datetime import datetime, timedelta, timezone


class TimeSource:
    """当前时间提供者"""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(TimeSource):
    def now(self) -> datetime:
        # pymongo 默认返回不带时区的UTC时间，这里保持一致
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FixedClock(TimeSource):
    """手动推进的时钟，用于测试"""

    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def set(self, value: datetime):
        self.current = value

    def advance(self, seconds: int = 1) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


def to_naive_utc(value: datetime) -> datetime:
    """移除时区信息（先换算到UTC）"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


_system_clock = SystemClock()


def get_clock() -> TimeSource:
    return _system_clock
