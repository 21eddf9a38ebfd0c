from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime


class TagStat(BaseModel):
    type: str
    value: str
    color: str
    seconds: int
    percentage: float  # 相对当日总时长的百分比


class DaySummary(BaseModel):
    date: date
    task_count: int
    total_seconds: int
    total_display: str  # 如 "1h 5m"
    tags: List[TagStat]  # 按秒数降序；各项之和可能大于总时长
    tag_types: List[str]
    running_timer_ids: List[str]
    server_time: datetime
    tick_seconds: Optional[int] = None  # 无计时器运行时为空，前端停止刷新
