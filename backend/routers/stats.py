from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from clock import TimeSource, get_clock
from database import get_db
from models import DaySummary
from routers.auth import get_user_id
from services.aggregate import DayAggregator
from services.tasks import TaskStore
from services.timers import RunningTimers

router = APIRouter(prefix="/stats", tags=["统计"])


@router.get("/day", response_model=DaySummary)
async def get_day_summary(
    day: date = Query(alias="date", description="日期 YYYY-MM-DD"),
    tag_type: Optional[str] = Query(default=None, description="只返回该类型的标签统计"),
    running: Optional[List[str]] = Query(default=None, description="客户端认为正在运行的计时器ID，缺省时按服务器状态"),
    user_id: str = Depends(get_user_id),
    db: Database = Depends(get_db),
    clock: TimeSource = Depends(get_clock)
):
    """当日总时长及按标签的时间分布（包含正在运行的计时器）"""
    tasks = TaskStore(db, clock).list_for_day(user_id, day)
    running_timers = RunningTimers(running) if running is not None else None
    return DayAggregator(clock).summarize(day, tasks, running=running_timers, tag_type=tag_type)
