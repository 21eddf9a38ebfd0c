from fastapi import APIRouter, Depends
from pymongo.database import Database

from clock import TimeSource, get_clock
from database import get_db
from models import Timer, TimerCreateRequest, TimerStopRequest, TimerResponse
from routers.auth import get_user_id
from services.formatting import format_stopwatch
from services.timers import TimerStore, elapsed

router = APIRouter(prefix="/timers", tags=["计时"])


def get_timer_store(db: Database = Depends(get_db), clock: TimeSource = Depends(get_clock)) -> TimerStore:
    return TimerStore(db, clock)


def timer_response(timer: Timer, clock: TimeSource) -> TimerResponse:
    # 返回服务器时间，用于前端校准
    server_time = clock.now()
    total = elapsed(timer, timer.is_running, server_time)
    return TimerResponse(
        timer=timer,
        elapsed=total,
        display=format_stopwatch(total),
        server_time=server_time
    )


@router.post("", response_model=TimerResponse)
async def create_timer(
    request: TimerCreateRequest,
    user_id: str = Depends(get_user_id),
    timers: TimerStore = Depends(get_timer_store),
    clock: TimeSource = Depends(get_clock)
):
    """为任务创建计时器（每个任务最多一个）"""
    return timer_response(timers.create(request.task_id, user_id), clock)


@router.get("/{timer_id}", response_model=TimerResponse)
async def get_timer(
    timer_id: str,
    user_id: str = Depends(get_user_id),
    timers: TimerStore = Depends(get_timer_store),
    clock: TimeSource = Depends(get_clock)
):
    """获取计时器状态"""
    return timer_response(timers.get(timer_id, user_id), clock)


@router.post("/{timer_id}/start", response_model=TimerResponse)
async def start_timer(
    timer_id: str,
    user_id: str = Depends(get_user_id),
    timers: TimerStore = Depends(get_timer_store),
    clock: TimeSource = Depends(get_clock)
):
    """开始计时 - 时间由服务器决定；已在运行时保持不变"""
    return timer_response(timers.start(timer_id, user_id), clock)


@router.post("/{timer_id}/stop", response_model=TimerResponse)
async def stop_timer(
    timer_id: str,
    request: TimerStopRequest = None,
    user_id: str = Depends(get_user_id),
    timers: TimerStore = Depends(get_timer_store),
    clock: TimeSource = Depends(get_clock)
):
    """停止计时 - 时长由服务器计算，客户端传入的 duration 仅作参考"""
    reported = request.duration if request else None
    timer = timers.stop(timer_id, user_id, reported_duration=reported)
    return timer_response(timer, clock)
