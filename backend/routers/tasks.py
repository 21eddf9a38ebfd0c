from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from clock import TimeSource, get_clock
from database import get_db
from models import MigrateRequest, Task, TaskCreate, TaskUpdate
from routers.auth import get_user_id
from services.tasks import TaskStore

router = APIRouter(prefix="/tasks", tags=["任务"])


def get_task_store(db: Database = Depends(get_db), clock: TimeSource = Depends(get_clock)) -> TaskStore:
    return TaskStore(db, clock)


@router.get("", response_model=List[Task])
async def list_tasks(
    day: date = Query(alias="date", description="日期 YYYY-MM-DD"),
    user_id: str = Depends(get_user_id),
    tasks: TaskStore = Depends(get_task_store)
):
    """获取某天的任务（含计时器和标签）"""
    return tasks.list_for_day(user_id, day)


@router.post("", response_model=Task)
async def create_task(
    data: TaskCreate,
    user_id: str = Depends(get_user_id),
    tasks: TaskStore = Depends(get_task_store)
):
    """创建任务"""
    return tasks.create(user_id, data)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_user_id),
    tasks: TaskStore = Depends(get_task_store)
):
    return tasks.get(task_id, user_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    user_id: str = Depends(get_user_id),
    tasks: TaskStore = Depends(get_task_store)
):
    """更新任务；传入 tags 时整体替换"""
    return tasks.update(task_id, user_id, data)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_user_id),
    tasks: TaskStore = Depends(get_task_store)
):
    """删除任务及其计时器和标签"""
    tasks.delete(task_id, user_id)
    return {"success": True}


@router.post("/{task_id}/migrate", response_model=Task)
async def migrate_task(
    task_id: str,
    request: MigrateRequest = None,
    user_id: str = Depends(get_user_id),
    tasks: TaskStore = Depends(get_task_store)
):
    """迁移到目标日期（默认今天），原任务标记为完成"""
    target_date = request.target_date if request else None
    return tasks.migrate(task_id, user_id, target_date)
