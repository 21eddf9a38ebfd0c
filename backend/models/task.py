from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from models.timer import Timer


class TagIn(BaseModel):
    type: str = Field(min_length=1)
    value: str = Field(min_length=1)
    color: Optional[str] = None  # 为空时按类型取默认颜色


class Tag(BaseModel):
    id: str
    task_id: str
    type: str
    value: str
    color: str


class Task(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    date: date
    completed: bool = False
    user_id: str
    tags: List[Tag] = []
    timer: Optional[Timer] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_mongo(cls, doc: dict, timer: Optional[Timer] = None) -> "Task":
        task_id = str(doc["_id"])
        return cls(
            id=task_id,
            title=doc["title"],
            description=doc.get("description"),
            date=date.fromisoformat(doc["date"]),
            completed=doc.get("completed", False),
            user_id=doc["user_id"],
            tags=[Tag(task_id=task_id, **t) for t in doc.get("tags", [])],
            timer=timer,
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    date: date
    tags: List[TagIn] = []


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    completed: Optional[bool] = None
    tags: Optional[List[TagIn]] = None  # 传入时整体替换


class MigrateRequest(BaseModel):
    target_date: Optional[date] = None  # 默认迁移到今天
