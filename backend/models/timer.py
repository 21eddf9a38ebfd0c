from pydantic import BaseModel, Field, computed_field
from typing import Optional
from datetime import datetime


class Timer(BaseModel):
    id: str
    task_id: str
    start_time: Optional[datetime] = None  # 仅在运行中时有值
    end_time: Optional[datetime] = None
    duration: int = 0  # 已持久化的累计秒数，不含当前这一段

    @computed_field
    @property
    def is_running(self) -> bool:
        return self.start_time is not None

    @classmethod
    def from_mongo(cls, doc: dict) -> "Timer":
        return cls(
            id=str(doc["_id"]),
            task_id=str(doc["task_id"]),
            start_time=doc.get("start_time"),
            end_time=doc.get("end_time"),
            duration=doc.get("duration") or 0,
        )


class TimerCreateRequest(BaseModel):
    task_id: str


class TimerStopRequest(BaseModel):
    # 客户端计算的总时长，仅作参考，以服务器计算为准
    duration: Optional[int] = Field(default=None, ge=0)


class TimerResponse(BaseModel):
    timer: Timer
    elapsed: int  # 含当前运行段的总秒数
    display: str  # H:MM:SS
    server_time: datetime
