import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from clock import TimeSource
from errors import NotFoundError, ValidationError, storage_errors
from models import Task, TaskCreate, TaskUpdate, TagIn, Timer
from services.ids import parse_object_id
from services.tags import build_tag_docs

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field}不能为空")
    return value.strip()


class TaskStore:
    """任务及其标签的持久化；所有操作都按用户隔离"""

    def __init__(self, db: Database, clock: TimeSource):
        self.tasks = db["tasks"]
        self.timers = db["timers"]
        self.clock = clock

    def _find_doc(self, task_id: str, user_id: str) -> dict:
        doc = self.tasks.find_one({"_id": parse_object_id(task_id, "任务"), "user_id": user_id})
        if not doc:
            raise NotFoundError("任务不存在")
        return doc

    def _timers_by_task(self, task_ids: Iterable[str]) -> Dict[str, Timer]:
        task_ids = list(task_ids)
        if not task_ids:
            return {}
        return {
            doc["task_id"]: Timer.from_mongo(doc)
            for doc in self.timers.find({"task_id": {"$in": task_ids}})
        }

    def _with_timer(self, doc: dict) -> Task:
        timers = self._timers_by_task([str(doc["_id"])])
        return Task.from_mongo(doc, timers.get(str(doc["_id"])))

    @storage_errors
    def create(self, user_id: str, data: TaskCreate) -> Task:
        user_id = _require_text(user_id, "用户ID")
        title = _require_text(data.title, "标题")
        if data.date is None:
            raise ValidationError("日期不能为空")

        now = self.clock.now()
        doc = {
            "title": title,
            "description": data.description or None,
            "date": data.date.isoformat(),
            "completed": False,
            "user_id": user_id,
            "tags": build_tag_docs(data.tags),
            "created_at": now,
            "updated_at": now,
        }
        result = self.tasks.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("task %s created for user %s on %s", result.inserted_id, user_id, doc["date"])
        return Task.from_mongo(doc)

    @storage_errors
    def get(self, task_id: str, user_id: str) -> Task:
        return self._with_timer(self._find_doc(task_id, user_id))

    @storage_errors
    def update(self, task_id: str, user_id: str, data: TaskUpdate) -> Task:
        """只更新传入的字段；tags 传入时整体替换（单次写入，原子）"""
        doc = self._find_doc(task_id, user_id)
        fields = data.model_dump(exclude_unset=True)

        changes = {}
        if "title" in fields:
            changes["title"] = _require_text(fields["title"], "标题")
        if "description" in fields:
            changes["description"] = fields["description"] or None
        if fields.get("completed") is not None:
            changes["completed"] = fields["completed"]
        if data.tags is not None:
            changes["tags"] = build_tag_docs(data.tags)

        if changes:
            changes["updated_at"] = self.clock.now()
            self.tasks.update_one({"_id": doc["_id"]}, {"$set": changes})
            doc.update(changes)
        return self._with_timer(doc)

    @storage_errors
    def replace_tags(self, task_id: str, user_id: str, tags: List[TagIn]) -> Task:
        return self.update(task_id, user_id, TaskUpdate(tags=tags))

    @storage_errors
    def delete(self, task_id: str, user_id: str):
        """删除任务，同时删除其计时器（标签随任务文档一起删除）"""
        doc = self._find_doc(task_id, user_id)
        # 先删计时器：中途失败时任务仍在，可以重试
        self.timers.delete_many({"task_id": str(doc["_id"])})
        self.tasks.delete_one({"_id": doc["_id"]})
        logger.info("task %s deleted", doc["_id"])

    @storage_errors
    def list_for_day(self, user_id: str, day: date) -> List[Task]:
        """某用户某天的任务，最新创建的在前"""
        docs = list(self.tasks.find(
            {"user_id": user_id, "date": day.isoformat()}
        ).sort([("created_at", DESCENDING), ("_id", DESCENDING)]))
        timers = self._timers_by_task(str(d["_id"]) for d in docs)
        return [Task.from_mongo(d, timers.get(str(d["_id"]))) for d in docs]

    @storage_errors
    def migrate(self, task_id: str, user_id: str, target_date: Optional[date] = None) -> Task:
        """把任务复制到目标日期（默认今天，不复制计时器），并把原任务标记为完成"""
        original = self._find_doc(task_id, user_id)
        target_date = target_date or self.clock.now().date()

        copy = self.create(user_id, TaskCreate(
            title=original["title"],
            description=original.get("description"),
            date=target_date,
            tags=[TagIn(type=t["type"], value=t["value"], color=t["color"]) for t in original.get("tags", [])],
        ))
        try:
            self.tasks.update_one(
                {"_id": original["_id"]},
                {"$set": {"completed": True, "updated_at": self.clock.now()}},
            )
        except PyMongoError:
            # 原任务未能标记完成时撤销新建的副本
            self.tasks.delete_one({"_id": ObjectId(copy.id)})
            raise
        logger.info("task %s migrated to %s as %s", task_id, target_date.isoformat(), copy.id)
        return copy
