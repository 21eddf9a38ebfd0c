import logging
from typing import Optional, Tuple

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from clock import TimeSource
from errors import NotFoundError, ValidationError, storage_errors
from models import UserModel
from services.ids import parse_object_id

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, db: Database, clock: TimeSource):
        self.users = db["users"]
        self.clock = clock

    @storage_errors
    def login_or_create(self, username: str, display_name: Optional[str] = None) -> Tuple[UserModel, bool]:
        """按用户名查找或创建用户（用户名精确匹配），返回 (用户, 是否新用户)"""
        if not username or not username.strip():
            raise ValidationError("用户名不能为空")

        user = self.users.find_one({"username": username})
        if user:
            return UserModel.from_mongo(user), False

        new_user = {
            "username": username,
            "display_name": display_name or username,
            "created_at": self.clock.now(),
        }
        try:
            result = self.users.insert_one(new_user)
        except DuplicateKeyError:
            # 同名用户被并发创建
            return UserModel.from_mongo(self.users.find_one({"username": username})), False
        new_user["_id"] = result.inserted_id
        logger.info("user %s created (%s)", result.inserted_id, username)
        return UserModel.from_mongo(new_user), True

    @storage_errors
    def get(self, user_id: str) -> UserModel:
        user = self.users.find_one({"_id": parse_object_id(user_id, "用户")})
        if not user:
            raise NotFoundError("用户不存在")
        return UserModel.from_mongo(user)
