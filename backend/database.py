from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import MONGODB_URL, DATABASE_NAME

# MongoClient 在首次操作时才建立连接
client = MongoClient(MONGODB_URL)
db = client[DATABASE_NAME]


def get_db() -> Database:
    return db


def ensure_indexes(database: Database):
    """创建索引"""
    database["users"].create_index("username", unique=True)
    database["tasks"].create_index([("user_id", ASCENDING), ("date", ASCENDING)])
    # 每个任务最多一个计时器
    database["timers"].create_index("task_id", unique=True)
