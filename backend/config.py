import os
from dotenv import load_dotenv

load_dotenv()

# MongoDB配置
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "time_ledger")

# JWT配置
JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", 24 * 7))  # 7天过期

# 计时配置
TICK_SECONDS = int(os.getenv("TICK_SECONDS", 1))  # 前端刷新间隔
DURATION_HINT_TOLERANCE = int(os.getenv("DURATION_HINT_TOLERANCE", 5))

# 服务器配置
API_PREFIX = "/api"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
