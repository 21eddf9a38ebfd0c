import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Header
from jose import jwt, JWTError
from pymongo.database import Database

from clock import TimeSource, get_clock
from config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRE_HOURS
from database import get_db
from models import LoginRequest, LoginResponse, UserModel
from services.users import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["认证"])


def create_token(user_id: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRE_HOURS)
    payload = {
        "user_id": user_id,
        "exp": expire
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> str:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Token无效或已过期")
    user_id = payload.get("user_id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token无效或已过期")
    return user_id


def get_user_id(authorization: str = Header(...)) -> str:
    """从Header获取用户ID"""
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="无效的Authorization头")
    token = authorization[7:]
    return verify_token(token)


def get_user_store(db: Database = Depends(get_db), clock: TimeSource = Depends(get_clock)) -> UserStore:
    return UserStore(db, clock)


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, users: UserStore = Depends(get_user_store)):
    """用户名登录，不存在时自动创建"""
    user, is_new_user = users.login_or_create(request.username, request.display_name)
    logger.info("login: %s (new=%s)", user.username, is_new_user)

    return LoginResponse(
        token=create_token(user.id),
        user=user,
        is_new_user=is_new_user
    )


@router.get("/me", response_model=UserModel)
async def me(user_id: str = Depends(get_user_id), users: UserStore = Depends(get_user_store)):
    """根据token加载当前会话的用户"""
    return users.get(user_id)
