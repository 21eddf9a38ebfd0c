from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class UserModel(BaseModel):
    id: str
    username: str
    display_name: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_mongo(cls, doc: dict) -> "UserModel":
        return cls(
            id=str(doc["_id"]),
            username=doc["username"],
            display_name=doc.get("display_name") or doc["username"],
            created_at=doc.get("created_at"),
        )


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    display_name: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    user: UserModel
    is_new_user: bool
