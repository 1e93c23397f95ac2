from enum import Enum
from pydantic import BaseModel
from typing import Optional


class UserRole(str, Enum):
    TEACHER = "teacher"
    MASTER_TEACHER = "master_teacher"


# Claims carried by a verified access token
class TokenData(BaseModel):
    sub: str
    role: str
    teacher_id: Optional[str] = None
    master_teacher_id: Optional[str] = None


class CurrentUser(BaseModel):
    user_id: Optional[int] = None
    role: str
    teacher_id: Optional[str] = None
    master_teacher_id: Optional[str] = None

    @classmethod
    def from_token(cls, token: TokenData) -> "CurrentUser":
        return cls(
            user_id=int(token.sub) if token.sub.isdigit() else None,
            role=token.role,
            teacher_id=token.teacher_id or None,
            master_teacher_id=token.master_teacher_id or None,
        )
