from datetime import date
from typing import Optional

from fastapi import Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from remedial_attendance.core.database import get_db
from remedial_attendance.core.errors import AuthenticationError, PermissionDenied
from remedial_attendance.core.logging import logger
from remedial_attendance.core.security import verify_token
from remedial_attendance.schemas.auth import CurrentUser, TokenData, UserRole
from remedial_attendance.services.attendance_service import RemedialAttendanceService


def get_today() -> date:
    """Calendar clock for school-year resolution; overridden in tests."""
    return date.today()


def _extract_token(request: Request) -> Optional[str]:
    # Cookie first, Authorization header as fallback
    raw = request.cookies.get("access_token") or request.headers.get("Authorization")
    if not raw:
        return None
    if raw.startswith("Bearer "):
        raw = raw[len("Bearer "):]
    token = raw.strip().strip('"')
    return token or None


async def get_current_user(request: Request) -> CurrentUser:
    token = _extract_token(request)
    if not token:
        raise AuthenticationError("Not authenticated - No token found")

    payload = verify_token(token)
    try:
        token_data = TokenData(**payload)
    except PydanticValidationError:
        logger.warning("Access token is missing required claims")
        raise AuthenticationError("Could not validate credentials")
    return CurrentUser.from_token(token_data)


def require_role(role: UserRole):
    async def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role != role.value:
            raise PermissionDenied(f"Only {role.value.replace('_', ' ')}s can access this resource")
        return current_user
    return role_checker


get_current_teacher = require_role(UserRole.TEACHER)
get_current_master_teacher = require_role(UserRole.MASTER_TEACHER)


async def get_attendance_service(
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
) -> RemedialAttendanceService:
    """Provide RemedialAttendanceService instance"""
    return RemedialAttendanceService(db, today)
