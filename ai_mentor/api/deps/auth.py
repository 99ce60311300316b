"""
Caller identity.

Authentication happens upstream; the gateway forwards the verified user id
and role as headers.

Dependencies: fastapi
System role: Auth boundary adapter
"""

import enum
from dataclasses import dataclass
from uuid import UUID

from fastapi import Header, HTTPException, status


class UserRole(str, enum.Enum):
    STUDENT = "student"
    CONTENT_CREATOR = "content_creator"
    ADMIN = "admin"


@dataclass(frozen=True)
class CurrentUser:
    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser:
    """
    Resolve the caller from gateway headers.

    Raises:
        HTTPException(401): Missing or malformed identity
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user identity")
    try:
        user_id = UUID(x_user_id)
        role = UserRole((x_user_role or UserRole.STUDENT.value).lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user identity")
    return CurrentUser(id=user_id, role=role)


def require_content_manager(user: CurrentUser) -> None:
    """Raise 403 unless the caller may manage lesson documents."""
    if user.role not in (UserRole.ADMIN, UserRole.CONTENT_CREATOR):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")


def get_websocket_user(
    user_id: str | None,
    role: str | None,
) -> CurrentUser:
    """
    Resolve a WebSocket caller from headers or query parameters.

    Browsers cannot set headers on a WebSocket handshake, so the gateway may
    forward identity as query parameters instead.
    """
    return get_current_user(x_user_id=user_id, x_user_role=role)
