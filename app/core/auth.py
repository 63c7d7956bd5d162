"""Caller identity as supplied by the upstream identity provider.

Requests arrive already authenticated; the gateway forwards the user id and
role in headers and they are trusted as-is.
"""
import enum
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status


class Role(str, enum.Enum):
    USER = "user"
    ORGANIZER = "organizer"


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    role: Role

    @property
    def is_organizer(self) -> bool:
        return self.role == Role.ORGANIZER


def get_current_user(
    x_user_id: int = Header(ge=1),
    x_user_role: Role = Header(default=Role.USER),
) -> CurrentUser:
    return CurrentUser(user_id=x_user_id, role=x_user_role)


def require_role(role: Role):
    def _check(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action requires the '{role.value}' role.",
            )
        return user

    return _check
