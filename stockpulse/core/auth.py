from fastapi import HTTPException, Request, status
from pydantic import BaseModel
from typing import Optional

from stockpulse.schemas.ledger import UserRole

USER_ID_HEADER = "x-user-id"
USER_ROLE_HEADER = "x-user-role"


class CurrentCaller(BaseModel):
    id: Optional[int] = None
    role: Optional[UserRole] = None

    @property
    def is_owner_or_admin(self) -> bool:
        return self.role in (UserRole.OWNER, UserRole.ADMIN)


def get_current_caller(request: Request) -> CurrentCaller:
    """
    Read the caller identity forwarded by the upstream auth gateway.

    Missing headers give an anonymous caller; malformed ones are rejected.
    """
    raw_id = request.headers.get(USER_ID_HEADER)
    raw_role = request.headers.get(USER_ROLE_HEADER)

    try:
        user_id = int(raw_id) if raw_id else None
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {USER_ID_HEADER} header",
        )

    try:
        role = UserRole(raw_role.strip().upper()) if raw_role else None
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role '{raw_role}'",
        )

    return CurrentCaller(id=user_id, role=role)
