from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from finance_tracker.core.config import settings
from finance_tracker.core.security import decode_access_token
from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage
from finance_tracker.models.user import UserInDB, UserRole


def get_current_user(
    authorization: Optional[str] = Header(None),
    store: Storage = Depends(get_storage),
) -> UserInDB:
    """Resolve the bearer token to a stored user."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")

    token = authorization[len("Bearer "):]
    payload = decode_access_token(token, settings)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = store.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user


def require_roles(*roles: UserRole) -> Callable[..., UserInDB]:
    def checker(user: UserInDB = Depends(get_current_user)) -> UserInDB:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return checker


# read-only accounts may query but not change anything
can_write = require_roles(UserRole.ADMIN, UserRole.USER)
admin_only = require_roles(UserRole.ADMIN)
