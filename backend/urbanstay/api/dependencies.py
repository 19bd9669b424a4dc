# urbanstay/api/dependencies.py
import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.core.security import verify_access_token
from urbanstay.db import crud_users
from urbanstay.db.models import User
from urbanstay.db.session import get_db
from urbanstay.exceptions.custom import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


async def _resolve_user(db: AsyncSession, token: str) -> User:
    try:
        payload = verify_access_token(token)
    except JWTError as exc:
        logger.debug("token decode error: %s", exc)
        raise AuthenticationError("Not authorized to access this route")

    try:
        uid = int(payload["user_id"])
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token user id")

    user = await crud_users.get_user(db, uid)
    if not user:
        raise AuthenticationError("User not found")
    return user


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """
    Extracts the JWT from ``Authorization: Bearer <token>`` and returns the
    matching User row.
    """
    if credentials is None:
        raise AuthenticationError("Not authorized to access this route")
    return await _resolve_user(db, credentials.credentials)


def require_role(*roles: str):
    """
    Dependency factory:
      current_user = Depends(require_role("seller", "admin"))
    """

    async def dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AuthorizationError(f"Role '{user.role}' is not authorized to access this route")
        return user

    return dep


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_role("admin"))]
SellerUser = Annotated[User, Depends(require_role("seller", "admin"))]
DbSession = Annotated[AsyncSession, Depends(get_db)]
