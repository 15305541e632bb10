from typing import Optional

from fastapi import Depends

from src.commonUtils.errors import AuthError, ForbiddenError
from src.crud.userService import optional_active_user
from src.models.userModel import User


async def get_current_user(user: Optional[User] = Depends(optional_active_user)) -> User:
    if user is None:
        raise AuthError("Not authorized, no token")
    return user


# Ensure only admins can access
async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError(f"User role '{', '.join(user.roles)}' is not authorized to access this route")
    return user
