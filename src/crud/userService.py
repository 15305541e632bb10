from typing import Any, Dict, List, Mapping, Optional, Tuple
from beanie import PydanticObjectId
from fastapi import Depends, Request
from fastapi_users import BaseUserManager, FastAPIUsers, models
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import BeanieUserDatabase, ObjectIDIDMixin
from fastapi_users.password import PasswordHelper

from src.commonUtils.enumUtils import Role
from src.commonUtils.errors import NotFoundError, ValidationError
from src.commonUtils.paginationUtils import fetch_page, plan_page
from src.commonUtils.queryUtils import FieldSpec, compile_filters
from src.models.userModel import User, get_user_db
from src.schemas.userSchema import UserAdminUpdate
from src.config.settings import settings
import logging

logger = logging.getLogger(__name__)

SECRET = settings.JWT_SECRET_KEY


class UserManager(ObjectIDIDMixin, BaseUserManager[User, PydanticObjectId]):
    reset_password_token_secret = SECRET
    verification_token_secret = SECRET

    async def on_after_register(
            self, user: User, request: Optional[Request] = None
    ):
        # Cart and wishlist start empty with the user
        user.roles = [Role.USER.value]
        user.cart = []
        user.wishlist = []
        await user.save()
        logger.info(f"User {user.id} has registered.")


async def get_user_manager(user_db: BeanieUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)


bearer_transport = BearerTransport(tokenUrl="api/v1/auth/jwt/login")


def get_jwt_strategy() -> JWTStrategy[models.UP, models.ID]:
    return JWTStrategy(secret=SECRET, lifetime_seconds=settings.JWT_LIFETIME_SECONDS)


auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[User, PydanticObjectId](get_user_manager, [auth_backend])

# Returns None instead of raising, so the app can answer with its own 401 envelope
optional_active_user = fastapi_users.current_user(active=True, optional=True)


async def ensure_admin_user() -> User:
    """Create the configured admin account unless a user with that email already exists.

    Runs once at startup. Safe to run on every boot.
    """
    logger.info("🌱 Checking for admin user...")
    admin = await User.find_one(User.email == settings.ADMIN_EMAIL)
    if admin:
        logger.info("🌱 Admin user already exists.")
        return admin

    logger.info("🌱 Creating admin user....")
    admin = User(
        email=settings.ADMIN_EMAIL,
        hashed_password=PasswordHelper().hash(settings.ADMIN_PASSWORD),
        full_name=settings.ADMIN_NAME,
        roles=[Role.USER.value, Role.ADMIN.value],
        is_superuser=True,
        is_verified=True,
    )
    await admin.insert()
    logger.info("🌱 Admin user created successfully.")
    return admin


USER_FILTER_FIELDS: Dict[str, FieldSpec] = {
    "email": FieldSpec("email"),
    "role": FieldSpec("roles"),
    "roles": FieldSpec("roles"),
}

USER_SORT = [("created_at", -1), ("_id", -1)]


class UserService:
    """Admin management of user accounts"""

    @staticmethod
    async def list_users(params: Mapping[str, Any]) -> Tuple[List[User], Dict[str, int]]:
        query = compile_filters(params, USER_FILTER_FIELDS)
        plan = plan_page(params.get("page"), params.get("limit"))
        return await fetch_page(User, query, plan, sort=USER_SORT)

    @staticmethod
    async def get_user(user_id: PydanticObjectId) -> User:
        user = await User.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    async def update_user(user_id: PydanticObjectId, user_data: UserAdminUpdate) -> User:
        """Apply the fields the admin sent. Roles always keep ``user``; ``admin`` also grants superuser."""
        user = await UserService.get_user(user_id)
        changes = user_data.model_dump(exclude_unset=True, exclude_none=True)

        email = changes.pop("email", None)
        if email is not None and email != user.email:
            if await User.find_one(User.email == email):
                raise ValidationError(f"Email '{email}' is already in use")
            user.email = email

        if user_data.roles is not None:
            changes.pop("roles")
            roles = [Role.USER.value] + [r.value for r in user_data.roles if r is not Role.USER]
            user.roles = list(dict.fromkeys(roles))
            user.is_superuser = Role.ADMIN.value in user.roles
            logger.info(f"User {user_id} roles set to {user.roles}")

        for field, value in changes.items():
            setattr(user, field, value)

        await user.save()
        return user

    @staticmethod
    async def delete_user(user_id: PydanticObjectId, current_user: User) -> None:
        user = await UserService.get_user(user_id)
        if user.id == current_user.id:
            raise ValidationError("Admin cannot delete themselves")

        await user.delete()
        logger.info(f"User {user_id} deleted by {current_user.id}")
