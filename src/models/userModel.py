from datetime import datetime

from beanie import Document, PydanticObjectId
from typing import List, Optional
from pydantic import Field
from fastapi_users.db import BeanieBaseUser, BeanieUserDatabase

from src.commonUtils.enumUtils import Role
from src.models.cartModel import CartItem


class User(BeanieBaseUser, Document):
    full_name: Optional[str] = None
    roles: List[str] = Field(default_factory=lambda: [Role.USER.value])  # ["user", "admin"]
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Owned exclusively by this user, only mutated through the cart/wishlist services
    cart: List[CartItem] = Field(default_factory=list)
    wishlist: List[PydanticObjectId] = Field(default_factory=list)

    class Settings(BeanieBaseUser.Settings):
        name = "users"

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN.value in self.roles


async def get_user_db():
    yield BeanieUserDatabase(User)
