from datetime import datetime
from typing import Optional, List

from beanie import PydanticObjectId
from fastapi_users import schemas
from pydantic import BaseModel, EmailStr, Field

from src.commonUtils.enumUtils import Role
from src.schemas.productSchema import PageMeta


class UserRead(schemas.BaseUser[PydanticObjectId]):
    full_name: Optional[str] = None
    roles: List[str] = ["user"]
    created_at: datetime


class UserCreate(schemas.BaseUserCreate):
    full_name: Optional[str] = None


class UserAdminUpdate(BaseModel):
    """Fields an admin may change on another account. Omitted fields are left alone."""
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    roles: Optional[List[Role]] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    success: bool = True
    data: UserRead
    message: Optional[str] = None


class UserListResponse(BaseModel):
    success: bool = True
    users: List[UserRead]
    meta: Optional[PageMeta] = None
