from fastapi import APIRouter, Depends, Request
from beanie import PydanticObjectId

from src.commonUtils.queryUtils import query_params_to_mapping
from src.models.userModel import User
from src.schemas.productSchema import MessageResponse
from src.schemas.userSchema import UserAdminUpdate, UserCreate, UserListResponse, UserRead, UserResponse
from src.crud.userService import UserService, auth_backend, fastapi_users
from src.dependencies.auth_dependencies import get_current_user, require_admin

router = APIRouter()

router.include_router(
    fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"]
)
router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["auth"],
)


@router.get("/users/me", response_model=UserResponse, tags=["users"])
async def get_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": current_user}


# --- ADMIN ROUTES ---
# Mounted after the cart router so /users/cart and /users/wishlist match first
@router.get("/users", response_model=UserListResponse, tags=["users"])
async def list_users(request: Request, admin: User = Depends(require_admin)):
    """All accounts, filterable by email or role, paginated"""
    users, meta = await UserService.list_users(query_params_to_mapping(request.query_params))
    return {"success": True, "users": users, "meta": meta}


@router.get("/users/{user_id}", response_model=UserResponse, tags=["users"])
async def get_user(user_id: PydanticObjectId, admin: User = Depends(require_admin)):
    user = await UserService.get_user(user_id)
    return {"success": True, "data": user}


@router.put("/users/{user_id}", response_model=UserResponse, tags=["users"])
async def update_user(user_id: PydanticObjectId, update: UserAdminUpdate, admin: User = Depends(require_admin)):
    """Change name, email, active flag or roles"""
    user = await UserService.update_user(user_id, update)
    return {"success": True, "data": user, "message": "User updated successfully"}


@router.delete("/users/{user_id}", response_model=MessageResponse, tags=["users"])
async def delete_user(user_id: PydanticObjectId, admin: User = Depends(require_admin)):
    await UserService.delete_user(user_id, admin)
    return {"success": True, "message": "User removed"}
