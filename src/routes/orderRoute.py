from fastapi import APIRouter, Depends, Request, status
from beanie import PydanticObjectId

from src.models.userModel import User
from src.schemas.orderSchema import OrderCreate, OrderStatusUpdate, OrderResponse, OrderListResponse
from src.commonUtils.queryUtils import query_params_to_mapping
from src.dependencies.auth_dependencies import get_current_user, require_admin
from src.crud.orderService import OrderService

router = APIRouter()


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED, tags=["orders"])
async def create_order(order_data: OrderCreate, current_user: User = Depends(get_current_user)):
    """Place an order. The user's cart is cleared once the order is stored."""
    order = await OrderService.create_order(current_user.id, order_data)
    return {"success": True, "order": order}


@router.get("/orders/myorders", response_model=OrderListResponse, tags=["orders"])
async def get_my_orders(current_user: User = Depends(get_current_user)):
    orders = await OrderService.get_my_orders(current_user.id)
    return {"success": True, "orders": orders}


@router.get("/orders/{order_id}", response_model=OrderResponse, tags=["orders"])
async def get_order(order_id: PydanticObjectId, current_user: User = Depends(get_current_user)):
    """Get a specific order. Owners and admins only."""
    order = await OrderService.get_order(order_id, current_user)
    return {"success": True, "order": order}


# --- ADMIN ROUTES ---
@router.get("/orders", response_model=OrderListResponse, tags=["orders"])
async def get_all_orders(request: Request, admin: User = Depends(require_admin)):
    orders, meta = await OrderService.list_orders(query_params_to_mapping(request.query_params))
    return {"success": True, "orders": orders, "meta": meta}


@router.put("/orders/{order_id}", response_model=OrderResponse, tags=["orders"])
async def update_order_status(
        order_id: PydanticObjectId,
        update: OrderStatusUpdate,
        admin: User = Depends(require_admin),
):
    """Move an order to Processing, Shipped or Delivered"""
    order = await OrderService.update_order_status(order_id, update.status)
    return {"success": True, "order": order, "message": f"Order marked as {order.order_status}"}
