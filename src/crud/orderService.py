import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Tuple

from beanie import PydanticObjectId
from pymongo.errors import PyMongoError

from src.commonUtils.enumUtils import OrderStatus
from src.commonUtils.errors import ForbiddenError, NotFoundError, ValidationError
from src.commonUtils.paginationUtils import fetch_page, plan_page
from src.commonUtils.queryUtils import FieldSpec, compile_filters, parse_datetime, parse_number
from src.crud.cartService import CartService
from src.models.orderModel import Order, PaymentInfo
from src.models.userModel import User
from src.schemas.orderSchema import OrderCreate

logger = logging.getLogger(__name__)

# Written on delivery under the pay-on-delivery model
COD_SETTLEMENT = PaymentInfo(id="COD", status="succeeded")

ORDER_FILTER_FIELDS: Dict[str, FieldSpec] = {
    "orderStatus": FieldSpec("order_status"),
    "order_status": FieldSpec("order_status"),
    "totalPrice": FieldSpec("total_price", parse_number, orderable=True),
    "total_price": FieldSpec("total_price", parse_number, orderable=True),
    "createdAt": FieldSpec("created_at", parse_datetime, orderable=True),
    "created_at": FieldSpec("created_at", parse_datetime, orderable=True),
}

ORDER_SORT = [("created_at", -1), ("_id", -1)]


def parse_order_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(raw.strip())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid order status '{raw}'. Expected one of: {allowed}")


def status_changes(new_status: OrderStatus, now: datetime) -> Dict[str, Any]:
    """Fields written together with a status change"""
    changes: Dict[str, Any] = {"order_status": new_status.value, "updated_at": now}
    if new_status is OrderStatus.DELIVERED:
        changes["delivered_at"] = now
        changes["paid_at"] = now  # Cash collected on delivery
        changes["payment_info"] = COD_SETTLEMENT.model_dump()
    return changes


async def attach_users(orders: List[Order]) -> List[Dict[str, Any]]:
    """Dump orders with the owner's name and email embedded"""
    user_ids = list({order.user_id for order in orders})
    users = await User.find({"_id": {"$in": user_ids}}).to_list() if user_ids else []
    users_map = {u.id: {"_id": u.id, "full_name": u.full_name, "email": u.email} for u in users}

    return [
        {**order.model_dump(), "user": users_map.get(order.user_id)}
        for order in orders
    ]


class OrderService:
    """Service layer for order operations"""

    @staticmethod
    async def create_order(user_id: PydanticObjectId, order_data: OrderCreate) -> Order:
        """Persist the order, then clear the buyer's cart.

        The order is durable before the cart is touched. A failed cart clear is logged
        and left for reconciliation, the order stands.
        """
        order = Order(
            user_id=user_id,
            **order_data.model_dump(),
            paid_at=datetime.utcnow(),
        )
        await order.insert()
        logger.info(f"Order {order.id} created for user {user_id}")

        try:
            await CartService.clear_cart(user_id)
        except PyMongoError as e:
            logger.error(f"Order {order.id} created but clearing cart for {user_id} failed: {e}", exc_info=True)

        return order

    @staticmethod
    async def get_my_orders(user_id: PydanticObjectId) -> List[Order]:
        return await Order.find(Order.user_id == user_id).sort(*ORDER_SORT).to_list()

    @staticmethod
    async def get_order(order_id: PydanticObjectId, current_user: User) -> Dict[str, Any]:
        order = await Order.get(order_id)
        if not order:
            raise NotFoundError("Order not found")

        if order.user_id != current_user.id and not current_user.is_admin:
            raise ForbiddenError("Not authorized to view this order")

        return (await attach_users([order]))[0]

    @staticmethod
    async def list_orders(params: Mapping[str, Any]) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """Admin listing with exact/comparison filters and pagination"""
        query = compile_filters(params, ORDER_FILTER_FIELDS)
        plan = plan_page(params.get("page"), params.get("limit"))
        orders, meta = await fetch_page(Order, query, plan, sort=ORDER_SORT)
        return await attach_users(orders), meta

    @staticmethod
    async def update_order_status(order_id: PydanticObjectId, raw_status: str) -> Order:
        """Set the order status. Delivered also settles payment as cash on delivery.

        Backward transitions are accepted but logged.
        """
        new_status = parse_order_status(raw_status)

        order = await Order.get(order_id)
        if not order:
            raise NotFoundError("Order not found")

        current = OrderStatus(order.order_status)
        if new_status.rank < current.rank:
            logger.warning(f"Order {order_id} moved backwards from {current.value} to {new_status.value}")

        await order.set(status_changes(new_status, datetime.utcnow()))
        return await Order.get(order_id)
