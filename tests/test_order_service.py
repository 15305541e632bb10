import pytest
from pymongo.errors import PyMongoError

from src.commonUtils.enumUtils import OrderStatus
from src.commonUtils.errors import ForbiddenError, NotFoundError, ValidationError
from src.crud.cartService import CartService
from src.crud.orderService import OrderService
from src.models.orderModel import Order
from src.models.userModel import User
from src.schemas.orderSchema import OrderCreate


def order_payload(product, quantity=1, payment_info=None):
    items_price = product.price * quantity
    return OrderCreate(
        order_items=[{
            "product_id": product.id,
            "name": product.name,
            "quantity": quantity,
            "price": product.price,
        }],
        shipping_info={
            "address": "1 Queen St",
            "city": "Auckland",
            "phone_no": "021000000",
            "postal_code": "1010",
            "country": "NZ",
        },
        payment_info=payment_info,
        items_price=items_price,
        tax_price=0,
        shipping_price=5,
        total_price=items_price + 5,
    )


async def test_order_creation_clears_cart(shopper, make_product):
    ordered = await make_product(name="Ordered")
    not_ordered = await make_product(name="Left in cart")
    await CartService.add_item(shopper.id, ordered.id, 2)
    await CartService.add_item(shopper.id, not_ordered.id, 1)

    order = await OrderService.create_order(shopper.id, order_payload(ordered, 2))

    assert (await User.get(shopper.id)).cart == []
    stored = await Order.get(order.id)
    assert stored.order_status == OrderStatus.PROCESSING.value
    assert stored.paid_at is not None
    assert stored.order_items[0].name == "Ordered"


async def test_cart_clear_failure_keeps_order(shopper, make_product, monkeypatch):
    product = await make_product()
    await CartService.add_item(shopper.id, product.id, 1)

    async def broken_clear(user_id):
        raise PyMongoError("write failed")

    monkeypatch.setattr(CartService, "clear_cart", broken_clear)

    order = await OrderService.create_order(shopper.id, order_payload(product))

    assert await Order.get(order.id) is not None
    assert len((await User.get(shopper.id)).cart) == 1


async def test_delivered_settles_payment(shopper, make_product):
    product = await make_product()
    order = await OrderService.create_order(shopper.id, order_payload(product))
    original_paid_at = (await Order.get(order.id)).paid_at

    updated = await OrderService.update_order_status(order.id, "Delivered")

    assert updated.order_status == "Delivered"
    assert updated.delivered_at is not None
    assert updated.paid_at >= original_paid_at
    assert updated.payment_info.id == "COD"
    assert updated.payment_info.status == "succeeded"


async def test_delivered_settles_previously_paid_order(shopper, make_product):
    product = await make_product()
    order = await OrderService.create_order(
        shopper.id, order_payload(product, payment_info={"id": "pi_123", "status": "pending"})
    )

    updated = await OrderService.update_order_status(order.id, "Delivered")

    assert updated.payment_info.id == "COD"


async def test_shipped_leaves_payment_alone(shopper, make_product):
    product = await make_product()
    order = await OrderService.create_order(shopper.id, order_payload(product))

    updated = await OrderService.update_order_status(order.id, "Shipped")

    assert updated.order_status == "Shipped"
    assert updated.delivered_at is None
    assert updated.payment_info is None


async def test_unknown_status_is_rejected(shopper, make_product):
    product = await make_product()
    order = await OrderService.create_order(shopper.id, order_payload(product))

    with pytest.raises(ValidationError):
        await OrderService.update_order_status(order.id, "Teleported")


async def test_backward_transition_is_allowed(shopper, make_product):
    product = await make_product()
    order = await OrderService.create_order(shopper.id, order_payload(product))
    await OrderService.update_order_status(order.id, "Shipped")

    updated = await OrderService.update_order_status(order.id, "Processing")

    assert updated.order_status == "Processing"


async def test_status_update_for_missing_order(db):
    from beanie import PydanticObjectId

    with pytest.raises(NotFoundError):
        await OrderService.update_order_status(PydanticObjectId(), "Shipped")


async def test_order_visible_to_owner_and_admin_only(shopper, admin, make_user, make_product):
    stranger = await make_user("stranger@example.com")
    product = await make_product()
    order = await OrderService.create_order(shopper.id, order_payload(product))

    mine = await OrderService.get_order(order.id, shopper)
    assert mine["user"]["email"] == "shopper@example.com"
    assert (await OrderService.get_order(order.id, admin))["user_id"] == shopper.id

    with pytest.raises(ForbiddenError):
        await OrderService.get_order(order.id, stranger)


async def test_list_orders_filters_and_paginates(shopper, make_product):
    product = await make_product()
    for _ in range(3):
        await OrderService.create_order(shopper.id, order_payload(product))
    shipped = await OrderService.create_order(shopper.id, order_payload(product))
    await OrderService.update_order_status(shipped.id, "Shipped")

    orders, meta = await OrderService.list_orders({"orderStatus": "Processing", "limit": "2"})

    assert meta["total"] == 3
    assert meta["totalPages"] == 2
    assert len(orders) == 2
    assert all(o["user"]["email"] == "shopper@example.com" for o in orders)


async def test_my_orders(shopper, make_user, make_product):
    other = await make_user("other@example.com")
    product = await make_product()
    await OrderService.create_order(shopper.id, order_payload(product))
    await OrderService.create_order(other.id, order_payload(product))

    orders = await OrderService.get_my_orders(shopper.id)

    assert len(orders) == 1
