import pytest
from beanie import PydanticObjectId

from src.commonUtils.errors import NotFoundError
from src.crud.cartService import CartService
from src.models.userModel import User


async def stored_cart(user):
    return {item.product_id: item.quantity for item in (await User.get(user.id)).cart}


async def test_repeated_adds_merge_into_one_line(shopper, make_product):
    product = await make_product()

    await CartService.add_item(shopper.id, product.id, 2)
    await CartService.add_item(shopper.id, product.id, 3)

    assert await stored_cart(shopper) == {product.id: 5}


async def test_decrease_to_zero_empties_cart(shopper, make_product):
    product = await make_product()

    await CartService.add_item(shopper.id, product.id, 1)
    await CartService.decrease_item(shopper.id, product.id)

    assert (await User.get(shopper.id)).cart == []


async def test_decrease_steps_down_by_one(shopper, make_product):
    product = await make_product()
    await CartService.add_item(shopper.id, product.id, 3)

    items = await CartService.decrease_item(shopper.id, product.id)

    assert [i.quantity for i in items] == [2]
    assert await stored_cart(shopper) == {product.id: 2}


async def test_decrease_missing_line(shopper, make_product):
    product = await make_product()
    with pytest.raises(NotFoundError):
        await CartService.decrease_item(shopper.id, product.id)


async def test_add_unknown_product(shopper):
    with pytest.raises(NotFoundError):
        await CartService.add_item(shopper.id, PydanticObjectId(), 1)
    assert (await User.get(shopper.id)).cart == []


async def test_remove_line_and_remove_again(shopper, make_product):
    keep = await make_product(name="Keep")
    drop = await make_product(name="Drop")
    await CartService.add_item(shopper.id, keep.id, 1)
    await CartService.add_item(shopper.id, drop.id, 4)

    await CartService.remove_item(shopper.id, drop.id)
    await CartService.remove_item(shopper.id, drop.id)

    assert await stored_cart(shopper) == {keep.id: 1}


async def test_carts_are_per_user(shopper, make_user, make_product):
    other = await make_user("other@example.com")
    product = await make_product()

    await CartService.add_item(shopper.id, product.id, 2)

    assert (await User.get(other.id)).cart == []


async def test_cart_with_products_totals_and_skips_deleted(shopper, make_product):
    serum = await make_product(name="Serum", price=12.5)
    mask = await make_product(name="Mask", price=20)
    await CartService.add_item(shopper.id, serum.id, 2)
    await CartService.add_item(shopper.id, mask.id, 1)
    await mask.delete()

    cart = await CartService.get_cart_with_products(shopper.id)

    assert cart["total_items"] == 2
    assert cart["total_price"] == 25.0
    assert [line["product"]["name"] for line in cart["items"]] == ["Serum"]


async def test_clear_cart(shopper, make_product):
    product = await make_product()
    await CartService.add_item(shopper.id, product.id, 2)

    await CartService.clear_cart(shopper.id)

    assert (await User.get(shopper.id)).cart == []
