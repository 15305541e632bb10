import pytest
from beanie import PydanticObjectId

from src.commonUtils.errors import NotFoundError
from src.crud.wishlistService import WishlistService
from src.models.userModel import User


async def test_add_twice_keeps_single_membership(shopper, make_product):
    product = await make_product()

    await WishlistService.add_item(shopper.id, product.id)
    await WishlistService.add_item(shopper.id, product.id)

    assert (await User.get(shopper.id)).wishlist == [product.id]


async def test_remove_is_idempotent(shopper, make_product):
    product = await make_product()
    await WishlistService.add_item(shopper.id, product.id)

    await WishlistService.remove_item(shopper.id, product.id)
    await WishlistService.remove_item(shopper.id, product.id)

    assert (await User.get(shopper.id)).wishlist == []


async def test_add_unknown_product(shopper):
    with pytest.raises(NotFoundError):
        await WishlistService.add_item(shopper.id, PydanticObjectId())


async def test_get_wishlist_returns_products(shopper, make_product):
    first = await make_product(name="First")
    second = await make_product(name="Second")
    await WishlistService.add_item(shopper.id, first.id)
    await WishlistService.add_item(shopper.id, second.id)

    products = await WishlistService.get_wishlist(shopper.id)

    assert {p.name for p in products} == {"First", "Second"}
