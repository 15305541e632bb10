import logging
from typing import List

from beanie import PydanticObjectId
from beanie.operators import AddToSet, Pull

from src.commonUtils.errors import NotFoundError
from src.models.productModel import Product
from src.models.userModel import User

logger = logging.getLogger(__name__)


class WishlistService:
    """Set semantics over the wishlist embedded in the user document.

    Both mutations are single atomic array operators, so repeating either one is a no-op.
    """

    @staticmethod
    async def add_item(user_id: PydanticObjectId, product_id: PydanticObjectId) -> None:
        product = await Product.get(product_id)
        if not product:
            raise NotFoundError("Product not found")

        await User.find_one(User.id == user_id).update(AddToSet({User.wishlist: product_id}))
        logger.info(f"User {user_id} wishlisted {product_id}")

    @staticmethod
    async def remove_item(user_id: PydanticObjectId, product_id: PydanticObjectId) -> None:
        await User.find_one(User.id == user_id).update(Pull({User.wishlist: product_id}))

    @staticmethod
    async def get_wishlist(user_id: PydanticObjectId) -> List[Product]:
        user = await User.get(user_id)
        if not user:
            raise NotFoundError("User not found")

        products = await Product.find({"_id": {"$in": user.wishlist}}).to_list()
        products_map = {p.id: p for p in products}
        return [products_map[pid] for pid in dict.fromkeys(user.wishlist) if pid in products_map]
