import logging
from typing import Any, Dict, List

from beanie import PydanticObjectId
from beanie.operators import Set

from src.commonUtils.errors import NotFoundError, ValidationError
from src.models.cartModel import CartItem
from src.models.productModel import Product
from src.models.userModel import User

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------------------------------#
#                     Line item transitions (pure, never mutate their input)                            #
# ------------------------------------------------------------------------------------------------------#
def merge_lines(items: List[CartItem]) -> List[CartItem]:
    """Collapse lines sharing a product into one, keeping first-seen order"""
    merged: Dict[PydanticObjectId, int] = {}
    for item in items:
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    return [CartItem(product_id=product_id, quantity=quantity) for product_id, quantity in merged.items()]


def add_line(items: List[CartItem], product_id: PydanticObjectId, quantity: int = 1) -> List[CartItem]:
    """Absent -> Present(quantity), Present(q) -> Present(q + quantity)"""
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    return merge_lines([*items, CartItem(product_id=product_id, quantity=quantity)])


def decrease_line(items: List[CartItem], product_id: PydanticObjectId) -> List[CartItem]:
    """Present(1) -> Absent, Present(q) -> Present(q - 1). Absent is an error."""
    items = merge_lines(items)
    if not any(item.product_id == product_id for item in items):
        raise NotFoundError("Item not in cart")

    result = []
    for item in items:
        if item.product_id != product_id:
            result.append(item)
        elif item.quantity > 1:
            result.append(CartItem(product_id=product_id, quantity=item.quantity - 1))
    return result


def remove_line(items: List[CartItem], product_id: PydanticObjectId) -> List[CartItem]:
    """Present(any) -> Absent. No-op when already absent."""
    return [item for item in merge_lines(items) if item.product_id != product_id]


class CartService:
    """Read-modify-write of the cart embedded in the owning user document.

    Each mutation loads the user, computes the new cart and persists it with a single
    ``$set`` on the cart field. Two concurrent requests for the same user can still
    lose an update (last write wins).
    """

    @staticmethod
    async def _load_user(user_id: PydanticObjectId) -> User:
        user = await User.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    async def _persist(user: User, items: List[CartItem]) -> List[CartItem]:
        await user.set({User.cart: [item.model_dump() for item in items]})
        user.cart = items
        return items

    @staticmethod
    async def add_item(user_id: PydanticObjectId, product_id: PydanticObjectId, quantity: int = 1) -> List[CartItem]:
        """Add item to cart or increase quantity if exists"""
        product = await Product.get(product_id)
        if not product:
            raise NotFoundError("Product not found")

        user = await CartService._load_user(user_id)
        items = add_line(user.cart, product_id, quantity)
        logger.info(f"User {user_id} added {quantity} x {product_id} to cart")
        return await CartService._persist(user, items)

    @staticmethod
    async def decrease_item(user_id: PydanticObjectId, product_id: PydanticObjectId) -> List[CartItem]:
        """Decrease quantity by one, removing the line when it reaches zero"""
        user = await CartService._load_user(user_id)
        return await CartService._persist(user, decrease_line(user.cart, product_id))

    @staticmethod
    async def remove_item(user_id: PydanticObjectId, product_id: PydanticObjectId) -> List[CartItem]:
        """Remove item from cart entirely"""
        user = await CartService._load_user(user_id)
        return await CartService._persist(user, remove_line(user.cart, product_id))

    @staticmethod
    async def clear_cart(user_id: PydanticObjectId) -> None:
        """Clear all items from cart"""
        await User.find_one(User.id == user_id).update(Set({User.cart: []}))

    @staticmethod
    async def get_cart_with_products(user_id: PydanticObjectId) -> Dict[str, Any]:
        """Get cart with product summaries and totals"""
        user = await CartService._load_user(user_id)
        items = merge_lines(user.cart)

        # Fetch all products for items in cart
        product_ids = [item.product_id for item in items]
        products = await Product.find({"_id": {"$in": product_ids}}).to_list()
        products_map = {p.id: p for p in products}

        items_with_products = []
        total_price = 0
        total_items = 0

        for item in items:
            product = products_map.get(item.product_id)
            # Product deleted since it was added
            if not product:
                continue

            total_price += product.price * item.quantity
            total_items += item.quantity
            items_with_products.append({
                "product_id": item.product_id,
                "quantity": item.quantity,
                "product": {
                    "_id": product.id,
                    "name": product.name,
                    "price": product.price,
                    "images": product.images,
                    "category": product.category,
                    "brand": product.brand,
                    "skin_type": product.skin_type,
                },
            })

        return {
            "items": items_with_products,
            "total_items": total_items,
            "total_price": round(total_price, 2),
        }
