from fastapi import APIRouter, Depends
from beanie import PydanticObjectId

from src.models.userModel import User
from src.schemas.cartSchema import (
    CartAddItemRequest, CartResponse, CartMutationResponse,
    WishlistAddRequest, WishlistResponse,
)
from src.schemas.productSchema import MessageResponse
from src.dependencies.auth_dependencies import get_current_user
from src.crud.cartService import CartService
from src.crud.wishlistService import WishlistService

router = APIRouter()


# ============= CART ROUTES =============
@router.get("/users/cart", response_model=CartResponse, tags=["cart"])
async def get_cart(current_user: User = Depends(get_current_user)):
    """Get current user's cart"""
    cart_data = await CartService.get_cart_with_products(current_user.id)
    return {"success": True, "cart": cart_data}


@router.post("/users/cart", response_model=CartMutationResponse, tags=["cart"])
async def add_to_cart(item: CartAddItemRequest, current_user: User = Depends(get_current_user)):
    """Add item to cart, merging with an existing line for the same product"""
    cart = await CartService.add_item(current_user.id, item.product_id, item.quantity)
    return {"success": True, "data": cart, "message": "Product added to cart successfully."}


@router.delete("/users/cart/{product_id}", response_model=CartMutationResponse, tags=["cart"])
async def remove_from_cart(product_id: PydanticObjectId, current_user: User = Depends(get_current_user)):
    """Remove item from cart"""
    cart = await CartService.remove_item(current_user.id, product_id)
    return {"success": True, "data": cart}


@router.put("/users/cart/{product_id}/decrease", response_model=CartMutationResponse, tags=["cart"])
async def decrease_cart_item(product_id: PydanticObjectId, current_user: User = Depends(get_current_user)):
    """Decrease quantity by one; the line disappears at zero"""
    cart = await CartService.decrease_item(current_user.id, product_id)
    return {"success": True, "data": cart}


# ============= WISHLIST ROUTES =============
@router.get("/users/wishlist", response_model=WishlistResponse, tags=["wishlist"])
async def get_wishlist(current_user: User = Depends(get_current_user)):
    products = await WishlistService.get_wishlist(current_user.id)
    return {"success": True, "wishlist": products}


@router.post("/users/wishlist", response_model=MessageResponse, tags=["wishlist"])
async def add_to_wishlist(item: WishlistAddRequest, current_user: User = Depends(get_current_user)):
    await WishlistService.add_item(current_user.id, item.product_id)
    return {"success": True, "message": "Item added to wishlist"}


@router.delete("/users/wishlist/{product_id}", response_model=MessageResponse, tags=["wishlist"])
async def remove_from_wishlist(product_id: PydanticObjectId, current_user: User = Depends(get_current_user)):
    await WishlistService.remove_item(current_user.id, product_id)
    return {"success": True, "message": "Item removed from wishlist"}
