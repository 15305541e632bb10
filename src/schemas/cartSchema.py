from typing import Optional, List
from beanie import PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict

from src.commonUtils.enumUtils import SkinType
from src.models.productModel import ProductImage
from src.schemas.productSchema import ProductRead


# ============= CART SCHEMAS =============
class CartAddItemRequest(BaseModel):
    """Request schema for adding to cart"""
    product_id: PydanticObjectId = Field(..., alias="productId")
    quantity: int = Field(default=1, gt=0)

    model_config = ConfigDict(populate_by_name=True)


class CartItemRead(BaseModel):
    product_id: PydanticObjectId
    quantity: int


class CartProductSummary(BaseModel):
    """The product fields shown next to a cart line"""
    id: PydanticObjectId = Field(..., alias="_id")
    name: str
    price: float
    images: List[ProductImage] = Field(default_factory=list)
    category: str
    brand: str
    skin_type: List[SkinType]

    model_config = ConfigDict(populate_by_name=True)


class CartItemWithProduct(BaseModel):
    product_id: PydanticObjectId
    quantity: int
    product: CartProductSummary


class CartRead(BaseModel):
    items: List[CartItemWithProduct]
    total_items: int
    total_price: float


class CartResponse(BaseModel):
    success: bool = True
    cart: CartRead


class CartMutationResponse(BaseModel):
    success: bool = True
    data: List[CartItemRead]
    message: Optional[str] = None


# ============= WISHLIST SCHEMAS =============
class WishlistAddRequest(BaseModel):
    product_id: PydanticObjectId = Field(..., alias="productId")

    model_config = ConfigDict(populate_by_name=True)


class WishlistResponse(BaseModel):
    success: bool = True
    wishlist: List[ProductRead]
