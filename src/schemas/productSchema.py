from datetime import datetime
from typing import Optional, List
from beanie import PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict, field_validator

from src.commonUtils.enumUtils import SkinType, ProductStatus
from src.models.productModel import ProductImage


# ============= PAGINATION =============
class PageMeta(BaseModel):
    count: int
    total: int
    totalPages: int
    currentPage: int
    itemsPerPage: int


def _split_skin_types(value):
    # Multipart forms send either repeated fields or one comma separated field
    if isinstance(value, str):
        value = [value]
    if isinstance(value, list):
        return [part.strip() for item in value for part in str(item).split(",") if part.strip()]
    return value


# ============= PRODUCT SCHEMAS =============
class ProductCreate(BaseModel):
    """Schema for creating a product"""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    skin_type: List[SkinType] = Field(..., min_length=1)
    stock: int = Field(default=1, ge=0)
    ratings: float = Field(default=0, ge=0, le=5)
    status: ProductStatus = ProductStatus.ACTIVE

    @field_validator("skin_type", mode="before")
    @classmethod
    def normalise_skin_type(cls, value):
        return _split_skin_types(value)


class ProductUpdate(BaseModel):
    """Schema for updating a product"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = Field(None, min_length=1)
    skin_type: Optional[List[SkinType]] = Field(None, min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    ratings: Optional[float] = Field(None, ge=0, le=5)
    status: Optional[ProductStatus] = None

    @field_validator("skin_type", mode="before")
    @classmethod
    def normalise_skin_type(cls, value):
        return _split_skin_types(value)


class ProductRead(BaseModel):
    """Schema for reading a product"""
    id: PydanticObjectId = Field(..., alias="_id")
    user_id: Optional[PydanticObjectId] = None
    name: str
    description: str
    price: float
    ratings: float
    category: str
    brand: str
    skin_type: List[SkinType]
    status: ProductStatus
    stock: int
    num_of_reviews: int
    images: List[ProductImage] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
    )


class ProductResponse(BaseModel):
    success: bool = True
    data: ProductRead
    message: Optional[str] = None


class ProductListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[ProductRead]
    meta: Optional[PageMeta] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
