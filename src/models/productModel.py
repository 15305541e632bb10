from datetime import datetime
from typing import Optional, List
from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict, field_validator

from src.commonUtils.enumUtils import SkinType, ProductStatus


class ProductImage(BaseModel):
    """Reference to an image held by the object store"""
    public_id: str = Field(..., min_length=1)  # Object key, used for deletion
    url: str = Field(..., min_length=1)


class Product(Document):
    """Product document in MongoDB"""
    id: Optional[PydanticObjectId] = Field(None, alias="_id")
    user_id: Optional[PydanticObjectId] = None  # Admin who created the product

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    ratings: float = Field(default=0, ge=0, le=5)
    category: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    skin_type: List[SkinType] = Field(..., min_length=1)
    status: ProductStatus = ProductStatus.ACTIVE
    stock: int = Field(default=1, ge=0)
    num_of_reviews: int = Field(default=0, ge=0)

    images: List[ProductImage] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()

    class Settings:
        name = "products"
        indexes = [
            [("status", 1)],
            [("category", 1)],
            [("brand", 1)],
            [("price", 1)],
            [("created_at", -1)],
        ]

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,  # Store enum values as strings
    )
