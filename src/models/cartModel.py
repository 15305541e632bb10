from beanie import PydanticObjectId
from pydantic import BaseModel, Field


class CartItem(BaseModel):
    """Individual line in a user's cart. One line per product."""
    product_id: PydanticObjectId
    quantity: int = Field(..., gt=0)
