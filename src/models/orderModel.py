from datetime import datetime
from typing import Optional, List
from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict

from src.commonUtils.enumUtils import OrderStatus


class OrderItem(BaseModel):
    """Snapshot of a purchased line. Not a live product reference."""
    product_id: PydanticObjectId
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)
    image: Optional[str] = None


class ShippingInfo(BaseModel):
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    phone_no: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class PaymentInfo(BaseModel):
    id: Optional[str] = None  # Provider reference
    status: Optional[str] = None


class Order(Document):
    """Order placed at checkout. Only order_status and its stamps change afterwards."""
    id: Optional[PydanticObjectId] = Field(None, alias="_id")
    user_id: PydanticObjectId

    order_items: List[OrderItem] = Field(..., min_length=1)
    shipping_info: ShippingInfo
    payment_info: Optional[PaymentInfo] = None

    # Financial details
    items_price: float = Field(..., ge=0)
    tax_price: float = Field(default=0, ge=0)
    shipping_price: float = Field(default=0, ge=0)
    total_price: float = Field(..., ge=0)

    order_status: OrderStatus = Field(default=OrderStatus.PROCESSING)

    # Timestamps
    paid_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "orders"
        indexes = [
            [("user_id", 1)],
            [("order_status", 1)],
            [("created_at", -1)],
        ]

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,  # Store enum values as strings
    )
