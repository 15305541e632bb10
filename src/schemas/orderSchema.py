from datetime import datetime
from typing import List, Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field

from src.commonUtils.enumUtils import OrderStatus
from src.models.orderModel import OrderItem, PaymentInfo, ShippingInfo
from src.schemas.productSchema import PageMeta


class OrderCreate(BaseModel):
    """Checkout payload. Items are a snapshot taken by the client at checkout."""
    order_items: List[OrderItem] = Field(..., min_length=1)
    shipping_info: ShippingInfo
    payment_info: Optional[PaymentInfo] = None
    items_price: float = Field(..., ge=0)
    tax_price: float = Field(default=0, ge=0)
    shipping_price: float = Field(default=0, ge=0)
    total_price: float = Field(..., ge=0)


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


class OrderUser(BaseModel):
    id: PydanticObjectId = Field(..., alias="_id")
    full_name: Optional[str] = None
    email: str

    model_config = ConfigDict(populate_by_name=True)


class OrderRead(BaseModel):
    id: PydanticObjectId = Field(..., alias="_id")
    user_id: PydanticObjectId
    user: Optional[OrderUser] = None
    order_items: List[OrderItem]
    shipping_info: ShippingInfo
    payment_info: Optional[PaymentInfo] = None
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    order_status: OrderStatus
    paid_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
    )


class OrderResponse(BaseModel):
    success: bool = True
    order: OrderRead
    message: Optional[str] = None


class OrderListResponse(BaseModel):
    success: bool = True
    orders: List[OrderRead]
    meta: Optional[PageMeta] = None
