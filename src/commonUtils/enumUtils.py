from enum import Enum


class SkinType(str, Enum):
    OILY = "Oily"
    DRY = "Dry"
    COMBINATION = "Combination"
    NORMAL = "Normal"
    SENSITIVE = "Sensitive"


class ProductStatus(str, Enum):
    ACTIVE = "Active"  # Listed on the storefront
    INACTIVE = "Inactive"  # Hidden from /products/active, still visible to admins


class OrderStatus(str, Enum):
    """
    Order lifecycle.

    Flow:
    1. PROCESSING → created at checkout
    2. SHIPPED → handed to the courier
    3. DELIVERED → received and paid (cash on delivery)
    """
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"

    @property
    def rank(self) -> int:
        return list(OrderStatus).index(self)


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
