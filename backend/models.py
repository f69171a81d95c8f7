"""
Pydantic models for request validation.

Order payloads are deliberately loose (every field optional): the order
service owns the business validation so that a missing user_id, total or
item field is reported as a 400 ValidationError rather than a schema error.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiBase(BaseModel):
    """Shared base: allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Order Models ────────────────────────────────────────────────────

class OrderItemIn(ApiBase):
    product_id: Optional[int] = Field(default=None, alias="productId")
    quantity: Optional[int] = None
    price: Optional[Decimal] = None


class PlaceOrderRequest(ApiBase):
    """POST /api/orders body."""
    user_id: Optional[int] = Field(default=None, alias="userId")
    total: Optional[Decimal] = None
    shipping_address: Optional[str] = Field(default=None, alias="shippingAddress")
    items: Optional[List[OrderItemIn]] = None


class OrderStatusUpdateRequest(ApiBase):
    status: Optional[str] = None


# ── Product Models ──────────────────────────────────────────────────

class ProductCreateRequest(ApiBase):
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    description: str = Field(..., min_length=1)
    image_url: Optional[str] = Field(default=None, alias="imageUrl", max_length=1000)
    stock_quantity: int = Field(0, alias="stockQuantity", ge=0)


class ProductUpdateRequest(ApiBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl", max_length=1000)
    stock_quantity: Optional[int] = Field(default=None, alias="stockQuantity", ge=0)


# ── User Models ─────────────────────────────────────────────────────

class RegisterRequest(ApiBase):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
    first_name: Optional[str] = Field(default=None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=100)


class LoginRequest(ApiBase):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

