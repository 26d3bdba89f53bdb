# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime

Category = Literal[
    "Cereals",
    "Fresh milk",
    "Tuber foods",
    "Tea leaves",
    "Fruits",
    "Spices",
    "Vegetables",
]
Role = Literal["buyer", "admin", "superadmin"]


# ---- cart ----

class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(1, ge=1, description="Quantity (at least 1)")


class QuantityIn(BaseModel):
    """Schema for setting the quantity of a cart line."""

    quantity: int = Field(..., ge=1, description="New absolute quantity (at least 1)")


class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: Decimal
    name: str
    picture: Optional[str] = None


class CartOut(BaseModel):
    """Schema for the cart (response)."""

    cart_id: Optional[int] = None
    user_id: Optional[int] = None
    items: List[CartItemOut]
    total_items: int
    total_amount: Decimal
    expires_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TransferOut(BaseModel):
    message: str
    cart: Optional[CartOut] = None


# ---- checkout ----

class DeliveryAddress(BaseModel):
    """Schema for the delivery address given at checkout."""

    full_name: str = Field(..., min_length=1)
    address_line1: str = Field(..., min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class CheckoutIn(BaseModel):
    payment_method_id: int = Field(..., gt=0, description="ID of a stored payment method")
    delivery_address: DeliveryAddress


class PaymentSummary(BaseModel):
    type: str
    is_default: bool


class OrderItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal
    picture: Optional[str] = None


class OrderOut(BaseModel):
    """Schema for the order snapshot (response)."""

    order_number: str
    user_id: int
    status: str
    items: List[OrderItemOut]
    total_amount: Decimal
    payment_method: PaymentSummary
    delivery_address: DeliveryAddress
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---- catalog ----

class ProductCreate(BaseModel):
    """Schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    description: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    category: Category
    pictures: List[str] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Partial update, only the fields sent are changed."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    description: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, ge=0)
    category: Optional[Category] = None
    pictures: Optional[List[str]] = None


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    description: str
    quantity: int
    category: str
    pictures: List[str]
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    total: int
    page: int
    pages: int


class ProductPage(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class ProductCount(BaseModel):
    count: int


# ---- users ----

class UserCreate(BaseModel):
    """Schema for creating a user."""

    user_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: Role = "buyer"


class UserUpdate(BaseModel):
    """Profile changes; only a superadmin may change a role."""

    user_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None


class UserRead(BaseModel):
    id: int
    user_name: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class PaymentMethodIn(BaseModel):
    type: str = Field(..., min_length=1, description="e.g. card, mobile_money")
    token: str = Field(..., min_length=1, description="Gateway token, write only")
    is_default: bool = False


class PaymentMethodOut(BaseModel):
    """Payment method as exposed to callers, secret fields omitted."""

    id: int
    type: str
    is_default: bool

    model_config = ConfigDict(from_attributes=True)
