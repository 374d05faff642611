"""
Database Schemas for the shop

Each Pydantic model maps to a MongoDB collection (lowercased class name).
Wire and document field names are camelCase to match the web client;
attributes are snake_case and both are accepted on input.

Collections:
- product
- cart
- order
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """
    Products collection schema
    Collection name: "product"
    """
    id: Optional[str] = None
    name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(..., ge=0, description="Unit price")
    stock: int = Field(0, ge=0, description="Units in stock")
    image: str = Field(..., description="Image URL")
    description: str = Field("", description="Short description")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CartLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    quantity: int = Field(1, ge=1)


class Cart(BaseModel):
    """
    Carts collection schema, one document per owner
    Collection name: "cart"
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    items: List[CartLine] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_line(self, product_id: str) -> Optional[CartLine]:
        for line in self.items:
            if line.product_id == product_id:
                return line
        return None


class PaymentStatus(str, Enum):
    # Checkout only ever writes COMPLETED; the other states are kept for
    # compatibility with stored documents.
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OrderLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product_id: str = Field(..., alias="productId")
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class Order(BaseModel):
    """
    Orders collection schema
    Collection name: "order"
    """
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: Optional[str] = None
    user_id: str = Field(..., alias="userId")
    items: List[OrderLine]
    subtotal: float = Field(..., ge=0)
    tax: float = Field(..., ge=0)
    total: float = Field(..., ge=0)
    payment_status: PaymentStatus = Field(PaymentStatus.PENDING, alias="paymentStatus")
    payment_id: Optional[str] = Field(None, alias="paymentId")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


# Views returned by the cart operations

class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    quantity: int
    product: Product


class CartView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    items: List[CartItem] = Field(default_factory=list)
    cart_count: int = Field(0, alias="cartCount")


# Request bodies. Fields are optional so that missing values reach the
# cart and payment logic and fail there with a readable message.

class AddToCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(None, alias="productId")
    quantity: Optional[int] = None


class PaymentRequest(BaseModel):
    amount: Optional[float] = None


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_id: Optional[str] = Field(None, alias="paymentId")
