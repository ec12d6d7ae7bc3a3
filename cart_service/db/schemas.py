# cart_service/db/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AddToCartRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, gt=0)


class CategorySchema(BaseModel):
    id: int
    name: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class ProductSchema(BaseModel):
    id: int
    name: str
    description: str
    price: float
    stock_quantity: int
    image_url: Optional[str] = None
    category: CategorySchema

    model_config = ConfigDict(from_attributes=True)


class UserSchema(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class CartItemResponse(BaseModel):
    id: int
    quantity: int
    product: ProductSchema
    subtotal: float

    @classmethod
    def from_item(cls, item) -> "CartItemResponse":
        return cls(
            id=item.id,
            quantity=item.quantity,
            product=ProductSchema.model_validate(item.product),
            subtotal=float(Decimal(item.product.price) * item.quantity),
        )


class CartResponse(BaseModel):
    id: int
    user: UserSchema
    items: List[CartItemResponse]
    total_quantity: int
    total_price: float
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        """Собирает ответ из полностью загруженной корзины; итоги считаются, а не хранятся."""
        total = sum((Decimal(item.product.price) * item.quantity for item in cart.items), Decimal("0"))
        return cls(
            id=cart.id,
            user=UserSchema.model_validate(cart.user),
            items=[CartItemResponse.from_item(item) for item in cart.items],
            total_quantity=sum(item.quantity for item in cart.items),
            total_price=float(total),
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )
