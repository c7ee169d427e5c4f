from typing import Optional
from pydantic import BaseModel, Field


class CartItemInput(BaseModel):
    product_id: int = Field(..., ge=1)
    variant_id: Optional[int] = Field(default=None, ge=1)
    quantity: int = Field(default=1, ge=1)


class CartQuantityInput(BaseModel):
    quantity: int = Field(..., ge=1)
