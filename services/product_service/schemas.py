from datetime import date
from decimal import Decimal

from pydantic import Field

from shared.schemas import CamelModel, Money


class ProductCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None
    brand: str | None = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str | None = None
    release_date: date | None = None
    product_available: bool = False
    stock_quantity: int = Field(default=0, ge=0)


class ProductResponse(CamelModel):
    id: int
    name: str
    description: str | None
    brand: str | None
    price: Money
    category: str | None
    release_date: date | None
    product_available: bool
    stock_quantity: int
    image_name: str | None
    image_type: str | None


class ImageUpload(CamelModel):
    """An uploaded product image, already read into memory."""
    filename: str | None
    content_type: str | None
    data: bytes
