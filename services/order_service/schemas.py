from datetime import date

from pydantic import EmailStr, Field

from shared.schemas import CamelModel, Money


class OrderItemRequest(CamelModel):
    product_id: int
    quantity: int = Field(gt=0)


class OrderRequest(CamelModel):
    customer_name: str = Field(min_length=1)
    email: EmailStr
    items: list[OrderItemRequest] = Field(min_length=1)


class OrderItemResponse(CamelModel):
    product_name: str
    quantity: int
    total_price: Money


class OrderResponse(CamelModel):
    order_id: str
    customer_name: str
    email: str
    status: str
    order_date: date
    items: list[OrderItemResponse]
