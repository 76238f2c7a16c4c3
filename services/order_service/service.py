"""
Order placement workflow.

An order is placed in a single database transaction: every referenced
product row is locked, stock is checked and decremented, line totals are
computed and the order is inserted with its items. Any failure rolls the
whole transaction back, so no stock is decremented for a rejected order.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.repository import ProductRepository
from shared.errors import InsufficientStockError, NotFoundError, StoreError, StorefrontError
from shared.observability import (
    storefront_items_sold_total,
    storefront_order_duration_seconds,
    storefront_orders_total,
    storefront_out_of_stock_total,
)
from .models import Order, OrderItem
from .repository import OrderRepository
from .schemas import OrderItemResponse, OrderRequest, OrderResponse

log = structlog.get_logger(__name__)

ORDER_ID_PREFIX = "ORD"
ORDER_ID_ATTEMPTS = 5
INITIAL_STATUS = "PLACED"
CENT = Decimal("0.01")


def generate_order_id() -> str:
    """Prefix plus 8 uppercase hex characters of a random UUID, e.g. ORD1A2B3C4D."""
    return ORDER_ID_PREFIX + uuid.uuid4().hex[:8].upper()


def line_total(price: Decimal, quantity: int) -> Decimal:
    return (Decimal(price) * quantity).quantize(CENT)


def to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=order.order_id,
        customer_name=order.customer_name,
        email=order.email,
        status=order.status,
        order_date=order.order_date.date(),
        items=[
            OrderItemResponse(
                product_name=item.product.name,
                quantity=item.quantity,
                total_price=item.total_price,
            )
            for item in order.items
        ],
    )


class OrderService:

    @staticmethod
    async def _allocate_order_id(db: AsyncSession) -> str:
        # The UNIQUE constraint on orders.order_id still guards against a
        # concurrent insert of the same token between check and commit.
        for _ in range(ORDER_ID_ATTEMPTS):
            candidate = generate_order_id()
            if not await OrderRepository.order_id_exists(db, candidate):
                return candidate
            log.warning("order_id_collision", order_id=candidate)
        raise StoreError(f"Could not allocate a unique order id after {ORDER_ID_ATTEMPTS} attempts")

    @staticmethod
    async def _build_order(db: AsyncSession, data: OrderRequest) -> Order:
        order = Order(
            order_id=await OrderService._allocate_order_id(db),
            customer_name=data.customer_name,
            email=data.email,
            status=INITIAL_STATUS,
            order_date=datetime.now(timezone.utc),
        )

        # 1. Lock every product up front, in id order
        products = await ProductRepository.lock_products(
            db, [item.product_id for item in data.items]
        )

        for item in data.items:
            # 2. Existence
            product = products.get(item.product_id)
            if product is None:
                raise NotFoundError(f"Product {item.product_id} not found")

            # 3. Stock (repeated product ids draw from the same row)
            if product.stock_quantity < item.quantity:
                raise InsufficientStockError(product.name, product.stock_quantity, item.quantity)

            # 4. Deduct
            product.stock_quantity -= item.quantity
            if product.stock_quantity <= 0:
                product.product_available = False

            order.items.append(
                OrderItem(
                    product=product,
                    quantity=item.quantity,
                    total_price=line_total(product.price, item.quantity),
                )
            )
        return order

    @staticmethod
    async def place_order(db: AsyncSession, data: OrderRequest) -> OrderResponse:
        with storefront_order_duration_seconds.time():
            try:
                order = await OrderService._build_order(db, data)
                await OrderRepository.add_order(db, order)
                await db.commit()
            except StorefrontError as e:
                await db.rollback()
                label = "failed" if isinstance(e, StoreError) else "rejected"
                storefront_orders_total.labels(status=label).inc()
                log.warning("order_rejected", customer=data.customer_name, reason=str(e))
                raise
            except SQLAlchemyError as e:
                await db.rollback()
                storefront_orders_total.labels(status="failed").inc()
                log.error("order_persist_failed", customer=data.customer_name, error=str(e))
                raise StoreError(f"Failed to place order: {e}") from e

        storefront_orders_total.labels(status="placed").inc()
        storefront_items_sold_total.inc(sum(item.quantity for item in order.items))
        sold_out = {item.product.id for item in order.items if item.product.stock_quantity <= 0}
        if sold_out:
            storefront_out_of_stock_total.inc(len(sold_out))
        log.info("order_placed", order_id=order.order_id, items=len(order.items))
        return to_response(order)

    @staticmethod
    async def list_orders(db: AsyncSession) -> list[OrderResponse]:
        orders = await OrderRepository.get_all_orders(db)
        return [to_response(order) for order in orders]

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str) -> OrderResponse:
        order = await OrderRepository.get_order_by_order_id(db, order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return to_response(order)
