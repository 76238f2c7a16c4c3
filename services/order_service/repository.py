from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from .models import Order


class OrderRepository:
    """Order persistence. Methods only flush; the caller owns the transaction."""

    @staticmethod
    async def add_order(db: AsyncSession, order: Order):
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_all_orders(db: AsyncSession):
        result = await db.execute(select(Order).order_by(Order.id))
        return result.scalars().all()

    @staticmethod
    async def get_order_by_order_id(db: AsyncSession, order_id: str):
        result = await db.execute(select(Order).where(Order.order_id == order_id))
        return result.scalars().first()

    @staticmethod
    async def order_id_exists(db: AsyncSession, order_id: str) -> bool:
        result = await db.execute(select(Order.id).where(Order.order_id == order_id))
        return result.first() is not None
