from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, or_
from sqlalchemy.orm import undefer
from .models import Product


class ProductRepository:

    @staticmethod
    async def save_product(db: AsyncSession, product: Product):
        """Insert or update; commits and reloads store-assigned fields."""
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def get_all_products(db: AsyncSession):
        result = await db.execute(select(Product).order_by(Product.id))
        return result.scalars().all()

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int, with_image: bool = False):
        stmt = select(Product).where(Product.id == product_id)
        if with_image:
            stmt = stmt.options(undefer(Product.image_data))
        result = await db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def lock_products(db: AsyncSession, product_ids):
        """
        SELECT ... FOR UPDATE every product in ascending id order so that
        concurrent orders over overlapping products cannot deadlock.
        Returns {id: Product} for the ids that exist.
        """
        result = await db.execute(ProductRepository.lock_statement(product_ids))
        return {p.id: p for p in result.scalars().all()}

    @staticmethod
    def lock_statement(product_ids):
        ids = sorted(set(product_ids))
        return (
            select(Product)
            .where(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
        )

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> bool:
        result = await db.execute(delete(Product).where(Product.id == product_id))
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def search_products(db: AsyncSession, keyword: str):
        # Keyword is matched literally: LIKE wildcards in it are escaped.
        escaped = keyword.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        columns = (Product.name, Product.description, Product.category, Product.brand)
        result = await db.execute(
            select(Product)
            .where(or_(*(func.lower(col).like(pattern, escape="\\") for col in columns)))
            .order_by(Product.id)
        )
        return result.scalars().all()
