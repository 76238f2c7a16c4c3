import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import NotFoundError, StoreError
from .models import Product
from .repository import ProductRepository
from .schemas import ImageUpload, ProductCreate

log = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    def _apply(product: Product, data: ProductCreate, image: ImageUpload | None):
        product.name = data.name
        product.description = data.description
        product.brand = data.brand
        product.price = data.price
        product.category = data.category
        product.release_date = data.release_date
        product.stock_quantity = data.stock_quantity
        # Nothing can be sold without stock, whatever the client asked for.
        product.product_available = data.product_available and data.stock_quantity > 0

        # Without a new upload the stored image is left untouched.
        if image is not None and image.data:
            product.image_name = image.filename
            product.image_type = image.content_type
            product.image_data = image.data
        return product

    @staticmethod
    async def _save(db: AsyncSession, product: Product):
        product_id = product.id
        try:
            return await ProductRepository.save_product(db, product)
        except SQLAlchemyError as e:
            await db.rollback()
            log.error("product_save_failed", product_id=product_id, error=str(e))
            raise StoreError(f"Failed to save product: {e}") from e

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate, image: ImageUpload | None = None):
        product = ProductService._apply(Product(), data, image)
        product = await ProductService._save(db, product)
        log.info("product_created", product_id=product.id, name=product.name)
        return product

    @staticmethod
    async def update_product(
        db: AsyncSession, product_id: int, data: ProductCreate, image: ImageUpload | None = None
    ):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")

        product = await ProductService._save(db, ProductService._apply(product, data, image))
        log.info("product_updated", product_id=product.id)
        return product

    @staticmethod
    async def list_products(db: AsyncSession):
        return await ProductRepository.get_all_products(db)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int):
        return await ProductRepository.get_product_by_id(db, product_id)

    @staticmethod
    async def get_product_image(db: AsyncSession, product_id: int):
        """Returns (bytes, mime type, filename) of the stored image."""
        product = await ProductRepository.get_product_by_id(db, product_id, with_image=True)
        if not product or product.image_data is None:
            raise NotFoundError(f"No image for product {product_id}")
        return product.image_data, product.image_type, product.image_name

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int):
        try:
            deleted = await ProductRepository.delete_product(db, product_id)
        except IntegrityError as e:
            await db.rollback()
            log.warning("product_delete_blocked", product_id=product_id)
            raise StoreError(f"Product {product_id} is referenced by existing orders") from e

        if not deleted:
            raise StoreError(f"Product {product_id} not found")
        log.info("product_deleted", product_id=product_id)

    @staticmethod
    async def search_products(db: AsyncSession, keyword: str):
        return await ProductRepository.search_products(db, keyword)
