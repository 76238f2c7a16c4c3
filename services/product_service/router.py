from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import NotFoundError, StoreError
from .schemas import ImageUpload, ProductCreate, ProductResponse
from .service import ProductService

router = APIRouter(tags=["Products"])
public_router = APIRouter()  # For any public endpoints (e.g. health check)


@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "storefront", "status": "running"}


async def product_form(
    product: str = Form(..., description="Product record as a JSON document"),
    image_file: UploadFile | None = File(default=None, alias="imageFile"),
) -> tuple[ProductCreate, ImageUpload | None]:
    """Multipart body shared by create and update: a JSON `product` part plus an optional image."""
    try:
        data = ProductCreate.model_validate_json(product)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid product: {e}")

    image = None
    if image_file is not None:
        image = ImageUpload(
            filename=image_file.filename,
            content_type=image_file.content_type,
            data=await image_file.read(),
        )
    return data, image


@router.get("/products", response_model=list[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_db)):
    return await ProductService.list_products(db)


@router.get("/products/search", response_model=list[ProductResponse])
async def search_products(
    keyword: str = Query(...),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.search_products(db, keyword)


@router.get("/product/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService.get_product_by_id(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/product/{product_id}/image")
async def get_product_image(product_id: int, db: AsyncSession = Depends(get_db)):
    try:
        data, media_type, _ = await ProductService.get_product_image(db, product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=data, media_type=media_type or "application/octet-stream")


@router.post("/product", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    form: tuple[ProductCreate, ImageUpload | None] = Depends(product_form),
    db: AsyncSession = Depends(get_db)
):
    data, image = form
    try:
        return await ProductService.create_product(db, data, image)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to create product: {e}")


@router.put("/product/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    form: tuple[ProductCreate, ImageUpload | None] = Depends(product_form),
    db: AsyncSession = Depends(get_db)
):
    data, image = form
    try:
        return await ProductService.update_product(db, product_id, data, image)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to update product: {e}")


@router.delete("/product/{product_id}")
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await ProductService.delete_product(db, product_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"message": "Product deleted"}
