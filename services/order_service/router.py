from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import NotFoundError, StoreError
from .schemas import OrderRequest, OrderResponse
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/place", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(order: OrderRequest, db: AsyncSession = Depends(get_db)):
    try:
        return await OrderService.place_order(db, order)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        # ValidationFailure, including insufficient stock
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("", response_model=list[OrderResponse])
async def list_orders(db: AsyncSession = Depends(get_db)):
    return await OrderService.list_orders(db)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return await OrderService.get_order(db, order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
