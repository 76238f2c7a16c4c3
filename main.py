import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shared.config.database import create_tables
from shared.observability import setup_observability

# IMPORTANT: import models so they register with Base
from services.product_service import models as product_models
from services.order_service import models as order_models

from services.product_service.router import router as product_router, public_router
from services.order_service.router import router as order_router

SERVICE_NAME = os.getenv("SERVICE_NAME", "storefront")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

app = FastAPI(title="Storefront", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, SERVICE_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(public_router)
app.include_router(product_router, prefix="/api")
app.include_router(order_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    await create_tables()
