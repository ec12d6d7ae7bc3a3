# cart_service/main.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from cart_service.config import settings
from cart_service.db.database import get_db
from cart_service.db.init_db import init_db
from cart_service.db.schemas import AddToCartRequest, CartResponse
from cart_service.engine import CartEngine
from cart_service.exceptions import (
    CartEmpty,
    CartServiceError,
    InsufficientStock,
    InvalidQuantity,
    NotFound,
    PersistenceFailure,
)

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    logger.info("cart_service starting up")
    await init_db()
    yield
    logger.info("cart_service shutting down")


app = FastAPI(title="cart_service", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_engine(db: AsyncSession = Depends(get_db)) -> CartEngine:
    return CartEngine(db)


def _error_response(status_code: int, exc: CartServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.__class__.__name__, **exc.extra()},
    )


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return _error_response(404, exc)


@app.exception_handler(InsufficientStock)
async def insufficient_stock_handler(request: Request, exc: InsufficientStock):
    return _error_response(409, exc)


@app.exception_handler(CartEmpty)
async def cart_empty_handler(request: Request, exc: CartEmpty):
    return _error_response(409, exc)


@app.exception_handler(InvalidQuantity)
async def invalid_quantity_handler(request: Request, exc: InvalidQuantity):
    return _error_response(422, exc)


@app.exception_handler(PersistenceFailure)
async def persistence_failure_handler(request: Request, exc: PersistenceFailure):
    return _error_response(503, exc)


# Получение корзины (создаётся при первом обращении)
@app.get("/cart/{user_id}", response_model=CartResponse)
async def get_cart(user_id: int, engine: CartEngine = Depends(get_engine)):
    cart = await engine.fetch_or_create_cart(user_id)
    return CartResponse.from_cart(cart)


# Добавление товара в корзину
@app.post("/cart/{user_id}/items", response_model=CartResponse)
async def add_to_cart(user_id: int, item: AddToCartRequest, engine: CartEngine = Depends(get_engine)):
    cart = await engine.add_to_cart(user_id, item.product_id, item.quantity)
    return CartResponse.from_cart(cart)


# Удаление товара из корзины
@app.delete("/cart/{user_id}/items/{cart_item_id}", response_model=CartResponse)
async def remove_from_cart(user_id: int, cart_item_id: int, engine: CartEngine = Depends(get_engine)):
    cart = await engine.remove_from_cart(user_id, cart_item_id)
    return CartResponse.from_cart(cart)


@app.get("/")
async def health_check():
    """Health check endpoint."""
    return {"status": "cart_service running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cart_service.main:app", host="0.0.0.0", port=8003, log_level=settings.LOG_LEVEL.lower())
