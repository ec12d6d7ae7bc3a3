"""
Shared fixtures: a throwaway SQLite database per test, a seeded catalog and an
HTTP client wired to the same database through dependency overrides.
"""
import os

# Глобальный движок не должен тянуть PostgreSQL при импорте приложения в тестах
os.environ.setdefault("CART_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from dataclasses import dataclass
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from cart_service.db.database import create_engine, get_db
from cart_service.db.init_db import init_db
from cart_service.db.models import Category, Product, User
from cart_service.engine import CartEngine
from cart_service.main import app


@dataclass
class Catalog:
    user_id: int
    other_user_id: int
    category_id: int
    product_id: int
    cheap_product_id: int
    sold_out_product_id: int


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'cart.db'}", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def cart_engine(db) -> CartEngine:
    return CartEngine(db)


@pytest.fixture
async def catalog(session_factory) -> Catalog:
    """
    Two users without carts, one category and three products:
    - product: price 19.99, stock 5
    - cheap_product: price 5.00, stock 100
    - sold_out_product: price 1.50, stock 0
    """
    async with session_factory() as session:
        user = User(email="ada@example.com", first_name="Ada", last_name="Lovelace", hashed_password="x")
        other = User(email="alan@example.com", first_name="Alan", last_name="Turing", hashed_password="x")
        category = Category(name="Books", description="Paper and ink")
        product = Product(
            name="Notebook", description="A5, dotted", price=Decimal("19.99"), stock_quantity=5, category=category
        )
        cheap = Product(
            name="Pencil", description="HB", price=Decimal("5.00"), stock_quantity=100, category=category
        )
        sold_out = Product(
            name="Eraser", description="", price=Decimal("1.50"), stock_quantity=0, category=category
        )
        session.add_all([user, other, category, product, cheap, sold_out])
        await session.commit()
        return Catalog(
            user_id=user.id,
            other_user_id=other.id,
            category_id=category.id,
            product_id=product.id,
            cheap_product_id=cheap.id,
            sold_out_product_id=sold_out.id,
        )


@pytest.fixture
def count_rows(session_factory):
    """Counts rows of a model in a fresh session, i.e. what is actually persisted."""

    async def _count(model) -> int:
        async with session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()

    return _count


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()
