"""
Pytest configuration and fixtures.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./storefront_test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-storefront-tests")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import uuid
from typing import Any, AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront import app
from storefront.auth.utils import create_access_token
from storefront.db.main import get_session
from storefront.db.models import Discount, DiscountType, Order, OrderItem, OrderStatus, Product, User


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, Any]:
    """In-memory database shared by every session of a single test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, Any]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, Any]:
    """HTTP client whose requests run against the test database."""
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session) -> Callable:
    async def _make_user(role: str = "user", is_verified: bool = True) -> User:
        name = f"user-{uuid.uuid4().hex[:8]}"
        user = User(username=name, email=f"{name}@example.com", role=role, is_verified=is_verified)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_product(session) -> Callable:
    async def _make_product(title: str = "Desk Lamp", price: float = 25.0) -> Product:
        product = Product(title=title, description="", price=price, stock=10)
        session.add(product)
        await session.commit()
        await session.refresh(product)
        return product
    return _make_product


@pytest.fixture
def make_discount(session) -> Callable:
    """Insert a discount row directly, bypassing create-time checks."""
    async def _make_discount(code: str = "SAVE20", discount_type: str = "percentage", value: float = 20, **fields) -> Discount:
        discount = Discount(code=code.upper(), discount_type=DiscountType(discount_type).value, value=value, **fields)
        session.add(discount)
        await session.commit()
        await session.refresh(discount)
        return discount
    return _make_discount


@pytest.fixture
def make_order(session) -> Callable:
    async def _make_order(user: User, product: Product, status: OrderStatus = OrderStatus.delivered) -> Order:
        order = Order(
            user_uid=user.uid,
            status=status,
            total_price=product.price,
            discount=0.0,
            final_price=product.price,
        )
        session.add(order)
        await session.commit()
        session.add(OrderItem(
            order_uid=order.uid,
            product_uid=product.uid,
            quantity=1,
            price_at_purchase=product.price,
            total_price=product.price,
        ))
        await session.commit()
        return order
    return _make_order


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token({"user_uid": str(user.uid), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers
