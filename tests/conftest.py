import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_PASSWORD", "Admin@123")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("MONGO_DATABASE", "noyo_test")

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from src.config.database import startDB
from src.crud.userService import optional_active_user
from src.models.productModel import Product
from src.models.userModel import User


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    await startDB(client=client)
    yield client


@pytest.fixture
def make_product(db):
    async def _make(**overrides) -> Product:
        fields = dict(
            name="Vitamin C Serum",
            description="Brightening serum",
            price=100,
            category="Skincare",
            brand="Glow Labs",
            skin_type=["Normal"],
            stock=10,
        )
        fields.update(overrides)
        product = Product(**fields)
        await product.insert()
        return product

    return _make


@pytest.fixture
def make_user(db):
    async def _make(email="jane@example.com", roles=None) -> User:
        user = User(
            email=email,
            hashed_password="not-a-real-hash",
            full_name=email.split("@")[0].title(),
            roles=roles or ["user"],
        )
        await user.insert()
        return user

    return _make


@pytest.fixture
async def shopper(make_user):
    return await make_user("shopper@example.com")


@pytest.fixture
async def admin(make_user):
    return await make_user("boss@example.com", roles=["user", "admin"])


@pytest.fixture
def app():
    from src.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client_as(app, db):
    """Build an HTTP client authenticated as ``user`` (None for anonymous)"""
    def _client(user):
        app.dependency_overrides[optional_active_user] = lambda: user
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _client
