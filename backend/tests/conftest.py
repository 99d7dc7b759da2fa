import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("PAYPAL_CLIENT_ID", "")
os.environ.setdefault("PAYPAL_CLIENT_SECRET", "")

from typing import AsyncGenerator, Dict

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from edusphere.database import Base, get_db
from edusphere.main import app
from edusphere.models.user import User
import edusphere.models  # noqa: F401

SEED_USERS = {
    "alice": ("user_alice", "alice@example.com", "Alice", "Ng"),
    "bob": ("user_bob", "bob@example.com", "Bob", "Okafor"),
    "carol": ("user_carol", "carol@example.com", "Carol", "Diaz"),
    "dave": ("user_dave", "dave@example.com", None, None),
}


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def users(session_factory) -> Dict[str, User]:
    seeded = {}
    async with session_factory() as session:
        for key, (clerk_id, email, first_name, last_name) in SEED_USERS.items():
            user = User(clerk_id=clerk_id, email=email, first_name=first_name, last_name=last_name)
            session.add(user)
            seeded[key] = user
        await session.commit()
    return seeded


@pytest.fixture
async def client(session_factory, users) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    for attr in ("paypal_client", "premium_service"):
        if hasattr(app.state, attr):
            delattr(app.state, attr)


def as_user(key: str) -> Dict[str, str]:
    return {"X-User-ID": SEED_USERS[key][0]}


class FakeWebSocket:
    """Collects what the change hub sends; optionally fails on send."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


PAYPAL_BASE_URL = "https://api-m.sandbox.paypal.com"


class FakePayPal:
    """Minimal PayPal REST double served through httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.fail_paths = set()
        self.subscription_status = "APPROVAL_PENDING"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.fail_paths:
            return httpx.Response(422, json={"name": "UNPROCESSABLE_ENTITY", "message": "Request is not well-formed"})

        if path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "A21-token", "expires_in": 32400})
        if path == "/v2/checkout/orders":
            return httpx.Response(
                201,
                json={
                    "id": "ORDER-1",
                    "status": "CREATED",
                    "links": [
                        {"href": f"{PAYPAL_BASE_URL}/v2/checkout/orders/ORDER-1", "rel": "self", "method": "GET"},
                        {"href": "https://www.sandbox.paypal.com/checkoutnow?token=ORDER-1", "rel": "approve", "method": "GET"},
                    ],
                },
            )
        if path == "/v2/checkout/orders/ORDER-1/capture":
            return httpx.Response(201, json={"id": "ORDER-1", "status": "COMPLETED"})
        if path == "/v2/checkout/orders/ORDER-1":
            return httpx.Response(200, json={"id": "ORDER-1", "status": "APPROVED"})
        if path == "/v1/catalogs/products":
            return httpx.Response(201, json={"id": "PROD-1", "name": json.loads(request.content)["name"]})
        if path == "/v1/billing/plans":
            return httpx.Response(201, json={"id": "P-1", "status": "ACTIVE"})
        if path == "/v1/billing/subscriptions":
            return httpx.Response(
                201,
                json={
                    "id": "I-SUB1",
                    "status": "APPROVAL_PENDING",
                    "links": [{"href": "https://www.sandbox.paypal.com/webapps/billing/subscriptions?ba_token=BA-1", "rel": "approve", "method": "GET"}],
                },
            )
        if path == "/v1/billing/subscriptions/I-SUB1":
            return httpx.Response(200, json={"id": "I-SUB1", "status": self.subscription_status})
        if path == "/v1/billing/subscriptions/I-SUB1/cancel":
            self.subscription_status = "CANCELLED"
            return httpx.Response(204)
        return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND", "message": "Unknown resource"})

    def calls_to(self, path: str):
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def fake_paypal() -> FakePayPal:
    return FakePayPal()
