"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from shippro.app.main import app
from shippro.app.core.config import settings
from shippro.app.core.jwt import issue_session_token
from shippro.app.core.reliability import geocoding_circuit_breaker
from shippro.app.db.session import get_db, Base
from shippro.app.models.service import Service

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

EXPRESS_SERVICE_ID = "507f1f77bcf86cd799439011"


def _enable_foreign_keys(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(test_engine.sync_engine, "connect", _enable_foreign_keys)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Shared session for fixture data creation."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Async client for testing, bound to the per-test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def sent_emails(mocker):
    """Outbound SMTP is never touched; every send reports success."""
    return mocker.patch(
        "shippro.app.services.notification_service.send_email",
        new=mocker.AsyncMock(return_value=True),
    )


@pytest.fixture(autouse=True)
def offline_geocoding(mocker):
    """No API key, so geocoding always uses the static table."""
    mocker.patch.object(settings, "google_maps_api_key", None)
    geocoding_circuit_breaker.reset_state()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {issue_session_token('user_admin', 'ops@ship-pro.com', 'admin')}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {issue_session_token('user_regular', 'clerk@ship-pro.com', 'user')}"}


@pytest.fixture
async def express_service(db_session):
    service = Service(
        id=EXPRESS_SERVICE_ID,
        name="Express Delivery",
        description="Fast delivery service",
        features=["Same day pickup", "Priority handling"],
        price="$25.00",
        icon="🚀",
        active=True,
    )
    db_session.add(service)
    await db_session.commit()
    return service


@pytest.fixture
def shipment_payload():
    """A valid create-shipment body (camelCase, as clients send it)."""
    return {
        "senderName": "Alice Sender",
        "senderEmail": "alice@example.com",
        "senderPhone": "+1 555 0100",
        "senderAddress": {
            "street": "1 Market St",
            "city": "San Francisco",
            "state": "CA",
            "postalCode": "94105",
            "country": "United States",
        },
        "receiverName": "Bob Receiver",
        "receiverEmail": "bob@example.com",
        "receiverAddress": {
            "street": "10 Downing St",
            "city": "London",
            "state": "",
            "postalCode": "SW1A 2AA",
            "country": "United Kingdom",
        },
        "serviceId": EXPRESS_SERVICE_ID,
        "weight": 2.5,
        "dimensions": {"length": 30, "width": 20, "height": 10, "unit": "cm"},
        "value": 150.0,
        "description": "Books",
        "estimatedCost": 42.5,
    }


@pytest.fixture
async def created_shipment(client, user_headers, express_service, shipment_payload):
    """A shipment created through the API; returns the response JSON."""
    response = await client.post("/api/shipments", json=shipment_payload, headers=user_headers)
    assert response.status_code == 201, response.text
    return response.json()["shipment"]
