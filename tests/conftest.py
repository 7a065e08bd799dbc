"""
Pytest fixtures for testing.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import naming_review.database
from naming_review.database import Base
# Import ALL models so Base.metadata knows about all tables
from naming_review.models import FormConfiguration, NamingRequest, RequestStatus
from naming_review.schemas.form_configuration import FormConfigurationCreate
from naming_review.services.form_configs import create_form_configuration
from naming_review.services.lifecycle import submit_request, transition_request
from naming_review.services.claims import claim_request

# Now import app (after we can override database)
from naming_review.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SUBMITTER = {"X-Actor-Id": "sub-1", "X-Actor-Role": "submitter", "X-Actor-Name": "Sam Submitter"}
OTHER_SUBMITTER = {"X-Actor-Id": "sub-2", "X-Actor-Role": "submitter", "X-Actor-Name": "Olga Other"}
REVIEWER = {"X-Actor-Id": "rev-1", "X-Actor-Role": "reviewer", "X-Actor-Name": "Rita Reviewer"}
OTHER_REVIEWER = {"X-Actor-Id": "rev-2", "X-Actor-Role": "reviewer", "X-Actor-Name": "Ravi Reviewer"}
ADMIN = {"X-Actor-Id": "adm-1", "X-Actor-Role": "admin", "X-Actor-Name": "Ada Admin"}

NAMING_FIELDS = [
    {"name": "proposedName", "label": "Proposed name", "field_type": "text", "required": True, "max_length": 60},
    {"name": "description", "label": "Description", "field_type": "textarea", "required": True},
    {"name": "serviceLine", "label": "Service line", "field_type": "select", "required": True,
     "options": ["Consulting", "Audit", "Tax"]},
    {"field_type": "content-block", "content": "Names must be cleared by legal before use."},
    {"name": "ipr", "label": "IPR", "field_type": "radio", "options": ["Yes", "No"]},
    {"name": "launchDate", "label": "Launch date", "field_type": "date"},
]


def naming_values(name: str = "Project Atlas", **overrides) -> dict:
    values = {
        "proposedName": name,
        "description": f"{name} is an analytics offering",
        "serviceLine": "Consulting",
        "ipr": "No",
    }
    values.update(overrides)
    return values


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # StaticPool keeps a single connection alive so every session sees the
    # same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Replace the app's engine and sessionmaker so get_db() uses the test DB
    original_engine = naming_review.database.engine
    original_sessionmaker = naming_review.database.AsyncSessionLocal

    naming_review.database.engine = test_engine
    naming_review.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    session = async_session()

    try:
        yield session
    finally:
        await session.close()
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await test_engine.dispose()

        naming_review.database.engine = original_engine
        naming_review.database.AsyncSessionLocal = original_sessionmaker


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing endpoints.

    The db fixture already replaced naming_review.database.engine with the
    test engine, so all endpoints automatically use the test database.
    """
    transport = ASGITransport(app=fastapi_app)

    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True  # Follow 307 redirects for trailing slashes
    ) as client:
        yield client


@pytest_asyncio.fixture
async def active_config(db: AsyncSession) -> FormConfiguration:
    """The active intake form."""
    return await create_form_configuration(
        db,
        FormConfigurationCreate(name="Naming Request v1", fields=NAMING_FIELDS, is_active=True),
    )


@pytest_asyncio.fixture
async def submitted_request(db: AsyncSession, active_config: FormConfiguration) -> NamingRequest:
    return await submit_request(
        db, None, naming_values(), requestor_id=SUBMITTER["X-Actor-Id"], requestor_name=SUBMITTER["X-Actor-Name"]
    )


@pytest.fixture
def advance(db: AsyncSession):
    """Drive a request along the happy path up to a target status."""
    path = [RequestStatus.UNDER_REVIEW, RequestStatus.FINAL_REVIEW]

    async def _advance(request: NamingRequest, target: RequestStatus) -> NamingRequest:
        if request.reviewer_id is None:
            request = await claim_request(db, request.id, REVIEWER["X-Actor-Id"], REVIEWER["X-Actor-Name"])
        for status in path:
            if request.status == target.value:
                break
            request = await transition_request(db, request.id, status, actor_id=REVIEWER["X-Actor-Id"])
        return request

    return _advance
