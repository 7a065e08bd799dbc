"""
Tests for the form configuration store and its API.

Validates:
- At most one active configuration after any activation sequence
- Activating a missing configuration changes nothing
- Duplicate names conflict, but a soft-deleted name can be reused
- Blank names are rejected
- Concurrent activations leave exactly one active configuration
- Referenced configurations are soft-deleted
- Admin-only writes
"""
import asyncio
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import event, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from naming_review.database import Base
from naming_review.errors import ConflictError, NotFoundError, ValidationError
from naming_review.models.form_configuration import FormConfiguration
from naming_review.schemas.form_configuration import FormConfigurationCreate, FormConfigurationUpdate
from naming_review.services.form_configs import (
    activate_form_configuration,
    create_form_configuration,
    delete_form_configuration,
    get_active_form_configuration,
    get_form_configuration,
    list_form_configurations,
    update_form_configuration,
)
from naming_review.services.lifecycle import submit_request
from tests.conftest import ADMIN, NAMING_FIELDS, REVIEWER, SUBMITTER, naming_values


async def _make(db, name: str, active: bool = False) -> FormConfiguration:
    return await create_form_configuration(
        db, FormConfigurationCreate(name=name, fields=NAMING_FIELDS, is_active=active)
    )


async def _active_ids(db) -> list:
    result = await db.execute(
        select(FormConfiguration.id).where(FormConfiguration.is_active.is_(True))
    )
    return list(result.scalars().all())


# =============================================================================
# Store
# =============================================================================

@pytest.mark.asyncio
async def test_create_is_inactive_by_default(db):
    config = await _make(db, "Draft")

    assert config.is_active is False
    assert await get_active_form_configuration(db) is None


@pytest.mark.asyncio
async def test_create_normalizes_fields(db):
    config = await _make(db, "Intake")

    names = [f["name"] for f in config.fields]
    assert names == ["proposedName", "description", "serviceLine", "content_3", "ipr", "launchDate"]


@pytest.mark.asyncio
async def test_create_rejects_invalid_fields(db):
    with pytest.raises(ValidationError):
        await create_form_configuration(
            db, FormConfigurationCreate(name="Broken", fields=[{"name": "a b", "field_type": "text"}])
        )

    assert await list_form_configurations(db) == []


@pytest.mark.asyncio
async def test_duplicate_name_conflicts(db):
    await _make(db, "Intake")

    with pytest.raises(ConflictError):
        await _make(db, "Intake")


@pytest.mark.asyncio
async def test_blank_name_is_rejected(db):
    with pytest.raises(ValidationError) as exc_info:
        await _make(db, "   ")
    assert exc_info.value.fields == ["name"]
    assert await list_form_configurations(db) == []

    config = await _make(db, "Intake")
    with pytest.raises(ValidationError):
        await update_form_configuration(db, config.id, FormConfigurationUpdate(name="\t "))
    assert (await get_form_configuration(db, config.id)).name == "Intake"


@pytest.mark.asyncio
async def test_soft_deleted_name_can_be_reused(db):
    old = await _make(db, "Intake", active=True)
    await submit_request(db, None, naming_values(), requestor_id="sub-1")
    assert await delete_form_configuration(db, old.id) is True

    new = await _make(db, "Intake", active=True)

    assert new.id != old.id
    assert [c.id for c in await list_form_configurations(db)] == [new.id]
    assert await _active_ids(db) == [new.id]

    # Only one live configuration may hold the name
    with pytest.raises(ConflictError):
        await _make(db, "Intake")


@pytest.mark.asyncio
async def test_schema_refuses_two_active_rows(db):
    await _make(db, "A", active=True)
    await _make(db, "B")

    with pytest.raises(IntegrityError):
        await db.execute(update(FormConfiguration).values(is_active=True))
    await db.rollback()

    assert len(await _active_ids(db)) == 1


@pytest.mark.asyncio
async def test_activation_sequence_leaves_exactly_one_active(db):
    a = await _make(db, "A", active=True)
    b = await _make(db, "B", active=True)
    c = await _make(db, "C")

    assert await _active_ids(db) == [b.id]

    await activate_form_configuration(db, c.id)
    await activate_form_configuration(db, a.id)
    await activate_form_configuration(db, a.id)

    assert await _active_ids(db) == [a.id]
    active = await get_active_form_configuration(db)
    assert active.id == a.id


@pytest.mark.asyncio
async def test_activate_missing_leaves_previous_active(db):
    a = await _make(db, "A", active=True)

    with pytest.raises(NotFoundError):
        await activate_form_configuration(db, uuid.uuid4())

    assert await _active_ids(db) == [a.id]


@pytest.mark.asyncio
async def test_update_with_activation_and_deactivation(db):
    a = await _make(db, "A", active=True)
    b = await _make(db, "B")

    await update_form_configuration(db, b.id, FormConfigurationUpdate(is_active=True))
    assert await _active_ids(db) == [b.id]

    updated = await update_form_configuration(
        db, b.id, FormConfigurationUpdate(is_active=False, description="retired")
    )
    assert updated.is_active is False
    assert updated.description == "retired"
    assert await _active_ids(db) == []

    # A stays inactive; deactivation does not pick a replacement
    assert (await get_form_configuration(db, a.id)).is_active is False


@pytest.mark.asyncio
async def test_update_rename_conflict(db):
    await _make(db, "A")
    b = await _make(db, "B")

    with pytest.raises(ConflictError):
        await update_form_configuration(db, b.id, FormConfigurationUpdate(name="A"))


@pytest.mark.asyncio
async def test_unreferenced_config_is_hard_deleted(db):
    a = await _make(db, "A")

    soft = await delete_form_configuration(db, a.id)

    assert soft is False
    count = (await db.execute(select(func.count()).select_from(FormConfiguration))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
async def test_referenced_config_is_soft_deleted(db):
    a = await _make(db, "A", active=True)
    request = await submit_request(db, None, naming_values(), requestor_id="sub-1")

    soft = await delete_form_configuration(db, a.id)

    assert soft is True
    assert await get_active_form_configuration(db) is None
    assert await list_form_configurations(db) == []
    with pytest.raises(NotFoundError):
        await get_form_configuration(db, a.id)
    with pytest.raises(NotFoundError):
        await activate_form_configuration(db, a.id)

    # The request keeps its snapshot
    assert request.form_snapshot[0]["name"] == "proposedName"


@pytest.mark.asyncio
async def test_editing_fields_does_not_touch_existing_snapshots(db):
    a = await _make(db, "A", active=True)
    request = await submit_request(db, None, naming_values(), requestor_id="sub-1")

    await update_form_configuration(
        db, a.id, FormConfigurationUpdate(fields=[{"name": "onlyField", "field_type": "text"}])
    )

    await db.refresh(request)
    assert len(request.form_snapshot) == len(NAMING_FIELDS)


# =============================================================================
# Concurrent Activation
# =============================================================================

@pytest.mark.asyncio
async def test_concurrent_activations_leave_one_active(tmp_path):
    """
    Activations and active creates race on separate connections. SQLite runs
    them one at a time under BEGIN IMMEDIATE, so every call succeeds and the
    last one to commit is the single active configuration.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'activate.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as setup:
            existing = [await _make(setup, f"Existing {i}") for i in range(3)]

        async def activate(config_id):
            async with session_factory() as session:
                return await activate_form_configuration(session, config_id)

        async def create_active(name: str):
            async with session_factory() as session:
                return await _make(session, name, active=True)

        results = await asyncio.gather(
            *(activate(c.id) for c in existing),
            create_active("Fresh 1"),
            create_active("Fresh 2"),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        assert failures == []

        async with session_factory() as check:
            active = await _active_ids(check)
            assert len(active) == 1
            assert active[0] in {r.id for r in results}
            assert (await get_active_form_configuration(check)).id == active[0]
    finally:
        await engine.dispose()


# =============================================================================
# API
# =============================================================================

@pytest.mark.asyncio
async def test_api_create_and_activate(async_client: AsyncClient):
    response = await async_client.post(
        "/api/form-configurations/",
        json={"name": "Intake", "fields": NAMING_FIELDS},
        headers=ADMIN,
    )
    assert response.status_code == 201
    config = response.json()
    assert config["is_active"] is False

    response = await async_client.get("/api/form-configurations/active", headers=SUBMITTER)
    assert response.status_code == 200
    assert response.json() is None

    response = await async_client.put(f"/api/form-configurations/{config['id']}/activate", headers=ADMIN)
    assert response.status_code == 200
    assert response.json()["is_active"] is True

    response = await async_client.get("/api/form-configurations/active", headers=SUBMITTER)
    assert response.json()["id"] == config["id"]


@pytest.mark.asyncio
async def test_api_writes_require_admin(async_client: AsyncClient):
    response = await async_client.post(
        "/api/form-configurations/",
        json={"name": "Intake", "fields": NAMING_FIELDS},
        headers=REVIEWER,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_api_missing_identity_is_unauthorized(async_client: AsyncClient):
    response = await async_client.get("/api/form-configurations/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_api_validation_error_body(async_client: AsyncClient):
    response = await async_client.post(
        "/api/form-configurations/",
        json={"name": "Intake", "fields": [{"name": "line", "field_type": "select"}]},
        headers=ADMIN,
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "validation_error"
    assert body["detail"]["errors"][0]["field"] == "line"


@pytest.mark.asyncio
async def test_api_blank_name_is_422(async_client: AsyncClient):
    response = await async_client.post(
        "/api/form-configurations/",
        json={"name": "   ", "fields": NAMING_FIELDS},
        headers=ADMIN,
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [{"field": "name", "message": "Name is required"}]


@pytest.mark.asyncio
async def test_api_activate_unknown_is_404(async_client: AsyncClient):
    response = await async_client.put(f"/api/form-configurations/{uuid.uuid4()}/activate", headers=ADMIN)

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_api_delete_reports_soft_delete(async_client: AsyncClient, submitted_request, active_config):
    response = await async_client.delete(f"/api/form-configurations/{active_config.id}", headers=ADMIN)

    assert response.status_code == 200
    assert response.json()["soft_deleted"] is True
