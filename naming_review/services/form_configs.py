"""
Form configuration store.

At most one configuration is active. A partial unique index enforces it, and
activation runs as two UPDATEs in one transaction: switch the others off
(only if the target exists and is not deleted), then switch the target on.
A missing target leaves the current active configuration untouched. Names are
unique among non-deleted configurations, so an archived name can be reused.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from naming_review.database_types import utcnow
from naming_review.errors import ConflictError, NotFoundError, ValidationError
from naming_review.models.form_configuration import FormConfiguration
from naming_review.models.naming_request import NamingRequest
from naming_review.schemas.form_configuration import FormConfigurationCreate, FormConfigurationUpdate
from naming_review.services.form_validation import normalize_field_definitions
from naming_review.services.storage import storage_errors

logger = logging.getLogger(__name__)


async def _load(db: AsyncSession, config_id: UUID) -> FormConfiguration:
    """Fetch a non-deleted configuration, bypassing stale identity-map state."""
    config = await db.get(FormConfiguration, config_id, populate_existing=True)
    if config is None or config.is_deleted:
        raise NotFoundError("FormConfiguration", config_id)
    return config


def _clean_name(raw: str) -> str:
    name = raw.strip()
    if not name:
        raise ValidationError.single("name", "Name is required")
    return name


async def _ensure_name_available(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> None:
    query = select(FormConfiguration.id).where(
        FormConfiguration.name == name,
        FormConfiguration.deleted_at.is_(None),
    )
    if exclude_id is not None:
        query = query.where(FormConfiguration.id != exclude_id)
    existing = (await db.execute(query)).scalar_one_or_none()
    if existing is not None:
        raise ConflictError("FormConfiguration", existing, f"A form configuration named '{name}' already exists")


async def _apply_activation(db: AsyncSession, config_id: UUID) -> int:
    """
    Activate config_id inside the caller's transaction.

    Other rows are switched off before the target is switched on, so the
    single-active index never holds two active rows even when it is checked
    row by row. A concurrent activation that got there first makes the second
    statement violate that index, which surfaces as ConflictError.

    Returns:
        1 when activated, 0 when the target is missing or deleted (nothing changed)
    """
    target = aliased(FormConfiguration)
    target_exists = (
        select(target.id)
        .where(target.id == config_id, target.deleted_at.is_(None))
        .exists()
    )
    now = utcnow()
    try:
        await db.execute(
            update(FormConfiguration)
            .where(target_exists, FormConfiguration.is_active.is_(True), FormConfiguration.id != config_id)
            .values(is_active=False, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(
            update(FormConfiguration)
            .where(FormConfiguration.id == config_id, FormConfiguration.deleted_at.is_(None))
            .values(is_active=True, updated_at=now)
            .execution_options(synchronize_session=False)
        )
    except IntegrityError:
        logger.warning(f"Activation of form configuration {config_id} lost a race")
        raise ConflictError(
            "FormConfiguration", config_id, "Another form configuration was activated at the same time"
        )
    return result.rowcount


async def create_form_configuration(
    db: AsyncSession,
    data: FormConfigurationCreate,
) -> FormConfiguration:
    """
    Create a configuration. It is inactive unless data.is_active is set, in
    which case it is activated in the same transaction.

    Raises:
        ValidationError: Blank name or invalid field definitions
        ConflictError: Duplicate configuration name
    """
    async with storage_errors(db, "create_form_configuration"):
        name = _clean_name(data.name)
        fields = normalize_field_definitions(data.fields)
        await _ensure_name_available(db, name)

        config = FormConfiguration(
            name=name,
            description=data.description,
            fields=fields,
            is_active=False,
        )
        db.add(config)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("FormConfiguration", name, f"A form configuration named '{name}' already exists")

        if data.is_active:
            await _apply_activation(db, config.id)

        await db.commit()
        config = await db.get(FormConfiguration, config.id, populate_existing=True)

    logger.info(
        f"Created form configuration {config.id} ('{config.name}')",
        extra={"form_config_id": str(config.id), "active": config.is_active, "field_count": len(fields)},
    )
    return config


async def activate_form_configuration(db: AsyncSession, config_id: UUID) -> FormConfiguration:
    """
    Make config_id the only active configuration.

    Raises:
        NotFoundError: Unknown or deleted configuration (nothing is changed)
    """
    async with storage_errors(db, "activate_form_configuration"):
        touched = await _apply_activation(db, config_id)
        if touched == 0:
            raise NotFoundError("FormConfiguration", config_id)
        await db.commit()
        config = await _load(db, config_id)

    logger.info(f"Activated form configuration {config_id}", extra={"form_config_id": str(config_id)})
    return config


async def get_active_form_configuration(db: AsyncSession) -> Optional[FormConfiguration]:
    """Return the active configuration, or None when no configuration is active."""
    async with storage_errors(db, "get_active_form_configuration"):
        result = await db.execute(
            select(FormConfiguration)
            .where(FormConfiguration.is_active.is_(True), FormConfiguration.deleted_at.is_(None))
            .order_by(FormConfiguration.updated_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()


async def get_form_configuration(db: AsyncSession, config_id: UUID) -> FormConfiguration:
    async with storage_errors(db, "get_form_configuration"):
        return await _load(db, config_id)


async def list_form_configurations(db: AsyncSession) -> list[FormConfiguration]:
    """All non-deleted configurations, newest first."""
    async with storage_errors(db, "list_form_configurations"):
        result = await db.execute(
            select(FormConfiguration)
            .where(FormConfiguration.deleted_at.is_(None))
            .order_by(FormConfiguration.created_at.desc(), FormConfiguration.id.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())


async def update_form_configuration(
    db: AsyncSession,
    config_id: UUID,
    patch: FormConfigurationUpdate,
) -> FormConfiguration:
    """
    Partially update a configuration.

    Editing fields never touches existing requests; they keep their snapshot.
    is_active=True goes through the activation protocol, is_active=False only
    deactivates this configuration.

    Raises:
        NotFoundError, ValidationError, ConflictError
    """
    async with storage_errors(db, "update_form_configuration"):
        config = await _load(db, config_id)
        changes = patch.model_dump(exclude_unset=True)

        if changes.get("name") is not None:
            name = _clean_name(patch.name)
            await _ensure_name_available(db, name, exclude_id=config.id)
            config.name = name
        if "description" in changes:
            config.description = patch.description
        if patch.fields is not None:
            config.fields = normalize_field_definitions(patch.fields)
        if patch.is_active is False:
            config.is_active = False

        config.updated_at = utcnow()
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("FormConfiguration", config_id, f"A form configuration named '{config.name}' already exists")

        if patch.is_active:
            await _apply_activation(db, config.id)

        await db.commit()
        config = await _load(db, config_id)

    logger.info(f"Updated form configuration {config_id}", extra={"changed": sorted(changes)})
    return config


async def delete_form_configuration(db: AsyncSession, config_id: UUID) -> bool:
    """
    Delete a configuration.

    Configurations referenced by requests are soft-deleted so the foreign key
    and historical snapshots stay valid; unreferenced ones are removed.

    Returns:
        True if soft-deleted, False if hard-deleted

    Raises:
        NotFoundError: Unknown or already deleted configuration
    """
    async with storage_errors(db, "delete_form_configuration"):
        config = await _load(db, config_id)
        references = (await db.execute(
            select(func.count()).select_from(NamingRequest).where(NamingRequest.form_config_id == config_id)
        )).scalar_one()

        if references:
            config.deleted_at = utcnow()
            config.is_active = False
            soft = True
        else:
            await db.delete(config)
            soft = False
        await db.commit()

    logger.info(
        f"{'Soft' if soft else 'Hard'} deleted form configuration {config_id}",
        extra={"form_config_id": str(config_id), "references": references},
    )
    return soft
