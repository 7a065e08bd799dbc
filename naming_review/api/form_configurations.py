"""
Form configuration API endpoints.
Reads are open to any caller; writes are admin-only.
"""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.api.auth import get_current_actor, require_admin
from naming_review.database import get_db
from naming_review.schemas.auth import Actor
from naming_review.schemas.form_configuration import (
    FormConfigurationCreate,
    FormConfigurationDeleteResponse,
    FormConfigurationResponse,
    FormConfigurationUpdate,
)
from naming_review.services import form_configs

logger = logging.getLogger(__name__)
router = APIRouter()


# Endpoints
@router.get("/active", response_model=Optional[FormConfigurationResponse])
async def get_active_configuration(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """
    Get the configuration new requests are submitted against.

    Returns null when no configuration is active.
    """
    return await form_configs.get_active_form_configuration(db)


@router.get("/", response_model=List[FormConfigurationResponse])
async def list_configurations(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """List all non-deleted configurations, newest first."""
    return await form_configs.list_form_configurations(db)


@router.get("/{config_id}", response_model=FormConfigurationResponse)
async def get_configuration(
    config_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return await form_configs.get_form_configuration(db, config_id)


@router.post("/", response_model=FormConfigurationResponse, status_code=201)
async def create_configuration(
    data: FormConfigurationCreate,
    db: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin)
):
    """
    Create a configuration.

    It stays inactive unless is_active is true, in which case every other
    configuration is deactivated.
    """
    config = await form_configs.create_form_configuration(db, data)
    logger.info(f"Admin {admin.id} created form configuration {config.id}")
    return config


@router.patch("/{config_id}", response_model=FormConfigurationResponse)
async def update_configuration(
    config_id: UUID,
    patch: FormConfigurationUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin)
):
    """Partially update a configuration. Submitted requests keep their snapshot."""
    return await form_configs.update_form_configuration(db, config_id, patch)


@router.put("/{config_id}/activate", response_model=FormConfigurationResponse)
async def activate_configuration(
    config_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin)
):
    """Make this the single active configuration."""
    config = await form_configs.activate_form_configuration(db, config_id)
    logger.info(f"Admin {admin.id} activated form configuration {config_id}")
    return config


@router.delete("/{config_id}", response_model=FormConfigurationDeleteResponse)
async def delete_configuration(
    config_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin)
):
    """
    Delete a configuration.

    Configurations that requests were submitted against are soft-deleted.
    """
    soft = await form_configs.delete_form_configuration(db, config_id)
    return FormConfigurationDeleteResponse(
        id=config_id,
        soft_deleted=soft,
        message="Form configuration archived" if soft else "Form configuration deleted",
    )
