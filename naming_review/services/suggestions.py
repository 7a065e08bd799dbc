"""
Relay to the optional AI suggestion service.

Hints are advisory. Any collaborator failure (not configured, unreachable,
timeout, non-200, malformed body) yields an "unavailable" response and never
an error, and nothing here takes part in a lifecycle transition.
"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.config import settings
from naming_review.errors import ValidationError
from naming_review.schemas.form_configuration import FieldDefinition
from naming_review.schemas.suggestion import SuggestionRequest, SuggestionResponse
from naming_review.services.form_configs import get_active_form_configuration, get_form_configuration

logger = logging.getLogger(__name__)

UNAVAILABLE = SuggestionResponse(available=False)


async def _resolve_field(db: AsyncSession, payload: SuggestionRequest) -> FieldDefinition:
    if payload.form_config_id is not None:
        config = await get_form_configuration(db, payload.form_config_id)
    else:
        config = await get_active_form_configuration(db)
        if config is None:
            raise ValidationError.single("form_config_id", "No active form configuration")

    for raw in config.fields:
        if raw.get("name") == payload.field_name:
            field = FieldDefinition.model_validate(raw)
            break
    else:
        raise ValidationError.single("field_name", f"Unknown field '{payload.field_name}'")

    enabled = field.ai_suggest if payload.mode == "suggest" else field.ai_evaluate
    if not enabled:
        raise ValidationError.single("field_name", f"AI {payload.mode} is not enabled for '{field.name}'")
    return field


async def fetch_suggestion(
    field: FieldDefinition,
    value: Optional[str],
    mode: str,
    session: aiohttp.ClientSession,
    url: str,
    timeout_s: float,
) -> SuggestionResponse:
    """POST one hint request to the collaborator."""
    body = {
        "field": field.name,
        "label": field.label,
        "helper_text": field.ai_helper_text,
        "value": value,
        "mode": mode,
    }
    try:
        timeout = aiohttp.ClientTimeout(total=timeout_s)
        async with session.post(url, json=body, timeout=timeout) as resp:
            if resp.status != 200:
                logger.warning(f"Suggestion service returned {resp.status} for field {field.name}")
                return UNAVAILABLE
            data: Any = await resp.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.warning(f"Suggestion service unavailable: {type(e).__name__}: {str(e)[:200]}")
        return UNAVAILABLE

    if not isinstance(data, dict) or not isinstance(data.get("text"), str):
        logger.warning(f"Malformed suggestion response for field {field.name}")
        return UNAVAILABLE

    score = data.get("score")
    return SuggestionResponse(
        available=True,
        text=data["text"],
        score=float(score) if isinstance(score, (int, float)) and not isinstance(score, bool) else None,
    )


async def request_suggestion(db: AsyncSession, payload: SuggestionRequest) -> SuggestionResponse:
    """
    Ask the collaborator for a suggestion or evaluation of a field value.

    Raises:
        ValidationError: Unknown field, or the field is not flagged for this mode
        NotFoundError: Unknown form configuration
    """
    field = await _resolve_field(db, payload)

    url = settings.suggestion_service_url
    if not url:
        return UNAVAILABLE

    async with aiohttp.ClientSession() as session:
        return await fetch_suggestion(
            field,
            payload.value,
            payload.mode,
            session,
            url,
            settings.suggestion_timeout_seconds,
        )
