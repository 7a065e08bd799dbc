"""
AI suggestion relay endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.api.auth import get_current_actor
from naming_review.database import get_db
from naming_review.schemas.auth import Actor
from naming_review.schemas.suggestion import SuggestionRequest, SuggestionResponse
from naming_review.services import suggestions

router = APIRouter()


@router.post("/", response_model=SuggestionResponse)
async def suggest(
    payload: SuggestionRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """
    Ask for a suggestion or evaluation of a field value.

    Always 200 when the field is AI-enabled; available=false means the
    suggestion service is disabled or did not answer.
    """
    return await suggestions.request_suggestion(db, payload)
