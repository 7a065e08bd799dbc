"""
Caller identity for the HTTP surface.

Authentication happens upstream (gateway or SSO proxy); the core only reads
the resolved identity from request headers:

- X-Actor-Id: stable user id
- X-Actor-Role: submitter | reviewer | admin
- X-Actor-Name: display name (optional)

With DEV_AUTH_BYPASS enabled and no headers, a development admin is used.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException

from naming_review.config import settings
from naming_review.schemas.auth import Actor, Role

logger = logging.getLogger(__name__)

DEV_ACTOR = Actor(id="dev-admin", role=Role.ADMIN, name="Dev Admin")


# Authentication Dependencies
async def get_current_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
    x_actor_name: Optional[str] = Header(None),
) -> Actor:
    """
    Dependency resolving the caller from identity headers.

    Raises:
        HTTPException 401: Missing identity or unknown role
    """
    if not x_actor_id:
        # DEV MODE: no identity headers means the development admin
        if settings.dev_auth_bypass:
            return DEV_ACTOR
        raise HTTPException(status_code=401, detail="Missing X-Actor-Id header")

    try:
        role = Role((x_actor_role or Role.SUBMITTER.value).lower())
    except ValueError:
        logger.warning(f"Rejected unknown role {x_actor_role!r} for actor {x_actor_id}")
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_actor_role}'")

    return Actor(id=x_actor_id, role=role, name=x_actor_name)


async def require_reviewer(
    actor: Actor = Depends(get_current_actor)
) -> Actor:
    """
    Dependency to require the reviewer or admin role.

    Raises:
        HTTPException 403: If the caller is a submitter
    """
    if not actor.can_review():
        logger.warning(f"Actor {actor.id} (role={actor.role.value}) attempted to access reviewer endpoint")
        raise HTTPException(status_code=403, detail="Reviewer access required")
    return actor


async def require_admin(
    actor: Actor = Depends(get_current_actor)
) -> Actor:
    """
    Dependency to require admin role.

    Raises:
        HTTPException 403: If the caller is not an admin
    """
    if not actor.is_admin():
        logger.warning(f"Actor {actor.id} (role={actor.role.value}) attempted to access admin endpoint")
        raise HTTPException(
            status_code=403,
            detail="Admin access required. You do not have permission to access this resource."
        )
    return actor
