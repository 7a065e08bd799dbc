"""
Transaction guard for storage operations.

Every core operation runs inside ``storage_errors`` so that it is bounded by a
timeout, rolled back on failure, and surfaces driver problems as StorageError.
The core does not retry; that decision belongs to the caller.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.config import settings
from naming_review.errors import NamingReviewError, StorageError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def storage_errors(
    db: AsyncSession,
    operation: str,
    timeout: Optional[float] = None,
) -> AsyncIterator[None]:
    """
    Run one logical storage transaction.

    Args:
        db: Database session
        operation: Name used in logs and in the StorageError detail
        timeout: Seconds before the operation is abandoned (defaults to settings)

    Raises:
        StorageError: On SQLAlchemy failures or timeout
        NamingReviewError: Domain errors pass through after rollback
    """
    limit = timeout if timeout is not None else settings.storage_timeout_seconds
    try:
        async with asyncio.timeout(limit):
            yield
    except NamingReviewError:
        await db.rollback()
        raise
    except TimeoutError as e:
        await db.rollback()
        logger.error(f"Storage timeout after {limit}s during {operation}")
        raise StorageError(operation, f"Storage timed out during {operation}") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Storage failure during {operation}: {str(e)}", exc_info=True)
        raise StorageError(operation) from e
