# coachmate/services/base_service.py
"""Base service: post-write reload and the retrying transaction boundary."""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from typing import Awaitable, Callable, Generic, Type, TypeVar

from ..core.config import settings
from ..core.database import is_retryable_db_error
from ..core.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)

# Define generic types
T = TypeVar('T')
R = TypeVar('R')

class TenantScopedService(Generic[T]):
    def __init__(self, model: Type[T], db: AsyncSession):
        self.model = model
        self.db = db

    async def reload(self, obj: T) -> T:
        """Re-read a row with its relationships after a write"""
        await self.db.flush()
        stmt = (
            select(self.model)
            .where(self.model.id == obj.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def run_in_transaction(self, work: Callable[[], Awaitable[R]], operation: str) -> R:
        """Run a whole validate-then-write pipeline atomically.

        work() is re-run from scratch when the store reports a lost race
        (serialization failure, deadlock, lock timeout or a uniqueness
        backstop). Nothing is committed unless work() completes.
        """
        attempts = settings.transaction_max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                result = await work()
                await self.db.commit()
                return result
            except DBAPIError as exc:
                await self.db.rollback()
                if not is_retryable_db_error(exc):
                    raise
                logger.warning(
                    f"{operation}: competing write detected (attempt {attempt}/{attempts}): {exc.orig}"
                )
            except Exception:
                await self.db.rollback()
                raise

        logger.error(f"{operation}: giving up after {attempts} attempts")
        raise ConcurrencyConflict()
