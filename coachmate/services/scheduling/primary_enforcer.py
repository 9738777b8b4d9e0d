# coachmate/services/scheduling/primary_enforcer.py
import logging
from typing import Type, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from ...models.tenant_specific.class_model import ClassModel
from ...models.tenant_specific.teacher_assignment import TeacherClassAssignment
from ...models.tenant_specific.timetable import TimetableSlot

logger = logging.getLogger(__name__)

PrimaryCarrier = Union[Type[TimetableSlot], Type[TeacherClassAssignment]]


class PrimaryInvariantEnforcer:
    """Keeps at most one active primary row per class for one table.

    Runs inside the caller's transaction: the class row is locked first, so
    two promotions on the same class are applied one after the other.
    """

    def __init__(self, db: AsyncSession, model: PrimaryCarrier):
        self.db = db
        self.model = model

    async def _lock_class(self, tenant_id: UUID, class_id: UUID) -> None:
        stmt = select(ClassModel.id).where(
            ClassModel.id == class_id,
            ClassModel.tenant_id == tenant_id
        ).with_for_update()
        await self.db.execute(stmt)

    async def promote_to_primary(self, tenant_id: UUID, class_id: UUID, entry_id: UUID) -> int:
        """Demote every other active primary of the class, then promote entry_id.

        Returns the number of demoted rows.
        """
        # pending inserts/moves must hit the table before the bulk updates
        await self.db.flush()
        await self._lock_class(tenant_id, class_id)

        demote_stmt = (
            update(self.model)
            .where(
                self.model.tenant_id == tenant_id,
                self.model.class_id == class_id,
                self.model.id != entry_id,
                self.model.is_primary == True,
                self.model.is_active == True
            )
            .values(is_primary=False)
            .execution_options(synchronize_session="evaluate")
        )
        demoted = (await self.db.execute(demote_stmt)).rowcount

        promote_stmt = (
            update(self.model)
            .where(self.model.id == entry_id, self.model.tenant_id == tenant_id)
            .values(is_primary=True)
            .execution_options(synchronize_session="evaluate")
        )
        await self.db.execute(promote_stmt)

        if demoted:
            logger.info(
                f"Promoted {self.model.__tablename__} {entry_id} to primary for class {class_id}, "
                f"demoted {demoted} other(s)"
            )
        return demoted

    async def demote(self, tenant_id: UUID, entry_id: UUID) -> None:
        await self.db.flush()
        stmt = (
            update(self.model)
            .where(self.model.id == entry_id, self.model.tenant_id == tenant_id)
            .values(is_primary=False)
            .execution_options(synchronize_session="evaluate")
        )
        await self.db.execute(stmt)
