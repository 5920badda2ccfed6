"""Policy-scoped data access layer.

``PolicyStore`` is the only way request code touches the database. It is
bound to one caller identity and applies each table's row policy to every
read and write. It has no delete verb.
"""

import logging
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, Select, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from consent_portal.core.security import CallerIdentity
from consent_portal.policies.row_level import PolicyViolationError, policy_for

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class PolicyStore:
    """Database access bound to a single caller."""

    def __init__(self, session: AsyncSession, caller: CallerIdentity) -> None:
        self.session = session
        self.caller = caller

    @property
    def _is_postgres(self) -> bool:
        return self.session.sync_session.get_bind().dialect.name == "postgresql"

    async def _bind_caller(self) -> None:
        """Expose the caller to the database-side RLS policies.

        The setting is transaction-local, so it is re-applied before every
        operation.
        """
        if not self._is_postgres:
            return
        await self.session.execute(
            text("SELECT set_config('app.current_user_id', :user_id, true)"),
            {"user_id": self.caller.user_id},
        )

    # --- Reads ---

    def visible(self, model: type) -> ColumnElement[bool]:
        """Read predicate for ``model``, for joins and custom queries."""
        return policy_for(model).read_clause(self.caller)

    def select(self, model: type[ModelT]) -> Select[tuple[ModelT]]:
        """Start a SELECT over the rows of ``model`` visible to the caller."""
        return select(model).where(self.visible(model))

    async def execute(self, statement: Select) -> Any:
        """Execute a statement built from ``select``/``visible``."""
        await self._bind_caller()
        return await self.session.execute(statement)

    async def all(self, statement: Select[tuple[ModelT]]) -> list[ModelT]:
        result = await self.execute(statement)
        return list(result.scalars().all())

    async def get(self, model: type[ModelT], row_id: str) -> ModelT | None:
        """Fetch a row by id.

        Returns None both when the row does not exist and when the policy
        hides it; callers cannot tell the two apart.
        """
        result = await self.execute(self.select(model).where(model.id == row_id))
        return result.scalar_one_or_none()

    # --- Writes ---

    async def insert(self, row: ModelT) -> ModelT:
        """Insert a row after checking the table's insert policy.

        The row is flushed, not committed, so constraint violations surface
        here and the caller decides the transaction boundary.
        """
        policy_for(type(row)).check_insert(self.caller, row)
        await self._bind_caller()
        self.session.add(row)
        await self.session.flush()
        return row

    async def update(self, row: ModelT, **changes: Any) -> ModelT:
        """Update a row in place after checking the table's update policy."""
        policy_for(type(row)).check_update(self.caller, row, changes)
        await self._bind_caller()
        for key, value in changes.items():
            setattr(row, key, value)
        await self.session.flush()
        return row

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


__all__ = ["PolicyStore", "PolicyViolationError"]
