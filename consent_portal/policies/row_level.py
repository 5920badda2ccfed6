"""Row-level access policies.

Every table carries one policy: a read predicate rendered into the WHERE
clause of each SELECT, and write predicates checked before each INSERT or
UPDATE. They mirror the PostgreSQL row-level security policies created by
the ``002`` migration, so an in-process store and the database agree on
what a caller may see and change.

Predicates are keyed on the caller identity only. The admin bypass is a
sub-query on the caller's own profile role, not a separate credential.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, false, or_, select, true
from sqlalchemy.orm import aliased

from consent_portal.core.security import CallerIdentity
from consent_portal.models.audit_log import AuditLogEntry
from consent_portal.models.consent_record import ConsentRecord
from consent_portal.models.hospital import Hospital
from consent_portal.models.profile import Profile, ProfileRole
from consent_portal.models.research_project import ProjectStatus, ResearchProject

ReadPredicate = Callable[[CallerIdentity], ColumnElement[bool]]
WritePredicate = Callable[[CallerIdentity, Any], bool]


class PolicyViolationError(Exception):
    """Raised when a write does not satisfy the table's row policy."""

    pass


class _ProposedRow:
    """View of a row with pending changes applied, for WITH CHECK evaluation."""

    def __init__(self, row: Any, changes: Mapping[str, Any]) -> None:
        self._row = row
        self._changes = changes

    def __getattr__(self, name: str) -> Any:
        if name in self._changes:
            return self._changes[name]
        return getattr(self._row, name)


@dataclass(frozen=True)
class TablePolicy:
    """Read and write rules for one table.

    A missing ``insert`` or ``update`` predicate means the table exposes no
    such write path at all.
    """

    table: str
    read: ReadPredicate
    insert: WritePredicate | None = None
    update: WritePredicate | None = None
    immutable_columns: tuple[str, ...] = ()

    def read_clause(self, caller: CallerIdentity) -> ColumnElement[bool]:
        return self.read(caller)

    def check_insert(self, caller: CallerIdentity, row: Any) -> None:
        if self.insert is None or not self.insert(caller, row):
            raise PolicyViolationError(
                f"new row violates row-level policy for table {self.table}"
            )

    def check_update(
        self,
        caller: CallerIdentity,
        row: Any,
        changes: Mapping[str, Any],
    ) -> None:
        # USING: the existing row must be updatable by the caller
        if self.update is None or not self.update(caller, row):
            raise PolicyViolationError(
                f"row is not updatable under row-level policy for table {self.table}"
            )

        for column in self.immutable_columns:
            if column in changes and changes[column] != getattr(row, column):
                raise PolicyViolationError(
                    f"column {column} of table {self.table} cannot be changed"
                )

        # WITH CHECK: the row as it would be after the update
        if not self.update(caller, _ProposedRow(row, changes)):
            raise PolicyViolationError(
                f"updated row violates row-level policy for table {self.table}"
            )


def caller_is_admin(caller: CallerIdentity) -> ColumnElement[bool]:
    """EXISTS sub-query: does the caller's own profile carry the admin role?"""
    caller_profile = aliased(Profile, name="caller_profile")
    return (
        select(caller_profile.id)
        .where(caller_profile.id == caller.user_id)
        .where(caller_profile.role == ProfileRole.ADMIN.value)
        .exists()
    )


def _owns(column: str) -> WritePredicate:
    def predicate(caller: CallerIdentity, row: Any) -> bool:
        return getattr(row, column) == caller.user_id

    return predicate


PROFILE_POLICY = TablePolicy(
    table=Profile.__tablename__,
    read=lambda caller: Profile.id == caller.user_id,
    insert=_owns("id"),
    update=_owns("id"),
    immutable_columns=("id", "role"),
)

HOSPITAL_POLICY = TablePolicy(
    table=Hospital.__tablename__,
    read=lambda caller: true(),
)

RESEARCH_PROJECT_POLICY = TablePolicy(
    table=ResearchProject.__tablename__,
    read=lambda caller: ResearchProject.status == ProjectStatus.ACTIVE.value,
)

CONSENT_RECORD_POLICY = TablePolicy(
    table=ConsentRecord.__tablename__,
    read=lambda caller: or_(
        ConsentRecord.patient_id == caller.user_id,
        caller_is_admin(caller),
    ),
    insert=_owns("patient_id"),
    update=_owns("patient_id"),
    immutable_columns=("id", "patient_id", "project_id"),
)

AUDIT_LOG_POLICY = TablePolicy(
    table=AuditLogEntry.__tablename__,
    read=lambda caller: or_(
        AuditLogEntry.user_id == caller.user_id,
        caller_is_admin(caller),
    ),
    insert=_owns("user_id"),
)

POLICIES: dict[type, TablePolicy] = {
    Profile: PROFILE_POLICY,
    Hospital: HOSPITAL_POLICY,
    ResearchProject: RESEARCH_PROJECT_POLICY,
    ConsentRecord: CONSENT_RECORD_POLICY,
    AuditLogEntry: AUDIT_LOG_POLICY,
}


def policy_for(model: type) -> TablePolicy:
    """Return the policy for a mapped model.

    Tables without a registered policy are not readable at all.
    """
    policy = POLICIES.get(model)
    if policy is None:
        return TablePolicy(
            table=getattr(model, "__tablename__", model.__name__),
            read=lambda caller: false(),
        )
    return policy
