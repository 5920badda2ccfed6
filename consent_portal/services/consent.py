"""Consent toggle and consent read service.

Each (patient, project) pair is in one of two states:

- NotConsented: no record, or a record with ``consent_given`` false
- Consented: a record with ``consent_given`` true

A transition updates the single record in place (or inserts it the first
time consent is given) and appends exactly one audit entry in the same
transaction. A request for the state already held changes nothing.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from consent_portal.core.config import settings
from consent_portal.models.audit_log import AuditAction
from consent_portal.models.consent_record import ConsentRecord
from consent_portal.models.research_project import ResearchProject
from consent_portal.services.aggregation import (
    ConsentOverview,
    build_overview,
    summarize_consents,
)
from consent_portal.services.audit import log_audit_entry, write_audit_entry
from consent_portal.services.store import PolicyStore
from consent_portal.utils.time import utc_now

logger = logging.getLogger(__name__)

CONSENT_RESOURCE_TYPE = "consent_record"
DEFAULT_PERMISSION_SCOPES = ("data_sharing", "federated_learning", "anonymized_research")


class ProjectNotFoundError(Exception):
    """Raised when a project does not exist or is not visible to the caller."""

    pass


class ConsentWriteError(Exception):
    """Raised when the store rejects a consent write.

    ``conflict`` is True for constraint violations (e.g. a racing duplicate
    insert), False for transport or service failures.
    """

    def __init__(self, message: str, conflict: bool = False) -> None:
        super().__init__(message)
        self.conflict = conflict


@dataclass
class ConsentChange:
    """Outcome of a consent toggle."""

    record: ConsentRecord | None
    changed: bool
    action: AuditAction | None = None


@dataclass
class ProjectConsentState:
    """A visible project with the caller's consent record, if any."""

    project: ResearchProject
    record: ConsentRecord | None

    @property
    def consent_given(self) -> bool:
        return bool(self.record and self.record.consent_given)


class ConsentService:
    """Service for consent records, scoped by the caller's policy store."""

    def __init__(self, store: PolicyStore) -> None:
        self.store = store

    # --- Reads ---

    async def list_own_records(self) -> list[ConsentRecord]:
        """Consent records belonging to the caller (patient-scoped query)."""
        return await self.store.all(
            self.store.select(ConsentRecord)
            .where(ConsentRecord.patient_id == self.store.caller.user_id)
            .order_by(ConsentRecord.created_at)
        )

    async def get_record(self, record_id: str) -> ConsentRecord | None:
        """Visible record by id; None for missing or forbidden alike."""
        return await self.store.get(ConsentRecord, record_id)

    async def get_own_record(self, project_id: str) -> ConsentRecord | None:
        result = await self.store.execute(
            self.store.select(ConsentRecord)
            .where(ConsentRecord.patient_id == self.store.caller.user_id)
            .where(ConsentRecord.project_id == project_id)
        )
        return result.scalar_one_or_none()

    async def list_projects(self) -> list[ResearchProject]:
        """Visible research projects, newest first."""
        return await self.store.all(
            self.store.select(ResearchProject).order_by(
                ResearchProject.created_at.desc()
            )
        )

    async def project_states(self) -> list[ProjectConsentState]:
        """Each visible project paired with the caller's own record."""
        projects = await self.list_projects()
        records = {r.project_id: r for r in await self.list_own_records()}
        return [ProjectConsentState(project=p, record=records.get(p.id)) for p in projects]

    async def consent_overview(self) -> ConsentOverview:
        """Aggregate consent counts over every visible project and record.

        For an admin the record policy exposes all patients; for anyone
        else only their own records are counted.
        """
        projects = await self.list_projects()
        records = await self.store.all(self.store.select(ConsentRecord))
        return build_overview(summarize_consents(projects, records))

    # --- Toggle ---

    async def set_consent(
        self,
        project_id: str,
        consent_given: bool,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ConsentChange:
        """Move the caller's consent for a project to the requested state.

        Args:
            project_id: Research project to consent to or withdraw from
            consent_given: Requested state
            ip_address: Client IP for the audit entry
            user_agent: Client user agent for the audit entry

        Returns:
            ConsentChange describing the resulting record

        Raises:
            ProjectNotFoundError: granting consent to a project that is not
                visible (missing or not active)
            ConsentWriteError: the store rejected the consent or audit write
            PolicyViolationError: the write is not allowed for the caller
        """
        existing = await self.get_own_record(project_id)
        currently_given = bool(existing and existing.consent_given)

        if currently_given == consent_given:
            return ConsentChange(record=existing, changed=False)

        if consent_given:
            project = await self.store.get(ResearchProject, project_id)
            if not project:
                raise ProjectNotFoundError(f"Research project {project_id} not found")

        now = utc_now()
        action = AuditAction.CONSENT_GIVEN if consent_given else AuditAction.CONSENT_WITHDRAWN

        try:
            if existing is None:
                record = await self.store.insert(
                    ConsentRecord(
                        patient_id=self.store.caller.user_id,
                        project_id=project_id,
                        consent_given=True,
                        consent_date=now,
                        withdrawal_date=None,
                        data_retention_period=settings.default_retention_months,
                        specific_permissions={
                            scope: True for scope in DEFAULT_PERMISSION_SCOPES
                        },
                        gdpr_compliant=True,
                    )
                )
            elif consent_given:
                record = await self.store.update(
                    existing,
                    consent_given=True,
                    consent_date=now,
                    withdrawal_date=None,
                )
            else:
                record = await self.store.update(
                    existing,
                    consent_given=False,
                    withdrawal_date=now,
                )

            entry = await write_audit_entry(
                self.store,
                action=action.value,
                resource_type=CONSENT_RESOURCE_TYPE,
                resource_id=project_id,
                details={
                    "project_id": project_id,
                    "consent_status": consent_given,
                },
                ip_address=ip_address,
                user_agent=user_agent,
                commit=False,
            )
            await self.store.commit()
        except IntegrityError as e:
            await self.store.rollback()
            logger.warning(
                f"Consent write conflict for project={project_id} "
                f"user={self.store.caller.user_id}: {e.orig}"
            )
            raise ConsentWriteError(str(e.orig), conflict=True) from e
        except SQLAlchemyError as e:
            await self.store.rollback()
            logger.error(
                f"Consent write failed for project={project_id} "
                f"user={self.store.caller.user_id}: {e}"
            )
            raise ConsentWriteError(str(e)) from e

        log_audit_entry(entry)
        return ConsentChange(record=record, changed=True, action=action)
