"""Consent aggregation over already-fetched rows.

Pure and deterministic: no I/O, no retries. Rows may be ORM instances or
any objects exposing the same attributes.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from consent_portal.models.consent_record import ConsentRecord
from consent_portal.models.research_project import ResearchProject


@dataclass(frozen=True)
class ProjectConsentSummary:
    """Consent counts for one research project."""

    project_id: str
    project_title: str
    total_patients: int
    consented_patients: int
    withdrawn_patients: int
    consent_rate: float


@dataclass(frozen=True)
class ConsentOverview:
    """Per-project summaries plus totals across all of them."""

    projects: list[ProjectConsentSummary]
    total_patients: int
    total_consented: int
    overall_consent_rate: float


def consent_rate(consented: int, total: int) -> float:
    """Percentage of consenting patients; 0 when there are none."""
    if total <= 0:
        return 0.0
    return consented / total * 100


def summarize_consents(
    projects: Sequence[ResearchProject],
    consents: Iterable[ConsentRecord],
) -> list[ProjectConsentSummary]:
    """Build one summary row per project, in input project order.

    Records for projects not in ``projects`` are ignored.
    """
    tallies: dict[str, list[int]] = {}
    for record in consents:
        tally = tallies.setdefault(record.project_id, [0, 0])
        tally[0] += 1
        if record.consent_given:
            tally[1] += 1

    summaries = []
    for project in projects:
        total, consented = tallies.get(project.id, (0, 0))
        summaries.append(
            ProjectConsentSummary(
                project_id=project.id,
                project_title=project.title,
                total_patients=total,
                consented_patients=consented,
                withdrawn_patients=total - consented,
                consent_rate=consent_rate(consented, total),
            )
        )
    return summaries


def build_overview(summaries: list[ProjectConsentSummary]) -> ConsentOverview:
    """Add overall totals to a list of project summaries."""
    total = sum(s.total_patients for s in summaries)
    consented = sum(s.consented_patients for s in summaries)
    return ConsentOverview(
        projects=summaries,
        total_patients=total,
        total_consented=consented,
        overall_consent_rate=consent_rate(consented, total),
    )
