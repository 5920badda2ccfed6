"""Admin view: consent statistics and export.

These endpoints carry no role gate of their own. What they return is
decided by the row policies: an admin sees every patient's records, any
other caller only their own.
"""

from fastapi import APIRouter
from fastapi.responses import Response

from consent_portal.api.deps import CurrentProfile, Store
from consent_portal.schemas.consent import ConsentOverviewRead
from consent_portal.services.consent import ConsentService
from consent_portal.services.export import ConsentExportService, export_filename

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/consent-summary", response_model=ConsentOverviewRead)
async def get_consent_summary(
    profile: CurrentProfile,
    store: Store,
) -> ConsentOverviewRead:
    """Per-project consent counts and rates, plus overall totals."""
    overview = await ConsentService(store).consent_overview()
    return ConsentOverviewRead.model_validate(overview)


@router.get(
    "/consent-export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_consent_data(
    profile: CurrentProfile,
    store: Store,
) -> Response:
    """Download visible consent records as CSV."""
    content = await ConsentExportService(store).export_csv()
    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename()}"',
        },
    )
