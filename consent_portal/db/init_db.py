"""Database initialization utilities."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from consent_portal.db.base import Base
from consent_portal.db.session import engine
from consent_portal.fixtures.reference_data import seed_reference_data

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables."""
    # Import models so every table is registered on the metadata
    import consent_portal.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def init_db(session: AsyncSession) -> None:
    """Initialize database with reference data.

    Args:
        session: Database session
    """
    hospitals, projects = await seed_reference_data(session)
    logger.info(
        f"Database initialization complete "
        f"(hospitals added={hospitals}, projects added={projects})"
    )
