"""Seed participating hospitals and research projects.

Revision ID: 003
Revises: 002
Create Date: 2025-06-20 00:02:00.000000

Reference tables have no insert policy, so FORCE row-level security is
lifted for the duration of the seed and restored afterwards.
"""

from datetime import datetime, timezone
from typing import Sequence, Union
from uuid import uuid4

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SEEDED_TABLES = ("hospitals", "research_projects")

HOSPITALS = [
    {
        "name": "General Hospital",
        "address": "123 Medical Center Dr, Healthcare City, HC 12345",
        "contact_email": "admin@generalhospital.com",
    },
    {
        "name": "University Medical Center",
        "address": "456 Research Blvd, University Town, UT 67890",
        "contact_email": "research@umc.edu",
    },
    {
        "name": "Regional Health System",
        "address": "789 Community Ave, Regional City, RC 54321",
        "contact_email": "info@regionalhealthsystem.org",
    },
]

RESEARCH_PROJECTS = [
    {
        "title": "AI-Powered Diagnostic Imaging for Early Cancer Detection",
        "description": (
            "This research project aims to develop and validate artificial "
            "intelligence algorithms for early detection of various cancers "
            "using medical imaging data. The federated learning approach "
            "ensures patient privacy while enabling collaborative model "
            "training across multiple healthcare institutions."
        ),
        "principal_investigator": "Dr. Sarah Johnson, MD, PhD",
        "institution": "University Medical Center",
        "data_types": [
            "Medical Images",
            "Diagnostic Reports",
            "Patient Demographics",
            "Treatment Outcomes",
        ],
        "purpose": (
            "To improve early cancer detection rates and reduce false "
            "positives in diagnostic imaging through advanced AI algorithms "
            "trained on diverse, multi-institutional datasets."
        ),
        "duration_months": 36,
        "status": "active",
    },
    {
        "title": "Federated Learning for Personalized Treatment Recommendations",
        "description": (
            "A collaborative research initiative to develop personalized "
            "treatment recommendation systems using federated learning "
            "techniques. This project focuses on cardiovascular diseases and "
            "aims to improve treatment outcomes while maintaining patient "
            "data privacy."
        ),
        "principal_investigator": "Prof. Michael Chen, PhD",
        "institution": "General Hospital Research Institute",
        "data_types": [
            "Electronic Health Records",
            "Lab Results",
            "Medication History",
            "Treatment Responses",
        ],
        "purpose": (
            "To create personalized treatment recommendation algorithms that "
            "can adapt to individual patient characteristics and improve "
            "cardiovascular disease outcomes."
        ),
        "duration_months": 24,
        "status": "active",
    },
    {
        "title": "Privacy-Preserving Mental Health Analytics",
        "description": (
            "This study explores the use of federated learning for mental "
            "health analytics, focusing on depression and anxiety disorders. "
            "The research aims to identify patterns and risk factors while "
            "ensuring complete patient privacy and data security."
        ),
        "principal_investigator": "Dr. Emily Rodriguez, PhD",
        "institution": "Regional Health System",
        "data_types": [
            "Mental Health Assessments",
            "Behavioral Data",
            "Treatment History",
            "Outcome Measures",
        ],
        "purpose": (
            "To develop predictive models for mental health outcomes and "
            "treatment effectiveness while maintaining strict privacy "
            "standards."
        ),
        "duration_months": 18,
        "status": "active",
    },
    {
        "title": "Collaborative Drug Discovery Through Federated Learning",
        "description": (
            "A multi-institutional research project focused on accelerating "
            "drug discovery processes using federated learning approaches. "
            "This study aims to identify potential drug candidates and "
            "predict their efficacy across diverse patient populations."
        ),
        "principal_investigator": "Dr. Robert Kim, PharmD, PhD",
        "institution": "University Medical Center",
        "data_types": [
            "Genomic Data",
            "Drug Response Data",
            "Clinical Trial Results",
            "Biomarker Information",
        ],
        "purpose": (
            "To accelerate drug discovery and development by leveraging "
            "collaborative machine learning while protecting sensitive "
            "patient and proprietary data."
        ),
        "duration_months": 48,
        "status": "active",
    },
]

hospitals = sa.table(
    "hospitals",
    sa.column("id", postgresql.UUID(as_uuid=False)),
    sa.column("name", sa.String),
    sa.column("address", sa.Text),
    sa.column("contact_email", sa.String),
    sa.column("created_at", sa.DateTime(timezone=True)),
)

research_projects = sa.table(
    "research_projects",
    sa.column("id", postgresql.UUID(as_uuid=False)),
    sa.column("title", sa.String),
    sa.column("description", sa.Text),
    sa.column("principal_investigator", sa.String),
    sa.column("institution", sa.String),
    sa.column("data_types", sa.JSON),
    sa.column("purpose", sa.Text),
    sa.column("duration_months", sa.Integer),
    sa.column("status", sa.String),
    sa.column("created_at", sa.DateTime(timezone=True)),
    sa.column("updated_at", sa.DateTime(timezone=True)),
)


def upgrade() -> None:
    """Insert reference rows."""
    now = datetime.now(timezone.utc)

    for table in SEEDED_TABLES:
        op.execute(f"ALTER TABLE {table} NO FORCE ROW LEVEL SECURITY")

    op.bulk_insert(
        hospitals,
        [
            {"id": str(uuid4()), "created_at": now, **hospital}
            for hospital in HOSPITALS
        ],
    )

    op.bulk_insert(
        research_projects,
        [
            {"id": str(uuid4()), "created_at": now, "updated_at": now, **project}
            for project in RESEARCH_PROJECTS
        ],
    )

    for table in SEEDED_TABLES:
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")


def downgrade() -> None:
    """Remove seeded rows."""
    for table in SEEDED_TABLES:
        op.execute(f"ALTER TABLE {table} NO FORCE ROW LEVEL SECURITY")

    op.execute(
        research_projects.delete().where(
            research_projects.c.title.in_([p["title"] for p in RESEARCH_PROJECTS])
        )
    )
    op.execute(
        hospitals.delete().where(
            hospitals.c.name.in_([h["name"] for h in HOSPITALS])
        )
    )

    for table in SEEDED_TABLES:
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")
