"""Reference data fixtures for the consent portal.

Participating hospitals and the research projects open for consent. The
seed migration carries its own copy of these rows; this module seeds a database
created with ``create_tables`` (development and local demos).
"""

from consent_portal.models.research_project import ProjectStatus

# Participating hospitals
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

# Research projects open for consent
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
        "status": ProjectStatus.ACTIVE,
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
        "status": ProjectStatus.ACTIVE,
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
        "status": ProjectStatus.ACTIVE,
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
        "status": ProjectStatus.ACTIVE,
    },
]


async def seed_reference_data(session) -> tuple[int, int]:
    """Seed hospitals and research projects that are not yet present.

    Existing rows (matched by hospital name and project title) are left as
    they are.

    Args:
        session: AsyncSession database session

    Returns:
        Tuple of (hospitals added, projects added)
    """
    from sqlalchemy import select

    from consent_portal.models.hospital import Hospital
    from consent_portal.models.research_project import ResearchProject

    hospitals_added = 0
    for hospital_data in HOSPITALS:
        result = await session.execute(
            select(Hospital.id).where(Hospital.name == hospital_data["name"])
        )
        if result.scalar_one_or_none() is None:
            session.add(Hospital(**hospital_data))
            hospitals_added += 1

    projects_added = 0
    for project_data in RESEARCH_PROJECTS:
        result = await session.execute(
            select(ResearchProject.id).where(
                ResearchProject.title == project_data["title"]
            )
        )
        if result.scalar_one_or_none() is None:
            session.add(ResearchProject(**project_data))
            projects_added += 1

    await session.commit()
    return hospitals_added, projects_added
