"""
Models module - SQLAlchemy ORM entities.

Difference from schemas:
- Models: Internal data structures (database rows)
- Schemas: API contract (what client sends/receives)
"""

# Import all models in dependency order so relationships resolve
from placement_pipeline.models.base import Base
from placement_pipeline.models.profiles import Company, Student
from placement_pipeline.models.job_offer import JobOffer, RecruitmentStage
from placement_pipeline.models.application import Application

__all__ = [
    "Base",
    "Company",
    "Student",
    "JobOffer",
    "RecruitmentStage",
    "Application",
]
