"""
Test configuration - pytest fixtures and factories

This module provides:
- An in-memory SQLite database per test with the full schema
- Factories for companies, students, job offers and applications
- A FastAPI TestClient wired to the test database
- JWT headers for company and student callers

RUNNING TESTS:
    pytest tests/ -v
"""

import os

# Must be set before the settings are first read
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import timedelta
from fastapi.testclient import TestClient

from placement_pipeline.core.auth import create_access_token
from placement_pipeline.core.config import Settings
from placement_pipeline.db.postgres import SessionLocal, build_engine, get_db
from placement_pipeline.main import app
from placement_pipeline.models import Base, Company, Student
from placement_pipeline.schemas.schemas import JobOfferCreate, RecruitmentStageIn
from placement_pipeline.services.application_service import ApplicationService
from placement_pipeline.services.job_offer_service import JobOfferService
from placement_pipeline.utils.clock import utcnow

STAGE_NAMES = ["Aptitude Test", "Technical Interview", "HR Interview", "Managerial Round", "Offer Discussion"]


# ============================================================================
# DATABASE
# ============================================================================

@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = SessionLocal(bind=engine)
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://")


# ============================================================================
# FACTORIES
# ============================================================================

@pytest.fixture
def make_company(db):
    def _make(name="Acme Corp", industry="Software"):
        company = Company(company_name=name, industry=industry)
        db.add(company)
        db.commit()
        return company
    return _make


@pytest.fixture
def make_student(db):
    counter = {"n": 0}

    def _make(name=None, department="CSE", cgpa=8.0, graduation_year=2026):
        counter["n"] += 1
        name = name or f"Student {counter['n']:02d}"
        student = Student(
            full_name=name,
            email=f"student{counter['n']}@college.edu",
            department=department,
            cgpa=cgpa,
            graduation_year=graduation_year,
        )
        db.add(student)
        db.commit()
        return student
    return _make


def job_offer_payload(rounds=3, deadline_in=timedelta(days=7), **overrides):
    data = dict(
        title="Software Engineer",
        role="Backend Developer",
        description="Build placement systems",
        location="Bengaluru",
        ctc_total=1200000,
        application_deadline=utcnow() + deadline_in,
        recruitment_process=[
            RecruitmentStageIn(stage_name=STAGE_NAMES[i % len(STAGE_NAMES)], stage_order=i + 1)
            for i in range(rounds)
        ],
    )
    data.update(overrides)
    return JobOfferCreate(**data)


@pytest.fixture
def make_job_offer(db, make_company):
    def _make(company=None, rounds=3, deadline_in=timedelta(days=7), **overrides):
        company = company or make_company()
        payload = job_offer_payload(rounds=rounds, deadline_in=deadline_in, **overrides)
        return JobOfferService(db).create_job_offer(company.company_id, payload)
    return _make


@pytest.fixture
def apply_students(db, make_student):
    """Create n students and apply each of them to the job offer."""
    def _apply(job_offer, n, **student_kwargs):
        service = ApplicationService(db)
        return [
            service.apply(make_student(**student_kwargs).student_id, job_offer.job_offer_id)
            for _ in range(n)
        ]
    return _apply


# ============================================================================
# API
# ============================================================================

@pytest.fixture
def client(engine):
    def override_get_db():
        session = SessionLocal(bind=engine)
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def company_headers(company):
    token = create_access_token({"sub": f"user-c{company.company_id}", "role": "company", "company_id": company.company_id})
    return {"Authorization": f"Bearer {token}"}


def student_headers(student):
    token = create_access_token({"sub": f"user-s{student.student_id}", "role": "student", "student_id": student.student_id})
    return {"Authorization": f"Bearer {token}"}
