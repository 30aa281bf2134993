"""
Job Routes

POST /jobs - Create job offer with its recruitment stages (company only)
GET /jobs - List open job offers (public, paginated)
GET /jobs/{job_id} - Get job offer details
POST /jobs/{job_id}/cancel - Cancel job offer (company only)
POST /jobs/{job_id}/apply - Apply to job offer (student only)
GET /jobs/{job_id}/application-status - Has the student applied? (student only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from placement_pipeline.db.postgres import get_db
from placement_pipeline.core.auth import get_current_student, get_current_company
from placement_pipeline.services.application_service import get_application_service
from placement_pipeline.services.job_offer_service import get_job_offer_service
from placement_pipeline.schemas.schemas import (
    JobOfferCreate, JobOfferResponse, JobOfferListResponse, ApplicationResponse, ApplicationCheckResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=JobOfferResponse, status_code=201)
def create_job_offer(
    job: JobOfferCreate,
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """
    Create a job offer. Only companies can create job offers.

    The recruitment process is fixed here: total_rounds is the number
    of stages and cannot change afterwards.
    """
    job_offer = get_job_offer_service(db).create_job_offer(company["company_id"], job)
    return JobOfferResponse.model_validate(job_offer)


@router.get("", response_model=JobOfferListResponse)
def list_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db)
):
    """List job offers that are still hiring, newest first."""
    return get_job_offer_service(db).list_open_job_offers(page, page_size)


@router.get("/{job_id}", response_model=JobOfferResponse)
def get_job_offer(job_id: int, db: Session = Depends(get_db)):
    """Get details of a specific job offer."""
    job_offer = get_job_offer_service(db).get_job_offer(job_id)
    return JobOfferResponse.model_validate(job_offer)


@router.post("/{job_id}/cancel", response_model=JobOfferResponse)
def cancel_job_offer(
    job_id: int,
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """Cancel a job offer. Cancelled offers accept no new applications."""
    job_offer = get_job_offer_service(db).cancel_job_offer(job_id, company["company_id"])
    return JobOfferResponse.model_validate(job_offer)


@router.post("/{job_id}/apply", response_model=ApplicationResponse, status_code=201)
def apply_to_job(
    job_id: int,
    student: dict = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    """Apply to a job offer. Students only. Cannot apply twice to same job."""
    application = get_application_service(db).apply(student["student_id"], job_id)
    return ApplicationResponse.model_validate(application)


@router.get("/{job_id}/application-status", response_model=ApplicationCheckResponse)
def check_application_status(
    job_id: int,
    student: dict = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    """Check whether the current student already applied to this job offer."""
    return get_application_service(db).check_application_status(student["student_id"], job_id)
