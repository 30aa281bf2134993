"""
Company Routes - job offers and the hiring pipeline

GET /companies/jobs - Get company's job offers
GET /companies/jobs/{job_id}/applications - All applications for a job offer
GET /companies/jobs/{job_id}/rounds/{round_number} - Applicants visible in a round
POST /companies/jobs/{job_id}/push-to-next-round - Move selected applicants forward
POST /companies/jobs/{job_id}/reject-selected - Reject selected applicants
POST /companies/jobs/{job_id}/advance-round - Close the active round
POST /companies/jobs/{job_id}/complete-hiring - Finish hiring (final round only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from placement_pipeline.db.postgres import get_db
from placement_pipeline.core.auth import get_current_company
from placement_pipeline.services.application_service import get_application_service
from placement_pipeline.services.job_offer_service import get_job_offer_service
from placement_pipeline.services.pipeline_service import get_pipeline_service
from placement_pipeline.services.round_query_service import get_round_query_service
from placement_pipeline.schemas.schemas import (
    JobOfferResponse, JobStatus, ApplicantResponse, ApplicationStatus, RoundSort, RoundViewResponse,
    PushToNextRoundRequest, PushToNextRoundResult, RejectSelectedRequest, RejectSelectedResult,
    AdvanceRoundRequest, AdvanceRoundResult, CompleteHiringResult
)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/jobs", response_model=List[JobOfferResponse])
def get_company_jobs(
    status: Optional[JobStatus] = Query(None),
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """Get all job offers posted by this company."""
    job_offers = get_job_offer_service(db).list_company_job_offers(company["company_id"], status)
    return [JobOfferResponse.model_validate(job_offer) for job_offer in job_offers]


@router.get("/jobs/{job_id}/applications", response_model=List[ApplicantResponse])
def get_job_applications(
    job_id: int,
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """Get every application for one of the company's job offers, in any round."""
    return get_application_service(db).list_job_applications(job_id, company["company_id"])


@router.get("/jobs/{job_id}/rounds/{round_number}", response_model=RoundViewResponse)
def get_round_applications(
    job_id: int,
    round_number: int,
    status: Optional[ApplicationStatus] = Query(None),
    department: Optional[str] = Query(None, description="Department name or 'all'"),
    sort_by: RoundSort = Query(RoundSort.date),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """
    Get the applicants visible in a round.

    - Completed round: applicants rejected in that round
    - Active round: applicants awaiting a decision (accepted ones in the final round)
    - Future round: nobody

    round_stats always holds the raw per-status counts for the round.
    """
    return get_round_query_service(db).get_round_view(
        job_offer_id=job_id,
        company_id=company["company_id"],
        round_number=round_number,
        status=status,
        department=department,
        sort_by=sort_by,
        page=page,
        limit=limit
    )


@router.post("/jobs/{job_id}/push-to-next-round", response_model=PushToNextRoundResult)
def push_to_next_round(
    job_id: int,
    request: PushToNextRoundRequest,
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """
    Push selected applicants from the active round to the next one.

    Applicants pushed into the final round are accepted. Ids that are
    not in the given round are skipped and listed in skipped_ids.
    """
    return get_pipeline_service(db).push_to_next_round(
        job_id, company["company_id"], request.application_ids, request.current_round
    )


@router.post("/jobs/{job_id}/reject-selected", response_model=RejectSelectedResult)
def reject_selected(
    job_id: int,
    request: RejectSelectedRequest,
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """Reject selected applicants, in any round. Accepted applicants are overridden."""
    return get_pipeline_service(db).reject_selected(job_id, company["company_id"], request.application_ids)


@router.post("/jobs/{job_id}/advance-round", response_model=AdvanceRoundResult)
def advance_round(
    job_id: int,
    request: AdvanceRoundRequest,
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """
    Close the active round.

    Applicants still in-progress in it are rejected and the job offer
    moves to the next round. Someone must have been pushed there first.
    """
    return get_pipeline_service(db).advance_round(job_id, company["company_id"], request.current_round)


@router.post("/jobs/{job_id}/complete-hiring", response_model=CompleteHiringResult)
def complete_hiring(
    job_id: int,
    company: dict = Depends(get_current_company),
    db: Session = Depends(get_db)
):
    """Mark hiring completed. Only allowed once the job offer is in its final round."""
    return get_pipeline_service(db).complete_hiring(job_id, company["company_id"])
