"""
Job Offer Service

Creates job offers with their ordered recruitment stages and resolves
"does this offer exist and belong to this company" for every company
operation in the pipeline.

A job offer's stage list is fixed at creation: total_rounds is the
number of stages and is copied onto every application at apply time.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from placement_pipeline.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from placement_pipeline.models import Company, JobOffer, RecruitmentStage
from placement_pipeline.schemas.schemas import (
    JobOfferCreate, JobOfferListItem, JobOfferListResponse, JobStatus, RecruitmentStageIn
)
from placement_pipeline.utils.pagination import page_bounds

logger = logging.getLogger(__name__)

LISTED_JOB_STATUSES = (JobStatus.open.value, JobStatus.in_progress.value)


def order_stages(stages: List[RecruitmentStageIn]) -> List[RecruitmentStageIn]:
    """
    Return the stages sorted by stage_order, numbered 1..N.

    Stages without an explicit order take their list position. The
    resulting orders must be exactly 1..N with no gaps or duplicates.
    """
    if not stages:
        raise ValidationError("At least one recruitment process stage is required")

    numbered = [
        stage.model_copy(update={"stage_order": stage.stage_order or position})
        for position, stage in enumerate(stages, start=1)
    ]
    numbered.sort(key=lambda stage: stage.stage_order)

    orders = [stage.stage_order for stage in numbered]
    if orders != list(range(1, len(numbered) + 1)):
        raise ValidationError(
            "Stage orders must run from 1 to the number of stages without gaps",
            {"stage_orders": orders},
        )
    return numbered


class JobOfferService:
    """Job offer creation, lookup, listing and cancellation."""

    def __init__(self, db: Session):
        self.db = db

    def create_job_offer(self, company_id: int, data: JobOfferCreate) -> JobOffer:
        if self.db.get(Company, company_id) is None:
            raise NotFoundError("Company profile not found. Please create company profile first.")

        stages = order_stages(data.recruitment_process)

        job_offer = JobOffer(
            company_id=company_id,
            title=data.title,
            role=data.role,
            description=data.description,
            location=data.location,
            job_type=data.job_type.value,
            ctc_total=data.ctc_total,
            total_rounds=len(stages),
            current_recruitment_stage=1,
            current_application_count=0,
            job_status=JobStatus.open.value,
            application_deadline=data.application_deadline,
            recruitment_process=[
                RecruitmentStage(
                    stage_name=stage.stage_name,
                    stage_order=stage.stage_order,
                    scheduled_date=stage.scheduled_date,
                    description=stage.description,
                )
                for stage in stages
            ],
        )
        self.db.add(job_offer)
        self.db.commit()

        logger.info(
            "Created job offer %s for company %s with %s rounds",
            job_offer.job_offer_id, company_id, job_offer.total_rounds
        )
        return job_offer

    def get_job_offer(self, job_offer_id: int) -> JobOffer:
        job_offer = self.db.get(JobOffer, job_offer_id)
        if job_offer is None:
            raise NotFoundError("Job offer not found")
        return job_offer

    def get_owned_job_offer(self, job_offer_id: int, company_id: int, for_update: bool = False) -> JobOffer:
        """
        Fetch a job offer owned by company_id.

        An offer owned by another company is reported as not found.
        for_update locks the row until the caller's transaction ends.
        """
        stmt = select(JobOffer).where(
            JobOffer.job_offer_id == job_offer_id,
            JobOffer.company_id == company_id
        )
        if for_update:
            stmt = stmt.with_for_update()

        job_offer = self.db.execute(stmt).scalar_one_or_none()
        if job_offer is None:
            raise NotFoundError("Job offer not found or unauthorized")
        return job_offer

    def list_company_job_offers(self, company_id: int, status: Optional[JobStatus] = None) -> List[JobOffer]:
        stmt = select(JobOffer).where(JobOffer.company_id == company_id)
        if status:
            stmt = stmt.where(JobOffer.job_status == status.value)
        stmt = stmt.order_by(JobOffer.created_at.desc(), JobOffer.job_offer_id.desc())
        return list(self.db.execute(stmt).scalars())

    def list_open_job_offers(self, page: int = 1, page_size: int = 10) -> JobOfferListResponse:
        """
        Public listing for students: offers still running (open or
        in-progress), newest first, with the company name joined.
        """
        stmt = (
            select(JobOffer, Company.company_name)
            .join(Company, JobOffer.company_id == Company.company_id)
            .where(JobOffer.job_status.in_(LISTED_JOB_STATUSES))
        )
        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        offset, limit = page_bounds(page, page_size)
        rows = self.db.execute(
            stmt.order_by(JobOffer.created_at.desc(), JobOffer.job_offer_id.desc())
            .offset(offset).limit(limit)
        ).all()

        jobs = [
            JobOfferListItem(
                job_offer_id=job_offer.job_offer_id, title=job_offer.title,
                total_rounds=job_offer.total_rounds,
                current_recruitment_stage=job_offer.current_recruitment_stage,
                job_status=job_offer.job_status, company_id=job_offer.company_id,
                company_name=company_name, role=job_offer.role, location=job_offer.location,
                job_type=job_offer.job_type, ctc_total=job_offer.ctc_total,
                application_deadline=job_offer.application_deadline, created_at=job_offer.created_at
            )
            for job_offer, company_name in rows
        ]
        return JobOfferListResponse(jobs=jobs, total=total, page=page, page_size=page_size)

    def cancel_job_offer(self, job_offer_id: int, company_id: int) -> JobOffer:
        """Cancel an offer. Cancelled offers accept no new applications."""
        job_offer = self.get_owned_job_offer(job_offer_id, company_id, for_update=True)

        if job_offer.job_status == JobStatus.completed.value:
            raise InvalidStateError("Hiring is already completed for this job offer")
        if job_offer.job_status == JobStatus.cancelled.value:
            return job_offer

        job_offer.job_status = JobStatus.cancelled.value
        self.db.commit()

        logger.info("Cancelled job offer %s", job_offer_id)
        return job_offer


def get_job_offer_service(db: Session) -> JobOfferService:
    return JobOfferService(db)
