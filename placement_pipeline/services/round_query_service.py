"""
Round Query Service

Answers "which applications does a company see in round R of a job
offer, and what are the counts for that round".

VISIBILITY (C = job offer's current recruitment stage):
- R < C   completed round: only applications rejected in round R.
          Everyone else has moved on and shows up in a later round.
- R == C  active round: in-progress applications waiting for a decision,
          or, when R is the final round, the accepted applications
          (arriving in the final round is acceptance).
- R > C   future round: always empty.

Round statistics are raw per-status counts for (job offer, R) and
ignore both the visibility rule and the optional filters.
"""

import logging
from typing import Optional

from sqlalchemy import false, func, select
from sqlalchemy.orm import Session

from placement_pipeline.core.config import Settings, get_settings
from placement_pipeline.core.exceptions import ValidationError
from placement_pipeline.models import Application, JobOffer, Student
from placement_pipeline.schemas.schemas import (
    ApplicationStatus, JobOfferSummary, Pagination, RoundSort, RoundViewResponse
)
from placement_pipeline.services.application_service import to_applicant
from placement_pipeline.services.application_stats import count_by_status
from placement_pipeline.services.job_offer_service import JobOfferService
from placement_pipeline.utils.pagination import page_bounds, page_count

logger = logging.getLogger(__name__)


def visible_status(job_offer: JobOffer, round_number: int) -> Optional[ApplicationStatus]:
    """
    Status of the applications visible in round_number, or None when
    the round is in the future and nothing is visible.
    """
    current_round = job_offer.current_recruitment_stage
    if round_number < current_round:
        return ApplicationStatus.rejected
    if round_number == current_round:
        if round_number == job_offer.total_rounds:
            return ApplicationStatus.accepted
        return ApplicationStatus.in_progress
    return None


class RoundQueryService:
    """Read-only round views for a company's job offers."""

    def __init__(self, db: Session, settings: Settings = None):
        self.db = db
        self.settings = settings or get_settings()
        self.job_offers = JobOfferService(db)

    def get_round_view(
        self,
        job_offer_id: int,
        company_id: int,
        round_number: int,
        status: Optional[ApplicationStatus] = None,
        department: Optional[str] = None,
        sort_by: RoundSort = RoundSort.date,
        page: int = 1,
        limit: Optional[int] = None
    ) -> RoundViewResponse:
        limit = limit or self.settings.default_page_size
        sort_by = self._validate(round_number, sort_by, page, limit)

        job_offer = self.job_offers.get_owned_job_offer(job_offer_id, company_id)
        round_status = visible_status(job_offer, round_number)

        stmt = (
            select(Application, Student)
            .join(Student, Application.student_id == Student.student_id)
            .where(Application.job_offer_id == job_offer_id)
        )
        if round_status is None:
            stmt = stmt.where(false())
        else:
            stmt = stmt.where(
                Application.current_round == round_number,
                Application.application_status == round_status.value
            )

        if status is not None:
            stmt = stmt.where(Application.application_status == ApplicationStatus(status).value)
        if department and department != "all":
            stmt = stmt.where(Student.department == department)

        total = self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        offset, limit = page_bounds(page, limit)
        rows = self.db.execute(
            stmt.order_by(*self._ordering(sort_by)).offset(offset).limit(limit)
        ).all()

        current_round = job_offer.current_recruitment_stage
        logger.debug(
            "Round view job offer %s round %s: %s visible, page %s",
            job_offer_id, round_number, total, page
        )

        return RoundViewResponse(
            applications=[to_applicant(app, student) for app, student in rows],
            job_offer=JobOfferSummary.model_validate(job_offer),
            round_number=round_number,
            round_stats=count_by_status(self.db, job_offer_id, round_number),
            current_round=current_round,
            is_active_round=round_number == current_round,
            is_completed_round=round_number < current_round,
            is_final_round=round_number == job_offer.total_rounds,
            pagination=Pagination(
                current=page, pages=page_count(total, limit), total=total, limit=limit
            )
        )

    def _validate(self, round_number: int, sort_by, page: int, limit: int) -> RoundSort:
        if round_number < 1:
            raise ValidationError("Round number must be a positive integer")
        if page < 1:
            raise ValidationError("Page must be a positive integer")
        if limit < 1 or limit > self.settings.max_page_size:
            raise ValidationError(f"Limit must be between 1 and {self.settings.max_page_size}")
        try:
            return RoundSort(sort_by)
        except ValueError:
            raise ValidationError(f"Unsupported sort '{sort_by}'; use date, name or cgpa")

    @staticmethod
    def _ordering(sort_by: RoundSort):
        """Ties always break on application_id so pages are stable."""
        if sort_by == RoundSort.name:
            return [Student.full_name.asc(), Application.application_id.asc()]
        if sort_by == RoundSort.cgpa:
            return [Student.cgpa.desc().nulls_last(), Application.application_id.asc()]
        return [Application.applied_at.desc(), Application.application_id.desc()]


def get_round_query_service(db: Session) -> RoundQueryService:
    return RoundQueryService(db)
