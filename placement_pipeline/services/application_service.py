"""
Application Service - apply, status checks and application listings.

APPLY FLOW:
1. Student profile must exist
2. Job offer must exist and not be cancelled (cancelled reads as not found)
3. Completed offers and offers past their deadline are expired
4. No existing application for (student, job offer)
5. Insert the application and bump the offer's application counter
   in the same transaction

The unique constraint on (student_id, job_offer_id) is what actually
prevents duplicates: the existence check in step 4 only gives a
friendlier message in the common case. An insert that loses a race
hits the constraint and is reported as a conflict too.

current_application_count is a cached value. If it ever drifts,
ReconciliationService.recompute_application_count rebuilds it from
the applications table.
"""

import logging
from typing import List

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from placement_pipeline.core.exceptions import ConflictError, ExpiredError, NotFoundError
from placement_pipeline.models import Application, Company, JobOffer, Student
from placement_pipeline.schemas.schemas import (
    ApplicantResponse, ApplicationCheckResponse, ApplicationStatus, JobStatus,
    StudentApplicationResponse
)
from placement_pipeline.services.job_offer_service import JobOfferService
from placement_pipeline.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


def to_applicant(application: Application, student: Student) -> ApplicantResponse:
    """Join an application with the student's directory fields."""
    return ApplicantResponse(
        application_id=application.application_id,
        student_id=application.student_id,
        job_offer_id=application.job_offer_id,
        current_round=application.current_round,
        total_rounds=application.total_rounds,
        application_status=application.application_status,
        applied_at=application.applied_at,
        updated_at=application.updated_at,
        student_name=student.full_name,
        email=student.email,
        department=student.department,
        cgpa=student.cgpa,
    )


class ApplicationService:
    """Application lifecycle: creation and read-only lookups."""

    def __init__(self, db: Session):
        self.db = db
        self.job_offers = JobOfferService(db)

    def apply(self, student_id: int, job_offer_id: int) -> Application:
        """
        Create an application for student_id on job_offer_id.

        Raises:
            NotFoundError: unknown student, unknown or cancelled job offer
            ExpiredError: job offer completed or past its deadline
            ConflictError: student already applied
        """
        if self.db.get(Student, student_id) is None:
            raise NotFoundError("Student profile not found. Please create profile first.")

        job_offer = self.db.get(JobOffer, job_offer_id)
        if job_offer is None or job_offer.job_status == JobStatus.cancelled.value:
            raise NotFoundError("Job offer not found or cancelled")
        if job_offer.job_status == JobStatus.completed.value:
            raise ExpiredError("Hiring for this job offer is already completed")

        existing = self._find(student_id, job_offer_id)
        if existing is not None:
            raise ConflictError(
                "You have already applied for this job",
                {"application_id": existing.application_id}
            )

        if utcnow() > as_utc(job_offer.application_deadline):
            raise ExpiredError("Application deadline has passed")

        application = Application(
            student_id=student_id,
            job_offer_id=job_offer_id,
            current_round=1,
            total_rounds=job_offer.total_rounds,
            application_status=ApplicationStatus.in_progress.value,
        )
        self.db.add(application)

        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                "Duplicate application rejected by constraint: student %s, job offer %s",
                student_id, job_offer_id
            )
            raise ConflictError("You have already applied for this job")

        # In-database increment so concurrent applies don't lose updates
        self.db.execute(
            text("""
                UPDATE job_offers
                SET current_application_count = current_application_count + 1
                WHERE job_offer_id = :jid
            """),
            {"jid": job_offer_id}
        )
        self.db.commit()
        self.db.refresh(job_offer)

        logger.info(
            "Student %s applied to job offer %s (application %s)",
            student_id, job_offer_id, application.application_id
        )
        return application

    def check_application_status(self, student_id: int, job_offer_id: int) -> ApplicationCheckResponse:
        application = self._find(student_id, job_offer_id)
        return ApplicationCheckResponse(
            is_applied=application is not None,
            application_id=application.application_id if application else None
        )

    def list_student_applications(self, student_id: int) -> List[StudentApplicationResponse]:
        """All applications of a student, newest first."""
        rows = self.db.execute(
            select(Application, JobOffer.title, Company.company_name)
            .join(JobOffer, Application.job_offer_id == JobOffer.job_offer_id)
            .join(Company, JobOffer.company_id == Company.company_id)
            .where(Application.student_id == student_id)
            .order_by(Application.applied_at.desc(), Application.application_id.desc())
        ).all()

        return [
            StudentApplicationResponse(
                application_id=app.application_id, student_id=app.student_id,
                job_offer_id=app.job_offer_id, current_round=app.current_round,
                total_rounds=app.total_rounds, application_status=app.application_status,
                applied_at=app.applied_at, updated_at=app.updated_at,
                job_title=title, company_name=company_name
            ) for app, title, company_name in rows
        ]

    def list_job_applications(self, job_offer_id: int, company_id: int) -> List[ApplicantResponse]:
        """All applications of a company's job offer, newest first, regardless of round."""
        self.job_offers.get_owned_job_offer(job_offer_id, company_id)

        rows = self.db.execute(
            select(Application, Student)
            .join(Student, Application.student_id == Student.student_id)
            .where(Application.job_offer_id == job_offer_id)
            .order_by(Application.applied_at.desc(), Application.application_id.desc())
        ).all()
        return [to_applicant(app, student) for app, student in rows]

    def _find(self, student_id: int, job_offer_id: int):
        return self.db.execute(
            select(Application).where(
                Application.student_id == student_id,
                Application.job_offer_id == job_offer_id
            )
        ).scalar_one_or_none()


def get_application_service(db: Session) -> ApplicationService:
    return ApplicationService(db)
