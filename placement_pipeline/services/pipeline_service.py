"""
Pipeline Service - bulk round transitions for a job offer.

STATES (per application, parameterized by current_round):
    in-progress  ->  accepted   (pushed into the final round)
    in-progress  ->  rejected   (reject-selected, or straggler on advance)
    accepted     ->  rejected   (reject-selected override)

TRANSITIONS:
1. push_to_next_round - move selected applications from round R to R+1;
   arriving in the final round is acceptance
2. reject_selected    - reject selected applications in any round
3. advance_round      - close round R: reject its stragglers, then move
   the job offer's current stage to R+1
4. complete_hiring    - mark the job offer completed (final round only)

Every bulk update is one UPDATE ... RETURNING statement over the
matched rows, so the ids that actually changed are known exactly.
Ids that do not match (wrong job offer, wrong round, already moved)
are skipped without error and reported back as skipped_ids.
"""

import logging
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from placement_pipeline.core.config import Settings, get_settings
from placement_pipeline.core.exceptions import InvalidStateError, ValidationError
from placement_pipeline.models import Application, JobOffer
from placement_pipeline.schemas.schemas import (
    AdvanceRoundResult, ApplicationStatus, CompleteHiringResult, JobStatus,
    PushToNextRoundResult, RejectSelectedResult
)
from placement_pipeline.services.application_stats import count_by_status
from placement_pipeline.services.job_offer_service import JobOfferService
from placement_pipeline.utils.clock import utcnow

logger = logging.getLogger(__name__)

TERMINAL_JOB_STATUSES = (JobStatus.completed.value, JobStatus.cancelled.value)


def unique_ids(application_ids: List[int]) -> List[int]:
    """Drop duplicate ids, keeping first-seen order."""
    if not application_ids:
        raise ValidationError("Application IDs are required")
    return list(dict.fromkeys(application_ids))


def validate_round(round_number: int) -> None:
    if round_number is None or round_number < 1:
        raise ValidationError("Round number must be a positive integer")


class PipelineService:
    """State machine operations over a job offer's applications."""

    def __init__(self, db: Session, settings: Settings = None):
        self.db = db
        self.settings = settings or get_settings()
        self.job_offers = JobOfferService(db)

    # ============================================================
    # PUSH TO NEXT ROUND
    # ============================================================

    def push_to_next_round(
        self,
        job_offer_id: int,
        company_id: int,
        application_ids: List[int],
        current_round: int
    ) -> PushToNextRoundResult:
        """
        Move in-progress applications from current_round to current_round + 1.

        If current_round + 1 is the final round the moved applications
        become accepted, otherwise they stay in-progress.
        """
        ids = unique_ids(application_ids)
        validate_round(current_round)

        job_offer = self.job_offers.get_owned_job_offer(job_offer_id, company_id)
        self._require_active(job_offer)

        if current_round >= job_offer.total_rounds:
            raise InvalidStateError("This is already the final round")
        self._require_current_stage(job_offer, current_round)

        next_round = current_round + 1
        is_final_round = next_round == job_offer.total_rounds
        new_status = ApplicationStatus.accepted if is_final_round else ApplicationStatus.in_progress

        result = self.db.execute(
            update(Application)
            .where(
                Application.application_id.in_(ids),
                Application.job_offer_id == job_offer_id,
                Application.current_round == current_round,
                Application.application_status == ApplicationStatus.in_progress.value
            )
            .values(
                current_round=next_round,
                application_status=new_status.value,
                updated_at=utcnow()
            )
            .returning(Application.application_id),
            execution_options={"synchronize_session": False}
        )
        updated_ids = [row[0] for row in result]
        self.db.commit()
        self.db.expire_all()

        changed = set(updated_ids)
        skipped_ids = [app_id for app_id in ids if app_id not in changed]
        logger.info(
            "Job offer %s: pushed %s/%s applications from round %s to round %s%s",
            job_offer_id, len(updated_ids), len(ids), current_round, next_round,
            " (final, accepted)" if is_final_round else ""
        )
        if skipped_ids:
            logger.info("Job offer %s: push skipped stale ids %s", job_offer_id, skipped_ids)

        return PushToNextRoundResult(
            updated_count=len(updated_ids),
            next_round=next_round,
            is_final_round=is_final_round,
            updated_ids=sorted(updated_ids),
            skipped_ids=skipped_ids
        )

    # ============================================================
    # REJECT SELECTED
    # ============================================================

    def reject_selected(
        self,
        job_offer_id: int,
        company_id: int,
        application_ids: List[int]
    ) -> RejectSelectedResult:
        """
        Reject the selected applications of a job offer.

        No round filter: this is an override, and accepted applications
        are rejected as well. Those are returned as overridden_ids.
        Applications that are already rejected are left alone and come
        back in skipped_ids.
        """
        ids = unique_ids(application_ids)
        self.job_offers.get_owned_job_offer(job_offer_id, company_id)

        overridden_ids = list(self.db.execute(
            select(Application.application_id).where(
                Application.application_id.in_(ids),
                Application.job_offer_id == job_offer_id,
                Application.application_status == ApplicationStatus.accepted.value
            )
        ).scalars())

        result = self.db.execute(
            update(Application)
            .where(
                Application.application_id.in_(ids),
                Application.job_offer_id == job_offer_id,
                Application.application_status != ApplicationStatus.rejected.value
            )
            .values(application_status=ApplicationStatus.rejected.value, updated_at=utcnow())
            .returning(Application.application_id),
            execution_options={"synchronize_session": False}
        )
        updated_ids = [row[0] for row in result]
        self.db.commit()
        self.db.expire_all()

        changed = set(updated_ids)
        skipped_ids = [app_id for app_id in ids if app_id not in changed]
        logger.info("Job offer %s: rejected %s/%s applications", job_offer_id, len(updated_ids), len(ids))
        if overridden_ids:
            logger.warning(
                "Job offer %s: reject overrode accepted applications %s",
                job_offer_id, sorted(overridden_ids)
            )

        return RejectSelectedResult(
            updated_count=len(updated_ids),
            updated_ids=sorted(updated_ids),
            skipped_ids=skipped_ids,
            overridden_ids=sorted(overridden_ids)
        )

    # ============================================================
    # ADVANCE ROUND
    # ============================================================

    def advance_round(self, job_offer_id: int, company_id: int, current_round: int) -> AdvanceRoundResult:
        """
        Close current_round and make current_round + 1 the active round.

        Preconditions:
        - current_round is not the final round
        - at least one application was already pushed into current_round + 1

        Effects, in order and in one transaction:
        1. in-progress applications still in current_round become rejected
        2. the job offer's current stage becomes current_round + 1
        """
        validate_round(current_round)

        job_offer = self.job_offers.get_owned_job_offer(job_offer_id, company_id, for_update=True)
        self._require_active(job_offer)

        if current_round >= job_offer.total_rounds:
            raise InvalidStateError("This is already the final round")
        self._require_current_stage(job_offer, current_round)

        next_round = current_round + 1
        students_in_next_round = self.db.execute(
            select(func.count(Application.application_id)).where(
                Application.job_offer_id == job_offer_id,
                Application.current_round == next_round
            )
        ).scalar_one()

        if students_in_next_round == 0:
            logger.warning("Job offer %s: advance from round %s with empty next round", job_offer_id, current_round)
            raise InvalidStateError("Please push at least one student to the next round before advancing")

        result = self.db.execute(
            update(Application)
            .where(
                Application.job_offer_id == job_offer_id,
                Application.current_round == current_round,
                Application.application_status == ApplicationStatus.in_progress.value
            )
            .values(application_status=ApplicationStatus.rejected.value, updated_at=utcnow())
            .returning(Application.application_id),
            execution_options={"synchronize_session": False}
        )
        auto_rejected = len(result.all())

        job_offer.current_recruitment_stage = next_round
        if job_offer.job_status == JobStatus.open.value:
            job_offer.job_status = JobStatus.in_progress.value
        self.db.commit()
        self.db.expire_all()

        logger.info(
            "Job offer %s: advanced to round %s (%s waiting, %s stragglers rejected)",
            job_offer_id, next_round, students_in_next_round, auto_rejected
        )
        return AdvanceRoundResult(
            new_round=next_round,
            students_in_next_round=students_in_next_round,
            auto_rejected_count=auto_rejected
        )

    # ============================================================
    # COMPLETE HIRING
    # ============================================================

    def complete_hiring(self, job_offer_id: int, company_id: int) -> CompleteHiringResult:
        """Mark the job offer completed. Only allowed in the final round."""
        job_offer = self.job_offers.get_owned_job_offer(job_offer_id, company_id, for_update=True)

        if job_offer.job_status == JobStatus.completed.value:
            raise InvalidStateError("Hiring is already completed for this job offer")
        if job_offer.job_status == JobStatus.cancelled.value:
            raise InvalidStateError("Job offer is cancelled")
        if job_offer.current_recruitment_stage != job_offer.total_rounds:
            raise InvalidStateError(
                "Can only complete hiring in the final round",
                {"current_round": job_offer.current_recruitment_stage, "total_rounds": job_offer.total_rounds}
            )

        job_offer.job_status = JobStatus.completed.value
        job_offer.completed_at = utcnow()
        self.db.commit()

        final_stats = count_by_status(self.db, job_offer_id)
        logger.info(
            "Job offer %s: hiring completed (%s accepted, %s rejected)",
            job_offer_id, final_stats.accepted, final_stats.rejected
        )
        return CompleteHiringResult(
            job_offer_id=job_offer_id,
            job_status=job_offer.job_status,
            completed_at=job_offer.completed_at,
            final_stats=final_stats
        )

    # ============================================================
    # PRECONDITIONS
    # ============================================================

    @staticmethod
    def _require_active(job_offer: JobOffer) -> None:
        if job_offer.job_status in TERMINAL_JOB_STATUSES:
            raise InvalidStateError(f"Job offer is {job_offer.job_status}; no further round changes allowed")

    def _require_current_stage(self, job_offer: JobOffer, current_round: int) -> None:
        """Reject a client-supplied round that disagrees with the offer's real stage."""
        if not self.settings.enforce_current_stage:
            return
        if current_round != job_offer.current_recruitment_stage:
            logger.warning(
                "Job offer %s: stale round %s (current stage is %s)",
                job_offer.job_offer_id, current_round, job_offer.current_recruitment_stage
            )
            raise InvalidStateError(
                f"Round {current_round} is not the active round",
                {"current_round": job_offer.current_recruitment_stage}
            )


def get_pipeline_service(db: Session) -> PipelineService:
    return PipelineService(db)
