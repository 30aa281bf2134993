"""
Reconciliation Service

Repairs the two kinds of drift the pipeline tolerates instead of
guarding with distributed transactions:

1. current_application_count out of step with the applications table
   (e.g. a crash between inserting an application and bumping the
   counter). Fixed by recounting.
2. in-progress applications left in a round below the job offer's
   current stage (a round was closed without its stragglers being
   rejected). Fixed by re-running the advance-round auto-reject.

Run from the command line with scripts/reconcile.py.
"""

import logging
from typing import List, Tuple

from sqlalchemy import select, text, update
from sqlalchemy.orm import Session

from placement_pipeline.models import Application, JobOffer
from placement_pipeline.schemas.schemas import ApplicationStatus, ReconciliationResult
from placement_pipeline.utils.clock import utcnow

logger = logging.getLogger(__name__)


class ReconciliationService:

    def __init__(self, db: Session):
        self.db = db

    def recompute_application_count(self, job_offer_id: int) -> Tuple[int, int]:
        """Reset the cached counter to the real number of applications. Returns (old, new)."""
        previous = self.db.execute(
            text("SELECT current_application_count FROM job_offers WHERE job_offer_id = :jid"),
            {"jid": job_offer_id}
        ).scalar_one()

        actual = self.db.execute(
            text("SELECT COUNT(*) FROM applications WHERE job_offer_id = :jid"),
            {"jid": job_offer_id}
        ).scalar_one()

        if previous != actual:
            self.db.execute(
                text("UPDATE job_offers SET current_application_count = :count WHERE job_offer_id = :jid"),
                {"count": actual, "jid": job_offer_id}
            )
            logger.warning(
                "Job offer %s: application count corrected %s -> %s",
                job_offer_id, previous, actual
            )
        self.db.commit()
        self.db.expire_all()
        return previous, actual

    def reject_stragglers(self, job_offer_id: int) -> int:
        """Reject in-progress applications sitting in rounds that are already closed."""
        stage = self.db.execute(
            select(JobOffer.current_recruitment_stage).where(JobOffer.job_offer_id == job_offer_id)
        ).scalar_one()

        result = self.db.execute(
            update(Application)
            .where(
                Application.job_offer_id == job_offer_id,
                Application.application_status == ApplicationStatus.in_progress.value,
                Application.current_round < stage
            )
            .values(application_status=ApplicationStatus.rejected.value, updated_at=utcnow()),
            execution_options={"synchronize_session": False}
        )
        self.db.commit()
        self.db.expire_all()

        if result.rowcount:
            logger.warning("Job offer %s: rejected %s stragglers from closed rounds", job_offer_id, result.rowcount)
        return result.rowcount

    def reconcile_all(self) -> List[ReconciliationResult]:
        """Run both passes over every job offer."""
        job_offer_ids = list(self.db.execute(
            select(JobOffer.job_offer_id).order_by(JobOffer.job_offer_id)
        ).scalars())

        results = []
        for job_offer_id in job_offer_ids:
            previous, actual = self.recompute_application_count(job_offer_id)
            stragglers = self.reject_stragglers(job_offer_id)
            results.append(ReconciliationResult(
                job_offer_id=job_offer_id,
                previous_application_count=previous,
                application_count=actual,
                stragglers_rejected=stragglers
            ))

        logger.info("Reconciled %s job offers", len(results))
        return results
