"""
Per-status application counts.

Raw counts straight from the applications table: no visibility rule
and no filters are applied. Used for round statistics and for the
final statistics returned when hiring completes.
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from placement_pipeline.schemas.schemas import ApplicationStatus, StatusCounts


def count_by_status(db: Session, job_offer_id: int, round_number: Optional[int] = None) -> StatusCounts:
    """Group a job offer's applications (optionally one round) by status."""
    sql = """
        SELECT application_status, COUNT(*) AS count
        FROM applications
        WHERE job_offer_id = :jid
    """
    params = {"jid": job_offer_id}

    if round_number is not None:
        sql += " AND current_round = :round"
        params["round"] = round_number

    sql += " GROUP BY application_status"
    counts = {row[0]: row[1] for row in db.execute(text(sql), params)}

    return StatusCounts(
        total=sum(counts.values()),
        in_progress=counts.get(ApplicationStatus.in_progress.value, 0),
        accepted=counts.get(ApplicationStatus.accepted.value, 0),
        rejected=counts.get(ApplicationStatus.rejected.value, 0),
    )
