"""Application model - one student's traversal of one job offer's rounds."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from placement_pipeline.models.base import Base
from placement_pipeline.utils.clock import utcnow


class Application(Base):
    """
    Job application.

    (student_id, job_offer_id) is unique at the storage layer, so two
    concurrent applies for the same pair cannot both insert.
    total_rounds is a snapshot of the offer's round count taken at
    apply time.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("student_id", "job_offer_id", name="uq_application_student_job_offer"),
        Index("ix_application_round_status", "job_offer_id", "current_round", "application_status"),
    )

    application_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.student_id"), nullable=False, index=True)
    job_offer_id = Column(Integer, ForeignKey("job_offers.job_offer_id"), nullable=False)

    current_round = Column(Integer, nullable=False, default=1)
    total_rounds = Column(Integer, nullable=False)
    application_status = Column(String(20), nullable=False, default="in-progress")  # in-progress, accepted, rejected

    applied_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    student = relationship("Student")
    job_offer = relationship("JobOffer")

    def __repr__(self):
        return f"<Application {self.student_id} -> {self.job_offer_id} round {self.current_round}>"
