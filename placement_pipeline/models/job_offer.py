"""Job offer and its ordered recruitment stages."""

from sqlalchemy import (
    CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship

from placement_pipeline.models.base import Base
from placement_pipeline.utils.clock import utcnow


class JobOffer(Base):
    """
    A published job with a fixed list of recruitment stages.

    total_rounds is the length of the stage list and never changes.
    current_recruitment_stage only moves forward, one round per
    advance. current_application_count is a cached counter; the
    reconciliation service can recompute it from the applications table.
    """

    __tablename__ = "job_offers"
    __table_args__ = (
        CheckConstraint("total_rounds >= 1", name="ck_job_offer_total_rounds"),
        CheckConstraint(
            "current_recruitment_stage >= 1 AND current_recruitment_stage <= total_rounds",
            name="ck_job_offer_stage_range",
        ),
    )

    job_offer_id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.company_id"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    role = Column(String(200), nullable=False)
    description = Column(Text)
    location = Column(String(200))
    job_type = Column(String(20), nullable=False, default="full-time")
    ctc_total = Column(Float)

    total_rounds = Column(Integer, nullable=False)
    current_recruitment_stage = Column(Integer, nullable=False, default=1)
    current_application_count = Column(Integer, nullable=False, default=0)
    job_status = Column(String(20), nullable=False, default="open", index=True)

    application_deadline = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    company = relationship("Company")
    recruitment_process = relationship(
        "RecruitmentStage",
        order_by="RecruitmentStage.stage_order",
        cascade="all, delete-orphan",
        back_populates="job_offer",
    )

    def __repr__(self):
        return f"<JobOffer {self.job_offer_id} stage {self.current_recruitment_stage}/{self.total_rounds}>"


class RecruitmentStage(Base):
    __tablename__ = "recruitment_stages"
    __table_args__ = (
        UniqueConstraint("job_offer_id", "stage_order", name="uq_stage_job_offer_order"),
    )

    stage_id = Column(Integer, primary_key=True, autoincrement=True)
    job_offer_id = Column(Integer, ForeignKey("job_offers.job_offer_id"), nullable=False, index=True)
    stage_name = Column(String(200), nullable=False)
    stage_order = Column(Integer, nullable=False)
    scheduled_date = Column(DateTime(timezone=True))
    description = Column(Text)

    job_offer = relationship("JobOffer", back_populates="recruitment_process")
