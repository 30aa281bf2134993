"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Services return these result objects directly.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    internship = "internship"
    contract = "contract"


class JobStatus(str, Enum):
    open = "open"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


class ApplicationStatus(str, Enum):
    in_progress = "in-progress"
    accepted = "accepted"
    rejected = "rejected"


class RoundSort(str, Enum):
    date = "date"
    name = "name"
    cgpa = "cgpa"


# ============================================================
# JOB OFFER SCHEMAS
# ============================================================

class RecruitmentStageIn(BaseModel):
    stage_name: str = Field(..., min_length=1, max_length=200)
    stage_order: Optional[int] = Field(None, ge=1)
    scheduled_date: Optional[datetime] = None
    description: Optional[str] = None

class JobOfferCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    role: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    job_type: JobType = JobType.full_time
    ctc_total: Optional[float] = Field(None, gt=0)
    application_deadline: datetime
    recruitment_process: List[RecruitmentStageIn] = Field(..., min_length=1)

class RecruitmentStageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stage_order: int
    stage_name: str
    scheduled_date: Optional[datetime] = None
    description: Optional[str] = None

class JobOfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_offer_id: int
    company_id: int
    title: str
    role: str
    description: Optional[str] = None
    location: Optional[str] = None
    job_type: str
    ctc_total: Optional[float] = None
    total_rounds: int
    current_recruitment_stage: int
    current_application_count: int
    job_status: str
    application_deadline: datetime
    completed_at: Optional[datetime] = None
    created_at: datetime
    recruitment_process: List[RecruitmentStageResponse] = []

class JobOfferSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_offer_id: int
    title: str
    total_rounds: int
    current_recruitment_stage: int
    job_status: str

class JobOfferListItem(JobOfferSummary):
    """Public listing entry shown to students."""
    company_id: int
    company_name: str
    role: str
    location: Optional[str] = None
    job_type: str
    ctc_total: Optional[float] = None
    application_deadline: datetime
    created_at: datetime

class JobOfferListResponse(BaseModel):
    jobs: List[JobOfferListItem]
    total: int
    page: int
    page_size: int


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    application_id: int
    student_id: int
    job_offer_id: int
    current_round: int
    total_rounds: int
    application_status: str
    applied_at: datetime
    updated_at: Optional[datetime] = None

class StudentApplicationResponse(ApplicationResponse):
    job_title: str
    company_name: str

class ApplicantResponse(ApplicationResponse):
    """Application joined with the student's directory fields."""
    student_name: str
    email: Optional[str] = None
    department: Optional[str] = None
    cgpa: Optional[float] = None

class ApplicationCheckResponse(BaseModel):
    is_applied: bool
    application_id: Optional[int] = None


# ============================================================
# ROUND VIEW SCHEMAS
# ============================================================

class StatusCounts(BaseModel):
    total: int = 0
    in_progress: int = 0
    accepted: int = 0
    rejected: int = 0

class Pagination(BaseModel):
    current: int
    pages: int
    total: int
    limit: int

class RoundViewResponse(BaseModel):
    applications: List[ApplicantResponse]
    job_offer: JobOfferSummary
    round_number: int
    round_stats: StatusCounts
    current_round: int
    is_active_round: bool
    is_completed_round: bool
    is_final_round: bool
    pagination: Pagination


# ============================================================
# TRANSITION SCHEMAS
# ============================================================

class PushToNextRoundRequest(BaseModel):
    application_ids: List[int] = Field(..., min_length=1)
    current_round: int = Field(..., ge=1)

class PushToNextRoundResult(BaseModel):
    updated_count: int
    next_round: int
    is_final_round: bool
    updated_ids: List[int] = []
    skipped_ids: List[int] = []

class RejectSelectedRequest(BaseModel):
    application_ids: List[int] = Field(..., min_length=1)

class RejectSelectedResult(BaseModel):
    updated_count: int
    updated_ids: List[int] = []
    skipped_ids: List[int] = []
    overridden_ids: List[int] = []

class AdvanceRoundRequest(BaseModel):
    current_round: int = Field(..., ge=1)

class AdvanceRoundResult(BaseModel):
    new_round: int
    students_in_next_round: int
    auto_rejected_count: int

class CompleteHiringResult(BaseModel):
    job_offer_id: int
    job_status: str
    completed_at: datetime
    final_stats: StatusCounts


# ============================================================
# RECONCILIATION SCHEMAS
# ============================================================

class ReconciliationResult(BaseModel):
    job_offer_id: int
    previous_application_count: int
    application_count: int
    stragglers_rejected: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class ErrorResponse(BaseModel):
    """Body of every business-rule error returned by the API."""
    success: bool = False
    error: str
    detail: str
    details: Optional[Dict[str, Any]] = None
