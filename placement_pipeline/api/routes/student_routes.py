"""
Student Routes

GET /students/applications - Get my applications
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from placement_pipeline.db.postgres import get_db
from placement_pipeline.core.auth import get_current_student
from placement_pipeline.services.application_service import get_application_service
from placement_pipeline.schemas.schemas import StudentApplicationResponse

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/applications", response_model=List[StudentApplicationResponse])
def get_my_applications(
    student: dict = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    """Get all job applications for current student, newest first."""
    return get_application_service(db).list_student_applications(student["student_id"])
