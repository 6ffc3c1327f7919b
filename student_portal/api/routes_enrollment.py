from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from student_portal.db.database import get_db
from student_portal.schemas.base import ApiResponse
from student_portal.schemas.course_schema import EnrollmentInfo
from student_portal.schemas.user_schema import CurrentUser
from student_portal.services.auth_gate import get_current_user
from student_portal.services.enrollment_service import get_user_enrollments

router = APIRouter()


@router.get("", response_model=ApiResponse[List[EnrollmentInfo]])
def get_my_enrollments(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    enrollments = get_user_enrollments(db, current_user.id)
    return ApiResponse[List[EnrollmentInfo]](message="Enrollments retrieved successfully", data=enrollments)
