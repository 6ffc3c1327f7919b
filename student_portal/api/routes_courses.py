from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from student_portal.db.database import get_db
from student_portal.schemas.base import ApiResponse
from student_portal.schemas.course_schema import CourseDetail, CourseSummary, EnrollmentConfirmation
from student_portal.schemas.user_schema import CurrentUser
from student_portal.services.auth_gate import get_current_user
from student_portal.services.course_service import get_course_detail, list_courses
from student_portal.services.enrollment_service import enroll_in_course

router = APIRouter()


@router.get("", response_model=ApiResponse[List[CourseSummary]])
def get_courses(
    search: Optional[str] = Query(None, max_length=100),
    semester: Optional[str] = None,
    year: Optional[int] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    courses = list_courses(db, current_user.id, search=search, semester=semester, year=year)
    return ApiResponse[List[CourseSummary]](message="Courses retrieved successfully", data=courses)


@router.get("/{course_id}", response_model=ApiResponse[CourseDetail])
def get_course(
    course_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    course = get_course_detail(db, course_id, current_user.id)
    return ApiResponse[CourseDetail](message="Course retrieved successfully", data=course)


@router.post("/{course_id}/enroll", response_model=ApiResponse[EnrollmentConfirmation])
def enroll(
    course_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    confirmation = enroll_in_course(db, current_user.id, course_id)
    return ApiResponse[EnrollmentConfirmation](
        message=f"Successfully enrolled in {confirmation.course_name}",
        data=confirmation,
    )
