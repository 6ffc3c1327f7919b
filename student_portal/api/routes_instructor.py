from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from student_portal.db.database import get_db
from student_portal.schemas.base import ApiResponse
from student_portal.schemas.grade_schema import GradeInfo, GradeRequest
from student_portal.schemas.user_schema import CurrentUser
from student_portal.services.auth_gate import get_current_user
from student_portal.services.grading_service import grade_submission

router = APIRouter()


@router.post("/submissions/{submission_id}/grade", response_model=ApiResponse[GradeInfo])
def grade(
    submission_id: int,
    data: GradeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """(Instructor/Admin) Grade a student's submission."""
    grade_info = grade_submission(
        db,
        submission_id=submission_id,
        grader=current_user,
        score=data.score,
        max_score=data.max_score,
        feedback=data.feedback,
    )
    return ApiResponse[GradeInfo](message="Submission graded successfully", data=grade_info)
