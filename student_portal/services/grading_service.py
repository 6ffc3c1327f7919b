import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session, joinedload

from student_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from student_portal.models.assignment import Assignment, Submission, SubmissionStatus
from student_portal.models.grade import Grade, GradeStatus
from student_portal.models.user import Role, User
from student_portal.schemas.grade_schema import GradeInfo
from student_portal.schemas.user_schema import CurrentUser

logger = logging.getLogger(__name__)


def _graded_at_key(grade: Grade) -> datetime:
    return grade.graded_at or datetime.min


def latest_grade(grades: Iterable[Grade]) -> Optional[Grade]:
    """Most recent grade record of a submission, if any."""
    grades = list(grades)
    if not grades:
        return None
    return max(grades, key=lambda g: (_graded_at_key(g), g.grade_id or 0))


def grade_submission(
    db: Session,
    submission_id: int,
    grader: CurrentUser,
    score: float,
    max_score: float,
    feedback: Optional[str] = None,
) -> GradeInfo:
    """
    Record a grade for a submission.

    Instructors may only grade submissions in courses they teach (matched on
    the course's instructor name); admins may grade anything.
    """
    if max_score <= 0:
        raise ValidationError(errors={"maxScore": "Max score must be greater than 0"})
    if score < 0 or score > max_score:
        raise ValidationError(errors={"score": "Score must be between 0 and max score"})

    submission = db.query(Submission).options(
        joinedload(Submission.assignment).joinedload(Assignment.course)
    ).filter(Submission.submission_id == submission_id).first()

    if not submission:
        raise NotFoundError("Submission not found")

    if grader.role != Role.ADMIN:
        grader_user = db.query(User).filter(User.user_id == grader.id).first()
        course = submission.assignment.course
        if not grader_user or course.instructor != grader_user.name:
            raise AuthorizationError("Not authorized", "You do not teach this course")

    grade = Grade(
        submission_id=submission.submission_id,
        score=score,
        max_score=max_score,
        feedback=feedback,
        graded_at=datetime.utcnow(),
        status=GradeStatus.GRADED,
    )
    submission.status = SubmissionStatus.GRADED
    db.add(grade)
    db.commit()
    db.refresh(grade)

    logger.info("Submission %s graded by user %s", submission_id, grader.id)

    return GradeInfo(
        id=grade.grade_id,
        submission_id=grade.submission_id,
        score=grade.score,
        max_score=grade.max_score,
        feedback=grade.feedback,
        graded_at=grade.graded_at,
        status=grade.status,
    )
