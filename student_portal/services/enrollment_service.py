import logging
from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from student_portal.core.exceptions import ConflictError, NotFoundError
from student_portal.models.course import Course
from student_portal.models.enrollment import Enrollment, EnrollmentStatus
from student_portal.schemas.course_schema import EnrollmentConfirmation, EnrollmentInfo

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "You are already enrolled in this course"


def get_active_course(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(
        Course.course_id == course_id,
        Course.is_active.is_(True)
    ).first()

    if not course:
        raise NotFoundError("Course not found or not available")

    return course


def is_enrolled(db: Session, user_id: int, course_id: int) -> bool:
    return db.query(Enrollment.enrollment_id).filter(
        Enrollment.user_id == user_id,
        Enrollment.course_id == course_id
    ).first() is not None


def enroll_in_course(db: Session, user_id: int, course_id: int) -> EnrollmentConfirmation:
    course = get_active_course(db, course_id)

    # Fast path only; the unique constraint settles concurrent requests
    if is_enrolled(db, user_id, course_id):
        raise ConflictError(ALREADY_ENROLLED)

    enrollment = Enrollment(
        user_id=user_id,
        course_id=course.course_id,
        enrolled_at=datetime.utcnow(),
        status=EnrollmentStatus.ACTIVE,
    )
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ALREADY_ENROLLED)
    db.refresh(enrollment)

    logger.info("User %s enrolled in course %s", user_id, course.code)

    return EnrollmentConfirmation(
        enrollment_id=enrollment.enrollment_id,
        course_name=course.name,
        course_code=course.code,
        enrolled_at=enrollment.enrolled_at,
    )


def get_user_enrollments(db: Session, user_id: int) -> List[EnrollmentInfo]:
    enrollments = (
        db.query(Enrollment)
        .options(joinedload(Enrollment.course))
        .filter(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc())
        .all()
    )

    return [
        EnrollmentInfo(
            enrollment_id=e.enrollment_id,
            course_id=e.course_id,
            course_name=e.course.name,
            course_code=e.course.code,
            status=e.status,
            enrolled_at=e.enrolled_at,
        )
        for e in enrollments
    ]
