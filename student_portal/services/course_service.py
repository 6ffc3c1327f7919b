from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from student_portal.models.assignment import Assignment, Submission, SubmissionStatus
from student_portal.models.course import Announcement, Course, CourseMaterial
from student_portal.models.enrollment import Enrollment
from student_portal.schemas.course_schema import (
    AnnouncementBrief,
    AnnouncementInfo,
    AssignmentBrief,
    AssignmentDetail,
    CourseDetail,
    CourseDetailStats,
    CourseStats,
    CourseSummary,
    GradeSummary,
    MaterialInfo,
    SubmissionInfo,
)
from student_portal.services.enrollment_service import get_active_course
from student_portal.services.grading_service import latest_grade

PREVIEW_SIZE = 3
COMPLETED_STATUSES = (SubmissionStatus.SUBMITTED, SubmissionStatus.GRADED)


def _count_by_course(db: Session, column, course_ids: List[int], *criteria) -> Dict[int, int]:
    if not course_ids:
        return {}
    model = column.class_
    rows = (
        db.query(model.course_id, func.count(column))
        .filter(model.course_id.in_(course_ids), *criteria)
        .group_by(model.course_id)
        .all()
    )
    return {course_id: count for course_id, count in rows}


def _enrollment_map(db: Session, user_id: int, course_ids: List[int]) -> Dict[int, Enrollment]:
    if not course_ids:
        return {}
    enrollments = db.query(Enrollment).filter(
        Enrollment.user_id == user_id,
        Enrollment.course_id.in_(course_ids)
    ).all()
    return {e.course_id: e for e in enrollments}


def list_courses(
    db: Session,
    user_id: int,
    search: Optional[str] = None,
    semester: Optional[str] = None,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[CourseSummary]:
    """Active courses matching the filters, personalised for ``user_id``."""
    now = now or datetime.utcnow()

    query = db.query(Course).filter(Course.is_active.is_(True))

    search = (search or "").strip()
    if search:
        query = query.filter(or_(
            Course.name.icontains(search, autoescape=True),
            Course.code.icontains(search, autoescape=True),
            Course.instructor.icontains(search, autoescape=True),
        ))
    if semester:
        query = query.filter(Course.semester == semester)
    if year is not None:
        query = query.filter(Course.year == year)

    courses = query.order_by(Course.year.desc(), Course.semester.asc(), Course.name.asc()).all()
    course_ids = [c.course_id for c in courses]

    enrollments = _enrollment_map(db, user_id, course_ids)
    assignment_counts = _count_by_course(
        db, Assignment.assignment_id, course_ids, Assignment.is_published.is_(True)
    )
    announcement_counts = _count_by_course(db, Announcement.announcement_id, course_ids)
    material_counts = _count_by_course(db, CourseMaterial.material_id, course_ids)

    result = []
    for course in courses:
        upcoming = (
            db.query(Assignment)
            .filter(
                Assignment.course_id == course.course_id,
                Assignment.is_published.is_(True),
                Assignment.due_date > now,
            )
            .order_by(Assignment.due_date.asc())
            .limit(PREVIEW_SIZE)
            .all()
        )
        recent = (
            db.query(Announcement)
            .filter(Announcement.course_id == course.course_id)
            .order_by(Announcement.created_at.desc())
            .limit(PREVIEW_SIZE)
            .all()
        )
        enrollment = enrollments.get(course.course_id)

        result.append(CourseSummary(
            id=course.course_id,
            name=course.name,
            code=course.code,
            description=course.description,
            instructor=course.instructor,
            credits=course.credits,
            semester=course.semester,
            year=course.year,
            is_enrolled=enrollment is not None,
            enrolled_at=enrollment.enrolled_at if enrollment else None,
            enrollment_status=enrollment.status if enrollment else None,
            upcoming_assignments=[
                AssignmentBrief(id=a.assignment_id, title=a.title, due_date=a.due_date)
                for a in upcoming
            ],
            recent_announcements=[
                AnnouncementBrief(id=ann.announcement_id, title=ann.title, created_at=ann.created_at)
                for ann in recent
            ],
            stats=CourseStats(
                total_assignments=assignment_counts.get(course.course_id, 0),
                total_announcements=announcement_counts.get(course.course_id, 0),
                total_materials=material_counts.get(course.course_id, 0),
            ),
        ))

    return result


def get_course_detail(db: Session, course_id: int, user_id: int) -> CourseDetail:
    """
    Full view of one active course.

    Any authenticated user may view it; submission and grade data are only
    ever the caller's own.
    """
    course = get_active_course(db, course_id)

    enrollment = db.query(Enrollment).filter(
        Enrollment.user_id == user_id,
        Enrollment.course_id == course.course_id
    ).first()

    assignments = (
        db.query(Assignment)
        .filter(Assignment.course_id == course.course_id, Assignment.is_published.is_(True))
        .order_by(Assignment.due_date.asc())
        .all()
    )

    # The caller's own submissions only, newest first so the first per assignment is current
    own_submissions = (
        db.query(Submission)
        .options(selectinload(Submission.grades))
        .filter(
            Submission.student_id == user_id,
            Submission.assignment_id.in_([a.assignment_id for a in assignments]),
        )
        .order_by(Submission.submitted_at.desc(), Submission.submission_id.desc())
        .all()
    )
    current_submission = {}
    for s in own_submissions:
        current_submission.setdefault(s.assignment_id, s)

    assignment_details = []
    for a in assignments:
        submission = current_submission.get(a.assignment_id)
        grade = latest_grade(submission.grades) if submission else None
        assignment_details.append(AssignmentDetail(
            id=a.assignment_id,
            title=a.title,
            description=a.description,
            due_date=a.due_date,
            max_points=a.max_points,
            created_at=a.created_at,
            submission=SubmissionInfo(
                id=submission.submission_id,
                submitted_at=submission.submitted_at,
                status=submission.status,
            ) if submission else None,
            grade=GradeSummary(
                score=grade.score,
                max_score=grade.max_score,
                feedback=grade.feedback,
                graded_at=grade.graded_at,
            ) if grade else None,
        ))

    announcements = (
        db.query(Announcement)
        .filter(Announcement.course_id == course.course_id)
        .order_by(Announcement.created_at.desc())
        .all()
    )
    materials = (
        db.query(CourseMaterial)
        .filter(CourseMaterial.course_id == course.course_id)
        .order_by(CourseMaterial.uploaded_at.desc())
        .all()
    )

    stats = CourseDetailStats(
        total_assignments=len(assignment_details),
        total_announcements=len(announcements),
        total_materials=len(materials),
        completed_assignments=sum(
            1 for a in assignment_details
            if a.submission and a.submission.status in COMPLETED_STATUSES
        ),
        graded_assignments=sum(1 for a in assignment_details if a.grade),
    )

    return CourseDetail(
        id=course.course_id,
        name=course.name,
        code=course.code,
        description=course.description,
        instructor=course.instructor,
        credits=course.credits,
        semester=course.semester,
        year=course.year,
        is_enrolled=enrollment is not None,
        enrolled_at=enrollment.enrolled_at if enrollment else None,
        enrollment_status=enrollment.status if enrollment else None,
        assignments=assignment_details,
        announcements=[
            AnnouncementInfo(
                id=ann.announcement_id,
                title=ann.title,
                content=ann.content,
                is_pinned=ann.is_pinned,
                created_at=ann.created_at,
            )
            for ann in announcements
        ],
        materials=[
            MaterialInfo(
                id=m.material_id,
                title=m.title,
                description=m.description,
                file_url=m.file_url,
                uploaded_at=m.uploaded_at,
            )
            for m in materials
        ],
        stats=stats,
    )
