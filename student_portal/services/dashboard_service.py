"""
Dashboard aggregation.

Pure read-and-fold over a user's enrollments, submissions and grades; safe
to call repeatedly.
"""

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from student_portal.models.assignment import Assignment, Submission, SubmissionStatus
from student_portal.models.course import Announcement
from student_portal.models.enrollment import Enrollment, EnrollmentStatus
from student_portal.models.grade import Grade, GradeStatus
from student_portal.schemas.dashboard_schema import (
    DashboardCourse,
    DashboardData,
    DashboardStatistics,
    RecentAnnouncement,
    RecentGrade,
    RecentSubmission,
    UpcomingAssignment,
)
from student_portal.services.grading_service import latest_grade

UPCOMING_WINDOW = timedelta(days=7)
ASSIGNMENTS_PER_COURSE = 5
ANNOUNCEMENTS_PER_COURSE = 3
RECENT_SUBMISSIONS = 10
FEED_SIZE = 5


def calculate_gpa(earned_points: float, total_points: float) -> float:
    """Points ratio on a 0-4 scale, 2 decimals; 0 when nothing is graded."""
    if total_points <= 0:
        return 0.0
    gpa = Decimal(earned_points / total_points * 4)
    return float(gpa.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def is_upcoming(due_date: datetime, now: datetime, window: timedelta = UPCOMING_WINDOW) -> bool:
    return now < due_date <= now + window


def _course_assignments(db: Session, course_id: int, now: datetime) -> List[Assignment]:
    return (
        db.query(Assignment)
        .filter(
            Assignment.course_id == course_id,
            Assignment.is_published.is_(True),
            Assignment.due_date > now,
        )
        .order_by(Assignment.due_date.asc())
        .limit(ASSIGNMENTS_PER_COURSE)
        .all()
    )


def _course_announcements(db: Session, course_id: int) -> List[Announcement]:
    return (
        db.query(Announcement)
        .filter(Announcement.course_id == course_id)
        .order_by(Announcement.created_at.desc())
        .limit(ANNOUNCEMENTS_PER_COURSE)
        .all()
    )


def _published_assignment_count(db: Session, course_id: int) -> int:
    return db.query(func.count(Assignment.assignment_id)).filter(
        Assignment.course_id == course_id,
        Assignment.is_published.is_(True),
    ).scalar() or 0


def _announcement_count(db: Session, course_id: int) -> int:
    return db.query(func.count(Announcement.announcement_id)).filter(
        Announcement.course_id == course_id
    ).scalar() or 0


def get_dashboard_overview(db: Session, user_id: int, now: Optional[datetime] = None) -> DashboardData:
    now = now or datetime.utcnow()

    # 1. Active enrollments with each course's next assignments and latest announcements
    enrollments = (
        db.query(Enrollment)
        .options(joinedload(Enrollment.course))
        .filter(Enrollment.user_id == user_id, Enrollment.status == EnrollmentStatus.ACTIVE)
        .order_by(Enrollment.enrolled_at.asc())
        .all()
    )

    courses = []
    upcoming_assignments = []
    announcements = []
    total_assignments = 0

    for enrollment in enrollments:
        course = enrollment.course
        assignment_count = _published_assignment_count(db, course.course_id)
        announcement_count = _announcement_count(db, course.course_id)
        total_assignments += assignment_count

        courses.append(DashboardCourse(
            id=course.course_id,
            name=course.name,
            code=course.code,
            instructor=course.instructor,
            credits=course.credits,
            semester=course.semester,
            year=course.year,
            assignment_count=assignment_count,
            announcement_count=announcement_count,
        ))

        for a in _course_assignments(db, course.course_id, now):
            if is_upcoming(a.due_date, now):
                upcoming_assignments.append(UpcomingAssignment(
                    id=a.assignment_id,
                    title=a.title,
                    description=a.description,
                    due_date=a.due_date,
                    max_points=a.max_points,
                    course_name=course.name,
                    course_code=course.code,
                ))

        for ann in _course_announcements(db, course.course_id):
            announcements.append(RecentAnnouncement(
                id=ann.announcement_id,
                title=ann.title,
                content=ann.content,
                is_pinned=ann.is_pinned,
                created_at=ann.created_at,
                course_name=course.name,
                course_code=course.code,
            ))

    upcoming_assignments.sort(key=lambda a: a.due_date)
    announcements.sort(key=lambda a: a.created_at, reverse=True)
    recent_announcements = announcements[:FEED_SIZE]

    # 2. Recent submissions, newest first
    submissions = (
        db.query(Submission)
        .options(
            joinedload(Submission.assignment).joinedload(Assignment.course),
            selectinload(Submission.grades),
        )
        .filter(Submission.student_id == user_id)
        .order_by(Submission.submitted_at.desc())
        .limit(RECENT_SUBMISSIONS)
        .all()
    )

    recent_submissions = []
    for s in submissions:
        grade = latest_grade(s.grades)
        recent_submissions.append(RecentSubmission(
            id=s.submission_id,
            assignment_title=s.assignment.title,
            course_name=s.assignment.course.name,
            course_code=s.assignment.course.code,
            status=s.status,
            submitted_at=s.submitted_at,
            score=grade.score if grade else None,
            max_score=grade.max_score if grade else None,
        ))

    submitted_assignments = db.query(func.count(Submission.submission_id)).filter(
        Submission.student_id == user_id,
        Submission.status == SubmissionStatus.SUBMITTED,
    ).scalar() or 0

    # 3. Graded grades of the user, only the latest per submission counts
    all_grades = (
        db.query(Grade)
        .join(Submission, Grade.submission_id == Submission.submission_id)
        .options(joinedload(Grade.submission).joinedload(Submission.assignment).joinedload(Assignment.course))
        .filter(Submission.student_id == user_id, Grade.status == GradeStatus.GRADED)
        .all()
    )
    by_submission: Dict[int, List[Grade]] = {}
    for g in all_grades:
        by_submission.setdefault(g.submission_id, []).append(g)
    grades = [latest_grade(group) for group in by_submission.values()]

    total_points = sum(g.max_score for g in grades)
    earned_points = sum(g.score for g in grades)

    ordered_grades = sorted(
        grades, key=lambda g: (g.graded_at or datetime.min, g.grade_id), reverse=True
    )
    recent_grades = [
        RecentGrade(
            id=g.grade_id,
            score=g.score,
            max_score=g.max_score,
            feedback=g.feedback,
            graded_at=g.graded_at,
            assignment_title=g.submission.assignment.title,
            course_name=g.submission.assignment.course.name,
            course_code=g.submission.assignment.course.code,
        )
        for g in ordered_grades[:FEED_SIZE]
    ]

    statistics = DashboardStatistics(
        total_courses=len(enrollments),
        total_assignments=total_assignments,
        submitted_assignments=submitted_assignments,
        graded_assignments=len(grades),
        gpa=calculate_gpa(earned_points, total_points),
        total_points=total_points,
        earned_points=earned_points,
    )

    return DashboardData(
        courses=courses,
        upcoming_assignments=upcoming_assignments,
        recent_announcements=recent_announcements,
        recent_grades=recent_grades,
        recent_submissions=recent_submissions,
        statistics=statistics,
    )
