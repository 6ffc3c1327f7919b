from datetime import datetime
from typing import List, Optional

from student_portal.models.assignment import SubmissionStatus
from student_portal.schemas.base import CamelModel


class DashboardCourse(CamelModel):
    id: int
    name: str
    code: str
    instructor: str
    credits: int
    semester: str
    year: int
    assignment_count: int
    announcement_count: int


class UpcomingAssignment(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    due_date: datetime
    max_points: int
    course_name: str
    course_code: str


class RecentAnnouncement(CamelModel):
    id: int
    title: str
    content: str
    is_pinned: bool = False
    created_at: datetime
    course_name: str
    course_code: str


class RecentGrade(CamelModel):
    id: int
    score: float
    max_score: float
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None
    assignment_title: str
    course_name: str
    course_code: str


class RecentSubmission(CamelModel):
    id: int
    assignment_title: str
    course_name: str
    course_code: str
    status: SubmissionStatus
    submitted_at: datetime
    score: Optional[float] = None
    max_score: Optional[float] = None


class DashboardStatistics(CamelModel):
    total_courses: int = 0
    total_assignments: int = 0
    submitted_assignments: int = 0
    graded_assignments: int = 0
    gpa: float = 0.0
    total_points: float = 0.0
    earned_points: float = 0.0


class DashboardData(CamelModel):
    courses: List[DashboardCourse] = []
    upcoming_assignments: List[UpcomingAssignment] = []
    recent_announcements: List[RecentAnnouncement] = []
    recent_grades: List[RecentGrade] = []
    recent_submissions: List[RecentSubmission] = []
    statistics: DashboardStatistics
