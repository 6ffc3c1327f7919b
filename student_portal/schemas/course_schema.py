from datetime import datetime
from typing import List, Optional

from student_portal.models.assignment import SubmissionStatus
from student_portal.models.enrollment import EnrollmentStatus
from student_portal.schemas.base import CamelModel


class AssignmentBrief(CamelModel):
    id: int
    title: str
    due_date: datetime


class AnnouncementBrief(CamelModel):
    id: int
    title: str
    created_at: datetime


class CourseStats(CamelModel):
    total_assignments: int = 0
    total_announcements: int = 0
    total_materials: int = 0


class CourseDetailStats(CourseStats):
    completed_assignments: int = 0
    graded_assignments: int = 0


class CourseSummary(CamelModel):
    id: int
    name: str
    code: str
    description: Optional[str] = None
    instructor: str
    credits: int
    semester: str
    year: int
    is_enrolled: bool = False
    enrolled_at: Optional[datetime] = None
    enrollment_status: Optional[EnrollmentStatus] = None
    upcoming_assignments: List[AssignmentBrief] = []
    recent_announcements: List[AnnouncementBrief] = []
    stats: CourseStats


class SubmissionInfo(CamelModel):
    id: int
    submitted_at: datetime
    status: SubmissionStatus


class GradeSummary(CamelModel):
    score: float
    max_score: float
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None


class AssignmentDetail(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    due_date: datetime
    max_points: int
    created_at: datetime
    submission: Optional[SubmissionInfo] = None
    grade: Optional[GradeSummary] = None


class AnnouncementInfo(CamelModel):
    id: int
    title: str
    content: str
    is_pinned: bool = False
    created_at: datetime


class MaterialInfo(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    file_url: str
    uploaded_at: datetime


class CourseDetail(CamelModel):
    id: int
    name: str
    code: str
    description: Optional[str] = None
    instructor: str
    credits: int
    semester: str
    year: int
    is_enrolled: bool = False
    enrolled_at: Optional[datetime] = None
    enrollment_status: Optional[EnrollmentStatus] = None
    assignments: List[AssignmentDetail] = []
    announcements: List[AnnouncementInfo] = []
    materials: List[MaterialInfo] = []
    stats: CourseDetailStats


class EnrollmentConfirmation(CamelModel):
    enrollment_id: int
    course_name: str
    course_code: str
    enrolled_at: datetime


class EnrollmentInfo(CamelModel):
    enrollment_id: int
    course_id: int
    course_name: str
    course_code: str
    status: EnrollmentStatus
    enrolled_at: datetime
