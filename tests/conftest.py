"""
Student Portal - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import Optional

import pytest
from faker import Faker
from fastapi.testclient import TestClient

# Set testing environment before the app (and its settings) are imported
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from student_portal.main import app
from student_portal.core.config import settings
from student_portal.db.database import Base, SessionLocal, engine
from student_portal.models.assignment import Assignment, Submission, SubmissionStatus
from student_portal.models.course import Announcement, Course, CourseMaterial
from student_portal.models.enrollment import Enrollment, EnrollmentStatus
from student_portal.models.grade import Grade, GradeStatus
from student_portal.models.user import Role, User
from student_portal.services.security import hash_password
from student_portal.services.token_service import create_access_token
from student_portal.services.user_service import to_user_data

fake = Faker()

DEFAULT_PASSWORD = "Password123"


@pytest.fixture(autouse=True)
def db_session():
    """Fresh schema and session for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    yield session
    session.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session) -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db_session):
    def _make_user(role: Role = Role.STUDENT, name: Optional[str] = None,
                   email: Optional[str] = None, password: str = DEFAULT_PASSWORD) -> User:
        user = User(
            email=email or f"{fake.unique.user_name()}@student.edu".lower(),
            name=name or "Test Student",
            password_hash=hash_password(password),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_course(db_session):
    def _make_course(code: Optional[str] = None, name: Optional[str] = None,
                     instructor: str = "Sarah Johnson", semester: str = "Fall",
                     year: int = 2024, is_active: bool = True, credits: int = 3) -> Course:
        course = Course(
            code=code or f"C{fake.unique.random_int(100, 99999)}",
            name=name or fake.catch_phrase(),
            description=fake.sentence(),
            instructor=instructor,
            credits=credits,
            semester=semester,
            year=year,
            is_active=is_active,
        )
        db_session.add(course)
        db_session.commit()
        db_session.refresh(course)
        return course
    return _make_course


@pytest.fixture
def make_enrollment(db_session):
    def _make_enrollment(user: User, course: Course,
                         status: EnrollmentStatus = EnrollmentStatus.ACTIVE) -> Enrollment:
        enrollment = Enrollment(user_id=user.user_id, course_id=course.course_id, status=status)
        db_session.add(enrollment)
        db_session.commit()
        db_session.refresh(enrollment)
        return enrollment
    return _make_enrollment


@pytest.fixture
def make_assignment(db_session):
    def _make_assignment(course: Course, due_date: Optional[datetime] = None,
                         is_published: bool = True, max_points: int = 100,
                         title: Optional[str] = None) -> Assignment:
        assignment = Assignment(
            course_id=course.course_id,
            title=title or fake.sentence(nb_words=3),
            description=fake.sentence(),
            due_date=due_date or datetime.utcnow() + timedelta(days=3),
            max_points=max_points,
            is_published=is_published,
        )
        db_session.add(assignment)
        db_session.commit()
        db_session.refresh(assignment)
        return assignment
    return _make_assignment


@pytest.fixture
def make_submission(db_session):
    def _make_submission(student: User, assignment: Assignment,
                         status: SubmissionStatus = SubmissionStatus.SUBMITTED,
                         submitted_at: Optional[datetime] = None) -> Submission:
        submission = Submission(
            student_id=student.user_id,
            assignment_id=assignment.assignment_id,
            content=fake.paragraph(),
            status=status,
            submitted_at=submitted_at or datetime.utcnow(),
        )
        db_session.add(submission)
        db_session.commit()
        db_session.refresh(submission)
        return submission
    return _make_submission


@pytest.fixture
def make_grade(db_session):
    def _make_grade(submission: Submission, score: float, max_score: float,
                    graded_at: Optional[datetime] = None,
                    status: GradeStatus = GradeStatus.GRADED) -> Grade:
        grade = Grade(
            submission_id=submission.submission_id,
            score=score,
            max_score=max_score,
            feedback=fake.sentence(),
            graded_at=graded_at or datetime.utcnow(),
            status=status,
        )
        db_session.add(grade)
        db_session.commit()
        db_session.refresh(grade)
        return grade
    return _make_grade


@pytest.fixture
def make_announcement(db_session):
    def _make_announcement(course: Course, created_at: Optional[datetime] = None,
                           title: Optional[str] = None) -> Announcement:
        announcement = Announcement(
            course_id=course.course_id,
            title=title or fake.sentence(nb_words=4),
            content=fake.paragraph(),
            created_at=created_at or datetime.utcnow(),
        )
        db_session.add(announcement)
        db_session.commit()
        db_session.refresh(announcement)
        return announcement
    return _make_announcement


@pytest.fixture
def make_material(db_session):
    def _make_material(course: Course, uploaded_at: Optional[datetime] = None) -> CourseMaterial:
        material = CourseMaterial(
            course_id=course.course_id,
            title=fake.sentence(nb_words=3),
            file_url=fake.url(),
            uploaded_at=uploaded_at or datetime.utcnow(),
        )
        db_session.add(material)
        db_session.commit()
        db_session.refresh(material)
        return material
    return _make_material


@pytest.fixture
def login_as(client):
    """Put a valid session cookie for ``user`` on the test client"""
    def _login_as(user: User) -> TestClient:
        token = create_access_token(to_user_data(user))
        client.cookies.set(settings.AUTH_COOKIE_NAME, token)
        return client
    return _login_as


@pytest.fixture
def student(make_user) -> User:
    return make_user(role=Role.STUDENT, name="John Doe")


@pytest.fixture
def student_client(login_as, student) -> TestClient:
    return login_as(student)
