from datetime import datetime

import pytest

from student_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from student_portal.models.assignment import Submission, SubmissionStatus
from student_portal.models.grade import Grade
from student_portal.models.user import Role
from student_portal.schemas.user_schema import CurrentUser
from student_portal.services.grading_service import grade_submission, latest_grade


@pytest.fixture
def submission(student, make_course, make_enrollment, make_assignment, make_submission):
    course = make_course(instructor="Sarah Johnson")
    make_enrollment(student, course)
    return make_submission(student, make_assignment(course))


@pytest.fixture
def instructor(make_user):
    return make_user(role=Role.INSTRUCTOR, name="Sarah Johnson")


def _as_current(user) -> CurrentUser:
    return CurrentUser(id=user.user_id, email=user.email, role=user.role)


def test_instructor_grades_own_course(login_as, instructor, submission, db_session):
    client = login_as(instructor)

    response = client.post(
        f"/api/instructor/submissions/{submission.submission_id}/grade",
        json={"score": 85, "maxScore": 100, "feedback": "Good work"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["score"] == 85
    assert data["maxScore"] == 100
    assert data["status"] == "GRADED"

    db_session.expire_all()
    stored = db_session.query(Submission).filter(Submission.submission_id == submission.submission_id).one()
    assert stored.status == SubmissionStatus.GRADED
    assert db_session.query(Grade).count() == 1


def test_score_above_max_rejected(login_as, instructor, submission):
    client = login_as(instructor)

    response = client.post(
        f"/api/instructor/submissions/{submission.submission_id}/grade",
        json={"score": 120, "maxScore": 100},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_negative_score_rejected(login_as, instructor, submission):
    client = login_as(instructor)

    response = client.post(
        f"/api/instructor/submissions/{submission.submission_id}/grade",
        json={"score": -1, "maxScore": 100},
    )

    assert response.status_code == 400
    assert "score" in response.json()["errors"]


def test_student_cannot_grade(student_client, submission):
    response = student_client.post(
        f"/api/instructor/submissions/{submission.submission_id}/grade",
        json={"score": 100, "maxScore": 100},
    )

    assert response.status_code == 403


def test_instructor_of_another_course_cannot_grade(login_as, make_user, submission):
    client = login_as(make_user(role=Role.INSTRUCTOR, name="Mark Davis"))

    response = client.post(
        f"/api/instructor/submissions/{submission.submission_id}/grade",
        json={"score": 50, "maxScore": 100},
    )

    assert response.status_code == 403


def test_admin_grades_any_submission(login_as, make_user, submission):
    client = login_as(make_user(role=Role.ADMIN, name="Admin User"))

    response = client.post(
        f"/api/instructor/submissions/{submission.submission_id}/grade",
        json={"score": 50, "maxScore": 100},
    )

    assert response.status_code == 200


def test_missing_submission(login_as, instructor):
    client = login_as(instructor)

    response = client.post("/api/instructor/submissions/9999/grade", json={"score": 1, "maxScore": 10})

    assert response.status_code == 404


def test_service_validates_bounds(db_session, instructor, submission):
    grader = _as_current(instructor)

    with pytest.raises(ValidationError):
        grade_submission(db_session, submission.submission_id, grader, score=11, max_score=10)
    with pytest.raises(ValidationError):
        grade_submission(db_session, submission.submission_id, grader, score=0, max_score=0)
    with pytest.raises(NotFoundError):
        grade_submission(db_session, 9999, grader, score=1, max_score=10)


def test_service_checks_course_instructor(db_session, make_user, submission):
    grader = _as_current(make_user(role=Role.INSTRUCTOR, name="Someone Else"))

    with pytest.raises(AuthorizationError):
        grade_submission(db_session, submission.submission_id, grader, score=1, max_score=10)


def test_latest_grade_picks_newest(submission, make_grade):
    old = make_grade(submission, score=1, max_score=10, graded_at=datetime(2024, 1, 1))
    new = make_grade(submission, score=2, max_score=10, graded_at=datetime(2024, 2, 1))

    assert latest_grade([old, new]).grade_id == new.grade_id
    assert latest_grade([]) is None
