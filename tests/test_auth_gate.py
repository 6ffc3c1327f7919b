import pytest

from student_portal.models.user import Role
from student_portal.services.auth_gate import (
    GateOutcome,
    RouteClass,
    authorize_request,
    classify_path,
)
from student_portal.services.token_service import create_access_token
from student_portal.services.user_service import to_user_data


@pytest.mark.parametrize("path, expected", [
    ("/", RouteClass.PUBLIC),
    ("/login", RouteClass.PUBLIC),
    ("/register", RouteClass.PUBLIC),
    ("/health", RouteClass.PUBLIC),
    ("/api/auth/login", RouteClass.PUBLIC),
    ("/api/auth/register", RouteClass.PUBLIC),
    ("/api/auth/logout", RouteClass.PUBLIC),
    ("/api/auth/me", RouteClass.PROTECTED),
    ("/dashboard", RouteClass.PROTECTED),
    ("/courses/12", RouteClass.PROTECTED),
    ("/api/courses", RouteClass.PROTECTED),
    ("/api/dashboard/overview", RouteClass.PROTECTED),
    ("/admin", RouteClass.ADMIN),
    ("/admin/users", RouteClass.ADMIN),
    ("/api/admin/users", RouteClass.ADMIN),
    ("/instructor", RouteClass.INSTRUCTOR),
    ("/api/instructor/submissions/1/grade", RouteClass.INSTRUCTOR),
    ("/administrator", RouteClass.PUBLIC),
    ("/favicon.ico", RouteClass.PUBLIC),
])
def test_classify_path(path, expected):
    assert classify_path(path) == expected


def test_public_path_needs_no_token(db_session):
    decision = authorize_request(db_session, "/api/auth/login", None)

    assert decision.outcome == GateOutcome.ALLOW
    assert decision.user is None


def test_missing_token(db_session):
    decision = authorize_request(db_session, "/api/courses", None)

    assert decision.outcome == GateOutcome.UNAUTHENTICATED
    assert decision.clear_cookie is False


def test_invalid_token_clears_cookie(db_session):
    decision = authorize_request(db_session, "/dashboard", "bad-token")

    assert decision.outcome == GateOutcome.UNAUTHENTICATED
    assert decision.clear_cookie is True


def test_deleted_user(db_session, make_user):
    user = make_user()
    token = create_access_token(to_user_data(user))
    db_session.delete(user)
    db_session.commit()

    decision = authorize_request(db_session, "/dashboard", token)

    assert decision.outcome == GateOutcome.UNAUTHENTICATED
    assert decision.clear_cookie is True


@pytest.mark.parametrize("role, path, outcome", [
    (Role.STUDENT, "/api/courses", GateOutcome.ALLOW),
    (Role.STUDENT, "/api/admin/users", GateOutcome.FORBIDDEN),
    (Role.STUDENT, "/api/instructor/submissions/1/grade", GateOutcome.FORBIDDEN),
    (Role.INSTRUCTOR, "/api/instructor/submissions/1/grade", GateOutcome.ALLOW),
    (Role.INSTRUCTOR, "/api/admin/users", GateOutcome.FORBIDDEN),
    (Role.ADMIN, "/api/instructor/submissions/1/grade", GateOutcome.ALLOW),
    (Role.ADMIN, "/api/admin/users", GateOutcome.ALLOW),
])
def test_role_sets(db_session, make_user, role, path, outcome):
    user = make_user(role=role)
    token = create_access_token(to_user_data(user))

    decision = authorize_request(db_session, path, token)

    assert decision.outcome == outcome
    assert decision.user.id == user.user_id
    assert decision.user.role == role


def test_page_without_session_redirects_to_login(client):
    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/login"


def test_page_with_invalid_session_redirects_and_clears(client):
    client.cookies.set("auth-token", "expired-or-forged")

    response = client.get("/courses", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/login"
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_student_on_admin_page_is_sent_to_dashboard(student_client):
    response = student_client.get("/admin", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"


def test_student_on_admin_api_is_forbidden(student_client):
    response = student_client.get("/api/admin/users")

    assert response.status_code == 403
    body = response.json()
    assert body["success"] is False
    assert "data" not in body


def test_admin_lists_users_without_hashes(login_as, make_user, student):
    admin = make_user(role=Role.ADMIN, name="Ada Admin")

    response = login_as(admin).get("/api/admin/users")

    assert response.status_code == 200
    users = response.json()["data"]
    assert {u["id"] for u in users} == {admin.user_id, student.user_id}
    for u in users:
        assert "passwordHash" not in u
        assert "password_hash" not in u


def test_api_without_session_is_401(client):
    response = client.get("/api/dashboard/overview")

    assert response.status_code == 401
    assert response.json()["message"] == "Authentication required"
