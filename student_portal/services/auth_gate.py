"""
Authorization Gate.

Every request is classified by path into PUBLIC, PROTECTED, ADMIN or
INSTRUCTOR. Non-public requests must carry a valid session token whose user
still exists and whose role is in the route's allowed set. Nothing is kept
between requests: identity is rebuilt from the token each time and handed to
handlers through ``request.state.user``.

API paths (``/api/...``) answer 401/403 with a JSON body; page paths are
redirected to the login page or, for an authenticated user lacking the
role, to the default landing page.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, RedirectResponse, Response

from student_portal.core.config import settings
from student_portal.core.exceptions import AuthenticationError
from student_portal.db import database
from student_portal.models.user import Role
from student_portal.schemas.user_schema import CurrentUser
from student_portal.services.token_service import (
    clear_auth_cookie,
    extract_token_from_header,
    verify_token,
)
from student_portal.services.user_service import find_user_by_id

logger = logging.getLogger(__name__)


class RouteClass(str, enum.Enum):
    PUBLIC = "PUBLIC"
    PROTECTED = "PROTECTED"
    ADMIN = "ADMIN"
    INSTRUCTOR = "INSTRUCTOR"


class GateOutcome(str, enum.Enum):
    ALLOW = "ALLOW"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"


EXACT_PUBLIC_PATHS = {"/"}

# First matching prefix wins
ROUTE_TABLE: List[Tuple[str, RouteClass]] = [
    ("/login", RouteClass.PUBLIC),
    ("/register", RouteClass.PUBLIC),
    ("/health", RouteClass.PUBLIC),
    ("/docs", RouteClass.PUBLIC),
    ("/redoc", RouteClass.PUBLIC),
    ("/openapi.json", RouteClass.PUBLIC),
    ("/api/auth/login", RouteClass.PUBLIC),
    ("/api/auth/register", RouteClass.PUBLIC),
    ("/api/auth/logout", RouteClass.PUBLIC),

    ("/admin", RouteClass.ADMIN),
    ("/api/admin", RouteClass.ADMIN),

    ("/instructor", RouteClass.INSTRUCTOR),
    ("/api/instructor", RouteClass.INSTRUCTOR),

    ("/dashboard", RouteClass.PROTECTED),
    ("/courses", RouteClass.PROTECTED),
    ("/assignments", RouteClass.PROTECTED),
    ("/grades", RouteClass.PROTECTED),
    ("/profile", RouteClass.PROTECTED),
    ("/settings", RouteClass.PROTECTED),
    ("/api", RouteClass.PROTECTED),
]

ROLE_REQUIREMENTS = {
    RouteClass.PROTECTED: frozenset(Role),
    RouteClass.INSTRUCTOR: frozenset({Role.INSTRUCTOR, Role.ADMIN}),
    RouteClass.ADMIN: frozenset({Role.ADMIN}),
}


@dataclass
class GateDecision:
    outcome: GateOutcome
    route_class: RouteClass
    user: Optional[CurrentUser] = None
    clear_cookie: bool = False
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.outcome == GateOutcome.ALLOW


def _prefix_matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str) -> RouteClass:
    if path in EXACT_PUBLIC_PATHS:
        return RouteClass.PUBLIC
    for prefix, route_class in ROUTE_TABLE:
        if _prefix_matches(path, prefix):
            return route_class
    return RouteClass.PUBLIC


def is_api_path(path: str) -> bool:
    return _prefix_matches(path, "/api")


def allowed_roles(route_class: RouteClass) -> FrozenSet[Role]:
    return ROLE_REQUIREMENTS.get(route_class, frozenset(Role))


def authorize_request(db: Session, path: str, token: Optional[str]) -> GateDecision:
    route_class = classify_path(path)
    if route_class == RouteClass.PUBLIC:
        return GateDecision(GateOutcome.ALLOW, route_class)

    if not token:
        return GateDecision(
            GateOutcome.UNAUTHENTICATED, route_class,
            reason="No authentication token found",
        )

    claims = verify_token(token)
    if claims is None:
        return GateDecision(
            GateOutcome.UNAUTHENTICATED, route_class, clear_cookie=True,
            reason="Authentication token is invalid or expired",
        )

    # Deleted accounts keep valid-looking tokens until they expire
    user = find_user_by_id(db, claims.user_id)
    if user is None:
        return GateDecision(
            GateOutcome.UNAUTHENTICATED, route_class, clear_cookie=True,
            reason="User account no longer exists",
        )

    current_user = CurrentUser(id=user.id, email=user.email, role=user.role)
    if user.role not in allowed_roles(route_class):
        return GateDecision(
            GateOutcome.FORBIDDEN, route_class, user=current_user,
            reason="Insufficient role for this resource",
        )

    return GateDecision(GateOutcome.ALLOW, route_class, user=current_user)


class AuthorizationGateMiddleware(BaseHTTPMiddleware):
    """Runs ``authorize_request`` in front of every route."""

    def __init__(self, app, session_factory: Optional[Callable[[], Session]] = None):
        super().__init__(app)
        self.session_factory = session_factory

    def _decide(self, path: str, token: Optional[str]) -> GateDecision:
        factory = self.session_factory or database.SessionLocal
        db = factory()
        try:
            return authorize_request(db, path, token)
        finally:
            db.close()

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if classify_path(path) == RouteClass.PUBLIC:
            return await call_next(request)

        token = request.cookies.get(settings.AUTH_COOKIE_NAME) or extract_token_from_header(
            request.headers.get("Authorization")
        )
        decision = await run_in_threadpool(self._decide, path, token)

        if decision.allowed:
            request.state.user = decision.user
            return await call_next(request)

        logger.info(
            "Gate denied %s %s: %s (%s)",
            request.method, path, decision.outcome.value, decision.reason,
        )
        response = self._denied_response(path, decision)
        if decision.clear_cookie:
            clear_auth_cookie(response)
        return response

    @staticmethod
    def _denied_response(path: str, decision: GateDecision) -> Response:
        if is_api_path(path):
            if decision.outcome == GateOutcome.FORBIDDEN:
                return JSONResponse(
                    status_code=403,
                    content={"success": False, "message": "Forbidden", "error": decision.reason},
                )
            return JSONResponse(
                status_code=401,
                content={"success": False, "message": "Authentication required", "error": decision.reason},
            )

        # Authenticated but wrong role: send them somewhere they may be, not to login
        if decision.outcome == GateOutcome.FORBIDDEN:
            return RedirectResponse(settings.DEFAULT_LANDING_PATH)
        return RedirectResponse(settings.LOGIN_PATH)


def get_current_user(request: Request) -> CurrentUser:
    """Identity attached by the gate; handlers depend on this."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise AuthenticationError("Authentication required", "No authentication token found")
    return user
