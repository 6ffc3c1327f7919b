import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from student_portal.api import (
    routes_admin,
    routes_auth,
    routes_courses,
    routes_dashboard,
    routes_enrollment,
    routes_instructor,
)
from student_portal.core.config import settings
from student_portal.core.exceptions import AuthenticationError, PortalError, ValidationError
from student_portal.core.logging_config import setup_logging
from student_portal.db import database
# Register every model on Base.metadata before create_all
from student_portal.models import assignment, course, enrollment, grade, user  # noqa: F401
from student_portal.services.auth_gate import AuthorizationGateMiddleware
from student_portal.services.token_service import clear_auth_cookie

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

database.Base.metadata.create_all(bind=database.engine)

app = FastAPI(title=settings.PROJECT_NAME)

# Added last so it runs first: CORS preflights never reach the gate
app.add_middleware(AuthorizationGateMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(message: str, error: str, **extra) -> dict:
    return {"success": False, "message": message, "error": error, **extra}


def _field_name(loc) -> str:
    # ("body", "confirmPassword") -> "confirmPassword"; model-level errors have no field
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    body = _error_body(exc.message, exc.error)
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    response = JSONResponse(status_code=exc.status_code, content=body)
    if isinstance(exc, AuthenticationError) and exc.clear_cookie:
        clear_auth_cookie(response)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        message = err.get("msg", "Invalid value")
        # Pydantic prefixes messages raised from our validators
        message = message.removeprefix("Value error, ")
        errors.setdefault(_field_name(err.get("loc", ())), message)

    return JSONResponse(
        status_code=400,
        content=_error_body("Validation failed", ", ".join(errors.values()), errors=errors),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", "An unexpected error occurred"),
    )


@app.get("/")
def read_root():
    return {"message": "Welcome to the Student Portal API"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(routes_auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(routes_courses.router, prefix="/api/courses", tags=["Courses"])
app.include_router(routes_enrollment.router, prefix="/api/enrollments", tags=["Enrollments"])
app.include_router(routes_dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(routes_admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(routes_instructor.router, prefix="/api/instructor", tags=["Instructor"])
