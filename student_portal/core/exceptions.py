"""
Error taxonomy for the portal.

Services raise these; the handlers in ``main.py`` turn them into the
``{success: false, message, error}`` envelope with the matching status code.
Anything that is not a ``PortalError`` becomes a generic 500.
"""

from typing import Dict, Optional


class PortalError(Exception):
    """Base class for errors that map to a client-visible response"""

    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None):
        self.message = message
        self.error = error or message
        super().__init__(self.message)


class ValidationError(PortalError):
    """Malformed or missing input fields"""

    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: Optional[Dict[str, str]] = None):
        self.errors = errors or {}
        detail = ", ".join(self.errors.values()) if self.errors else message
        super().__init__(message, detail)


class AuthenticationError(PortalError):
    """No, invalid or expired credentials"""

    status_code = 401

    def __init__(self, message: str = "Authentication required", error: Optional[str] = None, clear_cookie: bool = False):
        self.clear_cookie = clear_cookie
        super().__init__(message, error)


class AuthorizationError(PortalError):
    """Authenticated, but the role does not allow this"""

    status_code = 403

    def __init__(self, message: str = "Not authorized", error: Optional[str] = None):
        super().__init__(message, error)


class NotFoundError(PortalError):
    status_code = 404


class ConflictError(PortalError):
    status_code = 409
