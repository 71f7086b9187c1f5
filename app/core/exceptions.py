"""
Error taxonomy shared by services and routes.

Services raise these; the exception handlers registered in ``app.main``
turn each one into a single ``{"error": message}`` JSON response.
"""

from typing import Optional


class SkillSwapError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(SkillSwapError):
    """Missing or unusable request data."""
    status_code = 400


class AuthError(SkillSwapError):
    """Bad credentials, or a missing/invalid/expired token."""
    status_code = 401


class NotFoundError(SkillSwapError):
    status_code = 404


class UpstreamError(SkillSwapError):
    """A store call failed or timed out. Call sites pick the status."""
    status_code = 400


class InternalError(SkillSwapError):
    status_code = 500


def error_message(exc: BaseException) -> str:
    """Best human-readable message from a Supabase/PostgREST/GoTrue exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__
