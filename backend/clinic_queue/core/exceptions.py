from typing import Dict, Optional


class ClinicError(Exception):
    """Base for errors that the API layer renders as an HTTP response."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.detail = detail or self.detail
        self.headers = headers
        super().__init__(self.detail)


class DuplicateEmail(ClinicError):
    status_code = 409
    detail = "Email already registered"


class InvalidCredentials(ClinicError):
    """Login failure or token rejection. Never says which part was wrong."""

    status_code = 401
    detail = "Invalid authentication credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Unauthenticated(InvalidCredentials):
    pass


class PatientNotFound(ClinicError):
    status_code = 404
    detail = "Patient not found"


class PatientAlreadyVisited(ClinicError):
    status_code = 400
    detail = "Patient already visited"


class StorageUnavailable(ClinicError):
    status_code = 503
    detail = "Storage unavailable"
