"""
Error taxonomy shared by every service.

Each error carries the HTTP status it maps to; a single exception handler in
``hospital.main`` renders them as ``{"success": false, "message": ...}``.
"""
from fastapi import status


class HospitalError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(HospitalError):
    default_message = "All required fields must be filled"


class NotFound(HospitalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class DuplicateEmail(HospitalError):
    default_message = "Email already registered"


class DuplicateName(HospitalError):
    default_message = "Department already exists"


class SlotConflict(HospitalError):
    default_message = "This time slot is already booked"


class HasDependents(HospitalError):
    default_message = "Cannot delete a record that is still referenced"


class InvalidTransition(HospitalError):
    default_message = "Status transition not allowed"


class InvalidCredentials(HospitalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class AuthenticationRequired(HospitalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class PermissionDenied(HospitalError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not enough permissions"


class RateLimited(HospitalError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests. Please try again later."


class InternalError(HospitalError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
