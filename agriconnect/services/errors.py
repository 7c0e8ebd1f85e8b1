"""Service-layer exceptions.

Each carries the HTTP status the API answers with; ``main`` registers a
single handler for the whole hierarchy.
"""


class ServiceError(Exception):
    """Base class for marketplace service errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class JobNotFoundError(NotFoundError):
    def __init__(self, job_id: str):
        super().__init__("Job not found")
        self.job_id = job_id


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, application_id: str):
        super().__init__("Application not found")
        self.application_id = application_id


class ProfileNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__("Profile not found")
        self.user_id = user_id


class PermissionDeniedError(ServiceError):
    status_code = 403


class InvalidTransitionError(ServiceError):
    status_code = 409


class DuplicateApplicationError(ServiceError):
    status_code = 409

    def __init__(self):
        super().__init__("You have already applied to this job")


class AuthenticationError(ServiceError):
    status_code = 401


class RegistrationError(ServiceError):
    status_code = 400
