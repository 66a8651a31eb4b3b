"""Error taxonomy shared by the services, the HTTP layer and the client."""


class ServiceError(Exception):
    """Base class for every error a campaign or influencer operation can raise."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Input is malformed or out of range; nothing was written."""

    status_code = 422

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(ServiceError):
    """Target is missing or not owned by the caller (indistinguishable)."""

    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class UnauthenticatedError(ServiceError):
    status_code = 401
