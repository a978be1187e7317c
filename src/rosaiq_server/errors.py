"""Error taxonomy shared by services and API routers."""


class SyncError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(SyncError):
    """Unknown device, user or firmware."""

    status_code = 404
    code = "not_found"


class ConflictError(SyncError):
    status_code = 409
    code = "conflict"


class DuplicateSerialError(ConflictError):
    code = "duplicate_serial"


class DuplicateVersionError(ConflictError):
    code = "duplicate_version"


class AlreadyOwnedError(ConflictError):
    code = "already_owned"


class SweepInProgressError(ConflictError):
    code = "sweep_in_progress"


class UnauthorizedError(SyncError):
    """Missing or invalid session token or API key."""

    status_code = 401
    code = "unauthorized"


class ForbiddenError(SyncError):
    """Authenticated, but neither admin nor owner."""

    status_code = 403
    code = "forbidden"


class InvalidInputError(SyncError):
    status_code = 400
    code = "validation_error"


class InternalError(SyncError):
    status_code = 500
    code = "internal_error"
