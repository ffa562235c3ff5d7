"""Application error taxonomy.

Every error the service layer raises derives from :class:`LearnXError` and
carries the HTTP status it is reported with; ``learnx.main`` turns them into
``{"message": ...}`` JSON responses.
"""


class LearnXError(Exception):
    """Base exception for all LearnX errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInputError(LearnXError):
    """A required field is missing or malformed. Raised before any write."""

    status_code = 400


class AuthenticationError(LearnXError):
    """Credentials are missing, wrong, or do not match the requested role."""

    status_code = 401


class PermissionDeniedError(LearnXError):
    """The caller is authenticated but may not perform the operation."""

    status_code = 403


class NotFoundError(LearnXError):
    """A referenced course, user or enrollment does not exist."""

    status_code = 404

    def __init__(self, entity: str, message: str | None = None):
        self.entity = entity
        super().__init__(message or f"{entity} not found.")


class ConflictError(LearnXError):
    """A uniqueness rule was violated (duplicate userid or email on signup)."""

    status_code = 409


class StorageFailureError(LearnXError):
    """The transaction could not be committed; nothing was persisted."""

    status_code = 500

    def __init__(self, message: str = "Internal server error."):
        super().__init__(message)
