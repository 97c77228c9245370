class JobBoardError(Exception):
    """Base domain error. Every error carries a stable kind and a message."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "kind": self.kind}


class ValidationError(JobBoardError):
    """Malformed, missing or out-of-range input."""

    kind = "validation_error"

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.fields:
            body["fields"] = self.fields
        return body


class ForbiddenError(JobBoardError):
    kind = "forbidden"


class NotFoundError(JobBoardError):
    kind = "not_found"


class ConflictError(JobBoardError):
    """Duplicate application, or job no longer open."""

    kind = "conflict"


class ExpiredError(JobBoardError):
    kind = "expired"


class StoreFailureError(JobBoardError):
    """Underlying persistence error. Never retried by the core."""

    kind = "store_failure"
