class CoastboardError(Exception):
    """Base for errors whose message is safe to show to the caller."""

    message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class Unauthorized(CoastboardError):
    message = "Unauthorized"


class Forbidden(CoastboardError):
    message = "Forbidden: Admin access required"


class NotFound(CoastboardError):
    message = "Not found"


class Conflict(CoastboardError):
    message = "The record was modified by another request"


class AIUnavailable(CoastboardError):
    message = "AI service is not configured"


class DeliveryFailed(CoastboardError):
    message = "Failed to send email"
