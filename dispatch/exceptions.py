"""
Purpose: Error taxonomy for ride operations.
What it does:
Every failure a caller can see is one of five kinds. All of them are raised
before anything is written, so the caller may retry or report and move on.

- NotFound: a ride/puller/rider/location reference did not resolve
- Unauthorized: the acting puller is not the one bound to the ride
- InvalidTransition: the event is not legal from the ride's current status
- MissingField: a required payload field was absent
- InvalidValue: a payload field was present but unusable
"""

from typing import Optional


class RideError(Exception):
    """Base class for all ride operation failures."""
    kind = "error"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.kind)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


class NotFound(RideError):
    kind = "not_found"


class Unauthorized(RideError):
    kind = "unauthorized"


class InvalidTransition(RideError):
    """Raised when an invalid ride transition is attempted."""
    kind = "invalid_transition"


class RideAlreadyTaken(InvalidTransition):
    """Another puller won the race to accept this ride."""
    kind = "already_taken"


class MissingField(RideError):
    kind = "missing_field"


class InvalidValue(RideError):
    kind = "invalid_value"
