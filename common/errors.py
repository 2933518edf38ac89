"""
Purpose: Error taxonomy shared by the state machine, dispatch and the Tookan adapter.

Every boundary call either succeeds or raises one of these. The HTTP layer maps
`status_code` straight onto the response; anything that is not a FleetError is
reported as a 500.
"""


class FleetError(Exception):
    """Base class for expected, client-visible failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FleetError):
    """A required field is missing or a value is unusable."""

    status_code = 400


class NotFound(FleetError):
    """A referenced driver, order, agent or task does not exist."""

    status_code = 404


class Conflict(FleetError):
    """Optimistic version check failed on a concurrent mutation."""

    status_code = 409
