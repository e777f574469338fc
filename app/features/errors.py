"""
Service-level errors shared by the reliability and compliance features.

Routers translate these into HTTP responses; storage failures surface as
app.db.helpers.DatabaseError and are wrapped into DataUnavailableError by
the services so callers can tell them apart from a valid default result.
"""


class ServiceError(Exception):
    """Base class for feature service errors."""

    def __init__(self, message: str, *, code: str = "service_error"):
        super().__init__(message)
        self.code = code


class NotFoundError(ServiceError):
    """A referenced worker, business or booking does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found: {entity_id}", code="not_found")
        self.entity = entity
        self.entity_id = entity_id


class DataUnavailableError(ServiceError):
    """Upstream fetch of bookings, reviews or counts failed."""

    def __init__(self, message: str):
        super().__init__(message, code="data_unavailable")


class ComplianceLimitError(ServiceError):
    """Booking acceptance refused because the PP 35/2021 monthly limit is reached."""

    def __init__(self, message: str, days_worked: int):
        super().__init__(message, code="compliance_limit_reached")
        self.days_worked = days_worked


class InvalidStateError(ServiceError):
    """The target record is not in a state that allows the requested action."""

    def __init__(self, message: str):
        super().__init__(message, code="invalid_state")
