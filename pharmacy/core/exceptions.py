"""Domain errors raised by repositories and services.

Each error carries the HTTP status it is surfaced with; the handler
registered in ``pharmacy.main`` turns them into ``{"detail": ...}`` bodies.
"""


class PharmacyError(Exception):
    """Base class for errors that terminate the current request."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PharmacyError):
    """A required field is missing or malformed."""
    status_code = 400


class InvalidPaymentAmount(PharmacyError):
    """Paid amount lies outside ``[0, reference total]``."""
    status_code = 400


class RecordNotFound(PharmacyError):
    status_code = 404

    def __init__(self, kind: str, record_id: str | None = None):
        message = f"{kind} not found" if record_id is None else f"{kind} {record_id} not found"
        super().__init__(message)
        self.kind = kind
        self.record_id = record_id


class InsufficientStock(PharmacyError):
    status_code = 409

    def __init__(self, medicine_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {medicine_name}: "
            f"{available} available, {requested} requested"
        )
        self.medicine_name = medicine_name
        self.available = available
        self.requested = requested
