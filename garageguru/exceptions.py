"""
Typed exception hierarchy for the garage workflow core.

Every error carries a machine-readable ``code`` and the HTTP ``status_code``
the API layer answers with, so callers catch by type and clients switch on
the code instead of parsing messages.

    GarageGuruError (500)
    |
    +-- AuthenticationError (401)
    |   +-- MissingToken
    |   +-- InvalidToken
    |   +-- UnknownIdentity
    |   +-- InvalidCredentials
    |
    +-- AuthorizationError (403)
    |   +-- AccessDenied
    |   +-- InsufficientPermissions
    |
    +-- NotFoundError (404)
    |   +-- GarageNotFound
    |   +-- SparePartNotFound
    |   +-- CustomerNotFound
    |   +-- JobCardNotFound
    |   +-- InvoiceNotFound
    |
    +-- ValidationError (400)
    |   +-- InvalidActivationCode
    |   +-- PayloadValidationError
    |
    +-- ConflictError (409)
    |   +-- DuplicateIdentity
    |   +-- DuplicateInvoice
    |   +-- DuplicateInvoiceNumber
    |   +-- JobCardCompleted
    |
    +-- InternalError (500)
        +-- StoreError

Entities that exist in another garage raise the same NotFound as entities
that do not exist at all.
"""


class GarageGuruError(Exception):
    """Base exception for all core errors."""

    code: str = "GARAGEGURU_ERROR"
    status_code: int = 500

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__.strip()
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


# Authentication (401)


class AuthenticationError(GarageGuruError):
    """Authentication failed."""

    code = "UNAUTHENTICATED"
    status_code = 401


class MissingToken(AuthenticationError):
    """Access token required."""

    code = "MISSING_TOKEN"


class InvalidToken(AuthenticationError):
    """Access token is malformed, expired or has a bad signature."""

    code = "INVALID_TOKEN"


class UnknownIdentity(AuthenticationError):
    """Access token refers to a user that no longer exists."""

    code = "UNKNOWN_IDENTITY"


class InvalidCredentials(AuthenticationError):
    """Invalid credentials."""

    code = "INVALID_CREDENTIALS"


# Authorization (403)


class AuthorizationError(GarageGuruError):
    """Not allowed."""

    code = "UNAUTHORIZED"
    status_code = 403


class AccessDenied(AuthorizationError):
    """Access denied to this garage."""

    code = "ACCESS_DENIED"

    def __init__(self, garage_id: str):
        self.garage_id = garage_id
        super().__init__("Access denied to this garage")


class InsufficientPermissions(AuthorizationError):
    """Insufficient permissions."""

    code = "INSUFFICIENT_PERMISSIONS"

    def __init__(self, role: str = None, allowed_roles=None):
        self.role = role
        self.allowed_roles = tuple(allowed_roles or ())
        super().__init__("Insufficient permissions")


# Not found (404)


class NotFoundError(GarageGuruError):
    """Entity not found."""

    code = "NOT_FOUND"
    status_code = 404
    entity = "Entity"

    def __init__(self, entity_id: str = None):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found")


class GarageNotFound(NotFoundError):
    code = "GARAGE_NOT_FOUND"
    entity = "Garage"


class SparePartNotFound(NotFoundError):
    code = "SPARE_PART_NOT_FOUND"
    entity = "Spare part"


class CustomerNotFound(NotFoundError):
    code = "CUSTOMER_NOT_FOUND"
    entity = "Customer"


class JobCardNotFound(NotFoundError):
    code = "JOB_CARD_NOT_FOUND"
    entity = "Job card"


class InvoiceNotFound(NotFoundError):
    code = "INVOICE_NOT_FOUND"
    entity = "Invoice"


# Validation (400)


class ValidationError(GarageGuruError):
    """Invalid request."""

    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidActivationCode(ValidationError):
    """Invalid activation code."""

    code = "INVALID_ACTIVATION_CODE"


class PayloadValidationError(ValidationError):
    """Request payload failed validation."""

    code = "INVALID_PAYLOAD"

    def __init__(self, message: str = None, errors=None):
        self.errors = list(errors or [])
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.errors:
            data['details'] = self.errors
        return data


# Conflict (409)


class ConflictError(GarageGuruError):
    """Request conflicts with existing state."""

    code = "CONFLICT"
    status_code = 409


class DuplicateIdentity(ConflictError):
    """User already exists."""

    code = "DUPLICATE_IDENTITY"


class DuplicateInvoice(ConflictError):
    """Job card already has an invoice."""

    code = "DUPLICATE_INVOICE"

    def __init__(self, job_card_id: str):
        self.job_card_id = job_card_id
        super().__init__("Job card already has an invoice")


class DuplicateInvoiceNumber(ConflictError):
    """Invoice number already used in this garage."""

    code = "DUPLICATE_INVOICE_NUMBER"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice number {invoice_number} already used in this garage")


class JobCardCompleted(ConflictError):
    """Completed job cards cannot be changed."""

    code = "JOB_CARD_COMPLETED"


# Internal (500)


class InternalError(GarageGuruError):
    """Internal server error."""

    code = "INTERNAL_ERROR"
    status_code = 500


class StoreError(InternalError):
    """The data store failed; the operation was rolled back."""

    code = "STORE_ERROR"
