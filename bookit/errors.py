"""
Error taxonomy for the scheduling core.

Every error carries a stable ``code`` so callers can render a specific
message without parsing text:

- InputValidationError:  malformed input, raised before any store access
- DomainRuleError:       a business rule rejected the request
- NotFoundError:         an unknown business, service, provider or booking
- StoreError:            transient backing-store failure, safe to retry
"""

from typing import Optional


class BookItError(Exception):
    """Base class for all scheduling core errors."""

    code: str = "Error"
    retryable: bool = False

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InputValidationError(BookItError):
    code = "InvalidInput"


# --- Domain rule violations ---

class DomainRuleError(BookItError):
    code = "DomainRule"


class InThePastError(DomainRuleError):
    code = "InThePast"


class ServiceInactiveError(DomainRuleError):
    code = "ServiceInactive"


class ProviderServiceMismatchError(DomainRuleError):
    code = "ProviderServiceMismatch"


class SlotConflictError(DomainRuleError):
    code = "SlotConflict"


class InvalidStateError(DomainRuleError):
    code = "InvalidState"


class UnauthorizedError(DomainRuleError):
    code = "Unauthorized"


class NoEligibleProviderError(DomainRuleError):
    code = "NoEligibleProvider"


class DuplicateOverrideError(DomainRuleError):
    """An override already exists for this provider and date."""

    code = "DuplicateOverride"


# --- Not found ---

class NotFoundError(BookItError):
    code = "NotFound"


class BusinessNotFoundError(NotFoundError):
    code = "BusinessNotFound"


class ServiceNotFoundError(NotFoundError):
    code = "ServiceNotFound"


class ProviderNotFoundError(NotFoundError):
    code = "ProviderNotFound"


class BookingNotFoundError(NotFoundError):
    code = "NotFound"


# --- Infrastructure ---

class StoreError(BookItError):
    code = "StoreUnavailable"
    retryable = True
