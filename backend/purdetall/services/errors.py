from typing import Dict, List, Optional


class StoreError(ValueError):
    """Base class for user-visible store errors."""

    status_code = 400


class StoreValidationError(StoreError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class StoreUnauthorizedError(StoreError):
    status_code = 401


class StoreNotFoundError(StoreError):
    status_code = 404


class StoreConflictError(StoreError):
    status_code = 409


class SlotUnavailableError(StoreConflictError):
    status_code = 400


class StoreInternalError(StoreError):
    status_code = 500


class MailDeliveryError(StoreInternalError):
    pass


def field_error(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


def raise_if_errors(errors: List[Dict[str, str]]) -> None:
    if errors:
        raise StoreValidationError(errors[0]["message"], errors=errors)
