# backend/apprenticedb/errors.py
"""
Error taxonomy shared by the services.

Services raise these; `apprenticedb.actions` turns them into failed
`ActionResult` values so nothing in this family crosses the operation
boundary as an exception. `detail` uses the same `{"field", "reason"}`
shape everywhere so clients can render per-field messages.
"""

from __future__ import annotations

from typing import Dict, List, Optional

FieldErrors = List[Dict[str, str]]


class PortalError(Exception):
    code = "error"

    def __init__(self, message: str, *, detail: Optional[FieldErrors] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: FieldErrors = list(detail or [])


class AuthenticationRequired(PortalError):
    code = "authentication_required"

    def __init__(self, message: str = "You must be logged in.") -> None:
        super().__init__(message)


class NotFound(PortalError):
    code = "not_found"


class PermissionDenied(PortalError):
    code = "permission_denied"


class ValidationFailed(PortalError):
    code = "validation_error"

    @classmethod
    def for_field(cls, field: str, reason: str) -> "ValidationFailed":
        return cls(reason, detail=[{"field": field, "reason": reason}])


class TransitionError(PortalError):
    """
    Raised by the workflow engine.

    `code` is `invalid_transition` when the registry has no edge between the
    two states, `missing_requirements` when a guard rejected the target
    record.
    """

    def __init__(self, code: str, detail: FieldErrors) -> None:
        reasons = "; ".join(item.get("reason", "") for item in detail if item.get("reason"))
        super().__init__(reasons or code, detail=detail)
        self.code = code


class DataStoreError(PortalError):
    code = "data_store_error"
