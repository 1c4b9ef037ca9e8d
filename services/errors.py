# services/errors.py
"""
Failure kinds raised by the service layer.

Each carries a machine-readable `kind`, a human `message` and the HTTP status
the API answers with. `app.create_app` registers one handler that renders
them as ``{"success": false, "kind": ..., "message": ...}``.
"""
from __future__ import annotations


class FleetError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str, *, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])

    def to_dict(self) -> dict:
        out = {"success": False, "kind": self.kind, "message": self.message}
        if self.errors:
            out["errors"] = self.errors
        return out


class NotFound(FleetError):
    kind = "not_found"
    status_code = 404


class CapacityExceeded(FleetError):
    kind = "capacity_exceeded"
    status_code = 400


class Conflict(FleetError):
    kind = "conflict"
    status_code = 409


class Forbidden(FleetError):
    kind = "forbidden"
    status_code = 403


class ValidationError(FleetError):
    kind = "validation_error"
    status_code = 400
