"""Failure kinds raised by the employee service and its stores.

Routers translate these into HTTP responses; nothing below this layer
raises HTTPException.
"""
from __future__ import annotations
from typing import Optional


class EmployeeServiceError(Exception):
    """Base class for every failure the employee service reports."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(EmployeeServiceError):
    """One or more fields were missing or malformed.

    `errors` maps the field name to a human readable message.
    """

    def __init__(self, errors: dict[str, str]):
        super().__init__("Validation failed")
        self.errors = errors


class DuplicateEmail(EmployeeServiceError):
    def __init__(self, email: str):
        super().__init__("Employee with this email already exists")
        self.email = email


class NotFound(EmployeeServiceError):
    def __init__(self, employee_id: object):
        super().__init__("Employee not found")
        self.employee_id = employee_id


class StorageUnavailable(EmployeeServiceError):
    """The database could not be reached or failed for reasons unrelated to input.

    Transient; the caller decides whether to retry. `committed` is set when the
    write itself went through and only reading the row back failed, so the
    record exists and still references whatever artifact it was saved with.
    """

    def __init__(self, message: str, committed: bool = False):
        super().__init__(message)
        self.committed = committed


class ArtifactError(EmployeeServiceError):
    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


class ArtifactWriteFailed(ArtifactError):
    pass


class ArtifactDeleteFailed(ArtifactError):
    pass
