from __future__ import annotations

from typing import Any


class OperationsError(Exception):
    """Base for every failure the engine reports to its caller."""

    code = "OPERATIONS_ERROR"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details


class NotFoundError(OperationsError, LookupError):
    code = "NOT_FOUND"


class DuplicateIdError(OperationsError):
    code = "DUPLICATE_ID"


class DuplicateNameError(OperationsError):
    code = "DUPLICATE_NAME"


class InvalidStateError(OperationsError):
    code = "INVALID_STATE"


class InvalidArgumentError(OperationsError, ValueError):
    code = "INVALID_ARGUMENT"
