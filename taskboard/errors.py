from __future__ import annotations

from typing import Any, Optional


class TaskboardError(Exception):
    """Base class for failures surfaced to the request layer.

    Each subclass carries the HTTP status and the machine readable ``code``
    the API puts into its error envelope.
    """

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# === Not found ===


class NotFoundError(TaskboardError):
    status_code = 404
    code = "not_found"


class BoardNotFoundError(NotFoundError):
    code = "board_not_found"

    def __init__(self, board_id: int) -> None:
        super().__init__(f"Board with id {board_id} not found", {"boardId": board_id})


class ColumnNotFoundError(NotFoundError):
    code = "column_not_found"

    def __init__(self, column_id: int) -> None:
        super().__init__(f"Column with id {column_id} not found", {"columnId": column_id})


class CardNotFoundError(NotFoundError):
    code = "card_not_found"

    def __init__(self, card_id: int) -> None:
        super().__init__(f"Card with id {card_id} not found", {"cardId": card_id})


# === Reorder validation ===


class ValidationError(TaskboardError):
    status_code = 400
    code = "validation_error"


class EmptyPayloadError(ValidationError):
    code = "empty_payload"


class NonNegativeViolationError(ValidationError):
    code = "non_negative_violation"


class CountMismatchError(ValidationError):
    code = "count_mismatch"


class SetMismatchError(ValidationError):
    code = "set_mismatch"


class DuplicatePositionError(ValidationError):
    code = "duplicate_position"


class NonContiguousRangeError(ValidationError):
    code = "non_contiguous_range"


# === Concurrency ===


class ConcurrencyConflictError(TaskboardError):
    status_code = 409
    code = "concurrency_conflict"


class ConcurrentModificationError(ConcurrencyConflictError):
    code = "concurrent_modification"


class StorageError(TaskboardError):
    """A database failure inside an engine operation. Never retried here."""

    status_code = 500
    code = "storage_error"
