from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from .errors import (
    CountMismatchError,
    DuplicatePositionError,
    EmptyPayloadError,
    NonContiguousRangeError,
    NonNegativeViolationError,
    SetMismatchError,
)


class ColumnOrder(NamedTuple):
    id: int
    position: int


def validate_permutation(current_ids: Iterable[int], candidate: Sequence[ColumnOrder]) -> None:
    """Check that ``candidate`` is a dense zero-based reordering of ``current_ids``.

    ``candidate`` holds ``(column_id, position)`` pairs. Rules are checked in a
    fixed order and the first violation raises the matching ``ValidationError``
    subclass. Returns ``None`` when the candidate is acceptable, including the
    trivial case of an empty board and an empty candidate.
    """
    current = set(current_ids)
    if not current and not candidate:
        return
    if not candidate:
        raise EmptyPayloadError("At least one column is required")

    negative = [pos for _, pos in candidate if pos < 0]
    if negative:
        raise NonNegativeViolationError(
            "Column positions must be non-negative", {"positions": sorted(negative)}
        )

    if len(candidate) != len(current):
        raise CountMismatchError(
            "Columns payload must include all columns for the board",
            {"expected": len(current), "received": len(candidate)},
        )

    ids = {col_id for col_id, _ in candidate}
    if ids != current:
        raise SetMismatchError(
            "Columns payload does not match board columns",
            {"missing": sorted(current - ids), "unexpected": sorted(ids - current)},
        )

    positions = sorted(pos for _, pos in candidate)
    duplicates = sorted(pos for pos, count in Counter(positions).items() if count > 1)
    if duplicates:
        raise DuplicatePositionError(
            "Column positions must be distinct", {"positions": duplicates}
        )

    if positions != list(range(len(positions))):
        raise NonContiguousRangeError(
            f"Column positions must be exactly 0..{len(positions) - 1}",
            {"positions": positions},
        )
