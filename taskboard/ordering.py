"""Column ordering for boards.

Two write paths keep a board's columns at positions ``0..n-1``:

* :func:`reorder_columns` applies a full client supplied permutation.
* :func:`delete_column` removes a column with its cards and closes the gap.

Both run in the caller's session as one transaction. On any failure the
session is rolled back before the exception leaves this module, so a
partially written ordering is never committed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import Board, Card, ColumnModel, now_utc
from .errors import (
    BoardNotFoundError,
    ColumnNotFoundError,
    ConcurrentModificationError,
    StorageError,
    TaskboardError,
)
from .permutation import ColumnOrder, validate_permutation

logger = logging.getLogger(__name__)


def _ordered_columns(session: Session, board_id: int) -> list[ColumnModel]:
    stmt = (
        select(ColumnModel)
        .where(ColumnModel.board_id == board_id)
        .order_by(ColumnModel.position.asc(), ColumnModel.id.asc())
        .execution_options(populate_existing=True)
    )
    return list(session.scalars(stmt))


def _write_positions(session: Session, board_id: int, positions: Mapping[int, int]) -> int:
    """Set ``id -> position`` for one board in a single UPDATE; return matched rows.

    The ``board_id`` filter keeps ids belonging to another board untouched, so
    a re-parented column shows up as a short row count.
    """
    stmt = (
        update(ColumnModel)
        .where(ColumnModel.board_id == board_id, ColumnModel.id.in_(list(positions)))
        .values(
            position=case(dict(positions), value=ColumnModel.id),
            updated_at=now_utc(),
        )
        .execution_options(synchronize_session=False)
    )
    return session.execute(stmt).rowcount


def reorder_columns(
    session: Session, board_id: int, columns: Sequence[ColumnOrder]
) -> list[ColumnModel]:
    """Apply ``(column_id, position)`` pairs to a board and return its columns in order.

    Raises ``BoardNotFoundError`` when the board is gone, a ``ValidationError``
    subclass when the pairs are not a dense permutation of the board's current
    columns, and ``ConcurrentModificationError`` when a column vanished or moved
    to another board between the membership read and the write.
    """
    try:
        exists = session.scalar(select(Board.id).where(Board.id == board_id))
        if exists is None:
            raise BoardNotFoundError(board_id)

        current_ids = session.scalars(
            select(ColumnModel.id).where(ColumnModel.board_id == board_id)
        ).all()
        validate_permutation(current_ids, columns)

        if columns:
            positions = {col_id: pos for col_id, pos in columns}
            affected = _write_positions(session, board_id, positions)
            if affected != len(positions):
                raise ConcurrentModificationError(
                    "Board columns changed while reordering; reload and retry",
                    {"boardId": board_id, "expected": len(positions), "updated": affected},
                )

        ordered = _ordered_columns(session, board_id)
        session.commit()
    except TaskboardError as exc:
        session.rollback()
        logger.warning("Reorder of board %s rejected: %s (%s)", board_id, exc.message, exc.code)
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Database error reordering board %s", board_id, exc_info=True)
        raise StorageError("Database error occurred") from exc

    logger.debug("Reordered %d columns on board %s", len(ordered), board_id)
    return ordered


def renumber_columns(session: Session, board_id: int) -> int:
    """Compact a board's column positions to ``0..m-1`` keeping their relative order.

    Only rows whose position changes are written. Runs inside the caller's
    transaction and returns the number of rows moved.
    """
    rows = session.execute(
        select(ColumnModel.id, ColumnModel.position)
        .where(ColumnModel.board_id == board_id)
        .order_by(ColumnModel.position.asc(), ColumnModel.id.asc())
    ).all()
    moved = {row.id: index for index, row in enumerate(rows) if row.position != index}
    if not moved:
        return 0
    return _write_positions(session, board_id, moved)


def delete_column(session: Session, column_id: int) -> None:
    """Delete a column, its cards, and renumber the remaining columns of its board."""
    try:
        board_id = session.scalar(
            select(ColumnModel.board_id).where(ColumnModel.id == column_id).with_for_update()
        )
        if board_id is None:
            raise ColumnNotFoundError(column_id)

        cards = session.execute(
            delete(Card).where(Card.column_id == column_id).execution_options(synchronize_session=False)
        ).rowcount
        deleted = session.execute(
            delete(ColumnModel)
            .where(ColumnModel.id == column_id)
            .execution_options(synchronize_session=False)
        ).rowcount
        if deleted == 0:
            # another request removed it after our lookup
            raise ColumnNotFoundError(column_id)

        moved = renumber_columns(session, board_id)
        session.commit()
    except TaskboardError as exc:
        session.rollback()
        logger.warning("Delete of column %s rejected: %s (%s)", column_id, exc.message, exc.code)
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Database error deleting column %s", column_id, exc_info=True)
        raise StorageError("Database error occurred") from exc

    logger.debug(
        "Deleted column %s with %d cards; renumbered %d columns on board %s",
        column_id,
        cards,
        moved,
        board_id,
    )
