from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .db import Board, Card, ColumnModel, now_utc
from .errors import BoardNotFoundError, CardNotFoundError, ColumnNotFoundError

logger = logging.getLogger(__name__)


# === Board operations ===


def create_board(session: Session, owner: str, name: str, description: Optional[str]) -> Board:
    board = Board(
        name=name.strip(),
        description=description.strip() if description else None,
        owner=owner,
    )
    session.add(board)
    session.commit()
    logger.debug("Created board %s for %s", board.id, owner)
    return board


def list_boards_for_user(session: Session, user_id: str) -> List[Board]:
    stmt = select(Board).where(Board.owner == user_id).order_by(Board.id)
    return list(session.scalars(stmt))


def get_board(session: Session, board_id: int) -> Board:
    board = session.get(Board, board_id)
    if board is None:
        raise BoardNotFoundError(board_id)
    return board


def delete_board(session: Session, board: Board) -> None:
    # columns and cards go with it through the relationship cascade
    session.delete(board)
    session.commit()
    logger.debug("Deleted board %s", board.id)


# === Column operations ===


def list_columns(session: Session, board_id: int) -> List[ColumnModel]:
    stmt = (
        select(ColumnModel)
        .where(ColumnModel.board_id == board_id)
        .order_by(ColumnModel.position.asc(), ColumnModel.id.asc())
    )
    return list(session.scalars(stmt))


def get_column(session: Session, board_id: int, column_id: int) -> ColumnModel:
    column = session.get(ColumnModel, column_id)
    if column is None or column.board_id != board_id:
        raise ColumnNotFoundError(column_id)
    return column


def create_column(session: Session, board: Board, title: str) -> ColumnModel:
    next_position = session.scalar(
        select(func.coalesce(func.max(ColumnModel.position), -1) + 1).where(
            ColumnModel.board_id == board.id
        )
    )
    column = ColumnModel(board_id=board.id, title=title.strip(), position=next_position)
    session.add(column)
    board.updated_at = now_utc()
    session.commit()
    return column


def rename_column(session: Session, column: ColumnModel, title: str) -> ColumnModel:
    column.title = title.strip()
    column.updated_at = now_utc()
    session.commit()
    return column


# === Card operations ===


def list_cards(session: Session, column_id: int) -> List[Card]:
    stmt = select(Card).where(Card.column_id == column_id).order_by(Card.position.asc(), Card.id.asc())
    return list(session.scalars(stmt))


def create_card(
    session: Session,
    column: ColumnModel,
    title: str,
    description: Optional[str],
) -> Card:
    next_position = session.scalar(
        select(func.coalesce(func.max(Card.position), -1) + 1).where(Card.column_id == column.id)
    )
    card = Card(
        column_id=column.id,
        title=title.strip(),
        description=description.strip() if description else None,
        position=next_position,
    )
    session.add(card)
    session.commit()
    return card


def get_card(session: Session, column_id: int, card_id: int) -> Card:
    card = session.get(Card, card_id)
    if card is None or card.column_id != column_id:
        raise CardNotFoundError(card_id)
    return card


def delete_card(session: Session, card: Card) -> None:
    session.delete(card)
    session.commit()
