import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import ordering, storage
from .auth import check_owner, get_current_user
from .db import Board, Card, ColumnModel, get_session, init_db
from .errors import TaskboardError
from .permutation import ColumnOrder
from .schemas import (
    BoardIn,
    BoardOut,
    BoardsPage,
    BoardView,
    CardIn,
    CardOut,
    ColumnIn,
    ColumnOrderIn,
    ColumnOut,
    ColumnPatch,
    ErrorEnvelope,
    Health,
    Version,
)

VERSION = "1.0.0"

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Taskboard API %s started", VERSION)
    yield


app = FastAPI(title="Taskboard API", version=VERSION, lifespan=lifespan)


@app.exception_handler(TaskboardError)
async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    body = ErrorEnvelope(code=exc.code, message=exc.message, details=exc.details or None)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


# === Helpers ===


def board_out(board: Board) -> BoardOut:
    return BoardOut(
        id=board.id,
        name=board.name,
        description=board.description,
        owner=board.owner,
        createdAt=board.created_at,
        updatedAt=board.updated_at,
    )


def column_out(column: ColumnModel) -> ColumnOut:
    return ColumnOut(
        id=column.id,
        boardId=column.board_id,
        title=column.title,
        position=column.position,
        createdAt=column.created_at,
        updatedAt=column.updated_at,
    )


def card_out(card: Card) -> CardOut:
    return CardOut(
        id=card.id,
        columnId=card.column_id,
        title=card.title,
        description=card.description,
        position=card.position,
        createdAt=card.created_at,
        updatedAt=card.updated_at,
    )


def owned_board(session: Session, board_id: int, user: str) -> Board:
    board = storage.get_board(session, board_id)
    check_owner(board, user)
    return board


# === Health & metadata ===


@app.get("/v1/health", response_model=Health)
def health() -> Health:
    return Health()


@app.get("/v1/version", response_model=Version)
def version() -> Version:
    return Version(version=VERSION)


# === Board endpoints ===


@app.post("/v1/boards", response_model=BoardOut, status_code=201)
def create_board(
    payload: BoardIn,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    board = storage.create_board(session, user, payload.name, payload.description)
    return board_out(board)


@app.get("/v1/boards", response_model=BoardsPage)
def list_boards(user: str = Depends(get_current_user), session: Session = Depends(get_session)):
    return BoardsPage(boards=[board_out(b) for b in storage.list_boards_for_user(session, user)])


@app.get("/v1/boards/{board_id}", response_model=BoardView)
def get_board(
    board_id: int,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    board = owned_board(session, board_id, user)
    return BoardView(
        board=board_out(board),
        columns=[column_out(c) for c in board.columns],
        cards=[card_out(card) for column in board.columns for card in column.cards],
    )


@app.delete("/v1/boards/{board_id}", status_code=204)
def delete_board(
    board_id: int,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    board = owned_board(session, board_id, user)
    storage.delete_board(session, board)
    return Response(status_code=204)


# === Column endpoints ===


@app.get("/v1/boards/{board_id}/columns", response_model=list[ColumnOut])
def list_columns(
    board_id: int,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owned_board(session, board_id, user)
    return [column_out(c) for c in storage.list_columns(session, board_id)]


@app.post("/v1/boards/{board_id}/columns", response_model=ColumnOut, status_code=201)
def create_column(
    board_id: int,
    payload: ColumnIn,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    board = owned_board(session, board_id, user)
    column = storage.create_column(session, board, payload.title)
    return column_out(column)


@app.post("/v1/boards/{board_id}/columns:reorder", response_model=list[ColumnOut])
def reorder_columns(
    board_id: int,
    payload: ColumnOrderIn,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owned_board(session, board_id, user)
    pairs = [ColumnOrder(c.id, c.position) for c in payload.columns]
    columns = ordering.reorder_columns(session, board_id, pairs)
    return [column_out(c) for c in columns]


@app.patch("/v1/boards/{board_id}/columns/{column_id}", response_model=ColumnOut)
def rename_column(
    board_id: int,
    column_id: int,
    payload: ColumnPatch,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owned_board(session, board_id, user)
    column = storage.get_column(session, board_id, column_id)
    column = storage.rename_column(session, column, payload.title)
    return column_out(column)


@app.delete("/v1/boards/{board_id}/columns/{column_id}", status_code=204)
def delete_column(
    board_id: int,
    column_id: int,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owned_board(session, board_id, user)
    storage.get_column(session, board_id, column_id)
    ordering.delete_column(session, column_id)
    return Response(status_code=204)


# === Card endpoints ===


@app.get("/v1/boards/{board_id}/columns/{column_id}/cards", response_model=list[CardOut])
def list_cards(
    board_id: int,
    column_id: int,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owned_board(session, board_id, user)
    storage.get_column(session, board_id, column_id)
    return [card_out(c) for c in storage.list_cards(session, column_id)]


@app.post("/v1/boards/{board_id}/columns/{column_id}/cards", response_model=CardOut, status_code=201)
def create_card(
    board_id: int,
    column_id: int,
    payload: CardIn,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owned_board(session, board_id, user)
    column = storage.get_column(session, board_id, column_id)
    card = storage.create_card(session, column, payload.title, payload.description)
    return card_out(card)


@app.delete("/v1/boards/{board_id}/columns/{column_id}/cards/{card_id}", status_code=204)
def delete_card(
    board_id: int,
    column_id: int,
    card_id: int,
    user: str = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owned_board(session, board_id, user)
    storage.get_column(session, board_id, column_id)
    card = storage.get_card(session, column_id, card_id)
    storage.delete_card(session, card)
    return Response(status_code=204)
