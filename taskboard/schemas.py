from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class Health(BaseModel):
    status: str = "ok"


class Version(BaseModel):
    version: str = "1.0.0"


class BoardIn(BaseModel):
    name: str = Field(min_length=1, max_length=140)
    description: Optional[str] = Field(default=None, max_length=2000)


class BoardOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    owner: str
    createdAt: datetime
    updatedAt: datetime


class BoardsPage(BaseModel):
    boards: list[BoardOut]


class ColumnIn(BaseModel):
    title: str = Field(min_length=1, max_length=80)


class ColumnPatch(BaseModel):
    title: str = Field(min_length=1, max_length=80)


class ColumnOut(BaseModel):
    id: int
    boardId: int
    title: str
    position: int
    createdAt: datetime
    updatedAt: datetime


class ColumnPosition(BaseModel):
    id: int
    position: int


class ColumnOrderIn(BaseModel):
    columns: list[ColumnPosition]


class CardIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=8000)


class CardOut(BaseModel):
    id: int
    columnId: int
    title: str
    description: Optional[str]
    position: int
    createdAt: datetime
    updatedAt: datetime


class BoardView(BaseModel):
    board: BoardOut
    columns: list[ColumnOut]
    cards: list[CardOut]
