from datetime import datetime

import pytest
from sqlalchemy import event, func, select, update

from taskboard.db import Board, Card, ColumnModel, init_db, make_engine, make_session_factory


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'taskboard.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def make_board(session_factory):
    """Create a board with columns at positions 0..n-1; return (board_id, {title: column_id})."""

    def _make(titles, owner="alice", cards_per_column=0):
        with session_factory() as s:
            board = Board(name="Sprint", owner=owner)
            s.add(board)
            s.flush()
            ids = {}
            for position, title in enumerate(titles):
                column = ColumnModel(board_id=board.id, title=title, position=position)
                s.add(column)
                s.flush()
                for n in range(cards_per_column):
                    s.add(Card(column_id=column.id, title=f"{title}-{n}", position=n))
                ids[title] = column.id
            s.commit()
            return board.id, ids

    return _make


@pytest.fixture
def stored(session_factory):
    """Committed ``[(title, position)]`` of a board, ordered by position."""

    def _stored(board_id):
        with session_factory() as s:
            rows = s.execute(
                select(ColumnModel.title, ColumnModel.position)
                .where(ColumnModel.board_id == board_id)
                .order_by(ColumnModel.position, ColumnModel.id)
            ).all()
        return [tuple(r) for r in rows]

    return _stored


@pytest.fixture
def card_count(session_factory):
    def _count(column_id):
        with session_factory() as s:
            return s.scalar(select(func.count()).select_from(Card).where(Card.column_id == column_id))

    return _count


PAST = datetime(2000, 1, 1)


@pytest.fixture
def age_columns(session_factory):
    """Backdate every column's ``updated_at`` on a board; return the timestamp used."""

    def _age(board_id):
        with session_factory() as s:
            s.execute(update(ColumnModel).where(ColumnModel.board_id == board_id).values(updated_at=PAST))
            s.commit()
        return PAST

    return _age


@pytest.fixture
def stamps(session_factory):
    def _stamps(board_id):
        with session_factory() as s:
            rows = s.execute(
                select(ColumnModel.title, ColumnModel.updated_at).where(ColumnModel.board_id == board_id)
            ).all()
        return dict(rows)

    return _stamps


@pytest.fixture
def statements(engine):
    """SQL statements sent to the database while the test runs."""
    seen = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        seen.append(statement.lstrip().split(None, 1)[0].upper())

    event.listen(engine, "before_cursor_execute", _record)
    yield seen
    event.remove(engine, "before_cursor_execute", _record)
