import pytest

from pickeat.models import Season
from pickeat.storage.core import UnreachableError
from pickeat.storage.season import get_all_seasons, get_season_by_id


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))
        if self.conn.error is not None:
            raise self.conn.error

    def fetchall(self):
        return list(self.conn.rows)

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows=(), error=None):
        self.rows = list(rows)
        self.error = error
        self.executed = []

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        pass

    def rollback(self):
        pass


def test_get_all_seasons_in_id_order():
    conn = FakeConnection(rows=[(1, "Printemps", "spring"), (2, "Été", "summer")])
    assert get_all_seasons(conn) == [
        Season(1, "Printemps", "spring"),
        Season(2, "Été", "summer"),
    ]
    assert "ORDER BY id" in conn.executed[0][0]


def test_get_season_by_id():
    conn = FakeConnection(rows=[(4, "Hiver", "winter")])
    assert get_season_by_id(conn, 4) == Season(4, "Hiver", "winter")
    assert conn.executed[0][1] == (4,)


def test_missing_season():
    assert get_season_by_id(FakeConnection(), 99) is None


def test_connection_loss_is_retryable():
    conn = FakeConnection(error=ConnectionResetError("reset"))
    with pytest.raises(UnreachableError) as info:
        get_all_seasons(conn)
    assert info.value.is_retryable() is True