import pytest

from pickeat.models import InvalidityKind, InvalidTag, NewTag, Tag
from pickeat.storage.tag import (
    add_tag,
    delete_tag,
    get_all_tags,
    get_tag_by_id,
    invalid_from_constraint,
    replace_tag,
)


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = -1

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))
        self.rowcount = self.conn.rowcount

    def fetchall(self):
        return list(self.conn.rows)

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows=(), rowcount=0):
        self.rows = list(rows)
        self.rowcount = rowcount
        self.executed = []

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        pass

    def rollback(self):
        pass


def test_constraint_mapping():
    assert invalid_from_constraint("tags_uq_name") == InvalidTag(
        name=InvalidityKind.ALREADY_USED
    )
    with pytest.raises(ValueError, match="Unknown DB constraint categories_uq_name"):
        invalid_from_constraint("categories_uq_name")


def test_get_all_tags():
    conn = FakeConnection(rows=[(1, "Rapide"), (2, "Réconfortant")])
    assert get_all_tags(conn) == [Tag(1, "Rapide"), Tag(2, "Réconfortant")]
    assert "ORDER BY name" in conn.executed[0][0]


def test_add_tag():
    conn = FakeConnection(rows=[(8,)])
    assert add_tag(conn, NewTag("Grosse faim")) == 8
    assert conn.executed[0][1] == ("Grosse faim",)


def test_get_tag_by_id():
    assert get_tag_by_id(FakeConnection(rows=[(1, "Rapide")]), 1) == Tag(1, "Rapide")
    assert get_tag_by_id(FakeConnection(), 1) is None


def test_replace_and_delete():
    conn = FakeConnection(rowcount=1)
    assert replace_tag(conn, 2, NewTag("Lent")) is True
    assert conn.executed[0][1] == ("Lent", 2)
    assert replace_tag(FakeConnection(), 2, NewTag("Lent")) is False
    assert delete_tag(FakeConnection(rowcount=1), 2) is True
    assert delete_tag(FakeConnection(), 2) is False