from types import SimpleNamespace
import pytest

from backend.app.config import get_settings
from backend.app.db import core as core_mod


class _FakeCursor:
    def __init__(self, *, close_raises: bool = False):
        self.closed = False
        self.executed = []
        self._close_raises = close_raises

    def execute(self, sql, params=None):
        self.executed.append(sql)

    def close(self):
        self.closed = True
        if self._close_raises:
            raise RuntimeError("cursor close failed")


class _FakeConn:
    def __init__(self, *, ping_raises: bool = False, close_raises: bool = False):
        self._ping_raises = ping_raises
        self._close_raises = close_raises
        self.ping_called_with = None
        self.closed = False
        self._cursor = _FakeCursor()

    def ping(self, reconnect: bool = False):
        self.ping_called_with = reconnect
        if self._ping_raises:
            raise RuntimeError("ping fail")

    def close(self):
        self.closed = True
        if self._close_raises:
            raise RuntimeError("close failed")

    def cursor(self):
        return self._cursor


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr(core_mod, "time", SimpleNamespace(sleep=lambda _x: None))


def test_get_conn_uses_test_default_when_TEST_MODE(monkeypatch):
    calls = []

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return _FakeConn()

    monkeypatch.setenv("TEST_MODE", "1")
    monkeypatch.delenv("DB_NAME", raising=False)
    get_settings.cache_clear()
    monkeypatch.setattr(core_mod, "pymysql", SimpleNamespace(connect=fake_connect))

    conn = core_mod.get_conn()
    assert isinstance(conn, _FakeConn)
    assert calls[-1]["database"] == "plantcare_test"
    assert calls[-1]["autocommit"] is True
    assert conn.ping_called_with is True


def test_get_conn_DB_NAME_override(monkeypatch):
    calls = []

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return _FakeConn()

    monkeypatch.setenv("DB_NAME", "custom_test")
    monkeypatch.setenv("DB_CONNECT_TIMEOUT", "2")
    get_settings.cache_clear()
    monkeypatch.setattr(core_mod, "pymysql", SimpleNamespace(connect=fake_connect))

    core_mod.get_conn()
    assert calls[-1]["database"] == "custom_test"
    assert calls[-1]["connect_timeout"] == 2


def test_get_conn_retries_on_ping_failure_and_closes_first(monkeypatch, no_sleep):
    first_conn = _FakeConn(ping_raises=True, close_raises=True)
    second_conn = _FakeConn()
    seq = [first_conn, second_conn]

    monkeypatch.setattr(core_mod, "pymysql", SimpleNamespace(connect=lambda **kw: seq.pop(0)))

    conn = core_mod.get_conn()
    assert first_conn.closed is True
    assert conn is second_conn
    assert conn.ping_called_with is True


def test_get_conn_both_attempts_fail_raises(monkeypatch, no_sleep):
    seq = [_FakeConn(ping_raises=True), _FakeConn(ping_raises=True)]
    monkeypatch.setattr(core_mod, "pymysql", SimpleNamespace(connect=lambda **kw: seq.pop(0)))

    with pytest.raises(RuntimeError):
        core_mod.get_conn()


def test_connect_context_manager_closes_even_on_exception(monkeypatch):
    fake = _FakeConn()
    monkeypatch.setattr(core_mod, "get_conn", lambda: fake)

    with pytest.raises(RuntimeError):
        with core_mod.connect() as c:
            assert c is fake
            raise RuntimeError("boom")
    assert fake.closed is True


def test_connect_suppresses_close_failure(monkeypatch):
    fake = _FakeConn(close_raises=True)
    monkeypatch.setattr(core_mod, "get_conn", lambda: fake)

    with core_mod.connect() as c:
        assert c is fake
    assert fake.closed is True


def test_cursor_context_manager_closes_even_on_exception():
    fake = _FakeConn()
    cur = fake.cursor()
    with pytest.raises(ValueError):
        with core_mod.cursor(fake) as c:
            assert c is cur
            raise ValueError("err")
    assert cur.closed is True


def test_split_statements_drops_comments_and_blanks():
    sql = """
    -- plants
    CREATE TABLE a (id INT);

    -- schedules
    CREATE TABLE b (id INT);
    ;
    """
    assert core_mod._split_statements(sql) == ["CREATE TABLE a (id INT)", "CREATE TABLE b (id INT)"]


def test_ensure_schema_runs_every_statement():
    fake = _FakeConn()
    count = core_mod.ensure_schema(fake)

    executed = fake.cursor().executed
    assert count == len(executed) == 3
    assert all(stmt.upper().startswith("CREATE TABLE IF NOT EXISTS") for stmt in executed)
    assert any("care_schedules" in stmt for stmt in executed)
    assert fake.cursor().closed is True
