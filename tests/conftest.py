# Shared pytest fixtures
from __future__ import annotations

import tempfile
import threading
from pathlib import Path

import pytest

from tackle_import.db.batch_insert import InsertResult
from tackle_import.logging.init import reset_logging
from tackle_import.models.records import User

REEL_LINE = (
    "Shimano | Curado DC 150HG | owned | baitcaster | right | 7.4:1 | 30 | 7.8 | 11 | "
    "6+1 | 12/120 | DC | JDM spool | In black case"
)


class FakeRecordStore:
    """In-memory RecordStore.

    ``references`` maps gear_type -> rows returned by query(). Every call is
    recorded so tests can assert that no request was made.
    """

    def __init__(
        self,
        references: dict[str, list[dict]] | None = None,
        insert_error: Exception | None = None,
        query_error: Exception | None = None,
        query_gate: threading.Event | None = None,
    ) -> None:
        self.references = references or {}
        self.insert_error = insert_error
        self.query_error = query_error
        self.query_gate = query_gate
        self.queries: list[dict] = []
        self.inserts: list[tuple[str, list[dict]]] = []
        self.closed = False

    def query(self, collection, filters=None, order_by=None, columns=None):
        self.queries.append(
            {"collection": collection, "filters": dict(filters or {}), "order_by": order_by, "columns": columns}
        )
        if self.query_gate is not None:
            self.query_gate.wait(timeout=5)
        if self.query_error is not None:
            raise self.query_error
        gear_type = (filters or {}).get("gear_type")
        return [dict(r) for r in self.references.get(gear_type, [])]

    def insert_batch(self, collection, rows):
        rows = [dict(r) for r in rows]
        self.inserts.append((collection, rows))
        if self.insert_error is not None:
            raise self.insert_error
        return InsertResult(
            inserted_rows=len(rows), returned_values=[(f"new-{i}",) for i in range(len(rows))]
        )

    def close(self):
        self.closed = True


class FakeIdentity:
    def __init__(self, user: User | None = User(id="owner-1", email="angler@example.com")) -> None:
        self.user = user
        self.calls = 0

    def get_current_user(self):
        self.calls += 1
        return self.user


def gear_rows(*names: str, prefix: str = "id") -> list[dict]:
    return [{"id": f"{prefix}-{i}", "name": n, "brand": None, "model": None} for i, n in enumerate(names, 1)]


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: tackle
identity:
  owner_id: owner-from-config
  email: angler@example.com
request_timeout_seconds: 8
error_display_limit: 20
preview_limit: 50
success_message_seconds: 1.8
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "tackle.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def no_db_env(monkeypatch):
    for var in (
        "DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE",
        "TACKLE_OWNER_ID", "TACKLE_OWNER_EMAIL", "DISABLE_DB_CONNECT",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture()
def combo_store() -> FakeRecordStore:
    return FakeRecordStore(
        references={
            "rod": gear_rows("St Croix Jig Rod", prefix="rod"),
            "reel": gear_rows("Shimano Curado DC 150HG", prefix="reel"),
        }
    )


@pytest.fixture()
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture()
def anonymous() -> FakeIdentity:
    return FakeIdentity(user=None)


@pytest.fixture()
def make_store():
    return FakeRecordStore


@pytest.fixture()
def make_identity():
    return FakeIdentity


@pytest.fixture()
def reel_line() -> str:
    return REEL_LINE
