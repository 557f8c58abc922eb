"""Test the result store and reconciliation."""

import sqlite3
import threading
from datetime import datetime, timezone

import pytest

from core.models import AnalysisResult, Violation
from core.storage import ResultStore, select_new_results


def _result(url, *rule_ids):
    return AnalysisResult(
        url=url,
        violations=[Violation(id=r, description=f"{r} description", nodes=["<p>"]) for r in rule_ids],
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def store(tmp_path):
    return ResultStore(str(tmp_path / "results.db"))


def test_insert_assigns_ids_and_round_trips(store):
    a = _result("https://example.org/a", "image-alt", "label")
    store.insert_many([a])
    assert a.id is not None

    [loaded] = store.list_all()
    assert loaded.id == a.id
    assert loaded.url == a.url
    assert [v.id for v in loaded.violations] == ["image-alt", "label"]
    assert loaded.timestamp == a.timestamp


def test_select_new_results_filters_existing():
    a, b = _result("A"), _result("B")
    assert select_new_results({"A"}, [a, b]) == [b]


def test_select_new_results_drops_batch_duplicates():
    first, second = _result("B", "image-alt"), _result("B")
    assert select_new_results(set(), [first, second]) == [first]


def test_persist_new_only_inserts_unseen_urls(store):
    store.insert_many([_result("https://example.org/a")])

    inserted = store.persist_new([_result("https://example.org/a"), _result("https://example.org/b")])

    assert [r.url for r in inserted] == ["https://example.org/b"]
    assert sorted(r.url for r in store.list_all()) == ["https://example.org/a", "https://example.org/b"]


def test_persist_new_is_idempotent(store):
    batch = [_result("https://example.org/a"), _result("https://example.org/b")]
    store.persist_new(batch)
    assert store.persist_new([_result("https://example.org/a"), _result("https://example.org/b")]) == []
    assert len(store.list_all()) == 2


def test_concurrent_persist_does_not_duplicate(store):
    def worker():
        store.persist_new([_result("https://example.org/a"), _result("https://example.org/b")])

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store.list_all()) == 2


def test_update_and_delete(store):
    a = _result("https://example.org/a", "image-alt")
    store.insert_many([a])

    a.violations = []
    store.update(a)
    assert store.get(a.id).violations == []

    store.delete(a.id)
    assert store.get(a.id) is None
    with pytest.raises(KeyError):
        store.delete(a.id)


def test_update_unknown_result_raises(store):
    with pytest.raises(KeyError):
        store.update(_result("https://example.org/x"))
    ghost = _result("https://example.org/x")
    ghost.id = 999
    with pytest.raises(KeyError):
        store.update(ghost)


class TrackingConnection(sqlite3.Connection):
    opened = []

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.closed = False
        TrackingConnection.opened.append(self)

    def close(self):
        self.closed = True
        super().close()


@pytest.fixture
def tracked_store(store, monkeypatch):
    TrackingConnection.opened = []
    monkeypatch.setattr(store, "_connect", lambda: sqlite3.connect(store.db_path, factory=TrackingConnection))
    return store


def test_connections_closed_when_a_query_fails(tracked_store):
    conn = sqlite3.connect(tracked_store.db_path)
    conn.execute("DROP TABLE url_results")
    conn.commit()
    conn.close()

    with pytest.raises(sqlite3.OperationalError):
        tracked_store.list_all()
    with pytest.raises(sqlite3.OperationalError):
        tracked_store.insert_many([_result("https://example.org/a")])
    with pytest.raises(sqlite3.OperationalError):
        tracked_store.delete(1)

    assert len(TrackingConnection.opened) == 3
    assert all(conn.closed for conn in TrackingConnection.opened)


def test_connections_closed_after_success(tracked_store):
    a = _result("https://example.org/a")
    tracked_store.persist_new([a])
    tracked_store.get(a.id)
    tracked_store.update(a)

    assert TrackingConnection.opened
    assert all(conn.closed for conn in TrackingConnection.opened)
