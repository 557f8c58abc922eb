import json
import sqlite3
import threading
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Set

from core.models import AnalysisResult, Violation


def select_new_results(existing_urls: Set[str], results: Iterable[AnalysisResult]) -> List[AnalysisResult]:
    """Results whose URL is not stored yet; the first of any in-batch duplicates wins."""
    seen = set(existing_urls)
    fresh = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        fresh.append(result)
    return fresh


class ResultStore:
    """SQLite-backed store of analysis results, one row per result."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        # guards the check-then-insert in persist_new
        self._lock = threading.Lock()
        self.init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def init_db(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS url_results (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT NOT NULL,
                    violations_json TEXT,
                    ts TEXT
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_url_results_url ON url_results (url)")
            conn.commit()

    @staticmethod
    def _row_to_result(row) -> AnalysisResult:
        id_, url, violations_json, ts = row
        return AnalysisResult(
            id=id_,
            url=url,
            violations=[Violation.from_dict(v) for v in json.loads(violations_json or "[]")],
            timestamp=datetime.fromisoformat(ts),
        )

    @staticmethod
    def _violations_json(result: AnalysisResult) -> str:
        return json.dumps([v.to_dict() for v in result.violations])

    def list_all(self) -> List[AnalysisResult]:
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            cur.execute("SELECT id, url, violations_json, ts FROM url_results ORDER BY id")
            rows = cur.fetchall()
        return [self._row_to_result(r) for r in rows]

    def get(self, result_id: int) -> Optional[AnalysisResult]:
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            cur.execute("SELECT id, url, violations_json, ts FROM url_results WHERE id = ?", (result_id,))
            row = cur.fetchone()
        return self._row_to_result(row) if row else None

    def existing_urls(self) -> Set[str]:
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            cur.execute("SELECT url FROM url_results")
            return {r[0] for r in cur.fetchall()}

    def insert_many(self, results: List[AnalysisResult]) -> None:
        """Insert results and set their `id` from the store."""
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            for result in results:
                cur.execute(
                    "INSERT INTO url_results (url, violations_json, ts) VALUES (?, ?, ?)",
                    (result.url, self._violations_json(result), result.timestamp.isoformat()),
                )
                result.id = cur.lastrowid
            conn.commit()

    def update(self, result: AnalysisResult) -> None:
        """Overwrite a stored result. Raises KeyError if its id is unknown."""
        if result.id is None:
            raise KeyError("result has no id; insert it first")
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            cur.execute(
                "UPDATE url_results SET url = ?, violations_json = ?, ts = ? WHERE id = ?",
                (result.url, self._violations_json(result), result.timestamp.isoformat(), result.id),
            )
            updated = cur.rowcount
            conn.commit()
        if not updated:
            raise KeyError(result.id)

    def delete(self, result_id: int) -> None:
        """Remove a stored result. Raises KeyError if it does not exist."""
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM url_results WHERE id = ?", (result_id,))
            deleted = cur.rowcount
            conn.commit()
        if not deleted:
            raise KeyError(result_id)

    def persist_new(self, results: Iterable[AnalysisResult]) -> List[AnalysisResult]:
        """Insert only results whose URL is not stored yet; returns what was inserted."""
        with self._lock:
            fresh = select_new_results(self.existing_urls(), results)
            if fresh:
                self.insert_many(fresh)
        return fresh
