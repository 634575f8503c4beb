"""Random quotation tables (fortune slips, diary lines) and temple fortune images."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
from pathlib import Path

__all__ = ["OMIKUJI_BED", "QuoteDB", "omikuji_images"]

OMIKUJI_BED = "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/%d_%d.jpg"

_TABLE_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class QuoteDB:
    """An SQLite table of (id, text) quotations."""

    def __init__(self, path: str | Path, table: str) -> None:
        if _TABLE_NAME.fullmatch(table) is None:
            raise ValueError(f"invalid table name: {table!r}")
        self._table = f'"{table}"'
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                f"CREATE TABLE IF NOT EXISTS {self._table} (id INTEGER PRIMARY KEY, text TEXT)"
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()

    def __enter__(self) -> QuoteDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def get(self, id: int) -> str:
        """Return the quotation with this id; KeyError when there is none."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT text FROM {self._table} WHERE id = ?", (id,)
            ).fetchone()
        if row is None:
            raise KeyError(id)
        return row[0]

    def pick(self, rng: random.Random | None = None) -> str:
        """Return a random quotation; LookupError when the table is empty."""
        r = rng or random
        with self._lock:
            (count,) = self._conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()
            if count == 0:
                raise LookupError("no quotations")
            (text,) = self._conn.execute(
                f"SELECT text FROM {self._table} ORDER BY id LIMIT 1 OFFSET ?",
                (r.randrange(count),),
            ).fetchone()
        return text

    def count(self) -> int:
        """Return the number of quotations."""
        with self._lock:
            (n,) = self._conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()
        return n


def omikuji_images(index: int) -> tuple[str, str]:
    """Return the front and back image URLs of the fortune slip with this number."""
    return OMIKUJI_BED % (index, 0), OMIKUJI_BED % (index, 1)