"""Daily group "marriage" registry: one couple per member per day."""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path

__all__ = [
    "Couple",
    "MAX_NAME_WIDTH",
    "MarriageRegistry",
    "Status",
    "slice_name",
]

MAX_NAME_WIDTH = 350
_DATE_FORMAT = "%Y/%m/%d"


class Status(Enum):
    """A member's standing for the day."""

    SINGLE = "单"
    HUSBAND = "攻"
    WIFE = "受"


@dataclass(frozen=True)
class Couple:
    """One registered pair. A target of 0 marks a member who chose to stay single."""

    user: int
    target: int
    username: str
    targetname: str
    updatetime: str


def _day(today: date | str | None) -> str:
    if today is None:
        today = date.today()
    if isinstance(today, date):
        return today.strftime(_DATE_FORMAT)
    return today


class MarriageRegistry:
    """SQLite-backed registry of the day's couples, kept per group."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS updateinfo ("
                "gid INTEGER PRIMARY KEY, updatetime TEXT NOT NULL)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS couples ("
                "gid INTEGER NOT NULL, user INTEGER NOT NULL, target INTEGER NOT NULL, "
                "username TEXT NOT NULL, targetname TEXT NOT NULL, "
                "updatetime TEXT NOT NULL, PRIMARY KEY (gid, user))"
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()

    def __enter__(self) -> MarriageRegistry:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _stamp(self, gid: int, day: str) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO updateinfo (gid, updatetime) VALUES (?, ?)",
            (gid, day),
        )

    def open_day(self, gid: int, today: date | str | None = None) -> bool:
        """Start the group's day; return True when the roster is fresh (new group or new day)."""
        day = _day(today)
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT updatetime FROM updateinfo WHERE gid = ?", (gid,)
            ).fetchone()
            if row is not None and row[0] == day:
                return False
            if row is not None:
                self._conn.execute("DELETE FROM couples WHERE gid = ?", (gid,))
            self._stamp(gid, day)
            return True

    def clear_roster(self, gid: int | str | None, today: date | str | None = None) -> None:
        """Empty one group's roster, or every group's when gid is None or 0."""
        day = _day(today)
        group = 0 if gid is None else int(gid)
        with self._lock, self._conn:
            if group != 0:
                groups = [group]
            else:
                rows = self._conn.execute(
                    "SELECT gid FROM couples UNION SELECT gid FROM updateinfo"
                ).fetchall()
                groups = [r[0] for r in rows]
            for g in groups:
                self._conn.execute("DELETE FROM couples WHERE gid = ?", (g,))
                self._stamp(g, day)

    def _find(self, gid: int, column: str, uid: int) -> Couple | None:
        row = self._conn.execute(
            "SELECT user, target, username, targetname, updatetime FROM couples "
            f"WHERE gid = ? AND {column} = ? LIMIT 1",
            (gid, uid),
        ).fetchone()
        return Couple(*row) if row is not None else None

    def lookup(self, gid: int, uid: int) -> tuple[Status, Couple | None]:
        """Return a member's standing and, when married, the couple record."""
        with self._lock:
            couple = self._find(gid, "user", uid)
            if couple is not None:
                return Status.HUSBAND, couple
            couple = self._find(gid, "target", uid)
            if couple is not None:
                return Status.WIFE, couple
            return Status.SINGLE, None

    def register(
        self,
        gid: int,
        uid: int,
        target: int,
        username: str,
        targetname: str,
        today: date | str | None = None,
    ) -> Couple:
        """Record a couple, replacing any earlier record of the same user."""
        couple = Couple(uid, target, username, targetname, _day(today))
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO couples "
                "(gid, user, target, username, targetname, updatetime) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (gid, couple.user, couple.target, couple.username, couple.targetname, couple.updatetime),
            )
        return couple

    def divorce_wife(self, gid: int, wife: int) -> None:
        """Remove the couple whose target is the given member."""
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM couples WHERE gid = ? AND target = ?", (gid, wife))

    def divorce_husband(self, gid: int, husband: int) -> None:
        """Remove the couple whose user is the given member."""
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM couples WHERE gid = ? AND user = ?", (gid, husband))

    def roster(self, gid: int) -> list[tuple[str, str, str, str]]:
        """Return (username, user, targetname, target) for every real couple of the group."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT username, user, targetname, target FROM couples "
                "WHERE gid = ? AND target != 0 GROUP BY user ORDER BY user",
                (gid,),
            ).fetchall()
        return [(name, str(user), tname, str(target)) for name, user, tname, target in rows]


def slice_name(name: str, measure: Callable[[str], float]) -> str:
    """Shorten a name whose drawn width, per measure(char), exceeds the column width."""
    width = 0
    last = 0
    for i, ch in enumerate(name):
        width += int(measure(ch))
        if width > MAX_NAME_WIDTH:
            break
        last = i
    if width > MAX_NAME_WIDTH:
        return name[: max(last - 1, 0)] + "......"
    return name