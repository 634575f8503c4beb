"""Daily sign-in that awards biscuits, with levels and a score ranking."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = [
    "LEVELS",
    "SCOREMAX",
    "SIGNIN_MAX",
    "ScoreDB",
    "ScoreRecord",
    "SignInRecord",
    "SignInResult",
    "get_hour_word",
    "get_level",
    "next_level_score",
    "sign_in",
]

SIGNIN_MAX = 1
SCOREMAX = 120
LEVELS: tuple[int, ...] = (0, 1, 2, 5, 10, 20, 35, 55, 75, 100, 120)

_DAY_FORMAT = "%Y%m%d"


@dataclass(frozen=True)
class ScoreRecord:
    """A member's biscuit count."""

    uid: int
    score: int = 0


@dataclass(frozen=True)
class SignInRecord:
    """A member's sign-in count and the time it last changed."""

    uid: int
    count: int = 0
    updated_at: datetime | None = None


@dataclass(frozen=True)
class SignInResult:
    """What a sign-in attempt produced."""

    already_signed: bool
    score: int
    level: int
    next_level_score: int
    hour_word: str
    date_word: str
    add: int = 0
    capped: bool = False


def _encode(t: datetime) -> str:
    return t.isoformat()


def _decode(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


class ScoreDB:
    """SQLite store of scores and sign-in counts."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS score ("
                "uid INTEGER PRIMARY KEY, score INTEGER NOT NULL DEFAULT 0)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sign_in ("
                "uid INTEGER PRIMARY KEY, count INTEGER NOT NULL DEFAULT 0, updated_at TEXT)"
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()

    def __enter__(self) -> ScoreDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def get_score(self, uid: int) -> ScoreRecord:
        """Return the member's score, creating a zero record when missing."""
        with self._lock, self._conn:
            row = self._conn.execute("SELECT score FROM score WHERE uid = ?", (uid,)).fetchone()
            if row is None:
                self._conn.execute("INSERT INTO score (uid, score) VALUES (?, 0)", (uid,))
                return ScoreRecord(uid, 0)
            return ScoreRecord(uid, row[0])

    def set_score(self, uid: int, score: int) -> None:
        """Insert or update the member's score."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO score (uid, score) VALUES (?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET score = excluded.score",
                (uid, score),
            )

    def get_sign_in(self, uid: int) -> SignInRecord:
        """Return the member's sign-in record, creating an empty one when missing."""
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT count, updated_at FROM sign_in WHERE uid = ?", (uid,)
            ).fetchone()
            if row is None:
                now = datetime.now()
                self._conn.execute(
                    "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, 0, ?)",
                    (uid, _encode(now)),
                )
                return SignInRecord(uid, 0, now)
            return SignInRecord(uid, row[0], _decode(row[1]))

    def set_sign_in_count(self, uid: int, count: int, now: datetime | None = None) -> None:
        """Insert or update the member's sign-in count, stamping it with now."""
        stamp = _encode(now or datetime.now())
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET count = excluded.count, "
                "updated_at = excluded.updated_at",
                (uid, count, stamp),
            )

    def top_scores(self, n: int) -> list[ScoreRecord]:
        """Return the n highest scores, best first."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT uid, score FROM score ORDER BY score DESC LIMIT ?", (n,)
            ).fetchall()
        return [ScoreRecord(uid, score) for uid, score in rows]


def get_hour_word(t: datetime) -> str:
    """Return the greeting for the time of day."""
    h = t.hour
    if 6 <= h < 12:
        return "早上好"
    if 12 <= h < 14:
        return "中午好"
    if 14 <= h < 19:
        return "下午好"
    if 19 <= h < 24:
        return "晚上好"
    if 0 <= h < 6:
        return "凌晨好"
    return ""


def get_level(count: int) -> int:
    """Return the level reached with the given score, or -1 above the top."""
    for k, v in enumerate(LEVELS):
        if count == v:
            return k
        if count < v:
            return k - 1
    return -1


def next_level_score(level: int) -> int:
    """Return the score needed for the level after the given one."""
    if level < len(LEVELS) - 1:
        return LEVELS[level + 1]
    return SCOREMAX


def sign_in(db: ScoreDB, uid: int, now: datetime | None = None) -> SignInResult:
    """Sign a member in for the day and award a biscuit unless already signed."""
    now = now or datetime.now()
    today = now.strftime(_DAY_FORMAT)
    record = db.get_sign_in(uid)
    last_day = record.updated_at.strftime(_DAY_FORMAT) if record.updated_at else ""
    hour_word = get_hour_word(now)
    date_word = now.strftime("%m/%d")

    if record.count >= SIGNIN_MAX and last_day == today:
        score = db.get_score(uid).score
        level = get_level(score)
        return SignInResult(True, score, level, next_level_score(level), hour_word, date_word)

    if last_day != today:
        db.set_sign_in_count(uid, 0, now)
    db.set_sign_in_count(uid, record.count + 1, now)

    add = 1
    score = db.get_score(uid).score + add
    capped = score > SCOREMAX
    if capped:
        score = SCOREMAX
    db.set_score(uid, score)
    level = get_level(score)
    return SignInResult(
        False, score, level, next_level_score(level), hour_word, date_word, add, capped
    )