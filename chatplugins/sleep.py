"""Good-morning / good-night tracker that ranks members and measures sleep."""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timedelta
from pathlib import Path

__all__ = [
    "SleepDB",
    "good_morning_text",
    "good_night_text",
    "is_evening",
    "is_morning",
    "time_duration",
]

_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def _encode(t: datetime) -> str:
    return t.strftime(_FORMAT)


def _decode(s: str) -> datetime:
    return datetime.strptime(s, _FORMAT)


class SleepDB:
    """SQLite store of each member's last good-night or good-morning time."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sleep_manage ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, group_id INTEGER, "
                "user_id INTEGER, sleep_time TEXT)"
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()

    def __enter__(self) -> SleepDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _record(self, gid: int, uid: int, now: datetime, since: datetime) -> tuple[int, timedelta]:
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT sleep_time FROM sleep_manage WHERE group_id = ? AND user_id = ? LIMIT 1",
                (gid, uid),
            ).fetchone()
            elapsed = timedelta(0)
            if row is None:
                self._conn.execute(
                    "INSERT INTO sleep_manage (group_id, user_id, sleep_time) VALUES (?, ?, ?)",
                    (gid, uid, _encode(now)),
                )
            else:
                elapsed = now - _decode(row[0])
                self._conn.execute(
                    "UPDATE sleep_manage SET sleep_time = ? WHERE group_id = ? AND user_id = ?",
                    (_encode(now), gid, uid),
                )
            (position,) = self._conn.execute(
                "SELECT COUNT(*) FROM sleep_manage WHERE group_id = ? "
                "AND sleep_time <= ? AND sleep_time >= ?",
                (gid, _encode(now), _encode(since)),
            ).fetchone()
        return position, elapsed

    def sleep(self, gid: int, uid: int, now: datetime | None = None) -> tuple[int, timedelta]:
        """Record a good night; return the rank tonight and the time awake since last record."""
        now = now or datetime.now()
        top = now.replace(minute=0, second=0)
        if now.hour >= 21:
            since = top - timedelta(hours=now.hour - 21)
        elif now.hour <= 3:
            since = top - timedelta(hours=3 + now.hour)
        else:
            since = datetime.min
        return self._record(gid, uid, now, since)

    def get_up(self, gid: int, uid: int, now: datetime | None = None) -> tuple[int, timedelta]:
        """Record a good morning; return the rank today and the time slept since last record."""
        now = now or datetime.now()
        since = now.replace(minute=0, second=0) + timedelta(hours=6 - now.hour)
        return self._record(gid, uid, now, since)


def _tdiv(a: int, b: int) -> int:
    q = abs(a) // b
    return q if a >= 0 else -q


def time_duration(delta: timedelta) -> tuple[int, int, int]:
    """Split a duration into whole hours, minutes and seconds."""
    total = delta // timedelta(microseconds=1)
    hour = _tdiv(total, 3_600_000_000)
    rest = total - hour * 3_600_000_000
    minute = _tdiv(rest, 60_000_000)
    rest -= minute * 60_000_000
    second = _tdiv(rest, 1_000_000)
    return hour, minute, second


def is_morning(hour: int) -> bool:
    """Good mornings count from 6 to 12 o'clock."""
    return 6 <= hour <= 12


def is_evening(hour: int) -> bool:
    """Good nights count from 21 o'clock to 3 o'clock."""
    return hour >= 21 or hour <= 3


def _no_duration(hour: int, minute: int, second: int) -> bool:
    return (hour == 0 and minute == 0 and second == 0) or hour >= 24


def good_morning_text(position: int, duration: timedelta) -> str:
    """Reply to a good morning."""
    h, m, s = time_duration(duration)
    if _no_duration(h, m, s):
        return f"早安成功！你是今天第{position}个起床的"
    return f"早安成功！你的睡眠时长为{h}时{m}分{s}秒,你是今天第{position}个起床的"


def good_night_text(position: int, duration: timedelta) -> str:
    """Reply to a good night."""
    h, m, s = time_duration(duration)
    if _no_duration(h, m, s):
        return f"晚安成功！你是今天第{position}个睡觉的"
    return f"晚安成功！你的清醒时长为{h}时{m}分{s}秒,你是今天第{position}个睡觉的"