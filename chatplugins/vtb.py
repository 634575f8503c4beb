"""VTuber voice quotation catalogue: categories, quotes and their sync."""

from __future__ import annotations

import json
import random
import re
import sqlite3
import threading
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = [
    "FirstCategory",
    "SecondCategory",
    "ThirdCategory",
    "VTB_LIST_URL",
    "VTB_PAGE_URL",
    "VtbDB",
    "escape_record_url",
]

VTB_LIST_URL = "https://vtbkeyboard.moe/api/get_vtb_list"
VTB_PAGE_URL = "https://vtbkeyboard.moe/api/get_vtb_page?uid="

_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:95.0) Gecko/20100101 Firefox/95.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/15.1 Safari/605.1.15",
)

_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")
_LAST_SEGMENT = re.compile(r".*/(.*)")


@dataclass(frozen=True)
class FirstCategory:
    """A VTuber."""

    index: int
    name: str
    uid: str
    description: str = ""
    icon_path: str = ""


@dataclass(frozen=True)
class SecondCategory:
    """A quotation category of one VTuber."""

    index: int
    first_uid: str
    name: str
    author: str = ""
    description: str = ""


@dataclass(frozen=True)
class ThirdCategory:
    """One voice quotation."""

    index: int
    second_index: int
    first_uid: str
    name: str
    path: str = ""
    author: str = ""
    description: str = ""


def _decode_payload(data: Any) -> Any:
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    if not isinstance(data, str):
        return data
    text = _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), data)
    text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
    return json.loads(text, strict=False)


def _lookup(obj: Any, path: str) -> Any:
    for key in path.split("."):
        if isinstance(obj, dict):
            obj = obj.get(key)
        elif isinstance(obj, list) and key.isdigit() and int(key) < len(obj):
            obj = obj[int(key)]
        else:
            return None
    return obj


def _text(obj: Any, path: str) -> str:
    value = _lookup(obj, path)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def escape_record_url(url: str) -> str:
    """Percent-encode the last path segment of a record URL, spaces as %20."""
    m = _LAST_SEGMENT.search(url)
    if m is None:
        return url
    segment = m.group(1)
    url = url.replace(segment, urllib.parse.quote_plus(segment, safe=""))
    return url.replace("+", "%20")


def _get(url: str, timeout: float = 30) -> bytes:
    request = urllib.request.Request(url, headers={"User-Agent": random.choice(_USER_AGENTS)})
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return response.read()


class VtbDB:
    """SQLite store of VTubers, their quotation categories and quotations."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS first_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "first_category_index INTEGER, first_category_name TEXT, "
                "first_category_uid TEXT, first_category_description TEXT, "
                "first_category_icon_path TEXT)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS second_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "second_category_index INTEGER, first_category_uid TEXT, "
                "second_category_name TEXT, second_category_author TEXT, "
                "second_category_description TEXT)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS third_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "third_category_index INTEGER, second_category_index INTEGER, "
                "first_category_uid TEXT, third_category_name TEXT, "
                "third_category_path TEXT, third_category_author TEXT, "
                "third_category_description TEXT)"
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()

    def __enter__(self) -> VtbDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- reading -----------------------------------------------------------

    def _first_uid(self, first_index: int) -> str:
        row = self._conn.execute(
            "SELECT first_category_uid FROM first_category "
            "WHERE first_category_index = ? ORDER BY id LIMIT 1",
            (first_index,),
        ).fetchone()
        return row[0] if row is not None else ""

    def first_category_message(self) -> str:
        """Return the numbered list of all VTubers."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT first_category_index, first_category_name FROM first_category ORDER BY id"
            ).fetchall()
        return "请选择一个vtb并发送序号:\n" + "".join(f"{i}. {name}\n" for i, name in rows)

    def second_category_message(self, first_index: int) -> str:
        """Return the numbered categories of one VTuber, or "" when it has none."""
        with self._lock:
            uid = self._first_uid(first_index)
            rows = self._conn.execute(
                "SELECT second_category_index, second_category_name FROM second_category "
                "WHERE first_category_uid = ? ORDER BY id",
                (uid,),
            ).fetchall()
        if not rows:
            return ""
        return "请选择一个语录类别并发送序号:\n" + "".join(f"{i}. {name}\n" for i, name in rows)

    def third_category_message(self, first_index: int, second_index: int) -> str:
        """Return the numbered quotations of one category, or "" when it has none."""
        with self._lock:
            uid = self._first_uid(first_index)
            rows = self._conn.execute(
                "SELECT third_category_index, third_category_name FROM third_category "
                "WHERE first_category_uid = ? AND second_category_index = ? ORDER BY id",
                (uid, second_index),
            ).fetchall()
        if not rows:
            return ""
        return "请选择一个语录并发送序号:\n" + "".join(f"{i}. {name}\n" for i, name in rows)

    _THIRD_COLUMNS = (
        "third_category_index, second_category_index, first_category_uid, "
        "third_category_name, third_category_path, third_category_author, "
        "third_category_description"
    )

    def third_category(
        self, first_index: int, second_index: int, third_index: int
    ) -> ThirdCategory | None:
        """Return one quotation by its three indices, or None."""
        with self._lock:
            uid = self._first_uid(first_index)
            row = self._conn.execute(
                f"SELECT {self._THIRD_COLUMNS} FROM third_category "
                "WHERE first_category_uid = ? AND second_category_index = ? "
                "AND third_category_index = ? ORDER BY id LIMIT 1",
                (uid, second_index, third_index),
            ).fetchone()
        return ThirdCategory(*row) if row is not None else None

    def random_vtb(self, rng: random.Random | None = None) -> ThirdCategory | None:
        """Return a random quotation, or None when there are none."""
        r = rng or random
        with self._lock:
            (count,) = self._conn.execute("SELECT COUNT(*) FROM third_category").fetchone()
            if count == 0:
                return None
            row = self._conn.execute(
                f"SELECT {self._THIRD_COLUMNS} FROM third_category ORDER BY id LIMIT 1 OFFSET ?",
                (r.randrange(count),),
            ).fetchone()
        return ThirdCategory(*row)

    def first_category_by_uid(self, uid: str) -> FirstCategory | None:
        """Return the VTuber with this uid, or None."""
        with self._lock:
            row = self._conn.execute(
                "SELECT first_category_index, first_category_name, first_category_uid, "
                "first_category_description, first_category_icon_path FROM first_category "
                "WHERE first_category_uid = ? ORDER BY id LIMIT 1",
                (uid,),
            ).fetchone()
        return FirstCategory(*row) if row is not None else None

    # -- writing -----------------------------------------------------------

    def store_vtb_list(self, data: Any) -> list[str]:
        """Store the VTuber list (JSON text or parsed) and return their uids in order."""
        items = _decode_payload(data)
        if not isinstance(items, list):
            return []
        uids = []
        with self._lock, self._conn:
            for i, item in enumerate(items):
                fc = FirstCategory(
                    index=i,
                    name=_text(item, "name"),
                    uid=_text(item, "uid"),
                    description=_text(item, "description"),
                    icon_path=_text(item, "icon_path"),
                )
                exists = self._conn.execute(
                    "SELECT 1 FROM first_category WHERE first_category_uid = ? LIMIT 1",
                    (fc.uid,),
                ).fetchone()
                if exists is None:
                    self._conn.execute(
                        "INSERT INTO first_category (first_category_index, first_category_name, "
                        "first_category_uid, first_category_description, first_category_icon_path) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (fc.index, fc.name, fc.uid, fc.description, fc.icon_path),
                    )
                else:
                    self._conn.execute(
                        "UPDATE first_category SET first_category_index = ?, "
                        "first_category_name = ?, first_category_description = ?, "
                        "first_category_icon_path = ? WHERE first_category_uid = ?",
                        (fc.index, fc.name, fc.description, fc.icon_path, fc.uid),
                    )
                uids.append(fc.uid)
        return uids

    def store_vtb(self, uid: str, data: Any) -> None:
        """Store one VTuber's page (JSON text or parsed): its categories and quotations."""
        page = _decode_payload(data)
        voices = _lookup(page, "data.voices")
        if not isinstance(voices, list):
            return
        with self._lock, self._conn:
            for si, second in enumerate(voices):
                self._upsert_second(
                    SecondCategory(
                        index=si,
                        first_uid=uid,
                        name=_text(second, "categoryName"),
                        author=_text(second, "author"),
                        description=_text(second, "categoryDescription.zh-CN"),
                    )
                )
                voice_list = _lookup(second, "voiceList")
                if not isinstance(voice_list, list):
                    continue
                for ti, third in enumerate(voice_list):
                    self._upsert_third(
                        ThirdCategory(
                            index=ti,
                            second_index=si,
                            first_uid=uid,
                            name=_text(third, "name"),
                            path=_text(third, "path"),
                            author=_text(third, "author"),
                            description=_text(third, "description.zh-CN"),
                        )
                    )

    def _upsert_second(self, sc: SecondCategory) -> None:
        key = (sc.first_uid, sc.index)
        exists = self._conn.execute(
            "SELECT 1 FROM second_category WHERE first_category_uid = ? "
            "AND second_category_index = ? LIMIT 1",
            key,
        ).fetchone()
        if exists is None:
            self._conn.execute(
                "INSERT INTO second_category (second_category_index, first_category_uid, "
                "second_category_name, second_category_author, second_category_description) "
                "VALUES (?, ?, ?, ?, ?)",
                (sc.index, sc.first_uid, sc.name, sc.author, sc.description),
            )
        else:
            self._conn.execute(
                "UPDATE second_category SET second_category_name = ?, "
                "second_category_author = ?, second_category_description = ? "
                "WHERE first_category_uid = ? AND second_category_index = ?",
                (sc.name, sc.author, sc.description, *key),
            )

    def _upsert_third(self, tc: ThirdCategory) -> None:
        key = (tc.first_uid, tc.second_index, tc.index)
        exists = self._conn.execute(
            "SELECT 1 FROM third_category WHERE first_category_uid = ? "
            "AND second_category_index = ? AND third_category_index = ? LIMIT 1",
            key,
        ).fetchone()
        if exists is None:
            self._conn.execute(
                "INSERT INTO third_category (third_category_index, second_category_index, "
                "first_category_uid, third_category_name, third_category_path, "
                "third_category_author, third_category_description) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (tc.index, tc.second_index, tc.first_uid, tc.name, tc.path, tc.author, tc.description),
            )
        else:
            self._conn.execute(
                "UPDATE third_category SET third_category_name = ?, "
                "third_category_description = ?, third_category_path = ?, "
                "third_category_author = ? WHERE first_category_uid = ? "
                "AND second_category_index = ? AND third_category_index = ?",
                (tc.name, tc.description, tc.path, tc.author, *key),
            )

    # -- network -----------------------------------------------------------

    def fetch_vtb_list(self) -> list[str]:
        """Download and store the VTuber list; return their uids."""
        return self.store_vtb_list(_get(VTB_LIST_URL))

    def fetch_vtb(self, uid: str) -> None:
        """Download and store one VTuber's page."""
        self.store_vtb(uid, _get(VTB_PAGE_URL + urllib.parse.quote(uid, safe="")))