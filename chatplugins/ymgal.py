"""Galgame CG and sticker collection scraped from a picture-set site."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
import time
import urllib.parse
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import lxml.html

__all__ = [
    "CG_TYPE",
    "CG_URL",
    "EMOTICON_TYPE",
    "EMOTICON_URL",
    "NO_PICTURE_TEXT",
    "WEB_PIC_URL",
    "WEB_URL",
    "Ymgal",
    "YmgalDB",
    "forward_messages",
    "parse_page_number",
    "parse_picset",
    "parse_picset_ids",
    "update",
]

WEB_URL = "https://www.ymgal.com"
CG_TYPE = "Gal CG"
EMOTICON_TYPE = "其他"
WEB_PIC_URL = WEB_URL + "/co/picset/"
CG_URL = (
    WEB_URL + "/search?type=picset&sort=default&category=" + urllib.parse.quote_plus(CG_TYPE) + "&page="
)
EMOTICON_URL = (
    WEB_URL
    + "/search?type=picset&sort=default&category="
    + urllib.parse.quote_plus(EMOTICON_TYPE)
    + "&page="
)
NO_PICTURE_TEXT = "暂时没有这样的图呢"

_PAGE_NUMBER_EXPR = (
    "//*[@id='pager-box']/div/a[@class='icon item pager-next']/preceding-sibling::a[1]/text()"
)
_PICSET_LINKS_EXPR = "//*[@id='picset-result-list']/ul/div/div[1]/a"
_PICTURE_COUNT_EXPR = "//div[@class='meta-info']/div[@class='meta-right']/span[2]/text()"
_CG_PICTURE_EXPR = (
    "//*[@id='main-picset-warp']/div/div[2]/div/div[@class='swiper-wrapper']/div[{}]"
)
_EMOTICON_PICTURE_EXPR = "//*[@id='main-picset-warp']/div/div[@class='stream-list']/div[{}]/img"
_NUMBER = re.compile(r"\d+")
_PAUSE = 0.5


@dataclass(frozen=True)
class Ymgal:
    """One picture set: its id, title, kind, description and comma-separated picture URLs."""

    id: int
    title: str = ""
    picture_type: str = ""
    picture_description: str = ""
    picture_list: str = ""

    @property
    def pictures(self) -> list[str]:
        """The picture URLs of the set."""
        return self.picture_list.split(",") if self.picture_list else []


_COLUMNS = "id, title, picture_type, picture_description, picture_list"


class YmgalDB:
    """SQLite store of picture sets."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS ymgal ("
                "id INTEGER PRIMARY KEY, title TEXT, picture_type TEXT, "
                "picture_description TEXT, picture_list TEXT)"
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()

    def __enter__(self) -> YmgalDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def upsert(self, item: Ymgal) -> None:
        """Insert a picture set or replace the stored one with the same id."""
        with self._lock, self._conn:
            self._conn.execute(
                f"INSERT INTO ymgal ({_COLUMNS}) VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET title = excluded.title, "
                "picture_type = excluded.picture_type, "
                "picture_description = excluded.picture_description, "
                "picture_list = excluded.picture_list",
                (
                    item.id,
                    item.title,
                    item.picture_type,
                    item.picture_description,
                    item.picture_list,
                ),
            )

    def get_by_id(self, id: int | str) -> Ymgal | None:
        """Return the picture set with this id, or None."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE id = ?", (int(id),)
            ).fetchone()
        return Ymgal(*row) if row is not None else None

    def _random_where(self, where: str, params: tuple[Any, ...], rng: Any) -> Ymgal | None:
        r = rng or random
        with self._lock:
            (count,) = self._conn.execute(
                f"SELECT COUNT(*) FROM ymgal WHERE {where}", params
            ).fetchone()
            if count == 0:
                return None
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE {where} ORDER BY id LIMIT 1 OFFSET ?",
                (*params, r.randrange(count)),
            ).fetchone()
        return Ymgal(*row) if row is not None else None

    def random(self, picture_type: str, rng: random.Random | None = None) -> Ymgal | None:
        """Return a random picture set of the kind, or None when there is none."""
        return self._random_where("picture_type = ?", (picture_type,), rng)

    def search(
        self, picture_type: str, key: str, rng: random.Random | None = None
    ) -> Ymgal | None:
        """Return a random set of the kind whose title or description holds key, or None."""
        pattern = f"%{key}%"
        return self._random_where(
            "picture_type = ? AND (picture_description LIKE ? OR title LIKE ?)",
            (picture_type, pattern, pattern),
            rng,
        )


def _document(html: str | bytes) -> Any:
    return lxml.html.document_fromstring(html)


def _first(doc: Any, expr: str) -> Any:
    found = doc.xpath(expr)
    if not found:
        raise ValueError(f"nothing matches {expr}")
    return found[0]


def _attr(element: Any, position: int) -> str:
    values = list(element.attrib.values())
    if len(values) <= position:
        raise ValueError(f"element <{element.tag}> has no attribute at position {position}")
    return values[position]


def parse_page_number(html: str | bytes) -> int:
    """Return the last page number shown by a search result pager."""
    return int(str(_first(_document(html), _PAGE_NUMBER_EXPR)).strip())


def parse_picset_ids(html: str | bytes) -> list[str]:
    """Return the picture-set ids linked from a search result page, in page order."""
    ids = []
    for link in _document(html).xpath(_PICSET_LINKS_EXPR):
        values = list(link.attrib.values())
        m = _NUMBER.search(values[0]) if values else None
        if m is not None:
            ids.append(m.group())
    return ids


def parse_picset(html: str | bytes, pic_id: int | str, picture_type: str) -> Ymgal:
    """Read a picture-set page into a record of the given kind."""
    if picture_type == CG_TYPE:
        picture_expr = _CG_PICTURE_EXPR
    elif picture_type == EMOTICON_TYPE:
        picture_expr = _EMOTICON_PICTURE_EXPR
    else:
        raise ValueError(f"unknown picture type: {picture_type!r}")
    ident = int(pic_id)
    doc = _document(html)
    title = _attr(_first(doc, "//meta[@name='name']"), 1)
    description = _attr(_first(doc, "//meta[@name='description']"), 1)
    m = _NUMBER.search(str(_first(doc, _PICTURE_COUNT_EXPR)))
    if m is None:
        raise ValueError("picture count not found")
    count = int(m.group())
    urls = [_attr(_first(doc, picture_expr.format(i)), 1) for i in range(1, count + 1)]
    return Ymgal(ident, title, picture_type, description, ",".join(urls))


def forward_messages(item: Ymgal | None) -> list[tuple[str, str]]:
    """Return the ("text"|"image", value) nodes to forward for a set; empty when it has no pictures."""
    if item is None or not item.picture_list:
        return []
    nodes = [("text", item.title)]
    if item.picture_description:
        nodes.append(("text", item.picture_description))
    nodes.extend(("image", url) for url in item.pictures)
    return nodes


def update(
    db: YmgalDB,
    fetch: Callable[[str], str | bytes],
    sleep: Callable[[float], Any] = time.sleep,
) -> int:
    """Fetch new picture sets of both kinds into db; return how many were stored.

    Sets are visited from the end of the listing and the walk of a kind stops
    at the first set already stored.
    """
    kinds = ((CG_TYPE, CG_URL), (EMOTICON_TYPE, EMOTICON_URL))
    pages = {ptype: parse_page_number(fetch(base + "1")) for ptype, base in kinds}
    ids: dict[str, list[str]] = {}
    for ptype, base in kinds:
        collected: list[str] = []
        for page in range(1, pages[ptype] + 1):
            collected.extend(parse_picset_ids(fetch(base + str(page))))
            sleep(_PAUSE)
        ids[ptype] = collected
    stored = 0
    for ptype, _ in kinds:
        for pic_id in reversed(ids[ptype]):
            existing = db.get_by_id(pic_id)
            if existing is not None and existing.picture_list:
                break
            db.upsert(parse_picset(fetch(WEB_PIC_URL + pic_id), pic_id, ptype))
            stored += 1
            sleep(_PAUSE)
    return stored