"""Reincarnation lottery: a weighted draw of birthplace and gender."""

from __future__ import annotations

import bisect
import json
import random
from collections.abc import Hashable, Iterable
from pathlib import Path
from typing import Any

__all__ = [
    "FAILURE_TEXT",
    "GENDER",
    "WeightedChooser",
    "area_chooser",
    "load_rates",
    "random_gender",
    "reborn",
]

FAILURE_TEXT = "投胎失败！\n您没能活到出生，祝您下次好运！"
_SUCCESS_THRESHOLD = 1 << 27


class WeightedChooser:
    """Pick items at random in proportion to integer weights."""

    def __init__(self, choices: Iterable[tuple[Any, int]]) -> None:
        self._items: list[Any] = []
        self._totals: list[int] = []
        total = 0
        for item, weight in choices:
            weight = int(weight)
            if weight < 0:
                raise ValueError(f"negative weight for {item!r}")
            total += weight
            self._items.append(item)
            self._totals.append(total)
        if total <= 0:
            raise ValueError("no valid choices")
        self._max = total

    def pick(self, rng: random.Random | None = None) -> Any:
        """Return one item drawn by weight."""
        r = (rng or random).randrange(self._max)
        return self._items[bisect.bisect_right(self._totals, r)]


GENDER = WeightedChooser([("男孩子", 50707), ("女孩子", 48292), ("雌雄同体", 1001)])


def load_rates(path: str | Path) -> list[tuple[str, float]]:
    """Read a JSON list of {"name", "weight"} entries."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [(str(entry["name"]), float(entry["weight"])) for entry in data]


def area_chooser(rates: Iterable[tuple[Hashable, float]]) -> WeightedChooser:
    """Build a chooser from fractional area weights."""
    return WeightedChooser((name, int(weight * 1e9)) for name, weight in rates)


def random_gender(rng: random.Random | None = None) -> str:
    """Draw a gender."""
    return GENDER.pick(rng)


def reborn(areas: WeightedChooser, rng: random.Random | None = None) -> str:
    """Return the reincarnation verdict text."""
    r = rng or random
    if r.randrange(1 << 31) > _SUCCESS_THRESHOLD:
        return f"投胎成功！\n您出生在 {areas.pick(r)}, 是 {random_gender(r)}。"
    return FAILURE_TEXT