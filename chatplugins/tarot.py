"""Tarot card drawing, card lookup and card spreads."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "BED",
    "Card",
    "DrawnCard",
    "Formation",
    "MAX_DRAW",
    "POSITIONS",
    "REASONS",
    "Tarot",
    "TarotError",
    "parse_draw_count",
]

BED = "https://gitcode.net/shudorcl/zbp-tarot/-/raw/master/"
MAX_DRAW = 20
POSITIONS = ("『正位』", "『逆位』")
REASONS = ("您抽到的是~\n", "锵锵锵，塔罗牌的预言是~\n", "诶，让我看看您抽到了~\n")
_REVERSE_DIR = ("", "Reverse/")
_MAJOR_COUNT = 22
_MINOR_COUNT = 55
_ALL_COUNT = 77


class TarotError(Exception):
    """A draw request or spread name that cannot be served."""


@dataclass(frozen=True)
class Card:
    """One tarot card with its upright and reversed meanings."""

    name: str
    description: str = ""
    reverse_description: str = ""
    img_url: str = ""

    @property
    def image_url(self) -> str:
        """Image of the upright card."""
        return BED + self.img_url


@dataclass(frozen=True)
class Formation:
    """A spread: how many cards it uses and what each position represents."""

    cards_num: int
    is_cut: bool = False
    represent: list[list[str]] = field(default_factory=list)


@dataclass(frozen=True)
class DrawnCard:
    """A card as drawn, upright or reversed."""

    card: Card
    reversed: bool

    @property
    def position(self) -> str:
        return POSITIONS[self.reversed]

    @property
    def description(self) -> str:
        return self.card.reverse_description if self.reversed else self.card.description

    @property
    def image_url(self) -> str:
        return BED + _REVERSE_DIR[self.reversed] + self.card.img_url

    @property
    def title(self) -> str:
        return f"{self.position}的『{self.card.name}』"


def _check_count(n: int) -> None:
    if n <= 0:
        raise TarotError("张数必须为正")
    if n > MAX_DRAW:
        raise TarotError("抽取张数过多")


def parse_draw_count(text: str) -> int:
    """Parse an optional "N张" prefix into a card count; an empty prefix means one."""
    if not text:
        return 1
    digits = text.removesuffix("张")
    try:
        n = int(digits)
    except ValueError:
        raise TarotError(f"invalid card count: {text!r}") from None
    _check_count(n)
    return n


def _card_range(kind: str, allow_mixed: bool) -> tuple[int, int]:
    if "小" in kind:
        return _MAJOR_COUNT, _MINOR_COUNT
    if allow_mixed and kind == "混合":
        return 0, _ALL_COUNT
    return 0, _MAJOR_COUNT


class Tarot:
    """A deck keyed by card number ("0" to "76") and a set of named spreads."""

    def __init__(self, cards: dict[str, Card], formations: dict[str, Formation]) -> None:
        self.cards = dict(cards)
        self.formations = dict(formations)
        self._by_name = {card.name: card for card in self.cards.values()}

    @classmethod
    def from_json(cls, cards_json: str | bytes, formations_json: str | bytes) -> Tarot:
        """Build a deck from the card and formation JSON documents."""
        raw_cards: dict[str, Any] = json.loads(cards_json)
        raw_forms: dict[str, Any] = json.loads(formations_json)
        cards = {}
        for key, entry in raw_cards.items():
            info = entry.get("info") or {}
            cards[key] = Card(
                name=entry.get("name", ""),
                description=info.get("description", ""),
                reverse_description=info.get("reverseDescription", ""),
                img_url=info.get("imgUrl", ""),
            )
        formations = {
            name: Formation(
                cards_num=int(entry.get("cards_num", 0)),
                is_cut=bool(entry.get("is_cut", False)),
                represent=[list(row) for row in entry.get("represent", [])],
            )
            for name, entry in raw_forms.items()
        }
        return cls(cards, formations)

    def _card(self, index: int) -> Card:
        return self.cards.get(str(index), Card(""))

    def _drawn(self, index: int, rng: random.Random | Any) -> DrawnCard:
        return DrawnCard(self._card(index), rng.randrange(2) == 1)

    def draw(self, n: int, kind: str, rng: random.Random | None = None) -> list[DrawnCard]:
        """Draw n distinct cards of the kind (major arcana, or minor when it names 小)."""
        _check_count(n)
        r = rng or random
        start, length = _card_range(kind, allow_mixed=False)
        if n == 1:
            return [self._drawn(r.randrange(length) + start, r)]
        return [self._drawn(j + start, r) for j in r.sample(range(length), n)]

    def lookup(self, name: str) -> Card | None:
        """Return the card with this name, or None."""
        return self._by_name.get(name)

    def card_list_text(self) -> str:
        """Return the list of card names shown when a lookup fails."""
        major = [self._card(i).name for i in range(_MAJOR_COUNT)]
        return (
            "塔罗牌列表\n大阿尔卡纳:\n"
            + " ".join(major[:7])
            + "\n"
            + " ".join(major[7:14])
            + "\n"
            + " ".join(major[14:22])
            + "\n小阿尔卡纳:\n[圣杯|星币|宝剑|权杖] [0-10|侍从|骑士|王后|国王]"
        )

    def spread(
        self, kind: str, formation: str, rng: random.Random | None = None
    ) -> list[tuple[str, DrawnCard]]:
        """Lay out a named spread; return (position meaning, drawn card) pairs."""
        info = self.formations.get(formation)
        if info is None:
            raise TarotError(
                f"没有找到{formation}噢~\n现有牌阵列表: \n" + "\n".join(self.formations)
            )
        r = rng or random
        start, length = _card_range(kind, allow_mixed=True)
        labels = info.represent[0] if info.represent else []
        indices = r.sample(range(length), info.cards_num)
        return [
            (labels[i] if i < len(labels) else "", self._drawn(j + start, r))
            for i, j in enumerate(indices)
        ]