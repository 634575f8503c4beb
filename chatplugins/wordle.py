"""Word guessing game: guess a hidden word in limited tries."""

from __future__ import annotations

import bisect
from collections.abc import Iterable
from enum import Enum

__all__ = [
    "CLASSES",
    "Dictionary",
    "LengthNotEnough",
    "Mark",
    "TimesRunOut",
    "UnknownWord",
    "WordleError",
    "WordleGame",
    "class_from_name",
]

CLASSES = {"": 5, "五阶": 5, "六阶": 6, "七阶": 7}


class Mark(Enum):
    """The state of one board cell; the value is its RGBA colour."""

    MATCH = (125, 166, 108, 255)
    EXIST = (199, 183, 96, 255)
    NOTEXIST = (123, 123, 123, 255)
    UNDONE = (219, 219, 219, 255)


class WordleError(Exception):
    """A guess that cannot be taken."""


class LengthNotEnough(WordleError):
    """The guess is not as long as the hidden word."""


class UnknownWord(WordleError):
    """The guess is not in the dictionary."""


class TimesRunOut(WordleError):
    """All guesses are used up."""


def class_from_name(name: str) -> int:
    """Return the word length for a difficulty name ("" means five)."""
    try:
        return CLASSES[name]
    except KeyError:
        raise ValueError(f"unknown difficulty: {name!r}") from None


class Dictionary:
    """A sorted word list with fast membership tests."""

    def __init__(self, words: Iterable[str]) -> None:
        self._words = sorted(words)

    def contains(self, word: str) -> bool:
        i = bisect.bisect_left(self._words, word)
        return i < len(self._words) and self._words[i] == word

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains(word)

    def __len__(self) -> int:
        return len(self._words)


class WordleGame:
    """One round: the target word and the guesses made so far."""

    def __init__(self, target: str, dictionary: Dictionary) -> None:
        self.target = target
        self.dictionary = dictionary
        self.guesses: list[str] = []

    @property
    def max_guesses(self) -> int:
        return len(self.target) + 1

    def guess(self, word: str) -> bool:
        """Take a guess; return True when it is the target."""
        word = word.lower()
        win = word == self.target
        if not win:
            if len(word) != len(self.target):
                raise LengthNotEnough(word)
            if not self.dictionary.contains(word):
                raise UnknownWord(word)
        self.guesses.append(word)
        if not win and len(self.guesses) >= self.max_guesses:
            raise TimesRunOut(self.target)
        return win

    def _mark(self, letter: str, j: int) -> Mark:
        if letter == self.target[j]:
            return Mark.MATCH
        if letter in self.target:
            return Mark.EXIST
        return Mark.NOTEXIST

    def board(self) -> list[list[tuple[str, Mark]]]:
        """Return every row of the board; unused rows hold empty undone cells."""
        rows = []
        for i in range(self.max_guesses):
            if i < len(self.guesses):
                row = [(c.upper(), self._mark(c, j)) for j, c in enumerate(self.guesses[i])]
            else:
                row = [("", Mark.UNDONE)] * len(self.target)
            rows.append(row)
        return rows