"""Hot-word statistics over chat history."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Callable, Iterable, Mapping

__all__ = [
    "DEFAULT_MESSAGES",
    "MAX_MESSAGES",
    "TOP_N",
    "clamp_message_count",
    "count_words",
    "is_chinese_word",
    "load_stopwords",
    "rank_by_word_count",
]

MAX_MESSAGES = 10000
DEFAULT_MESSAGES = 1000
TOP_N = 20

_CHINESE = re.compile(r"[一-龥]+")


def is_chinese_word(text: str) -> bool:
    """Return True when the text is made of common CJK ideographs only."""
    return _CHINESE.fullmatch(text) is not None


def load_stopwords(text: str) -> list[str]:
    """Split a stopword file into a sorted list, one word per line."""
    return sorted(text.replace("\r", "").split("\n"))


def clamp_message_count(p: int) -> int:
    """Limit the number of messages to scan; 0 means the default."""
    if p > MAX_MESSAGES:
        return MAX_MESSAGES
    if p == 0:
        return DEFAULT_MESSAGES
    return p


def count_words(
    texts: Iterable[str],
    stopwords: Iterable[str],
    slicer: Callable[[str], Iterable[str]],
) -> Counter[str]:
    """Count the Chinese words, not in stopwords, that slicer cuts each message into."""
    stop = set(stopwords)
    counts: Counter[str] = Counter()
    for text in texts:
        text = text.strip()
        if not text:
            continue
        for word in slicer(text):
            word = word.strip()
            if is_chinese_word(word) and word not in stop:
                counts[word] += 1
    return counts


def rank_by_word_count(freqs: Mapping[str, int]) -> list[tuple[str, int]]:
    """Return (word, count) pairs, most frequent first."""
    return sorted(freqs.items(), key=lambda kv: (-kv[1], kv[0]))