"""Picture content rating: turn classifier scores into a short verdict."""

from __future__ import annotations

from dataclasses import dataclass

THRESHOLD = 0.3
HSO_IMAGE = "https://gchat.qpic.cn/gchatpic_new//--4234EDEC5F147A4C319A41149D7E0EA9/0"

__all__ = ["HSO_IMAGE", "THRESHOLD", "Picture", "autojudge", "judge"]


@dataclass(frozen=True)
class Picture:
    """Classifier scores of one picture, each between 0 and 1."""

    drawings: float = 0.0
    hentai: float = 0.0
    neutral: float = 0.0
    porn: float = 0.0
    sexy: float = 0.0


def _tags(p: Picture) -> list[str]:
    tags = []
    if p.hentai > THRESHOLD:
        tags.append("hentai")
    if p.porn > THRESHOLD:
        tags.append("porn")
    if p.sexy > THRESHOLD:
        tags.append("hso")
    return tags


def judge(p: Picture) -> str:
    """Return the verdict sent in reply to an explicit rating request."""
    if p.neutral > THRESHOLD:
        return "普通哦"
    if p.drawings > THRESHOLD or p.neutral < THRESHOLD:
        kind = "二次元"
    else:
        kind = "三次元"
    return "".join([kind, *(" " + tag for tag in _tags(p))])


def autojudge(p: Picture) -> str | None:
    """Return the verdict for automatic rating, or None when nothing is worth saying."""
    if p.neutral > THRESHOLD:
        return None
    kind = "二次元" if p.drawings > THRESHOLD else "三次元"
    tags = _tags(p)
    if not tags:
        return None
    return "".join([kind, *(" " + tag for tag in tags)])