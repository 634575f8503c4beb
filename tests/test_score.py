from datetime import datetime, timedelta

import pytest

from chatplugins.score import (
    LEVELS,
    SCOREMAX,
    ScoreDB,
    ScoreRecord,
    get_hour_word,
    get_level,
    next_level_score,
    sign_in,
)


@pytest.fixture
def db(tmp_path):
    with ScoreDB(tmp_path / "score.db") as d:
        yield d


@pytest.mark.parametrize(
    "hour, word",
    [(6, "早上好"), (11, "早上好"), (12, "中午好"), (14, "下午好"), (19, "晚上好"), (0, "凌晨好"), (5, "凌晨好")],
)
def test_hour_word(hour, word):
    assert get_hour_word(datetime(2022, 9, 1, hour, 30)) == word


def test_levels_round_trip():
    for index, value in enumerate(LEVELS):
        assert get_level(value) == index


def test_level_between_steps_is_lower_step():
    for index in range(1, len(LEVELS)):
        if LEVELS[index] - LEVELS[index - 1] > 1:
            assert get_level(LEVELS[index] - 1) == index - 1


def test_level_above_max():
    assert get_level(SCOREMAX + 1) == -1


def test_next_level_score():
    for level in range(len(LEVELS) - 1):
        assert next_level_score(level) == LEVELS[level + 1]
    assert next_level_score(len(LEVELS) - 1) == SCOREMAX


def test_get_score_creates_zero(db):
    assert db.get_score(7) == ScoreRecord(7, 0)


def test_set_score_round_trip(db):
    db.set_score(7, 42)
    assert db.get_score(7).score == 42
    db.set_score(7, 43)
    assert db.get_score(7).score == 43


def test_top_scores_ordered(db):
    for uid, score in [(1, 5), (2, 50), (3, 20), (4, 1)]:
        db.set_score(uid, score)
    top = db.top_scores(3)
    assert [r.uid for r in top] == [2, 3, 1]
    assert len(db.top_scores(10)) == 4


def test_sign_in_count_round_trip(db):
    now = datetime(2022, 9, 1, 8, 0)
    db.set_sign_in_count(9, 3, now)
    rec = db.get_sign_in(9)
    assert rec.count == 3
    assert rec.updated_at == now


def test_sign_in_once_per_day(db):
    now = datetime(2022, 9, 1, 8, 0)
    first = sign_in(db, 5, now)
    assert not first.already_signed
    assert first.score == first.add
    assert first.hour_word == "早上好"
    assert first.date_word == "09/01"
    second = sign_in(db, 5, now + timedelta(hours=2))
    assert second.already_signed
    assert second.score == first.score
    third = sign_in(db, 5, now + timedelta(days=1))
    assert not third.already_signed
    assert third.score == first.score + third.add


def test_sign_in_caps_score(db):
    db.set_score(6, SCOREMAX)
    result = sign_in(db, 6, datetime(2022, 9, 1, 20, 0))
    assert result.capped
    assert result.score == SCOREMAX
    assert db.get_score(6).score == SCOREMAX
    assert result.level == len(LEVELS) - 1
    assert result.next_level_score == SCOREMAX