from datetime import datetime, timedelta

import pytest

from chatplugins.sleep import (
    SleepDB,
    good_morning_text,
    good_night_text,
    is_evening,
    is_morning,
    time_duration,
)


@pytest.fixture
def db(tmp_path):
    d = SleepDB(tmp_path / "manage.db")
    yield d
    d.close()


def test_time_duration_splits():
    assert time_duration(timedelta(hours=1, minutes=2, seconds=3)) == (1, 2, 3)
    assert time_duration(timedelta(0)) == (0, 0, 0)


def test_time_duration_drops_fractions():
    assert time_duration(timedelta(minutes=5, seconds=7, microseconds=999)) == (0, 5, 7)


@pytest.mark.parametrize("hour,expected", [(5, False), (6, True), (12, True), (13, False)])
def test_is_morning(hour, expected):
    assert is_morning(hour) is expected


@pytest.mark.parametrize("hour,expected", [(20, False), (21, True), (0, True), (3, True), (4, False)])
def test_is_evening(hour, expected):
    assert is_evening(hour) is expected


def test_first_sleep_has_no_duration_and_ranks(db):
    night = datetime(2022, 9, 1, 22, 30)
    assert db.sleep(1, 100, night) == (1, timedelta(0))
    assert db.sleep(1, 101, night + timedelta(minutes=1)) == (2, timedelta(0))
    assert db.sleep(2, 100, night) == (1, timedelta(0))


def test_get_up_measures_sleep(db):
    night = datetime(2022, 9, 1, 23, 0)
    morning = datetime(2022, 9, 2, 7, 15)
    db.sleep(1, 100, night)
    position, slept = db.get_up(1, 100, morning)
    assert position == 1
    assert slept == morning - night


def test_early_morning_sleep_counts_previous_evening(db):
    db.sleep(1, 100, datetime(2022, 9, 1, 22, 0))
    position, _ = db.sleep(1, 101, datetime(2022, 9, 2, 1, 0))
    assert position == 2


def test_yesterdays_records_not_ranked(db):
    db.get_up(1, 100, datetime(2022, 9, 1, 7, 0))
    position, slept = db.get_up(1, 101, datetime(2022, 9, 2, 7, 0))
    assert position == 1
    assert slept == timedelta(0)


def test_persists_across_reopen(tmp_path):
    path = tmp_path / "s.db"
    night = datetime(2022, 9, 1, 22, 0)
    with SleepDB(path) as d:
        d.sleep(1, 100, night)
    with SleepDB(path) as d:
        _, slept = d.get_up(1, 100, night + timedelta(hours=9))
    assert slept == timedelta(hours=9)


def test_texts_without_duration():
    assert good_morning_text(3, timedelta(0)) == "早安成功！你是今天第3个起床的"
    assert good_night_text(2, timedelta(hours=30)) == "晚安成功！你是今天第2个睡觉的"


def test_texts_with_duration():
    text = good_morning_text(1, timedelta(hours=8, minutes=5, seconds=9))
    assert text == "早安成功！你的睡眠时长为8时5分9秒,你是今天第1个起床的"
    night = good_night_text(4, timedelta(hours=15, minutes=1, seconds=2))
    assert night.startswith("晚安成功！你的清醒时长为15时1分2秒")
    assert night.endswith("第4个睡觉的")