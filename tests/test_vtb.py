import json
import random

import pytest

from chatplugins.vtb import VtbDB, escape_record_url

LIST = [
    {"name": "Alice", "uid": "101", "description": "first", "icon_path": "a.png"},
    {"name": "Bob", "uid": "202"},
]

PAGE = {
    "data": {
        "voices": [
            {
                "categoryName": "问候",
                "author": "x",
                "categoryDescription": {"zh-CN": "greetings"},
                "voiceList": [
                    {
                        "name": "早上好",
                        "path": "voices/hello world.mp3",
                        "author": "y",
                        "description": {"zh-CN": "gm"},
                    },
                    {"name": "晚安", "path": "voices/gn.mp3"},
                ],
            }
        ]
    }
}


@pytest.fixture
def db(tmp_path):
    with VtbDB(tmp_path / "vtb.db") as vdb:
        yield vdb


@pytest.fixture
def filled(db):
    db.store_vtb_list(json.dumps(LIST))
    db.store_vtb("101", PAGE)
    return db


def test_store_list_returns_uids(db):
    assert db.store_vtb_list(LIST) == ["101", "202"]


def test_first_category_message(filled):
    assert filled.first_category_message() == "请选择一个vtb并发送序号:\n0. Alice\n1. Bob\n"


def test_second_category_message(filled):
    assert filled.second_category_message(0) == "请选择一个语录类别并发送序号:\n0. 问候\n"
    assert filled.second_category_message(1) == ""


def test_third_category_message(filled):
    assert filled.third_category_message(0, 0) == "请选择一个语录并发送序号:\n0. 早上好\n1. 晚安\n"
    assert filled.third_category_message(0, 3) == ""


def test_third_category_lookup(filled):
    tc = filled.third_category(0, 0, 0)
    assert tc.name == "早上好"
    assert tc.path == "voices/hello world.mp3"
    assert tc.description == "gm"
    assert tc.first_uid == "101"
    assert filled.third_category(0, 0, 5) is None


def test_first_category_by_uid(filled):
    fc = filled.first_category_by_uid("101")
    assert fc.name == "Alice"
    assert fc.icon_path == "a.png"
    assert filled.first_category_by_uid("999") is None


def test_upsert_does_not_duplicate(filled):
    changed = [dict(LIST[0], name="Alicia"), LIST[1]]
    filled.store_vtb_list(changed)
    filled.store_vtb("101", json.dumps(PAGE))
    message = filled.first_category_message()
    assert "Alicia" in message
    assert "Alice\n" not in message
    assert message.count("\n") == 3
    assert filled.third_category_message(0, 0).count("\n") == 3


def test_random_vtb_empty(db):
    assert db.random_vtb(random.Random(1)) is None


def test_random_vtb_picks_stored(filled):
    rng = random.Random(7)
    names = {filled.random_vtb(rng).name for _ in range(50)}
    assert names <= {"早上好", "晚安"}
    assert names


def test_unicode_escapes_decoded(db):
    db.store_vtb_list(b'[{"name": "\\u4e2d", "uid": "9"}]')
    assert db.first_category_by_uid("9").name == "\u4e2d"


def test_non_list_payload(db):
    assert db.store_vtb_list("{}") == []


def test_escape_record_url_spaces():
    assert escape_record_url("https://example.com/voices/hello world.mp3") == (
        "https://example.com/voices/hello%20world.mp3"
    )


def test_escape_record_url_plus_and_no_slash():
    assert escape_record_url("a/b+c") == "a/b%2Bc"
    assert escape_record_url("plain") == "plain"