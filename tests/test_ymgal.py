import random

import pytest

from chatplugins.ymgal import (
    CG_TYPE,
    CG_URL,
    EMOTICON_TYPE,
    EMOTICON_URL,
    WEB_PIC_URL,
    Ymgal,
    YmgalDB,
    forward_messages,
    parse_page_number,
    parse_picset,
    parse_picset_ids,
    update,
)


def pager(last):
    links = "".join(f"<a>{i}</a>" for i in range(1, last + 1))
    return (
        "<html><body><div id='pager-box'><div>"
        + links
        + "<a class='icon item pager-next'>next</a></div></div></body></html>"
    )


def listing(ids, last=1):
    items = "".join(
        f"<div><div><a href='/co/picset/{i}'>x</a></div><div>y</div></div>" for i in ids
    )
    return (
        "<html><body><div id='picset-result-list'><ul>"
        + items
        + "</ul></div>"
        + pager(last)[len("<html><body>"):]
    )


def cg_page(title, desc, urls):
    slides = "".join(f"<div class='swiper-slide' data-src='{u}'></div>" for u in urls)
    return (
        "<html><head>"
        f"<meta name='name' content='{title}'>"
        f"<meta name='description' content='{desc}'>"
        "</head><body>"
        f"<div class='meta-info'><div class='meta-right'><span>a</span><span>共 {len(urls)} 张</span></div></div>"
        "<div id='main-picset-warp'><div><div>head</div><div><div>"
        f"<div class='swiper-wrapper'>{slides}</div>"
        "</div></div></div></div></body></html>"
    )


def emoticon_page(title, desc, urls):
    items = "".join(f"<div><img class='pic' src='{u}'></div>" for u in urls)
    return (
        "<html><head>"
        f"<meta name='name' content='{title}'>"
        f"<meta name='description' content='{desc}'>"
        "</head><body>"
        f"<div class='meta-info'><div class='meta-right'><span>a</span><span>{len(urls)}</span></div></div>"
        "<div id='main-picset-warp'><div>"
        f"<div class='stream-list'>{items}</div>"
        "</div></div></body></html>"
    )


@pytest.fixture
def db(tmp_path):
    with YmgalDB(tmp_path / "ymgal.db") as d:
        yield d


def test_parse_page_number():
    assert parse_page_number(pager(7)) == 7


def test_parse_page_number_missing():
    with pytest.raises(ValueError):
        parse_page_number("<html><body><p>nothing</p></body></html>")


def test_parse_picset_ids_in_order():
    assert parse_picset_ids(listing(["123", "456"])) == ["123", "456"]


def test_parse_cg_picset():
    item = parse_picset(cg_page("T", "D", ["u1", "u2"]), "42", CG_TYPE)
    assert item == Ymgal(42, "T", CG_TYPE, "D", "u1,u2")
    assert item.pictures == ["u1", "u2"]


def test_parse_emoticon_picset():
    item = parse_picset(emoticon_page("E", "", ["a.png"]), 9, EMOTICON_TYPE)
    assert item.picture_list == "a.png"
    assert item.picture_type == EMOTICON_TYPE


def test_parse_picset_unknown_type():
    with pytest.raises(ValueError):
        parse_picset(cg_page("T", "D", ["u"]), 1, "other")


def test_upsert_roundtrip_and_update(db):
    db.upsert(Ymgal(1, "a", CG_TYPE, "d", "x"))
    assert db.get_by_id(1) == Ymgal(1, "a", CG_TYPE, "d", "x")
    db.upsert(Ymgal(1, "b", CG_TYPE, "e", "y,z"))
    assert db.get_by_id("1") == Ymgal(1, "b", CG_TYPE, "e", "y,z")
    assert db.get_by_id(2) is None


def test_random_and_search(db):
    db.upsert(Ymgal(1, "summer", CG_TYPE, "beach", "x"))
    db.upsert(Ymgal(2, "winter", CG_TYPE, "snow", "y"))
    db.upsert(Ymgal(3, "smile", EMOTICON_TYPE, "", "z"))
    rng = random.Random(1)
    assert db.random(CG_TYPE, rng).id in {1, 2}
    assert db.random(EMOTICON_TYPE, rng).id == 3
    assert db.random("none", rng) is None
    assert db.search(CG_TYPE, "snow", rng).id == 2
    assert db.search(CG_TYPE, "summ", rng).id == 1
    assert db.search(EMOTICON_TYPE, "snow", rng) is None


def test_forward_messages():
    item = Ymgal(1, "T", CG_TYPE, "D", "u1,u2")
    assert forward_messages(item) == [("text", "T"), ("text", "D"), ("image", "u1"), ("image", "u2")]
    assert forward_messages(Ymgal(1, "T", CG_TYPE, "", "u")) == [("text", "T"), ("image", "u")]
    assert forward_messages(Ymgal(1, "T", CG_TYPE, "D", "")) == []
    assert forward_messages(None) == []


def make_site():
    return {
        CG_URL + "1": listing(["10", "11"]),
        EMOTICON_URL + "1": listing(["20"]),
        WEB_PIC_URL + "10": cg_page("ten", "d10", ["a"]),
        WEB_PIC_URL + "11": cg_page("eleven", "d11", ["b", "c"]),
        WEB_PIC_URL + "20": emoticon_page("twenty", "d20", ["e"]),
    }


def test_update_stores_everything(db):
    site = make_site()
    pauses = []
    assert update(db, site.__getitem__, pauses.append) == 3
    assert db.get_by_id(11).picture_list == "b,c"
    assert db.get_by_id(10).title == "ten"
    assert db.get_by_id(20).picture_type == EMOTICON_TYPE
    assert all(p == 0.5 for p in pauses)


def test_update_stops_at_known_set(db):
    db.upsert(Ymgal(11, "known", CG_TYPE, "", "old"))
    site = make_site()
    assert update(db, site.__getitem__, lambda s: None) == 1
    assert db.get_by_id(10) is None
    assert db.get_by_id(11).picture_list == "old"
    assert db.get_by_id(20).title == "twenty"