import json
import random

import pytest

from chatplugins.tarot import BED, Card, Formation, Tarot, TarotError, parse_draw_count


def _cards_json():
    return json.dumps(
        {
            str(i): {
                "name": f"card{i}",
                "info": {
                    "description": f"up{i}",
                    "reverseDescription": f"down{i}",
                    "imgUrl": f"img/{i}.png",
                },
            }
            for i in range(77)
        }
    )


def _formations_json():
    return json.dumps(
        {
            "圣三角": {"cards_num": 3, "is_cut": False, "represent": [["a", "b", "c"]]},
        }
    )


@pytest.fixture
def deck():
    return Tarot.from_json(_cards_json(), _formations_json())


def test_from_json_reads_cards_and_formations(deck):
    assert deck.cards["5"] == Card("card5", "up5", "down5", "img/5.png")
    assert deck.formations["圣三角"] == Formation(3, False, [["a", "b", "c"]])


def test_parse_draw_count():
    assert parse_draw_count("") == 1
    assert parse_draw_count("3张") == 3
    with pytest.raises(TarotError):
        parse_draw_count("0张")
    with pytest.raises(TarotError):
        parse_draw_count("21张")


def test_draw_single_major(deck):
    drawn = deck.draw(1, "塔罗牌", random.Random(1))
    assert len(drawn) == 1
    index = int(drawn[0].card.name.removeprefix("card"))
    assert 0 <= index < 22


def test_draw_many_minor_distinct(deck):
    drawn = deck.draw(20, "小阿卡纳", random.Random(7))
    names = [d.card.name for d in drawn]
    assert len(set(names)) == 20
    assert all(22 <= int(n.removeprefix("card")) < 77 for n in names)


def test_draw_rejects_bad_counts(deck):
    with pytest.raises(TarotError):
        deck.draw(0, "塔罗牌")
    with pytest.raises(TarotError):
        deck.draw(21, "塔罗牌")


def test_drawn_card_faces(deck):
    card = deck.cards["3"]
    for d in deck.draw(10, "塔罗牌", random.Random(3)):
        if d.reversed:
            assert d.image_url == BED + "Reverse/" + d.card.img_url
            assert d.description == d.card.reverse_description
            assert d.title.startswith("『逆位』")
        else:
            assert d.image_url == BED + d.card.img_url
            assert d.description == d.card.description
    assert card.image_url == BED + "img/3.png"


def test_lookup(deck):
    assert deck.lookup("card10") == deck.cards["10"]
    assert deck.lookup("nothing") is None


def test_card_list_text(deck):
    lines = deck.card_list_text().split("\n")
    assert lines[0] == "塔罗牌列表"
    assert lines[2].split(" ") == [f"card{i}" for i in range(7)]
    assert lines[4].split(" ") == [f"card{i}" for i in range(14, 22)]


def test_spread(deck):
    laid = deck.spread("混合", "圣三角", random.Random(5))
    assert [label for label, _ in laid] == ["a", "b", "c"]
    assert len({d.card.name for _, d in laid}) == 3


def test_spread_unknown_lists_formations(deck):
    with pytest.raises(TarotError) as exc:
        deck.spread("塔罗", "nope")
    assert "圣三角" in str(exc.value)
    assert "nope" in str(exc.value)