import pytest

from chatplugins.wordle import (
    Dictionary,
    LengthNotEnough,
    Mark,
    TimesRunOut,
    UnknownWord,
    WordleGame,
    class_from_name,
)

WORDS = ["apple", "apply", "plead", "crane", "slate", "trace", "bread", "zebra"]


@pytest.fixture
def game():
    return WordleGame("apple", Dictionary(WORDS))


def test_class_from_name():
    assert class_from_name("") == 5
    assert class_from_name("六阶") == 6
    assert class_from_name("七阶") == 7
    with pytest.raises(ValueError):
        class_from_name("八阶")


def test_dictionary_contains():
    d = Dictionary(["b", "a", "c"])
    assert d.contains("a")
    assert not d.contains("d")
    assert "c" in d
    assert len(d) == 3


def test_win(game):
    assert game.guess("APPLE") is True
    assert game.board()[0] == [(c, Mark.MATCH) for c in "APPLE"]


def test_wrong_length(game):
    with pytest.raises(LengthNotEnough):
        game.guess("app")
    assert game.guesses == []


def test_unknown_word(game):
    with pytest.raises(UnknownWord):
        game.guess("qqqqq")
    assert game.guesses == []


def test_marks(game):
    assert game.guess("apply") is False
    row = game.board()[0]
    assert [m for _, m in row[:4]] == [Mark.MATCH] * 4
    assert row[4] == ("Y", Mark.NOTEXIST)
    game.guess("plead")
    assert all(m is not Mark.MATCH for _, m in game.board()[1])


def test_board_shape_and_undone(game):
    rows = game.board()
    assert len(rows) == game.max_guesses
    assert all(len(r) == 5 for r in rows)
    assert all(cell == ("", Mark.UNDONE) for r in rows for cell in r)


def test_times_run_out(game):
    for word in ["apply", "plead", "crane", "slate", "trace"]:
        assert game.guess(word) is False
    with pytest.raises(TimesRunOut):
        game.guess("bread")
    assert len(game.guesses) == game.max_guesses


def test_win_on_last_guess(game):
    for word in ["apply", "plead", "crane", "slate", "trace"]:
        game.guess(word)
    assert game.guess("apple") is True