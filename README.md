# chatplugins

This package holds the core logic for a set of small group-chat bot features: games, fortunes, a daily sign-in, sleep tracking and a few lookup tables. Every module works on plain Python values. Persistent state goes in SQLite through the standard `sqlite3` module. You wire the functions to whatever chat library you use.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install .[test]
pytest
```

The one runtime dependency is `lxml`. Only `chatplugins.ymgal` uses it, to parse HTML.

## Modules

- **`chatplugins.nsfw`**
  - `Picture` holds classifier scores: `drawings`, `hentai`, `neutral`, `porn` and `sexy`.
  - `judge(p)` always returns a verdict string.
  - `autojudge(p)` returns a verdict only for a picture that is not neutral and has at least one tag. Otherwise it returns `None`.

- **`chatplugins.runcode`**
  - `lookup(language)` maps a language name, in any case, to a `RunType` (service language id and file extension).
  - `template(language)` returns the hello-world template for a language.
  - Both raise `UnsupportedLanguage` for an unknown name.
  - `run_code(code, run_type, timeout=15)` posts the code to the online compiler service. It sends the token found in the `RUNCODE_TOKEN` environment variable.
  - `parse_response(payload)` reads the service's JSON reply and raises `RunCodeError` when the reply reports errors.
  - `clear_newline_suffix` drops trailing newlines.
  - `cut_too_long` truncates output after 30 line breaks or about 1000 characters.

- **`chatplugins.wtf`**
  - `TABLE` is the list of name-based fun-test generators.
  - `new_wtf(index)` returns one generator, or `None`.
  - `list_text()` returns the numbered list of generators.
  - `Wtf.url(*names)` builds the request URL.
  - `Wtf.parse(payload)` reads a reply and raises `WtfError` on failure.
  - `Wtf.predict(*names)` fetches and parses in one call.

- **`chatplugins.qqwife`**
  - `MarriageRegistry(path)` is a per-group daily registry of couples.
  - `open_day` starts a group's day and clears the roster of an earlier day.
  - `register` records a couple.
  - `lookup` returns a `Status` (`SINGLE`, `HUSBAND`, `WIFE`) and the `Couple` record.
  - `divorce_wife` and `divorce_husband` remove a couple.
  - `clear_roster` clears one group's roster, or every group's.
  - `roster` lists the day's real couples.
  - `slice_name(name, measure)` shortens a name whose drawn width, as reported by the `measure` callable, exceeds 350.

- **`chatplugins.sleep`**
  - `SleepDB(path)` records good-night (`sleep`) and good-morning (`get_up`) times. Each call returns the member's rank for the period and the time since their last record.
  - `time_duration` splits a `timedelta` into whole hours, minutes and seconds.
  - `is_morning(hour)` and `is_evening(hour)` give the accepted hours.
  - `good_morning_text` and `good_night_text` build the reply text.

- **`chatplugins.score`**
  - `ScoreDB(path)` stores scores and sign-in counts. `top_scores(n)` returns the ranking.
  - `sign_in(db, uid, now=None)` awards one biscuit a day, capped at `SCOREMAX`. It returns a `SignInResult` with the score, the level, the score needed for the next level and the greeting words.
  - `get_level`, `next_level_score` and `get_hour_word` are available on their own.

- **`chatplugins.reborn`**
  - `WeightedChooser` picks items in proportion to integer weights.
  - `load_rates(path)` reads a JSON list of `{"name", "weight"}` entries.
  - `area_chooser(rates)` builds a chooser from fractional weights.
  - `random_gender` draws a gender.
  - `reborn(areas, rng=None)` returns the reincarnation verdict text.

- **`chatplugins.tarot`**
  - `Tarot.from_json(cards_json, formations_json)` builds a deck and its spreads.
  - `draw(n, kind)` draws distinct major or minor arcana cards.
  - `lookup(name)` finds a card by name.
  - `card_list_text()` lists the cards.
  - `spread(kind, formation)` lays out a named spread.
  - `parse_draw_count("3张")` parses a card count.
  - Invalid counts and unknown spreads raise `TarotError`.

- **`chatplugins.wordle`**
  - `Dictionary` is a sorted word list.
  - `WordleGame(target, dictionary)` takes guesses through `guess(word)`, which returns `True` on a win. It raises `LengthNotEnough`, `UnknownWord` or `TimesRunOut`.
  - `board()` returns each row as `(letter, Mark)` cells.
  - `class_from_name` maps a difficulty name to a word length of 5, 6 or 7.

- **`chatplugins.vtb`**
  - `VtbDB(path)` stores VTubers (`FirstCategory`), their quotation categories (`SecondCategory`) and voice quotations (`ThirdCategory`).
  - It builds the numbered selection menus and returns a random quotation.
  - `store_vtb_list` and `store_vtb` load the site's JSON. `fetch_vtb_list` and `fetch_vtb` download it first.
  - `escape_record_url` percent-encodes the file name of a record URL.

- **`chatplugins.wordcount`**
  - `count_words(texts, stopwords, slicer)` counts Chinese words, leaving out stopwords. The `slicer` callable you supply cuts each message into words.
  - `rank_by_word_count` sorts the counts, most frequent first.
  - `load_stopwords`, `is_chinese_word` and `clamp_message_count` are helpers.

- **`chatplugins.ymgal`**
  - `YmgalDB(path)` stores galgame picture sets (`Ymgal`). It offers `upsert`, `get_by_id`, `random` and keyword `search`.
  - `parse_page_number`, `parse_picset_ids` and `parse_picset` read the site's HTML.
  - `update(db, fetch, sleep=time.sleep)` walks the listings and stores new sets. You supply `fetch`, which returns a page for a URL.
  - `forward_messages(item)` lists the text and image nodes to send.

- **`chatplugins.quotes`**
  - `QuoteDB(path, table)` reads an `(id, text)` table with `get(id)`, `pick()` and `count()`.
  - `omikuji_images(index)` returns the two image URLs of a temple fortune slip.

## Example

```python
from chatplugins.wordle import Dictionary, WordleGame
from chatplugins.tarot import parse_draw_count
from chatplugins.qqwife import MarriageRegistry

words = Dictionary(["apple", "angle", "ample"])
game = WordleGame("apple", words)
print(game.guess("angle"))   # False
print(game.board()[0])

print(parse_draw_count("3张"))  # 3

with MarriageRegistry(":memory:") as registry:
    registry.open_day(1001)
    registry.register(1001, 1, 2, "Alice", "Bob")
    print(registry.lookup(1001, 2))  # (Status.WIFE, Couple(...))
```

## What this package does not do

- It has no bot framework, no command parser and no command-line program. Connecting functions to chat messages is up to you.
- It draws no pictures. There are no sign-in cards, roster images, wordle boards or bar charts; `WordleGame.board()` and the score and roster data are what you would render.
- It does not classify images. `nsfw` only interprets scores that you get from a classifier.
- It does not download the data files the features rely on (tarot card JSON, word lists, stopword lists, quotation databases, area rates). You load them yourself and pass them in.
- It has no word segmenter. `count_words` needs one passed in as `slicer`.