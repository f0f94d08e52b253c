import logging
import threading
from pathlib import Path

import pytest
from IPython.lib.pretty import pretty

from block_config import (
    Configuration,
    ConfigStateError,
    ConfigSyntaxError,
    ConfigTypeError,
    FileConfigSource,
    ParserSettings,
    SourceUnreadable,
    TextConfigSource,
)

EXAMPLE = """\
[ someBlock ]
someKey = "some string"
otherKey = 12
"""

COOKIES = """\
# bakery settings
[cookies: sugar]
sweetness = 5
letters = 'a'..'e'

[cookies: chocolate]
sweetness = 8
countdown = 5..1
"""


def write_config(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_end_to_end_from_file(tmp_path: Path):
    conf = Configuration(write_config(tmp_path / "app.conf", EXAMPLE))
    conf.parse_config()

    assert conf.get("someBlock", "someKey") == "some string"
    assert conf.get("someBlock", "otherKey") == 12
    assert conf.keys_of_block("someBlock") == ["someKey", "otherKey"]
    assert conf.get("someBlock", "missing") is None
    assert conf.get("otherBlock", "someKey") is None


def test_named_blocks(tmp_path: Path):
    conf = Configuration(write_config(tmp_path / "app.conf", COOKIES))
    conf.parse_config()

    assert conf.names_of_block("cookies") == ["sugar", "chocolate"]
    assert conf.names_of_block("someBlock") == []
    assert conf.get(("cookies", "sugar"), "letters") == ["a", "b", "c", "d", "e"]
    assert conf.get(("cookies", "chocolate"), "countdown") == [5, 4, 3, 2, 1]
    assert conf.get("cookies", "sweetness") is None
    assert conf.keys_of_block(("cookies", "sugar")) == ["sweetness", "letters"]


def test_rehash_without_changes_fires_every_key():
    source = TextConfigSource(EXAMPLE)
    conf = Configuration(source)
    conf.parse_config()

    seen = []
    conf.on_change("someBlock", "someKey", lambda old, new: seen.append((old, new)))
    conf.on_change("someBlock", "otherKey", lambda old, new: seen.append((old, new)))

    records = conf.rehash()

    assert len(records) == 2
    assert not any(record.changed for record in records)
    assert seen == [("some string", "some string"), (12, 12)]


def test_added_changed_and_removed_keys():
    source = TextConfigSource(EXAMPLE)
    conf = Configuration(source)

    events = []
    for key in ("someKey", "otherKey", "newKey"):
        conf.on_change(
            "someBlock", key, lambda old, new, key=key: events.append((key, old, new))
        )

    conf.parse_config()
    assert events == [("someKey", None, "some string"), ("otherKey", None, 12)]

    events.clear()
    source.text = '[ someBlock ]\nnewKey = [1, 2]\notherKey = 13\n'
    records = conf.parse_config()

    assert events == [
        ("newKey", None, [1, 2]),
        ("otherKey", 12, 13),
        ("someKey", "some string", None),
    ]
    removed = [record for record in records if record.removed]
    assert len(removed) == 1
    assert removed[0].key == "someKey"
    assert conf.get("someBlock", "someKey") is None


def test_named_block_event_names():
    conf = Configuration(TextConfigSource(COOKIES))
    calls = []
    event_name = conf.on_change(
        ("cookies", "sugar"), "sweetness", lambda old, new: calls.append(new)
    )
    conf.parse_config()

    assert event_name == "change:cookies/sugar:sweetness"
    assert calls == [5]


def test_on_change_passes_options_to_the_sink():
    conf = Configuration(TextConfigSource(EXAMPLE))
    calls = []
    conf.on_change("someBlock", "otherKey", lambda o, n: calls.append("a"), name="w")
    conf.on_change("someBlock", "otherKey", lambda o, n: calls.append("b"), name="w")
    conf.on_change("someBlock", "otherKey", lambda o, n: calls.append("c"), priority=5)

    conf.parse_config()

    assert calls == ["c", "b"]


@pytest.mark.parametrize(
    "broken, error",
    [
        ("[ someBlock ]\nfoo = [1,2\n", ConfigSyntaxError),
        ("[ someBlock ]\nwhat is this\n", ConfigSyntaxError),
        ("[ someBlock ]\nfoo = 'a'..3\n", ConfigTypeError),
        ("foo = 1\n[ someBlock ]\n", ConfigStateError),
    ],
)
def test_failed_pass_keeps_previous_values(broken, error):
    source = TextConfigSource(EXAMPLE)
    conf = Configuration(source)
    conf.parse_config()

    fired = []
    conf.on_change("someBlock", "someKey", lambda old, new: fired.append(new))

    source.text = broken
    with pytest.raises(error):
        conf.parse_config()

    assert fired == []
    assert conf.get("someBlock", "someKey") == "some string"
    assert conf.keys_of_block("someBlock") == ["someKey", "otherKey"]


def test_missing_file_is_unreadable(tmp_path: Path):
    conf = Configuration(tmp_path / "missing.conf")
    with pytest.raises(SourceUnreadable):
        conf.parse_config()
    assert conf.store.is_empty()


def test_undecodable_file_is_unreadable(tmp_path: Path):
    path = tmp_path / "app.conf"
    path.write_bytes(b"[ a ]\nx = '\xff\xfe'\n")

    conf = Configuration(path)
    with pytest.raises(SourceUnreadable):
        conf.parse_config()


def test_file_removed_between_passes_keeps_store(tmp_path: Path):
    path = write_config(tmp_path / "app.conf", EXAMPLE)
    conf = Configuration(path)
    conf.parse_config()

    path.unlink()
    with pytest.raises(SourceUnreadable):
        conf.parse_config()
    assert conf.get("someBlock", "otherKey") == 12


def test_listener_errors_reach_the_caller():
    conf = Configuration(TextConfigSource(EXAMPLE))

    def broken(old, new):
        raise RuntimeError("listener failed")

    conf.on_change("someBlock", "someKey", broken)
    with pytest.raises(RuntimeError, match="listener failed"):
        conf.parse_config()

    # The store was already swapped before dispatching
    assert conf.get("someBlock", "otherKey") == 12


def test_shared_store(store):
    first = Configuration(TextConfigSource(EXAMPLE), store=store)
    first.parse_config()

    other = Configuration(TextConfigSource("[ unused ]\n"), store=store)
    assert other.get("someBlock", "otherKey") == 12
    assert first.store is other.store


def test_duplicate_block_setting():
    text = "[ a ]\nx = 1\n[ b ]\n[ a ]\ny = 2\n"

    merged = Configuration(TextConfigSource(text))
    merged.parse_config()
    assert merged.keys_of_block("a") == ["x", "y"]

    replaced = Configuration(
        TextConfigSource(text), settings=ParserSettings(duplicate_blocks="replace")
    )
    replaced.parse_config()
    assert replaced.keys_of_block("a") == ["y"]


def test_invalid_duplicate_block_setting():
    with pytest.raises(ValueError):
        ParserSettings(duplicate_blocks="ignore")


def test_parse_is_serialized_across_threads():
    source = TextConfigSource(EXAMPLE)
    conf = Configuration(source)
    conf.parse_config()

    seen = []
    conf.on_change("someBlock", "otherKey", lambda old, new: seen.append((old, new)))

    threads = [threading.Thread(target=conf.parse_config) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert seen == [(12, 12)] * 8


def test_parse_logs_summary(caplog):
    conf = Configuration(TextConfigSource(EXAMPLE, name="inline.conf"))
    with caplog.at_level(logging.INFO, logger="block_config"):
        conf.parse_config()
    assert "Parsed inline.conf: 1 block(s), 2 key(s) seen, 2 changed" in caplog.text

    conf.source.text = "oops\n"
    with caplog.at_level(logging.WARNING, logger="block_config"):
        with pytest.raises(ConfigSyntaxError):
            conf.parse_config()
    assert "inline.conf:1: unrecognized line: 'oops'" in caplog.text


def test_pretty_repr():
    conf = Configuration(TextConfigSource(EXAMPLE, name="inline.conf"))
    conf.parse_config()
    text = pretty(conf)
    assert text.startswith("Configuration(")
    assert "inline.conf" in text


def test_unchanged_floats_survive_a_rehash(store):
    source = TextConfigSource("[ a ]\nratio = 1.0\ncount = 1\n")
    conf = Configuration(source, store=store)
    conf.parse_config()

    records = conf.parse_config()
    assert type(conf.get("a", "ratio")) is float
    assert type(conf.get("a", "count")) is int
    assert len(records) == 2
    assert not any(record.changed for record in records)


def test_listeners_cannot_mutate_stored_values(store):
    conf = Configuration(TextConfigSource("[ a ]\nxs = [1, 2]\n"), store=store)

    def greedy(old, new):
        new.append(99)

    conf.on_change("a", "xs", greedy)
    records = conf.parse_config()
    assert conf.get("a", "xs") == [1, 2]

    records[0].new.append(100)
    conf.get("a", "xs").append(101)
    assert conf.get("a", "xs") == [1, 2]
    assert not any(record.changed for record in conf.parse_config())


def test_encoding_setting(tmp_path: Path):
    path = tmp_path / "app.conf"
    path.write_bytes("[ a ]\nname = 'caf\xe9'\n".encode("latin-1"))

    with pytest.raises(SourceUnreadable):
        Configuration(path).parse_config()

    conf = Configuration(path, settings=ParserSettings(encoding="latin-1"))
    conf.parse_config()
    assert conf.get("a", "name") == "caf\xe9"


def test_encoding_setting_overrides_the_source(tmp_path: Path):
    path = tmp_path / "app.conf"
    path.write_bytes("[ a ]\nname = 'caf\xe9'\n".encode("latin-1"))
    source = FileConfigSource(path)

    conf = Configuration(source, settings=ParserSettings(encoding="latin-1"))
    conf.parse_config()
    assert conf.get("a", "name") == "caf\xe9"
