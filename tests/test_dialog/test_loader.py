import json
import pytest

from cutscene.dialog.errors import ParseError
from cutscene.dialog.loader import (
    parse_sequence,
    load_sequences,
    load_synced_sequences,
    dump_sequences,
    payload_text,
)


def test_parse_valid_payload(intro_payload):
    seq = parse_sequence(intro_payload)

    assert seq.id == "intro"
    assert [e.id for e in seq.entries] == ["greet", "ask", "yes", "no"]
    ask = seq.find_entry("ask")
    assert ask.options[0].target_id == "yes"
    assert ask.options[0].command == "/give @p bread"
    assert ask.options[2].target_id is None


def test_parse_bytes_and_dict(intro_payload):
    assert parse_sequence(intro_payload.encode("utf-8")).id == "intro"
    assert parse_sequence(json.loads(intro_payload)).id == "intro"


def test_unknown_keys_ignored():
    seq = parse_sequence({"id": "x", "version": 2, "entries": [{"id": "a", "mood": "happy"}]})
    assert seq.find_entry("a") is not None


@pytest.mark.parametrize("payload", [
    "{not json",
    "[1, 2, 3]",
    json.dumps({"entries": []}),
    json.dumps({"id": None}),
    json.dumps({"id": "x", "entries": [{"id": "a", "options": [{"targetId": "b"}]}]}),
    json.dumps({"id": "x", "entries": [{"id": "a"}, {"id": "a"}]}),
    b"\xff\xfe",
])
def test_parse_errors(payload):
    with pytest.raises(ParseError) as info:
        parse_sequence(payload, "broken.json")

    assert info.value.subject_id == "broken.json"
    assert info.value.payload == payload


def test_parse_error_keeps_cause():
    with pytest.raises(ParseError) as info:
        parse_sequence("{oops")
    assert isinstance(info.value.__cause__, json.JSONDecodeError)


def test_batch_load_skips_failures(payload_factory):
    payloads = [
        payload_factory("A", ["a1"]),
        "{malformed",
        payload_factory("C", ["c1", "c2"]),
    ]

    result = load_sequences(payloads)

    assert set(result.sequences) == {"A", "C"}
    assert result.loaded == 2
    assert result.failed == 1
    source, error = result.failures[0]
    assert source == "#1"
    assert isinstance(error, ParseError)


def test_batch_load_survives_deeply_nested_payload(payload_factory):
    payloads = [
        payload_factory("A", ["a1"]),
        "[" * 100000,
        payload_factory("C", ["c1"]),
    ]

    result = load_sequences(payloads)

    assert set(result.sequences) == {"A", "C"}
    assert result.failed == 1
    _, error = result.failures[0]
    assert isinstance(error.__cause__, RecursionError)


def test_synced_load_survives_deeply_nested_payload(payload_factory):
    result = load_synced_sequences({
        "deep": "{\"id\": " + "[" * 100000,
        "ok": payload_factory("ok", ["a"]),
    })

    assert set(result.sequences) == {"ok"}
    assert [source for source, _ in result.failures] == ["deep"]


def test_batch_load_empty():
    result = load_sequences([])

    assert result.sequences == {}
    assert result.loaded == 0
    assert result.failures == []


def test_payload_text_deeply_nested_mapping():
    nested = {}
    for _ in range(100000):
        nested = {"x": nested}

    assert payload_text(nested) == "<dict nested too deeply>"


def test_batch_load_keeps_empty_sequences(payload_factory):
    result = load_sequences([payload_factory("quiet", [])])

    assert result.sequences["quiet"].is_empty
    assert result.failed == 0


def test_batch_load_later_duplicate_wins(payload_factory):
    result = load_sequences([payload_factory("A", ["first"]), payload_factory("A", ["second"])])

    assert result.sequences["A"].first_entry.id == "second"


def test_synced_load_uses_key_as_id(payload_factory):
    result = load_synced_sequences({
        "intro": payload_factory("intro", ["a"]),
        "alias": payload_factory("real_id", ["b"]),
        "bad": "nope",
    })

    assert set(result.sequences) == {"intro", "alias"}
    assert result.sequences["alias"].id == "real_id"
    assert result.mismatches == [("alias", "real_id")]
    assert [source for source, _ in result.failures] == ["bad"]


def test_dump_sequences_round_trips(intro_payload):
    seq = parse_sequence(intro_payload)
    seq.entries[1].selected_option_text = "Sure"

    dumped = dump_sequences({"intro": seq})
    data = json.loads(dumped["intro"])

    assert data["entries"][1]["options"][0]["targetId"] == "yes"
    assert "selectedOptionText" not in data["entries"][1]
    assert "targetId" not in data["entries"][1]["options"][2]
    assert parse_sequence(dumped["intro"]) == parse_sequence(intro_payload)


def test_payload_text():
    assert payload_text(b"abc") == "abc"
    assert payload_text("abc") == "abc"
    assert payload_text({"id": "x"}) == '{"id": "x"}'
