import pytest

from access_gate.core.errors import ParseError, ScopeMismatchError
from access_gate.services.decoder import (
    Bare,
    BarePlusContact,
    JsonPayload,
    ThreePart,
    TwoPart,
    decode_scan,
    names_differ,
)
from tests.fakes import EVENT


def test_three_part_code_yields_name_and_identifier():
    decoded = decode_scan("Ana Ruiz/12345678A/ana@example.com", EVENT)

    assert isinstance(decoded, ThreePart)
    assert decoded.identifier == "12345678A"
    assert decoded.name == "Ana Ruiz"
    assert decoded.contact == "ana@example.com"


def test_two_part_code_for_active_event():
    decoded = decode_scan(f"{EVENT}/12345678A", EVENT)

    assert isinstance(decoded, TwoPart)
    assert decoded.identifier == "12345678A"
    assert decoded.event_scope == EVENT
    assert decoded.name is None


def test_two_part_code_is_never_read_as_name_and_identifier():
    with pytest.raises(ScopeMismatchError) as exc_info:
        decode_scan("abc/12345678A", EVENT)

    assert exc_info.value.expected == EVENT
    assert exc_info.value.received == "abc"
    assert EVENT in exc_info.value.message
    assert "abc" in exc_info.value.message


def test_two_part_code_without_active_event():
    with pytest.raises(ScopeMismatchError) as exc_info:
        decode_scan(f"{EVENT}/12345678A", "")

    assert "No active event" in exc_info.value.message


@pytest.mark.parametrize("raw", ["a/b/c/d", "x/y/z/w/v"])
def test_too_many_slashes_is_a_parse_error(raw):
    with pytest.raises(ParseError):
        decode_scan(raw, EVENT)


def test_three_part_code_with_blank_identifier():
    with pytest.raises(ParseError):
        decode_scan("Ana Ruiz/ /ana@example.com", EVENT)


def test_json_code():
    decoded = decode_scan('{"identifier": " 12345678a ", "name": " Ana Ruiz "}', EVENT)

    assert isinstance(decoded, JsonPayload)
    assert decoded.identifier == "12345678A"
    assert decoded.name == "Ana Ruiz"


def test_json_code_accepts_legacy_keys():
    decoded = decode_scan('{"dni": "12345678A", "nombre": "Ana Ruiz"}', EVENT)

    assert decoded.identifier == "12345678A"
    assert decoded.name == "Ana Ruiz"


def test_json_with_slash_in_name_is_still_json():
    decoded = decode_scan('{"identifier": "12345678A", "name": "Ana/Ruiz"}', EVENT)

    assert isinstance(decoded, JsonPayload)


@pytest.mark.parametrize(
    "raw",
    [
        '{"identifier": "12345678A"',
        '{"identifier": "12345678A"}',
        '{"identifier": "", "name": "Ana"}',
        '{"identifier": 12345678, "name": "Ana"}',
        '["12345678A", "Ana"]',
    ],
)
def test_bad_json_codes_are_parse_errors(raw):
    with pytest.raises(ParseError) as exc_info:
        decode_scan(raw, EVENT)

    assert "identifier" in exc_info.value.message


def test_bare_identifier_is_case_insensitive():
    decoded = decode_scan("  x1234567b ", EVENT)

    assert isinstance(decoded, Bare)
    assert decoded.identifier == "X1234567B"


@pytest.mark.parametrize("raw", ["1234567A", "123456789", "12345678AB", "ANA-RUIZ"])
def test_bare_identifier_must_match_pattern(raw):
    with pytest.raises(ParseError) as exc_info:
        decode_scan(raw, EVENT)

    assert "Invalid identifier format" in exc_info.value.message


def test_identifier_with_contact_suffix():
    decoded = decode_scan("12345678A+ana@example.com+extra", EVENT)

    assert isinstance(decoded, BarePlusContact)
    assert decoded.identifier == "12345678A"
    assert decoded.contact == "ana@example.com+extra"


def test_identifier_with_contact_suffix_is_validated():
    with pytest.raises(ParseError):
        decode_scan("nope+ana@example.com", EVENT)


def test_empty_code():
    with pytest.raises(ParseError):
        decode_scan("   ", EVENT)


def test_name_comparison_is_loose():
    assert not names_differ(" ana ruiz ", "Ana Ruiz")
    assert names_differ("Ana Ruis", "Ana Ruiz")
    assert not names_differ(None, "Ana Ruiz")
