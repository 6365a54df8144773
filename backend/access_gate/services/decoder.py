"""
Scanned code decoder.

Turns the raw text read from a printed or on-screen code into a decoded
identifier. Supported shapes, picked by structural cue (never by trying
each parser in turn):

    {"identifier": "12345678A", "name": "Ana Ruiz"}   JSON object
    Ana Ruiz/12345678A/ana@example.com                name/identifier/contact
    congress-2025/12345678A                           event/identifier
    12345678A+ana@example.com                         identifier+contact
    12345678A                                         bare identifier

Decoding is pure: it never touches storage.
"""
import json
import re
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from access_gate.core.errors import ParseError, ScopeMismatchError

IDENTIFIER_PATTERN = re.compile(r"^[0-9A-Z][0-9]{7}[A-Z]$", re.IGNORECASE)

JSON_EXAMPLE = '{"identifier":"12345678A","name":"Full Name"}'


@dataclass(frozen=True)
class ThreePart:
    identifier: str
    name: str
    contact: str
    event_scope: Optional[str] = None


@dataclass(frozen=True)
class TwoPart:
    event_scope: str
    identifier: str
    name: Optional[str] = None


@dataclass(frozen=True)
class JsonPayload:
    identifier: str
    name: str
    event_scope: Optional[str] = None


@dataclass(frozen=True)
class Bare:
    identifier: str
    name: Optional[str] = None
    event_scope: Optional[str] = None


@dataclass(frozen=True)
class BarePlusContact:
    identifier: str
    contact: str
    name: Optional[str] = None
    event_scope: Optional[str] = None


DecodedCode = Union[ThreePart, TwoPart, JsonPayload, Bare, BarePlusContact]


class _QRPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    identifier: str = Field(min_length=1, validation_alias=AliasChoices("identifier", "dni"))
    name: str = Field(min_length=1, validation_alias=AliasChoices("name", "nombre"))


def normalize_identifier(value: str) -> str:
    return value.strip().upper()


def _require_identifier(value: str, content: str) -> str:
    identifier = normalize_identifier(value)
    if not identifier:
        raise ParseError(f"Invalid code: no identifier found in '{content}'")
    return identifier


def _check_identifier_format(identifier: str) -> str:
    if not IDENTIFIER_PATTERN.match(identifier):
        raise ParseError(
            f"Invalid identifier format: {identifier}\n\n"
            f"Expected 8 characters (a letter or digit followed by 7 digits) and a final letter."
        )
    return identifier


def _decode_json(content: str) -> JsonPayload:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Malformed JSON code.\n\nContent:\n{content}\n\n"
            f"Expected format:\n{JSON_EXAMPLE}\n\nError: {e.msg}"
        ) from e

    if not isinstance(data, dict):
        raise ParseError(f"Invalid JSON code: expected an object like {JSON_EXAMPLE}")

    try:
        payload = _QRPayload.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ParseError(
            f"Invalid JSON code: 'identifier' and 'name' must be non-empty strings"
            f" (problem with: {fields or 'payload'}).\n\nExpected format:\n{JSON_EXAMPLE}"
        ) from e

    return JsonPayload(identifier=normalize_identifier(payload.identifier), name=payload.name)


def _decode_slashed(content: str, event_scope: Optional[str]) -> Union[ThreePart, TwoPart]:
    parts = content.split("/")

    if len(parts) == 3:
        name, identifier, contact = (p.strip() for p in parts)
        return ThreePart(
            identifier=_require_identifier(identifier, content),
            name=name,
            contact=contact,
        )

    if len(parts) == 2:
        code_scope, identifier = (p.strip() for p in parts)
        if not event_scope or code_scope != event_scope:
            raise ScopeMismatchError(expected=event_scope, received=code_scope)
        return TwoPart(event_scope=code_scope, identifier=_require_identifier(identifier, content))

    raise ParseError(f"Unsupported code format: expected 2 or 3 '/'-separated fields, got {len(parts)}")


def decode_scan(raw: str, event_scope: Optional[str]) -> DecodedCode:
    """Classify ``raw`` and extract its identifier.

    ``event_scope`` is the active event token, checked against
    event/identifier codes. Raises ParseError or ScopeMismatchError.
    """
    content = (raw or "").strip()
    if not content:
        raise ParseError("Empty code: nothing was read")

    if content.startswith("{") or content.startswith("["):
        return _decode_json(content)

    if "/" in content:
        return _decode_slashed(content, event_scope)

    if "+" in content:
        identifier, contact = content.split("+", 1)
        identifier = _check_identifier_format(_require_identifier(identifier, content))
        return BarePlusContact(identifier=identifier, contact=contact.strip())

    return Bare(identifier=_check_identifier_format(normalize_identifier(content)))


def names_differ(decoded_name: Optional[str], stored_name: Optional[str]) -> bool:
    """Loose comparison of the name printed on a code with the stored one"""
    if not decoded_name or stored_name is None:
        return False
    return decoded_name.strip().lower() != stored_name.strip().lower()
