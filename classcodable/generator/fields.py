"""Extraction of serializable fields from member declarations."""

import re
from collections.abc import Iterable

from .types import FieldDescriptor, Marker, MemberDecl, MemberKind

CUSTOM_KEY_MARKER = "CustomCodableKey"

# Escape sequences allowed in a string literal
ESCAPES = {
    "0": "\0",
    "\\": "\\",
    "t": "\t",
    "n": "\n",
    "r": "\r",
    '"': '"',
    "'": "'",
}

_ESCAPE_RE = re.compile(r"\\(?:u\{([0-9A-Fa-f]{1,8})\}|(.))")


def _unescape(match: re.Match[str]) -> str:
    if match.group(1) is not None:
        return chr(int(match.group(1), 16))
    return ESCAPES.get(match.group(2), match.group(0))


def _literal_value(text: str) -> str:
    """Return the value of a marker argument literal.

    Quoted string literals are unquoted and unescaped, anything else is
    taken as written.
    """
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return _ESCAPE_RE.sub(_unescape, text[1:-1])
    return text


def override_key(markers: Iterable[Marker]) -> str | None:
    """Find the serialized key override among a member's markers.

    Only a marker carrying exactly one argument counts; the first such
    marker wins.
    """
    for marker in markers:
        if marker.name == CUSTOM_KEY_MARKER and len(marker.arguments) == 1:
            return _literal_value(marker.arguments[0].value)
    return None


def extract_fields(members: Iterable[MemberDecl]) -> list[FieldDescriptor]:
    """Build the ordered field list for a type's members.

    Members that are not annotated stored properties are skipped; the relative
    order of the remaining ones is kept.
    """
    fields: list[FieldDescriptor] = []
    for member in members:
        if member.kind != MemberKind.STORED_PROPERTY:
            continue
        if member.name is None or member.type is None:
            continue
        fields.append(
            FieldDescriptor(
                name=member.name,
                declared_type=member.type,
                default_expression=member.initializer,
                override_key=override_key(member.markers),
            )
        )
    return fields
