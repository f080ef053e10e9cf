"""Swift code generator for classcodable artifacts."""

from jinja2 import Environment, PackageLoader

from .types import (
    DecodeStatement,
    DefaultKind,
    EncodeStatement,
    GeneratedArtifact,
    Initializer,
    KeyCase,
    Parameter,
    ReadOp,
    WriteOp,
)

env = Environment(
    loader=PackageLoader("classcodable.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("swift.j2")

ABSENT = "nil"

WRITE_CALLS = {
    WriteOp.WRITE: "encode",
    WriteOp.WRITE_IF_PRESENT: "encodeIfPresent",
}

READ_CALLS = {
    ReadOp.READ: "decode",
    ReadOp.READ_IF_PRESENT: "decodeIfPresent",
}


ESCAPES = {
    "\0": "\\0",
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    '"': '\\"',
}


def _escape(char: str) -> str:
    if char in ESCAPES:
        return ESCAPES[char]
    if not char.isprintable():
        return f"\\u{{{ord(char):x}}}"
    return char


def _string_literal(value: str) -> str:
    return '"' + "".join(_escape(c) for c in value) + '"'


def _key_case(case: KeyCase) -> str:
    if case.custom:
        return f"case {case.name} = {_string_literal(case.raw_value)}"
    return f"case {case.name}"


def _param(p: Parameter) -> str:
    if p.default_kind == DefaultKind.DECLARED:
        return f"{p.name}: {p.type} = {p.default}"
    if p.default_kind == DefaultKind.ABSENT:
        return f"{p.name}: {p.type} = {ABSENT}"
    return f"{p.name}: {p.type}"


def _params(initializer: Initializer) -> str:
    return ", ".join(_param(p) for p in initializer.parameters)


def _encode(statement: EncodeStatement) -> str:
    call = WRITE_CALLS[statement.operation]
    return f"try container.{call}({statement.field}, forKey: .{statement.key})"


def _decode(statement: DecodeStatement) -> str:
    call = READ_CALLS[statement.operation]
    return (
        f"{statement.field} = try container.{call}"
        f"({statement.value_type}.self, forKey: .{statement.key})"
    )


def render(artifacts: list[GeneratedArtifact]) -> str:
    """Render artifacts to Swift members and conformance extensions."""
    return template.render(
        artifacts=artifacts,
        key_case=_key_case,
        params=_params,
        encode=_encode,
        decode=_decode,
    )
