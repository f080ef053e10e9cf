"""Python code generator for classcodable artifacts."""

import keyword
from importlib import resources

from jinja2 import Environment, PackageLoader

from .types import (
    Conformance,
    DecodeStatement,
    DefaultKind,
    EncodeStatement,
    GeneratedArtifact,
    Initializer,
    Parameter,
    ReadOp,
    TypeKind,
    TypeRef,
    WriteOp,
)

RUNTIME_FILES = [
    "__init__.py",
    "coding.py",
]

env = Environment(
    loader=PackageLoader("classcodable.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Map declared type names to Python type annotations
PRIMITIVE_TYPE_MAP = {
    "Bool": "bool",
    "Int": "int",
    "Int8": "int",
    "Int16": "int",
    "Int32": "int",
    "Int64": "int",
    "UInt": "int",
    "UInt8": "int",
    "UInt16": "int",
    "UInt32": "int",
    "UInt64": "int",
    "Float": "float",
    "Double": "float",
    "String": "str",
    "Character": "str",
    "Data": "bytes",
    "Any": "object",
}

GENERIC_TYPE_MAP = {
    "Array": "list",
    "Set": "set",
    "Dictionary": "dict",
}

# Literal defaults spelled differently in Python
LITERAL_MAP = {
    "nil": "None",
    "true": "True",
    "false": "False",
    "[:]": "{}",
}

ABSENT = "None"

BASE_CLASSES = {
    Conformance.ENCODABLE: "Encodable",
    Conformance.DECODABLE: "Decodable",
    Conformance.CODABLE: "Codable",
}

WRITE_CALLS = {
    WriteOp.WRITE: "encode",
    WriteOp.WRITE_IF_PRESENT: "encode_if_present",
}

READ_CALLS = {
    ReadOp.READ: "decode",
    ReadOp.READ_IF_PRESENT: "decode_if_present",
}


def _py_name(name: str) -> str:
    """Escape names that are Python keywords."""
    return f"{name}_" if keyword.iskeyword(name) else name


def _map_type(t: TypeRef) -> str:
    """Map a declared type to a Python type annotation."""
    if t.kind == TypeKind.ARRAY:
        spelling = f"list[{_map_type(t.arguments[0])}]"
    elif t.kind == TypeKind.DICTIONARY:
        spelling = f"dict[{_map_type(t.arguments[0])}, {_map_type(t.arguments[1])}]"
    elif t.name == "Optional" and len(t.arguments) == 1:
        spelling = f"{_map_type(t.arguments[0])} | None"
    elif t.arguments:
        args = ", ".join(_map_type(a) for a in t.arguments)
        spelling = f"{GENERIC_TYPE_MAP.get(t.name, t.name)}[{args}]"
    else:
        spelling = PRIMITIVE_TYPE_MAP.get(t.name, t.name)

    if t.optional:
        return f"{spelling} | None"
    return spelling


def _map_default(expression: str, t: TypeRef) -> str:
    """Map a declared default expression to Python."""
    if expression.startswith("."):
        # Implicit member expression, e.g. `.active`
        return f"{_map_type(t.unwrapped())}{expression}"
    if t.kind == TypeKind.NAMED and t.name == "Set" and expression.startswith("["):
        # Array literal initializing a set
        return "set()" if expression == "[]" else f"{{{expression[1:-1]}}}"
    return LITERAL_MAP.get(expression, expression)


def _mutable_default(p: Parameter) -> str | None:
    """Return the mapped default when it is a list, dict or set literal."""
    if p.default_kind != DefaultKind.DECLARED:
        return None
    default = _map_default(p.default or "", p.type)
    if default.startswith(("[", "{", "set(")):
        return default
    return None


def _string_literal(value: str) -> str:
    return repr(value)


def _param(p: Parameter) -> str:
    annotation = f"{_py_name(p.name)}: {_map_type(p.type)}"
    if _mutable_default(p) is not None:
        # Built per instance in the body
        if not p.type.optional:
            annotation = f"{annotation} | None"
        return f"{annotation} = {ABSENT}"
    if p.default_kind == DefaultKind.DECLARED:
        return f"{annotation} = {_map_default(p.default or '', p.type)}"
    if p.default_kind == DefaultKind.ABSENT:
        return f"{annotation} = {ABSENT}"
    return annotation


def _params(initializer: Initializer) -> str:
    """Render `__init__` parameters; keyword-only so required ones may follow defaults."""
    if not initializer.parameters:
        return "self"
    return "self, *, " + ", ".join(_param(p) for p in initializer.parameters)


def _assignments(initializer: Initializer) -> list[str]:
    """Render the `__init__` body, one assignment per field."""
    lines = []
    for p, assignment in zip(initializer.parameters, initializer.body):
        source = _py_name(assignment.source)
        default = _mutable_default(p)
        if default is not None:
            source = f"{default} if {source} is None else {source}"
        lines.append(f"self.{_py_name(assignment.target)} = {source}")
    return lines


def _encode(statement: EncodeStatement, keys: str) -> str:
    call = WRITE_CALLS[statement.operation]
    return f"container.{call}(self.{_py_name(statement.field)}, {keys}.{_py_name(statement.key)})"


def _decode(statement: DecodeStatement, keys: str) -> str:
    call = READ_CALLS[statement.operation]
    return f"container.{call}({_map_type(statement.value_type)}, {keys}.{_py_name(statement.key)})"


def _base_class(artifact: GeneratedArtifact) -> str:
    return ", ".join(BASE_CLASSES[c] for c in artifact.conformances)


def _runtime_names(artifacts: list[GeneratedArtifact]) -> list[str]:
    """Collect the runtime names the generated module imports."""
    names: set[str] = set()
    for artifact in artifacts:
        names.update(BASE_CLASSES[c] for c in artifact.conformances)
        if artifact.decoder:
            names.add("Decoder")
        if artifact.encoder:
            names.add("Encoder")
    return sorted(names)


def render(
    artifacts: list[GeneratedArtifact],
    runtime_import: str = "classcodable.runtime",
) -> str:
    """Render artifacts to a Python module."""
    return template.render(
        artifacts=artifacts,
        runtime_import=runtime_import,
        runtime_names=_runtime_names(artifacts),
        base_class=_base_class,
        py_name=_py_name,
        string_literal=_string_literal,
        params=_params,
        assignments=_assignments,
        encode=_encode,
        decode=_decode,
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("classcodable.runtime").joinpath(filename).read_text()
        result[filename] = content
    return result
