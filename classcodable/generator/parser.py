"""Declaration parser using Lark."""

import os
import re
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from .types import (
    DeclKind,
    Marker,
    MarkerArg,
    MemberDecl,
    MemberKind,
    TypeDecl,
    TypeKind,
    TypeRef,
)

_g_parser: Lark | None = None

# An accessor block made of these observers keeps a property stored
OBSERVERS = re.compile(r"\s*(?:willSet|didSet)\b")


class ValidationError(RuntimeError):
    """Raised when declaration validation fails."""


@dataclass
class _Name:
    value: str


@dataclass
class _Literal:
    value: str


@dataclass
class _Modifier:
    value: str


@dataclass
class _Attrs:
    markers: list[Marker]
    modifiers: list[str]


@dataclass
class _Body:
    text: str


@dataclass
class _Default:
    value: str


@dataclass
class _TypeAnnotation:
    value: TypeRef


@dataclass
class _GenericArgs:
    value: list[TypeRef]


@dataclass
class _TypeBody:
    kind: DeclKind
    name: str
    members: list[MemberDecl]


@dataclass
class _Import:
    path: str


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


def _tokens(args: list[Any], token_type: str) -> list[str]:
    return [str(v) for v in args if isinstance(v, Token) and v.type == token_type]


class TreeTransformer(Transformer):
    """Transform parse tree into declaration types."""

    def start(self, args: list[Any]) -> list[TypeDecl]:
        return _filter(args, TypeDecl)

    def import_decl(self, args: list[Any]) -> _Import:
        return _Import(path=".".join(_tokens(args, "NAME")))

    def type_decl(self, args: list[Any]) -> TypeDecl:
        attrs: _Attrs = args[0]
        body: _TypeBody = args[1]
        return TypeDecl(
            name=body.name,
            kind=body.kind,
            members=body.members,
            markers=attrs.markers,
        )

    def type_body(self, args: list[Any]) -> _TypeBody:
        return _TypeBody(
            kind=_filter(args, DeclKind)[0],
            name=_find_one(args, _Name),
            members=_find_one(args, list),
        )

    def decl_kind(self, args: list[Any]) -> DeclKind:
        return DeclKind(str(args[0]))

    def member_block(self, args: list[Any]) -> list[MemberDecl]:
        return _filter(args, MemberDecl)

    def member(self, args: list[Any]) -> MemberDecl:
        attrs: _Attrs = args[0]
        decl = args[1]
        if isinstance(decl, _TypeBody):
            return MemberDecl(kind=MemberKind.NESTED_TYPE, name=decl.name, markers=attrs.markers)

        decl.markers = attrs.markers
        if "static" in attrs.modifiers and decl.kind in (
            MemberKind.STORED_PROPERTY,
            MemberKind.COMPUTED_PROPERTY,
        ):
            decl.kind = MemberKind.STATIC_PROPERTY
        return decl

    def attrs(self, args: list[Any]) -> _Attrs:
        return _Attrs(
            markers=_filter(args, Marker),
            modifiers=[m.value for m in _filter(args, _Modifier)],
        )

    def marker(self, args: list[Any]) -> Marker:
        arguments = _find_one(args, list)
        return Marker(name=str(args[0]), arguments=arguments or [])

    def marker_args(self, args: list[Any]) -> list[MarkerArg]:
        return _filter(args, MarkerArg)

    def marker_arg(self, args: list[Any]) -> MarkerArg:
        label = _tokens(args, "NAME")
        return MarkerArg(label=label[0] if label else None, value=_find_one(args, _Literal))

    def literal(self, args: list[Any]) -> _Literal:
        return _Literal(value=str(args[0]))

    def member_literal(self, args: list[Any]) -> _Literal:
        return _Literal(value=f".{args[0]}")

    def modifier(self, args: list[Any]) -> _Modifier:
        return _Modifier(value=str(args[0]))

    def property(self, args: list[Any]) -> MemberDecl:
        type_ = _find_one(args, _TypeAnnotation)
        default = _find_one(args, _Default)
        body = _find_one(args, _Body)

        kind = MemberKind.STORED_PROPERTY
        if body is not None and default is None and not OBSERVERS.match(body.text):
            kind = MemberKind.COMPUTED_PROPERTY

        return MemberDecl(
            kind=kind,
            name=_find_one(args, _Name),
            type=type_,
            initializer=default,
        )

    def type_annotation(self, args: list[Any]) -> _TypeAnnotation:
        return _TypeAnnotation(value=args[0])

    def default_value(self, args: list[Any]) -> _Default:
        return _Default(value=str(args[0]).strip())

    def function(self, args: list[Any]) -> MemberDecl:
        return MemberDecl(kind=MemberKind.METHOD, name=_tokens(args, "NAME")[0])

    def initializer(self, args: list[Any]) -> MemberDecl:
        return MemberDecl(kind=MemberKind.INITIALIZER, name="init")

    def deinitializer(self, args: list[Any]) -> MemberDecl:
        return MemberDecl(kind=MemberKind.METHOD, name="deinit")

    def subscript(self, args: list[Any]) -> MemberDecl:
        return MemberDecl(kind=MemberKind.SUBSCRIPT, name="subscript")

    def enum_case(self, args: list[Any]) -> MemberDecl:
        return MemberDecl(kind=MemberKind.ENUM_CASE, name=str(args[0]).strip())

    def type_alias(self, args: list[Any]) -> MemberDecl:
        return MemberDecl(kind=MemberKind.TYPE_ALIAS, name=_find_one(args, _Name))

    def associated_type(self, args: list[Any]) -> MemberDecl:
        return MemberDecl(kind=MemberKind.TYPE_ALIAS, name=_find_one(args, _Name))

    def name(self, args: list[Any]) -> _Name:
        return _Name(value=str(args[0]))

    def body(self, args: list[Any]) -> _Body:
        parts = [a.text if isinstance(a, _Body) else str(a) for a in args]
        return _Body(text=" ".join(parts))

    def inner_body(self, args: list[Any]) -> _Body:
        return self.body(args)

    def type(self, args: list[Any]) -> TypeRef:
        base: TypeRef = args[0]
        if len(args) > 1:
            base.optional = True
        return base

    def named_type(self, args: list[Any]) -> TypeRef:
        return TypeRef(
            name=".".join(_tokens(args, "NAME")),
            arguments=_find_one(args, _GenericArgs) or [],
        )

    def generic_args(self, args: list[Any]) -> _GenericArgs:
        return _GenericArgs(value=_filter(args, TypeRef))

    def array_type(self, args: list[Any]) -> TypeRef:
        return TypeRef(name="Array", arguments=[args[0]], kind=TypeKind.ARRAY)

    def dict_type(self, args: list[Any]) -> TypeRef:
        return TypeRef(name="Dictionary", arguments=[args[0], args[1]], kind=TypeKind.DICTIONARY)


def validate(declarations: list[TypeDecl]) -> None:
    """Validate parsed declarations."""
    seen: set[str] = set()
    for decl in declarations:
        if decl.kind == DeclKind.EXTENSION:
            continue
        if decl.name in seen:
            raise ValidationError(f"{decl.name} declared more than once")
        seen.add(decl.name)


def parse(text: str) -> list[TypeDecl]:
    """Parse a declaration file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/decl.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr")

    tree = _g_parser.parse(text)
    declarations = TreeTransformer().transform(tree)

    validate(declarations)

    return declarations
