"""Type definitions for declaration parsing and code synthesis."""

from dataclasses import dataclass, field, replace
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


class TypeKind(StrEnum):
    """Syntactic shape of a type reference."""

    NAMED = auto()
    ARRAY = auto()
    DICTIONARY = auto()


@dataclass
class TypeRef(DataClassJsonMixin):
    """Represents a type annotation.

    - kind=NAMED: `name` is the (possibly dotted) type name, `arguments` its
      generic arguments
    - kind=ARRAY / DICTIONARY: sugared `[T]` / `[K: V]`, `arguments` holds
      the element (and key) types
    - optional=True: the reference is wrapped as `T?`
    """

    name: str
    arguments: list["TypeRef"] = field(default_factory=list)
    optional: bool = False
    kind: TypeKind = TypeKind.NAMED

    def unwrapped(self) -> "TypeRef":
        """Return this reference without its optional wrapper."""
        return replace(self, optional=False)

    def __str__(self) -> str:
        if self.kind == TypeKind.ARRAY:
            spelling = f"[{self.arguments[0]}]"
        elif self.kind == TypeKind.DICTIONARY:
            spelling = f"[{self.arguments[0]}: {self.arguments[1]}]"
        elif self.arguments:
            spelling = f"{self.name}<{', '.join(str(a) for a in self.arguments)}>"
        else:
            spelling = self.name
        return f"{spelling}?" if self.optional else spelling


@dataclass
class MarkerArg(DataClassJsonMixin):
    """Represents an argument to a marker.

    `value` is the literal text as written, quotes included for strings.
    """

    label: str | None
    value: str


@dataclass
class Marker(DataClassJsonMixin):
    """Represents an attribute attached to a declaration, e.g. `@Name(args)`."""

    name: str
    arguments: list[MarkerArg] = field(default_factory=list)


class MemberKind(StrEnum):
    """Classification of a member declaration."""

    STORED_PROPERTY = auto()
    STATIC_PROPERTY = auto()
    COMPUTED_PROPERTY = auto()
    METHOD = auto()
    INITIALIZER = auto()
    SUBSCRIPT = auto()
    ENUM_CASE = auto()
    TYPE_ALIAS = auto()
    NESTED_TYPE = auto()


@dataclass
class MemberDecl(DataClassJsonMixin):
    """Represents a member of a type declaration."""

    kind: MemberKind
    name: str | None
    type: TypeRef | None = None
    initializer: str | None = None
    markers: list[Marker] = field(default_factory=list)


class DeclKind(StrEnum):
    """Kind of a type declaration."""

    CLASS = auto()
    STRUCT = auto()
    ENUM = auto()
    ACTOR = auto()
    PROTOCOL = auto()
    EXTENSION = auto()


@dataclass
class TypeDecl(DataClassJsonMixin):
    """Represents a type declaration with its members."""

    name: str
    kind: DeclKind
    members: list[MemberDecl] = field(default_factory=list)
    markers: list[Marker] = field(default_factory=list)


@dataclass(frozen=True)
class FieldDescriptor(DataClassJsonMixin):
    """Represents one stored field taking part in serialization."""

    name: str
    declared_type: TypeRef
    default_expression: str | None = None
    override_key: str | None = None

    @property
    def is_optional(self) -> bool:
        return self.declared_type.optional

    @property
    def serialized_key(self) -> str:
        return self.override_key if self.override_key is not None else self.name


class GenerationMode(StrEnum):
    """Which synthesis paths run for a declaration."""

    ENCODE_ONLY = "encode"
    DECODE_ONLY = "decode"
    BOTH = "both"


class Conformance(StrEnum):
    """Serialization capability the host declares for a generated type."""

    ENCODABLE = "Encodable"
    DECODABLE = "Decodable"
    CODABLE = "Codable"


@dataclass(frozen=True)
class KeyCase(DataClassJsonMixin):
    """A case of the key enumeration.

    `custom` is set when the raw value comes from an override key.
    """

    name: str
    raw_value: str
    custom: bool = False


@dataclass(frozen=True)
class KeyMappingType(DataClassJsonMixin):
    """The named key enumeration shared by the encoder and decoder."""

    name: str
    cases: tuple[KeyCase, ...]

    def pairs(self) -> list[tuple[str, str]]:
        """Return the ordered (field name, serialized key) pairs."""
        return [(case.name, case.raw_value) for case in self.cases]


class DefaultKind(StrEnum):
    """How an initializer parameter gets its default."""

    DECLARED = auto()  # default expression from the declaration
    ABSENT = auto()  # optional field, defaults to the absent value
    REQUIRED = auto()  # no default


@dataclass(frozen=True)
class Parameter(DataClassJsonMixin):
    """An initializer parameter."""

    name: str
    type: TypeRef
    default_kind: DefaultKind
    default: str | None = None

    @property
    def required(self) -> bool:
        return self.default_kind == DefaultKind.REQUIRED


@dataclass(frozen=True)
class Assignment(DataClassJsonMixin):
    """Assigns an initializer parameter to a stored field."""

    target: str
    source: str


@dataclass(frozen=True)
class Initializer(DataClassJsonMixin):
    """A memberwise initializer."""

    parameters: tuple[Parameter, ...]
    body: tuple[Assignment, ...]


class WriteOp(StrEnum):
    WRITE = auto()
    WRITE_IF_PRESENT = auto()


@dataclass(frozen=True)
class EncodeStatement(DataClassJsonMixin):
    """Writes one field to the keyed output sink."""

    field: str
    key: str
    operation: WriteOp


@dataclass(frozen=True)
class EncodeFunction(DataClassJsonMixin):
    """Field-by-field serialization body addressed by the `keys` enumeration."""

    keys: str
    statements: tuple[EncodeStatement, ...]


class ReadOp(StrEnum):
    READ = auto()
    READ_IF_PRESENT = auto()


@dataclass(frozen=True)
class DecodeStatement(DataClassJsonMixin):
    """Reads one field from the keyed input source.

    `value_type` is the field type without its optional wrapper.
    """

    field: str
    key: str
    operation: ReadOp
    value_type: TypeRef


@dataclass(frozen=True)
class DecodeFunction(DataClassJsonMixin):
    """Field-by-field deserialization body addressed by the `keys` enumeration."""

    keys: str
    statements: tuple[DecodeStatement, ...]


@dataclass(frozen=True)
class GeneratedArtifact(DataClassJsonMixin):
    """Generated fragments for one declaration, ready to be rendered."""

    type_name: str
    mode: GenerationMode
    fields: tuple[FieldDescriptor, ...]
    key_mapping: KeyMappingType | None = None
    initializer: Initializer | None = None
    encoder: EncodeFunction | None = None
    decoder: DecodeFunction | None = None
    conformances: tuple[Conformance, ...] = ()

    @property
    def fragments(self) -> tuple[KeyMappingType | Initializer | EncodeFunction | DecodeFunction, ...]:
        """Return the present fragments in splice order."""
        parts = (self.key_mapping, self.initializer, self.encoder, self.decoder)
        return tuple(part for part in parts if part is not None)
