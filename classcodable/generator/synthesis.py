"""Synthesis of key mapping, initializer, encoder and decoder fragments.

Every synthesizer walks the same ordered field list, so the key cases,
initializer parameters and encode/decode statements always line up.
"""

from collections.abc import Sequence

from .types import (
    Assignment,
    DecodeFunction,
    DecodeStatement,
    DefaultKind,
    EncodeFunction,
    EncodeStatement,
    FieldDescriptor,
    Initializer,
    KeyCase,
    KeyMappingType,
    Parameter,
    ReadOp,
    WriteOp,
)

CODING_KEYS = "CodingKeys"


def synthesize_key_mapping(
    fields: Sequence[FieldDescriptor], name: str = CODING_KEYS
) -> KeyMappingType:
    """Build the key enumeration, one case per field."""
    return KeyMappingType(
        name=name,
        cases=tuple(
            KeyCase(name=f.name, raw_value=f.serialized_key, custom=f.override_key is not None)
            for f in fields
        ),
    )


def _parameter(f: FieldDescriptor) -> Parameter:
    if f.default_expression is not None:
        return Parameter(
            name=f.name,
            type=f.declared_type,
            default_kind=DefaultKind.DECLARED,
            default=f.default_expression,
        )
    if f.is_optional:
        return Parameter(name=f.name, type=f.declared_type, default_kind=DefaultKind.ABSENT)
    return Parameter(name=f.name, type=f.declared_type, default_kind=DefaultKind.REQUIRED)


def synthesize_initializer(fields: Sequence[FieldDescriptor]) -> Initializer:
    """Build the memberwise initializer."""
    return Initializer(
        parameters=tuple(_parameter(f) for f in fields),
        body=tuple(Assignment(target=f.name, source=f.name) for f in fields),
    )


def synthesize_encoder(
    fields: Sequence[FieldDescriptor], keys: KeyMappingType
) -> EncodeFunction:
    """Build the encode body; optional fields are only written when present."""
    return EncodeFunction(
        keys=keys.name,
        statements=tuple(
            EncodeStatement(
                field=f.name,
                key=f.name,
                operation=WriteOp.WRITE_IF_PRESENT if f.is_optional else WriteOp.WRITE,
            )
            for f in fields
        ),
    )


def synthesize_decoder(
    fields: Sequence[FieldDescriptor], keys: KeyMappingType
) -> DecodeFunction:
    """Build the decode body; optional fields read as absent when missing."""
    return DecodeFunction(
        keys=keys.name,
        statements=tuple(
            DecodeStatement(
                field=f.name,
                key=f.name,
                operation=ReadOp.READ_IF_PRESENT if f.is_optional else ReadOp.READ,
                value_type=f.declared_type.unwrapped(),
            )
            for f in fields
        ),
    )


def duplicate_keys(keys: KeyMappingType) -> dict[str, list[str]]:
    """Return serialized keys shared by more than one case, with the case names."""
    by_key: dict[str, list[str]] = {}
    for case in keys.cases:
        by_key.setdefault(case.raw_value, []).append(case.name)
    return {key: names for key, names in by_key.items() if len(names) > 1}
