"""Mode dispatch: validate a declaration and run the synthesizers it needs."""

import logging
from collections.abc import Iterable
from enum import StrEnum, auto

from .fields import extract_fields
from .synthesis import (
    duplicate_keys,
    synthesize_decoder,
    synthesize_encoder,
    synthesize_initializer,
    synthesize_key_mapping,
)
from .types import Conformance, DeclKind, GeneratedArtifact, GenerationMode, TypeDecl

logger = logging.getLogger(__name__)

# Generation markers and the mode each one requests
MODE_MARKERS: dict[str, GenerationMode] = {
    "ClassCodable": GenerationMode.BOTH,
    "ClassEncodable": GenerationMode.ENCODE_ONLY,
    "ClassDecodable": GenerationMode.DECODE_ONLY,
}

CONFORMANCES: dict[GenerationMode, Conformance] = {
    GenerationMode.ENCODE_ONLY: Conformance.ENCODABLE,
    GenerationMode.DECODE_ONLY: Conformance.DECODABLE,
    GenerationMode.BOTH: Conformance.CODABLE,
}

# Value types are rejected even though the generated code would compile for them
RECORD_KINDS = frozenset([DeclKind.CLASS])


class GenerationError(RuntimeError):
    """Raised when code cannot be generated for a declaration."""


class OnlyApplicableToRecordType(GenerationError):
    """Raised when generation is requested for a declaration that is not a class."""

    description = "@ClassCodable can only be applied to classes."

    def __init__(self, name: str, kind: DeclKind):
        super().__init__(self.description)
        self.name = name
        self.kind = kind


class GenerationState(StrEnum):
    VALIDATING = auto()
    EXTRACTING = auto()
    SYNTHESIZING = auto()
    DONE = auto()


def _enter(declaration: TypeDecl, state: GenerationState) -> None:
    logger.debug(f"{declaration.name}: {state}")


def generate(declaration: TypeDecl, mode: GenerationMode) -> GeneratedArtifact:
    """Generate the serialization fragments for a class declaration.

    Raises:
        OnlyApplicableToRecordType: The declaration is not a class.
    """
    _enter(declaration, GenerationState.VALIDATING)
    if declaration.kind not in RECORD_KINDS:
        raise OnlyApplicableToRecordType(declaration.name, declaration.kind)

    _enter(declaration, GenerationState.EXTRACTING)
    fields = extract_fields(declaration.members)

    _enter(declaration, GenerationState.SYNTHESIZING)
    keys = synthesize_key_mapping(fields)
    for key, names in duplicate_keys(keys).items():
        logger.warning(f"{declaration.name}: fields {', '.join(names)} share the key '{key}'")

    initializer = synthesize_initializer(fields)
    encoder = None
    decoder = None
    if mode in (GenerationMode.ENCODE_ONLY, GenerationMode.BOTH):
        encoder = synthesize_encoder(fields, keys)
    if mode in (GenerationMode.DECODE_ONLY, GenerationMode.BOTH):
        decoder = synthesize_decoder(fields, keys)

    artifact = GeneratedArtifact(
        type_name=declaration.name,
        mode=mode,
        fields=tuple(fields),
        key_mapping=keys,
        initializer=initializer,
        encoder=encoder,
        decoder=decoder,
        conformances=(CONFORMANCES[mode],),
    )
    _enter(declaration, GenerationState.DONE)
    return artifact


def mode_for(declaration: TypeDecl) -> GenerationMode | None:
    """Return the mode requested by a declaration's generation marker, if any."""
    for marker in declaration.markers:
        if marker.name in MODE_MARKERS:
            return MODE_MARKERS[marker.name]
    return None


def generate_all(
    declarations: Iterable[TypeDecl], mode: GenerationMode | None = None
) -> list[GeneratedArtifact]:
    """Generate fragments for a sequence of declarations.

    Without an explicit mode only declarations carrying a generation marker
    are processed, each in the mode its marker requests. An explicit mode
    applies to every declaration.
    """
    artifacts: list[GeneratedArtifact] = []
    for declaration in declarations:
        decl_mode = mode or mode_for(declaration)
        if decl_mode is None:
            logger.debug(f"{declaration.name}: no generation marker, skipping")
            continue
        artifacts.append(generate(declaration, decl_mode))
    return artifacts
