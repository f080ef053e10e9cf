"""Command-line interface for classcodable code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from lark.exceptions import UnexpectedInput
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from classcodable.generator import parse, python, swift
from classcodable.generator.dispatch import GenerationError, generate_all
from classcodable.generator.parser import ValidationError
from classcodable.generator.types import DefaultKind, GenerationMode, TypeDecl

if TYPE_CHECKING:
    from classcodable.generator.types import GeneratedArtifact

logger = logging.getLogger(__name__)

MODE_CHOICES = ["auto", *(m.value for m in GenerationMode)]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_declarations(input_file: str) -> list[TypeDecl]:
    """Read declarations from a declaration file or a JSON list of declarations."""
    with open(input_file, encoding="utf-8") as f:
        text = f.read()

    if Path(input_file).suffix == ".json":
        return [TypeDecl.from_dict(d) for d in json.loads(text)]
    return parse(text)


def _generate(input_file: str, mode: str) -> list[GeneratedArtifact]:
    """Load declarations and generate artifacts, exiting on invalid input."""
    try:
        declarations = _load_declarations(input_file)
        logger.debug(f"Loaded {len(declarations)} declarations from {input_file}")
        return generate_all(declarations, None if mode == "auto" else GenerationMode(mode))
    except (UnexpectedInput, ValidationError, GenerationError) as e:
        print(f"error: {e}")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """classcodable keyed serialization code generator."""
    _configure_logging(verbose)


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (swift, python)")
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--mode",
    "-m",
    type=click.Choice(MODE_CHOICES),
    default="auto",
    help="Generation mode. auto=use each declaration's marker",
)
@click.option(
    "--runtime-import",
    "runtime_import",
    is_flag=False,
    flag_value="classcodable.runtime",
    default=None,
    help="Import path for runtime. No value=classcodable.runtime, omit=classcodable_runtime",
)
def gen(
    language: str, input_file: str, output_file: str, mode: str, runtime_import: str | None
) -> None:
    """Generate serialization code from a declaration file."""
    if language not in ("swift", "python"):
        print(f"Unknown language: {language}")
        sys.exit(1)

    artifacts = _generate(input_file, mode)

    if language == "python":
        # Default to "classcodable_runtime" (vendored runtime) if not specified
        import_path = runtime_import if runtime_import is not None else "classcodable_runtime"
        generated_file = python.render(artifacts, runtime_import=import_path)
    else:
        generated_file = swift.render(artifacts)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="classcodable_runtime", help="Runtime folder name")
def runtime(output_path: str, name: str) -> None:
    """Generate the Python runtime support package."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
@click.option("--mode", "-m", type=click.Choice(MODE_CHOICES), default="auto")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, mode: str, output_json: bool) -> None:
    """Display the fields and keys of each generated type."""
    artifacts = _generate(input_file, mode)

    if output_json:
        _output_json(artifacts)
    else:
        _output_plain(artifacts)


def _output_json(artifacts: list[GeneratedArtifact]) -> None:
    """Output artifacts as JSON."""
    data = [json.loads(artifact.to_json()) for artifact in artifacts]
    print(json.dumps(data, indent=2))


def _format_default(artifact: GeneratedArtifact, index: int) -> str:
    assert artifact.initializer is not None
    param = artifact.initializer.parameters[index]
    if param.default_kind == DefaultKind.DECLARED:
        return param.default or ""
    if param.default_kind == DefaultKind.ABSENT:
        return "(absent)"
    return ""


def _output_plain(artifacts: list[GeneratedArtifact]) -> None:
    """Output artifact info using rich text formatting."""
    console = Console()

    if not artifacts:
        console.print("[dim]No declarations to generate[/dim]")
        return

    for artifact in artifacts:
        conformances = ", ".join(artifact.conformances)
        console.print(f"[bold cyan]{artifact.type_name}[/bold cyan] [dim]({conformances})[/dim]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Field", style="white")
        table.add_column("Type", style="yellow")
        table.add_column("Key", style="green")
        table.add_column("Default", style="dim")
        table.add_column("Optional", style="dim")

        for index, field in enumerate(artifact.fields):
            key = field.serialized_key
            if field.override_key is not None:
                key = f"{key} (custom)"
            table.add_row(
                field.name,
                escape(str(field.declared_type)),
                escape(key),
                escape(_format_default(artifact, index)),
                "yes" if field.is_optional else "",
            )

        console.print(table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
