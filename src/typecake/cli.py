"""TypeCake compiler CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from typecake import __version__
from typecake.config import CONFIG_NAME, find_config, load_config
from typecake.emitter import Emitter
from typecake.errors import CompileError, DiagnosticRenderer
from typecake.lexer import Lexer
from typecake.parser import Parser
from typecake.project import scaffold

logger = logging.getLogger(__name__)


def _read_source(file: str) -> tuple[str, str]:
    """Return ``(source, filename)`` for a path, or stdin for ``-``."""
    if file == "-":
        return sys.stdin.read(), "<stdin>"
    return Path(file).read_text(encoding="utf-8"), file


def _report(errors: list[CompileError], *, color: bool) -> None:
    renderer = DiagnosticRenderer(color=color)
    for error in errors:
        click.echo(renderer.render(error), err=True)


@click.group()
@click.version_option(__version__, prog_name="typecake")
@click.option("-v", "--verbose", is_flag=True, help="Log compiler progress.")
def main(verbose: bool) -> None:
    """The TypeCake compiler: functional type programs to TypeScript types."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command(name="compile")
@click.argument("file", default="-", type=click.Path(allow_dash=True))
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write output to a file.")
@click.option("--color/--no-color", default=False, help="Highlight the emitted TypeScript.")
def compile_cmd(file: str, output: str | None, color: bool) -> None:
    """Compile a single TypeCake file (stdin by default)."""
    try:
        source, filename = _read_source(file)
    except OSError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    logger.debug("compiling %s", filename)
    try:
        tokens = Lexer(source, filename).lex()
        program = Parser(tokens, source, filename).parse()
    except CompileError as e:
        _report([e], color=color)
        raise SystemExit(1)

    text = Emitter().emit(program)

    if output is not None:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"wrote {output}")
        return

    if color:
        from typecake.highlight import highlight_output

        text = highlight_output(text)
    click.echo(text, nl=False, color=color)


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def build(path: str) -> None:
    """Compile a TypeCake project."""
    from typecake.builder import build_project

    try:
        config_path = find_config(Path(path))
    except FileNotFoundError:
        click.echo(f"error: no {CONFIG_NAME} found", err=True)
        raise SystemExit(1)

    config = load_config(config_path)
    click.echo(f"building {config.package.name}...")
    result = build_project(config_path.parent, config)
    _report(result.errors, color=config.diagnostics.color)

    if not result.ok:
        if result.message:
            click.echo(f"error: {result.message}", err=True)
        raise SystemExit(1)

    click.echo(f"built {config.package.name} -> {len(result.outputs)} file(s)")


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Parse a TypeCake project without writing output."""
    from typecake.builder import check_project

    try:
        config_path = find_config(Path(path))
    except FileNotFoundError:
        click.echo(f"error: no {CONFIG_NAME} found", err=True)
        raise SystemExit(1)

    config = load_config(config_path)
    click.echo(f"checking {config.package.name}...")
    result = check_project(config_path.parent, config)
    _report(result.errors, color=config.diagnostics.color)

    if not result.ok:
        if result.message:
            click.echo(f"error: {result.message}", err=True)
        raise SystemExit(1)

    click.echo(f"checked {config.package.name}, no errors")


@main.command()
@click.argument("name")
def new(name: str) -> None:
    """Create a new TypeCake project."""
    try:
        project_dir = scaffold(name)
        click.echo(f"created project '{name}' at {project_dir}")
    except FileExistsError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--color/--no-color", default=True, help="Color the error diagnostics.")
def view(file: str, color: bool) -> None:
    """View the AST of a TypeCake source file."""
    source = Path(file).read_text(encoding="utf-8")
    filename = str(file)

    try:
        tokens = Lexer(source, filename).lex()
        program = Parser(tokens, source, filename).parse()
    except CompileError as e:
        _report([e], color=color)
        raise SystemExit(1)

    _dump_ast(program, 0)


def _dump_ast(node: object, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__"):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        click.echo(f"{indent}{name} @ {node.span}")  # type: ignore[union-attr]
        for field_name in fields:
            if field_name in ("start", "end", "span"):
                continue
            value = getattr(node, field_name)
            if isinstance(value, list):
                if value:
                    click.echo(f"{indent}  {field_name}:")
                    for item in value:
                        _dump_ast(item, depth + 2)
                else:
                    click.echo(f"{indent}  {field_name}: []")
            elif hasattr(value, "__dataclass_fields__"):
                click.echo(f"{indent}  {field_name}:")
                _dump_ast(value, depth + 2)
            elif value is not None:
                click.echo(f"{indent}  {field_name}: {value!r}")
    else:
        click.echo(f"{indent}{name}: {node!r}")
