"""Project build pipeline: .tc sources -> .ts declaration files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from typecake.ast_nodes import Program
from typecake.config import TypeCakeConfig
from typecake.emitter import Emitter
from typecake.errors import CompileError
from typecake.lexer import Lexer
from typecake.parser import Parser

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of a build or check."""

    ok: bool
    outputs: list[Path] = field(default_factory=list)
    errors: list[CompileError] = field(default_factory=list)
    message: str | None = None


def _source_dir(project_dir: Path, config: TypeCakeConfig) -> Path:
    src_dir = project_dir / config.build.source_dir
    if not src_dir.is_dir():
        src_dir = project_dir
    return src_dir


def _parse_file(path: Path) -> Program:
    source = path.read_text(encoding="utf-8")
    filename = str(path)
    tokens = Lexer(source, filename).lex()
    return Parser(tokens, source, filename).parse()


def build_project(project_dir: Path, config: TypeCakeConfig) -> BuildResult:
    """Compile every .tc file under the source dir into the out dir.

    Output paths mirror the source layout with the suffix replaced by
    ``config.build.extension``. A file that fails to compile is reported
    in ``errors`` and writes nothing; the remaining files still build.
    """
    src_dir = _source_dir(project_dir, config)
    out_dir = project_dir / config.build.out_dir

    tc_files = sorted(src_dir.rglob("*.tc"))
    if not tc_files:
        return BuildResult(ok=False, message="no .tc files found")

    result = BuildResult(ok=True)
    emitter = Emitter()

    for tc_file in tc_files:
        logger.debug("compiling %s", tc_file)
        try:
            program = _parse_file(tc_file)
        except CompileError as e:
            logger.debug("failed to compile %s: %s", tc_file, e)
            result.errors.append(e)
            continue

        target = (out_dir / tc_file.relative_to(src_dir)).with_suffix(config.build.extension)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(emitter.emit(program), encoding="utf-8")
        logger.info("wrote %s", target)
        result.outputs.append(target)

    result.ok = not result.errors
    return result


def check_project(project_dir: Path, config: TypeCakeConfig) -> BuildResult:
    """Lex and parse every .tc file without writing output."""
    tc_files = sorted(_source_dir(project_dir, config).rglob("*.tc"))
    if not tc_files:
        return BuildResult(ok=False, message="no .tc files found")

    result = BuildResult(ok=True)
    for tc_file in tc_files:
        logger.debug("checking %s", tc_file)
        try:
            _parse_file(tc_file)
        except CompileError as e:
            result.errors.append(e)

    result.ok = not result.errors
    return result
