"""TOML config loading for typecake.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "typecake.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class BuildConfig:
    source_dir: str = "src"
    out_dir: str = "types"
    extension: str = ".ts"


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class TypeCakeConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find typecake.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> TypeCakeConfig:
    """Parse a typecake.toml file into a TypeCakeConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = TypeCakeConfig()

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
        )

    if "build" in data:
        bld = data["build"]
        config.build = BuildConfig(
            source_dir=bld.get("source_dir", "src"),
            out_dir=bld.get("out_dir", "types"),
            extension=bld.get("extension", ".ts"),
        )

    if "diagnostics" in data:
        diag = data["diagnostics"]
        config.diagnostics = DiagnosticsConfig(
            color=diag.get("color", True),
        )

    return config
