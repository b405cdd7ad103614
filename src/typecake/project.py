"""Project scaffolding for `typecake new`."""

from __future__ import annotations

from pathlib import Path

_TYPECAKE_TOML_TEMPLATE = """\
[package]
name = "{name}"
version = "0.1.0"

[build]
source_dir = "src"
out_dir = "types"
extension = ".ts"

[diagnostics]
color = true
"""

_MAIN_TC_TEMPLATE = """\
// First element of a tuple, or never for an empty one.
fn First(xs: unknown[]) = switch xs {{
  [&head, ...&_] -> head,
  &_ -> never,
}}

fn Greeting(name: string) = `Hello, ${{name}}!`
"""

_GITIGNORE = """\
types/
__pycache__/
"""

_README_TEMPLATE = """\
# {name}

A TypeCake project. Sources live in `src/`, generated TypeScript
declarations are written to `types/`.

## Build

```bash
typecake build
```

## Check

```bash
typecake check
```
"""


def scaffold(name: str, parent: Path | None = None) -> Path:
    """Create a new TypeCake project directory. Returns the project path."""
    base = parent or Path.cwd()
    project_dir = base / name

    if project_dir.exists():
        raise FileExistsError(f"Directory '{name}' already exists")

    src_dir = project_dir / "src"
    src_dir.mkdir(parents=True)

    (project_dir / "typecake.toml").write_text(_TYPECAKE_TOML_TEMPLATE.format(name=name))
    (src_dir / "main.tc").write_text(_MAIN_TC_TEMPLATE.format())
    (project_dir / ".gitignore").write_text(_GITIGNORE)
    (project_dir / "README.md").write_text(_README_TEMPLATE.format(name=name))

    return project_dir
