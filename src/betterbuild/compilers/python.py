# compilers/python.py
from __future__ import annotations

import py_compile
from pathlib import Path
from typing import Dict, List, Tuple

from ..config import ProjectConfig
from ..errors import CompileError, ConfigError
from ..model import BuildContext, Changed, NoOp, StepResult
from ..pipeline import project_or_default
from ..tasks import TaskRegistry


# ---------------------------------------------------------------------
# Source discovery
# ---------------------------------------------------------------------

def _iter_files(root: Path, exts: List[str]):
    # deterministic traversal
    for p in sorted(root.rglob("*")):
        if p.is_file() and p.suffix in exts:
            yield p


def find_sources(project: ProjectConfig) -> List[Tuple[Path, Path]]:
    """
    Return (source file, path relative to its source dir) pairs, with
    `compile_first` entries first, in the order given.
    """
    found: Dict[Path, Tuple[Path, Path]] = {}
    for src_dir in project.source_paths:
        root = project.path(src_dir)
        if not root.is_dir():
            continue
        for f in _iter_files(root, project.compile_exts):
            found.setdefault(f.resolve(), (f, f.relative_to(root)))

    first: List[Tuple[Path, Path]] = []
    for entry in project.compile_first:
        key = project.path(entry).resolve()
        if key not in found:
            raise ConfigError(
                f"compile_first entry {entry!r} is not a source file under {project.source_paths}"
            )
        first.append(found.pop(key))

    return first + list(found.values())


def output_for(project: ProjectConfig, rel: Path) -> Path:
    return project.compile_dir / rel.with_suffix(".pyc")


def _stale(src: Path, dest: Path) -> bool:
    return not dest.exists() or src.stat().st_mtime > dest.stat().st_mtime


def _watched_changed(project: ProjectConfig) -> bool:
    """
    True if a watched, non-compiled file (templates, data files, ...) is
    newer than the compile path.
    """
    marker = project.compile_dir
    if not marker.exists():
        return False
    since = marker.stat().st_mtime
    only_watched = [e for e in project.watch_exts if e not in project.compile_exts]
    for src_dir in project.source_paths:
        root = project.path(src_dir)
        if not root.is_dir():
            continue
        for f in _iter_files(root, only_watched):
            if f.stat().st_mtime > since:
                return True
    return False


def _prune_orphans(project: ProjectConfig, expected: set[Path]) -> List[Path]:
    out_dir = project.compile_dir
    if not out_dir.is_dir():
        return []
    removed = []
    for f in sorted(out_dir.rglob("*.pyc")):
        if f.resolve() not in expected:
            f.unlink()
            removed.append(f)
    return removed


# ---------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------

def compile_file(src: Path, dest: Path, display: str) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        py_compile.compile(str(src), cfile=str(dest), dfile=display, doraise=True)
    except py_compile.PyCompileError as e:
        raise CompileError(path=display, message=e.msg.strip(), extra=e.exc_value) from e


def run_python(ctx: BuildContext, args: List[str]) -> StepResult:
    """
    Byte-compiles every source file whose output is missing or older than
    the source. `--force` recompiles everything, and so does a change to a
    watched file.
    """
    project = project_or_default(ctx)
    sources = find_sources(project)

    force = "--force" in args or _watched_changed(project)
    if force:
        ctx.console.print_debug("compile.python: full recompile")

    compiled: List[str] = []
    expected: set[Path] = set()
    for src, rel in sources:
        dest = output_for(project, rel)
        expected.add(dest.resolve())
        if force or _stale(src, dest):
            compile_file(src, dest, str(rel))
            compiled.append(str(rel))

    removed = _prune_orphans(project, expected)

    if not compiled and not removed:
        return NoOp("nothing to compile")

    if compiled:
        ctx.console.print_compiled("python", len(compiled))
    return Changed(compiled)


def register(tasks: TaskRegistry) -> None:
    tasks.task("compile.python", shortdoc="Compiles Python source files")(run_python)
