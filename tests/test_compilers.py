from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from betterbuild.compilers import app as app_compiler
from betterbuild.compilers import python as python_compiler
from betterbuild.errors import CompileError, ConfigError
from betterbuild.model import Changed, NoOp


def _write(path: Path, text: str, mtime: float | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def test_python_compiles_sources_then_is_a_noop(build_ctx, tmp_path: Path) -> None:
    _write(tmp_path / "src" / "pkg" / "__init__.py", "")
    _write(tmp_path / "src" / "pkg" / "core.py", "def f():\n    return 1\n")

    first = build_ctx.run_task("compile.python", [])
    build_ctx.tasks.clear_invoked()
    second = build_ctx.run_task("compile.python", [])

    assert isinstance(first, Changed)
    assert sorted(first.value) == [os.path.join("pkg", "__init__.py"), os.path.join("pkg", "core.py")]
    assert (tmp_path / "build" / "pkg" / "core.pyc").exists()
    assert isinstance(second, NoOp)


def test_python_recompiles_only_stale_files(build_ctx, tmp_path: Path) -> None:
    a = _write(tmp_path / "src" / "a.py", "A = 1\n", mtime=1_000_000)
    _write(tmp_path / "src" / "b.py", "B = 1\n", mtime=1_000_000)
    build_ctx.run_task("compile.python", [])
    build_ctx.tasks.clear_invoked()

    _write(a, "A = 2\n", mtime=2_000_000_000)
    result = build_ctx.run_task("compile.python", [])

    assert result == Changed(["a.py"])


def test_python_force_recompiles_everything(build_ctx, tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.py", "A = 1\n")
    _write(tmp_path / "src" / "b.py", "B = 1\n")
    build_ctx.run_task("compile.python", [])
    build_ctx.tasks.clear_invoked()

    result = build_ctx.run_task("compile.python", ["--force"])

    assert result == Changed(["a.py", "b.py"])


def test_python_watched_file_change_forces_full_recompile(build_ctx, tmp_path: Path) -> None:
    build_ctx.project.watch_exts = [".py", ".tmpl"]
    _write(tmp_path / "src" / "a.py", "A = 1\n")
    tmpl = _write(tmp_path / "src" / "page.tmpl", "hello", mtime=1_000_000)
    build_ctx.run_task("compile.python", [])
    os.utime(tmp_path / "build", (1_500_000_000, 1_500_000_000))
    build_ctx.tasks.clear_invoked()

    os.utime(tmpl, (2_000_000_000, 2_000_000_000))
    result = build_ctx.run_task("compile.python", [])

    assert result == Changed(["a.py"])


def test_python_compile_first_order(build_ctx, tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.py", "A = 1\n")
    _write(tmp_path / "src" / "z.py", "Z = 1\n")
    build_ctx.project.compile_first = ["src/z.py"]

    result = build_ctx.run_task("compile.python", [])

    assert result == Changed(["z.py", "a.py"])


def test_python_compile_first_must_be_a_source(build_ctx, tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.py", "A = 1\n")
    build_ctx.project.compile_first = ["src/missing.py"]

    with pytest.raises(ConfigError, match="missing.py"):
        build_ctx.run_task("compile.python", [])


def test_python_syntax_error_raises_compile_error(build_ctx, tmp_path: Path) -> None:
    _write(tmp_path / "src" / "bad.py", "def broken(:\n")

    with pytest.raises(CompileError) as exc:
        build_ctx.run_task("compile.python", [])

    assert exc.value.path == "bad.py"


def test_python_removes_outputs_of_deleted_sources(build_ctx, tmp_path: Path) -> None:
    gone = _write(tmp_path / "src" / "gone.py", "X = 1\n")
    _write(tmp_path / "src" / "kept.py", "Y = 1\n")
    build_ctx.run_task("compile.python", [])
    build_ctx.tasks.clear_invoked()

    gone.unlink()
    result = build_ctx.run_task("compile.python", [])

    assert isinstance(result, Changed)
    assert not (tmp_path / "build" / "gone.pyc").exists()
    assert (tmp_path / "build" / "kept.pyc").exists()


def test_app_writes_resource_file_then_is_a_noop(build_ctx, tmp_path: Path) -> None:
    _write(tmp_path / "src" / "pkg" / "__init__.py", "")
    _write(tmp_path / "src" / "pkg" / "core.py", "X = 1\n")
    build_ctx.project.version = "1.2.3"
    build_ctx.run_task("compile.python", [])

    first = build_ctx.run_task("compile.app", [])
    build_ctx.tasks.clear_invoked()
    second = build_ctx.run_task("compile.app", [])

    payload = json.loads((tmp_path / "build" / "demo.app.json").read_text(encoding="utf-8"))
    assert isinstance(first, Changed)
    assert payload == {"app": "demo", "version": "1.2.3", "modules": ["pkg", "pkg.core"], "deps": []}
    assert isinstance(second, NoOp)


def test_app_without_project_is_a_noop(build_ctx) -> None:
    build_ctx.project = None

    assert isinstance(app_compiler.run_app(build_ctx, []), NoOp)


def test_module_names_ignore_missing_dir(tmp_path: Path) -> None:
    assert app_compiler.module_names(tmp_path / "nope") == []


def test_find_sources_skips_other_extensions_and_missing_dirs(project, tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.py", "")
    _write(tmp_path / "src" / "notes.txt", "")
    project.source_paths = ["src", "does-not-exist"]

    found = python_compiler.find_sources(project)

    assert [str(rel) for _, rel in found] == ["a.py"]
