# pipeline.py
"""
A meta task that compiles source files. It runs the compilers configured
for the project, in order, and touches the compile path if any of them
produced something.

Configuration (in the project file):

  compilers: compilers to run, defaults to ["python", "app"]
             (just ["python"] outside a project). Each name maps to the
             task "compile.<name>", so custom compilers can be added:

                 "compilers": ["python", "mycompiler", "app"]

Command line options:

  --list     list all compilers and the enabled ones
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import ProjectConfig
from .model import NOOP, BuildContext, Changed, StepResult, changed
from .settings import COMPILER_TASK_PREFIX
from .tasks import TaskRegistry
from .ui.console import format_table

DEFAULT_COMPILERS = ["python", "app"]
NO_PROJECT_COMPILERS = ["python"]


def get_compilers(project: Optional[ProjectConfig]) -> List[str]:
    if project is not None and project.compilers is not None:
        return list(project.compilers)
    if project is not None:
        return list(DEFAULT_COMPILERS)
    return list(NO_PROJECT_COMPILERS)


def project_or_default(ctx: BuildContext) -> ProjectConfig:
    """The loaded project, or default settings rooted at the cwd."""
    if ctx.project is not None:
        return ctx.project
    return ProjectConfig(app=ctx.cwd.name or "app", project_dir=ctx.cwd)


def compiler_rows(tasks: TaskRegistry) -> List[Tuple[str, str]]:
    """(task name, shortdoc) for every compiler task that documents itself."""
    return sorted(
        (t.name, t.shortdoc)
        for t in tasks.with_prefix(COMPILER_TASK_PREFIX)
        if t.shortdoc
    )


def format_compiler_list(
    rows: Sequence[Tuple[str, str]],
    compilers: Sequence[str],
    prog: str = "betterbuild",
) -> List[str]:
    lines = format_table(sorted(rows), prefix=f"{prog} ")
    lines.append("")
    lines.append(f"Enabled compilers: {', '.join(compilers)}")
    return lines


def list_compilers(ctx: BuildContext) -> None:
    for line in format_compiler_list(compiler_rows(ctx.tasks), get_compilers(ctx.project)):
        ctx.console.print_info(line)


def touch_marker(path: Path) -> None:
    if path.exists():
        os.utime(path, None)
    else:
        path.mkdir(parents=True, exist_ok=True)


def run_pipeline(
    ctx: BuildContext,
    compilers: Sequence[str],
    args: List[str],
    marker: Path,
) -> bool:
    """
    Run each compiler task in order and touch `marker` once at the end if
    any of them did something. A failing compiler stops the pipeline and
    the marker is left alone.
    """
    any_changed = False
    for compiler in compilers:
        result = ctx.run_task(f"{COMPILER_TASK_PREFIX}{compiler}", args)
        if changed(result):
            any_changed = True

    # NOOP is also what an already invoked task returns, so running a
    # compiler twice in one run doesn't force a touch.
    if any_changed:
        touch_marker(marker)
    return any_changed


def run_compile(ctx: BuildContext, args: List[str]) -> StepResult:
    """Compile source files."""
    if "--list" in args:
        list_compilers(ctx)
        return NOOP

    ctx.run_task("loadpaths", args)

    compilers = get_compilers(ctx.project)
    marker = project_or_default(ctx).compile_dir
    if run_pipeline(ctx, compilers, args, marker):
        return Changed(compilers)
    return NOOP


def register(tasks: TaskRegistry) -> None:
    tasks.task("compile", shortdoc="Compile source files")(run_compile)
