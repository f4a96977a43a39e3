# bootstrap.py
# Startup: wires the console, the task registry and the SCM registry into a
# BuildContext. The CLI calls this once; tests call it with fakes.
from __future__ import annotations

from pathlib import Path
from typing import Optional

from . import deps_tasks, pipeline
from .compilers import app as app_compiler
from .compilers import python as python_compiler
from .config import ProjectConfig
from .model import BuildContext
from .scm.registry import SCMRegistry, get_registry
from .tasks import TaskRegistry, get_tasks
from .ui.console import Console, get_console


def register_builtin_tasks(tasks: TaskRegistry) -> None:
    pipeline.register(tasks)
    python_compiler.register(tasks)
    app_compiler.register(tasks)
    deps_tasks.register(tasks)


def make_context(
    project: Optional[ProjectConfig] = None,
    *,
    console: Optional[Console] = None,
    tasks: Optional[TaskRegistry] = None,
    registry: Optional[SCMRegistry] = None,
    cwd: Optional[Path] = None,
) -> BuildContext:
    """
    Build a context. Missing pieces fall back to the process-wide ones.
    Builtin tasks are added unless a task with the same name is already
    registered, so a project file can replace them.
    """
    tasks = tasks if tasks is not None else get_tasks()
    existing = {t.name for t in tasks.all()}
    fresh = TaskRegistry()
    register_builtin_tasks(fresh)
    for t in fresh.all():
        if t.name not in existing:
            tasks.add(t)

    if cwd is None:
        cwd = project.project_dir if project is not None else Path.cwd()

    return BuildContext(
        console=console if console is not None else get_console(),
        tasks=tasks,
        registry=registry if registry is not None else get_registry(),
        project=project,
        cwd=cwd,
    )
