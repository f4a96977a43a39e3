# deps_tasks.py
from __future__ import annotations

import sys
from typing import List

from . import deps as deps_mod
from .errors import BuildError, DependencyError
from .model import NOOP, BuildContext, Changed, Dependency, NoOp, StepResult
from .tasks import TaskRegistry


def _project_deps(ctx: BuildContext) -> List[Dependency]:
    if ctx.project is None:
        return []
    return ctx.project.dependencies()


def _selected(ctx: BuildContext, args: List[str]) -> List[Dependency]:
    """All project deps, or only the ones named on the command line."""
    all_deps = _project_deps(ctx)
    names = [a for a in args if not a.startswith("-")]
    if not names:
        return all_deps
    known = {d.name for d in all_deps}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise BuildError(f"Unknown dependencies: {', '.join(unknown)}")
    return [d for d in all_deps if d.name in names]


def _fetch(ctx: BuildContext, args: List[str], *, update: bool) -> StepResult:
    selected = _selected(ctx, args)
    if not selected:
        return NOOP

    report = deps_mod.fetch_all(selected, ctx.registry, ctx.project.deps_dir, update=update)
    ctx.console.print_fetch_report(report)
    if not report.ok:
        raise BuildError(f"{len(report.errors)} of {len(selected)} dependencies could not be fetched")
    if not report.locks:
        return NoOp("all dependencies are up to date")
    return Changed(report.locks)


def run_get(ctx: BuildContext, args: List[str]) -> StepResult:
    """Checks out missing dependencies and puts existing ones at their lock."""
    return _fetch(ctx, args, update=False)


def run_update(ctx: BuildContext, args: List[str]) -> StepResult:
    """Updates dependencies, ignoring their locks."""
    return _fetch(ctx, args, update=True)


def run_check(ctx: BuildContext, args: List[str]) -> StepResult:
    """Fails if any dependency is unavailable, unresolvable or off its lock."""
    deps = _project_deps(ctx)
    if not deps:
        return NOOP
    statuses = deps_mod.check_all(deps, ctx.registry, ctx.project.deps_dir)
    bad = [s for s in statuses if not s.ok]
    if bad:
        raise DependencyError(bad)
    return NOOP


def run_status(ctx: BuildContext, args: List[str]) -> StepResult:
    """Prints every dependency and its state."""
    statuses = deps_mod.check_all(_project_deps(ctx), ctx.registry, ctx.project.deps_dir) if ctx.project else []
    ctx.console.print_dep_statuses(statuses)
    return NOOP


def run_clean(ctx: BuildContext, args: List[str]) -> StepResult:
    """Removes the checked out dependencies."""
    selected = _selected(ctx, args)
    if not selected:
        return NOOP
    errors = deps_mod.clean_all(selected, ctx.registry, ctx.project.deps_dir)
    for err in errors:
        ctx.console.print_failure(str(err))
    return Changed([d.name for d in selected])


def run_loadpaths(ctx: BuildContext, args: List[str]) -> StepResult:
    """
    Checks dependencies (skipped with --no-deps-check) and puts the compile
    path and dependency paths on sys.path.
    """
    if "--no-deps-check" not in args:
        ctx.run_task("deps.check", [])

    if ctx.project is None:
        return NOOP

    paths = [str(ctx.project.compile_dir)]
    for s in deps_mod.check_all(_project_deps(ctx), ctx.registry, ctx.project.deps_dir):
        if s.path is not None:
            paths.append(str(s.path))

    added = [p for p in paths if p not in sys.path]
    for p in reversed(added):
        sys.path.insert(0, p)
    if added:
        ctx.console.print_debug(f"loadpaths: added {added}")
    return NOOP


def register(tasks: TaskRegistry) -> None:
    tasks.task("deps.get", shortdoc="Get all out of date dependencies")(run_get)
    tasks.task("deps.update", shortdoc="Update dependencies")(run_update)
    tasks.task("deps.check", shortdoc="Check if all dependencies are ok")(run_check)
    tasks.task("deps", shortdoc="List dependencies and their status")(run_status)
    tasks.task("deps.clean", shortdoc="Remove dependencies files")(run_clean)
    tasks.task("loadpaths", shortdoc="Load the project and dependency paths")(run_loadpaths)
