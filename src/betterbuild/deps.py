# deps.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .errors import BuildError, SCMError, UnresolvableDependencyError
from .model import Dependency, Lock
from .scm.registry import SCMRegistry

# DepStatus.status values
OK = "ok"
UNAVAILABLE = "unavailable"
OUTDATED = "outdated"
UNRESOLVABLE = "unresolvable"


@dataclass(frozen=True)
class DepStatus:
    dependency: Dependency
    status: str
    message: str = ""
    scm: Optional[str] = None
    path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.status == OK


@dataclass
class FetchReport:
    """
    Outcome of fetching a batch of dependencies.

    locks:   dependency name -> lock after checkout/update (None for lockless SCMs)
    current: dependencies that were already available and left alone
    errors:  one entry per dependency that could not be fetched
    """
    locks: Dict[str, Optional[Lock]] = field(default_factory=dict)
    current: List[str] = field(default_factory=list)
    errors: List[BuildError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def dep_path(dep: Dependency, opts: Dict[str, Any], deps_path: str | Path) -> Path:
    """Where the working copy lives: `dest` if the SCM set one, else deps_path/name."""
    dest = opts.get("dest")
    if dest:
        return Path(str(dest)).expanduser()
    return Path(deps_path) / dep.name


def _named(err: SCMError, dep: Dependency) -> SCMError:
    # backends only know paths; report the dependency by name
    return replace(err, dependency=dep.name, details={**err.details, "path": err.dependency})


def fetch_all(
    deps: Iterable[Dependency],
    registry: SCMRegistry,
    deps_path: str | Path,
    *,
    update: bool = False,
) -> FetchReport:
    """
    Make every dependency available.

    Missing working copies are checked out. Existing ones are moved to
    their lock when they are off it, and left alone otherwise; with
    `update=True` every existing copy is updated and locks are ignored.
    A failing dependency is recorded in the report and the rest are still
    processed.
    """
    report = FetchReport()

    for dep in deps:
        if update and dep.lock is not None:
            dep = replace(dep, lock=None)

        try:
            scm, opts = registry.resolve(dep)
        except UnresolvableDependencyError as e:
            report.errors.append(e)
            continue

        path = dep_path(dep, opts, deps_path)
        try:
            if not scm.is_available(path, opts):
                lock = scm.checkout(path, opts)
            elif update or (dep.lock is not None and not scm.check(path, opts)):
                lock = scm.update(path, opts)
            else:
                report.current.append(dep.name)
                continue
        except SCMError as e:
            report.errors.append(_named(e, dep))
            continue

        report.locks[dep.name] = lock

    return report


def check_all(
    deps: Iterable[Dependency],
    registry: SCMRegistry,
    deps_path: str | Path,
) -> List[DepStatus]:
    """Report the state of each dependency without touching working copies."""
    out: List[DepStatus] = []

    for dep in deps:
        try:
            scm, opts = registry.resolve(dep)
        except UnresolvableDependencyError as e:
            out.append(DepStatus(dep, UNRESOLVABLE, str(e)))
            continue

        path = dep_path(dep, opts, deps_path)
        if not scm.is_available(path, opts):
            out.append(DepStatus(dep, UNAVAILABLE, f"the dependency is not available at {path}", scm.key, path))
        elif dep.lock is not None and not scm.check(path, opts):
            out.append(DepStatus(dep, OUTDATED, f"the dependency does not match the lock {dep.lock}", scm.key, path))
        else:
            out.append(DepStatus(dep, OK, "", scm.key, path))

    return out


def clean_all(
    deps: Iterable[Dependency],
    registry: SCMRegistry,
    deps_path: str | Path,
) -> List[BuildError]:
    """Clean every resolvable dependency; unresolvable ones are returned."""
    errors: List[BuildError] = []
    for dep in deps:
        try:
            scm, opts = registry.resolve(dep)
        except UnresolvableDependencyError as e:
            errors.append(e)
            continue
        scm.clean(dep_path(dep, opts, deps_path), opts)
    return errors


def diverged(old: Dependency, new: Dependency, registry: SCMRegistry) -> bool:
    """
    True if `new` points at a different repository than `old` (as opposed to
    just a different version/requirement of the same one).
    """
    old_scm, old_opts = registry.resolve(old)
    new_scm, new_opts = registry.resolve(new)
    if old_scm.key != new_scm.key:
        return True
    return not new_scm.matches(old_opts, new_opts)
