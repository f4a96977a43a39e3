# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

if TYPE_CHECKING:
    from .config import ProjectConfig
    from .scm.registry import SCMRegistry
    from .tasks import TaskRegistry
    from .ui.console import Console


@dataclass(frozen=True)
class Lock:
    """
    Opaque pin produced by an SCM backend.

    `scm` is the key of the backend that produced it, `value` is whatever that
    backend needs to reproduce the exact state (a commit SHA for git).
    """
    scm: str
    value: str

    def belongs_to(self, key: str) -> bool:
        return self.scm == key

    def __str__(self) -> str:
        return f"{self.scm}:{self.value}"


@dataclass(frozen=True)
class Dependency:
    """A dependency declaration: name + backend options + optional prior lock."""
    name: str
    opts: Mapping[str, Any] = field(default_factory=dict)
    requirement: Optional[str] = None
    lock: Optional[Lock] = None

    def __post_init__(self) -> None:
        # frozen, so bypass __setattr__ to store a read-only copy
        object.__setattr__(self, "opts", MappingProxyType(dict(self.opts)))

    def scm_opts(self) -> Dict[str, Any]:
        """Options handed to a backend; the prior lock rides along under `lock`."""
        opts = dict(self.opts)
        if self.lock is not None:
            opts["lock"] = self.lock
        return opts

    def __str__(self) -> str:
        req = f" {self.requirement}" if self.requirement else ""
        opts = ", ".join(f"{k}={v!r}" for k, v in self.opts.items())
        return f"{self.name}{req} ({opts})"


# ---------------------------------------------------------------------
# Step results
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class NoOp:
    """A step ran but had nothing to do."""
    reason: str = ""


@dataclass(frozen=True)
class Changed:
    """A step did work. `value` is whatever the step wants to report."""
    value: Any = None


StepResult = Union[NoOp, Changed]

NOOP = NoOp()


def as_step_result(value: Any) -> StepResult:
    """Anything that is not a NoOp counts as a change."""
    if isinstance(value, (NoOp, Changed)):
        return value
    return Changed(value)


def changed(result: StepResult) -> bool:
    return not isinstance(result, NoOp)


# ---------------------------------------------------------------------
# Build context
# ---------------------------------------------------------------------

@dataclass
class BuildContext:
    """Everything a task needs: project (if any), output, tasks, SCMs."""
    console: "Console"
    tasks: "TaskRegistry"
    registry: "SCMRegistry"
    project: Optional["ProjectConfig"] = None
    cwd: Path = field(default_factory=Path.cwd)

    def run_task(self, name: str, args: list[str] | None = None) -> StepResult:
        return self.tasks.run(name, self, list(args or []))
