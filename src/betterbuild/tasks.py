# tasks.py
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set

from .errors import NoTaskError
from .model import NOOP, StepResult, as_step_result

if TYPE_CHECKING:
    from .model import BuildContext

TaskFn = Callable[["BuildContext", List[str]], object]


@dataclass(frozen=True)
class Task:
    name: str
    fn: TaskFn
    shortdoc: Optional[str] = None


class TaskRegistry:
    """
    Name -> task lookup.

    A task runs at most once per run: invoking it again returns NOOP until
    it is re-enabled (or `clear_invoked()` starts a new run).
    """

    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        self._invoked: Set[str] = set()
        self._lock = threading.Lock()

    def task(self, name: str, shortdoc: Optional[str] = None) -> Callable[[TaskFn], TaskFn]:
        """Decorator: @tasks.task("compile.foo", shortdoc="Compiles foo")."""
        def decorator(fn: TaskFn) -> TaskFn:
            self.add(Task(name=name, fn=fn, shortdoc=shortdoc))
            return fn
        return decorator

    def add(self, task: Task) -> None:
        with self._lock:
            self._tasks[task.name] = task

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise NoTaskError(name, list(self._tasks)) from None

    def all(self) -> List[Task]:
        return sorted(self._tasks.values(), key=lambda t: t.name)

    def with_prefix(self, prefix: str) -> List[Task]:
        return [t for t in self.all() if t.name.startswith(prefix)]

    def run(self, name: str, ctx: "BuildContext", args: List[str]) -> StepResult:
        task = self.get(name)
        if name in self._invoked:
            return NOOP
        self._invoked.add(name)
        ctx.console.print_debug(f"Running task {name} {' '.join(args)}".rstrip())
        return as_step_result(task.fn(ctx, list(args)))

    def reenable(self, name: str) -> None:
        self._invoked.discard(name)

    def clear_invoked(self) -> None:
        self._invoked.clear()


# Global task registry; builtin tasks and project files register on it
_tasks: Optional[TaskRegistry] = None


def get_tasks() -> TaskRegistry:
    global _tasks
    if _tasks is None:
        _tasks = TaskRegistry()
    return _tasks


def set_tasks(tasks: Optional[TaskRegistry]) -> None:
    global _tasks
    _tasks = tasks


def task(name: str, shortdoc: Optional[str] = None) -> Callable[[TaskFn], TaskFn]:
    """Register a task on the global registry (used from project files)."""
    return get_tasks().task(name, shortdoc=shortdoc)
