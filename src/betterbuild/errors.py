# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from .deps import DepStatus
    from .model import Dependency


class BuildError(Exception):
    """Base class for every error betterbuild reports to the user."""


class ConfigError(BuildError):
    """Bad project file, unknown task, unclaimed dependency, ..."""


class NoTaskError(ConfigError):
    def __init__(self, name: str, known: Optional[List[str]] = None):
        self.name = name
        self.known = sorted(known or [])
        super().__init__(f"The task {name!r} could not be found")


class UnresolvableDependencyError(ConfigError):
    """No registered SCM claims the dependency's options."""

    def __init__(self, dependency: "Dependency", scms: Optional[List[str]] = None):
        self.dependency = dependency
        self.scms = list(scms or [])
        tried = ", ".join(self.scms) or "none registered"
        super().__init__(
            f"Could not find an SCM for dependency {dependency} (tried: {tried})"
        )


@dataclass
class SCMError(BuildError):
    """
    A backend operation failed. Recoverable: carries which dependency and which
    operation so the caller can report it and move on to the next dependency.
    """
    dependency: str
    operation: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.operation} failed for {self.dependency}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class DependencyError(BuildError):
    """One or more dependencies are not ready to be used."""
    statuses: List["DepStatus"]

    def __str__(self) -> str:
        lines = ["Unchecked dependencies for environment:"]
        for s in self.statuses:
            lines.append(f"* {s.dependency.name}: {s.message or s.status}")
        return "\n".join(lines)


@dataclass
class CompileError(BuildError):
    path: str
    message: str
    extra: Any = None

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"
