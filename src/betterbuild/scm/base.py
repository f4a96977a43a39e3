"""SCM capability contract every dependency backend implements."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

from ..model import Lock

Opts = Mapping[str, Any]


@runtime_checkable
class SCM(Protocol):
    """
    A source control backend for dependencies.

    Backends are plain objects registered, in order, on an `SCMRegistry`.
    The first one whose `consumes` claims a dependency's options handles it.
    A prior lock, if any, is passed in `opts["lock"]`.
    """

    key: str
    """Stable identifier, used for printing and for matching lock types."""

    def consumes(self, opts: Opts) -> Optional[Dict[str, Any]]:
        """
        Return (possibly normalized) options if this backend handles the
        dependency, otherwise None.

        For example `{"github": "foo/bar"}` is claimed by the git backend,
        which returns `{"git": "https://github.com/foo/bar.git"}`.
        """

    def is_available(self, path: Path, opts: Opts) -> bool:
        """True if a working copy exists at `path` that can be operated on."""

    def checkout(self, path: Path, opts: Opts) -> Optional[Lock]:
        """
        Create a fresh working copy at `path`.

        Pinned to `opts["lock"]` when given, otherwise the latest/default
        state. Must not leave a half-written copy behind on failure.

        Raises:
            SCMError: the source is unreachable or the lock can't be satisfied
        """

    def update(self, path: Path, opts: Opts) -> Optional[Lock]:
        """
        Bring an existing working copy up to date and return the current lock.

        With a lock the result must match it exactly; without one the
        backend may move freely (e.g. to the latest upstream state).

        Raises:
            SCMError: the source is unreachable or the lock can't be satisfied
        """

    def check(self, path: Path, opts: Opts) -> bool:
        """
        True if the working copy matches `opts["lock"]`. Never mutates the
        working copy. Backends without locks may always return True.
        """

    def matches(self, opts1: Opts, opts2: Opts) -> bool:
        """True if both option sets refer to the same repository."""

    def clean(self, path: Path, opts: Opts) -> None:
        """Remove everything this backend manages at `path`. Missing path is fine."""


def lock_of(opts: Opts, key: str) -> Optional[Lock]:
    """Return the lock in `opts` if it was produced by the backend `key`."""
    lock = opts.get("lock")
    if isinstance(lock, Lock) and lock.belongs_to(key):
        return lock
    return None
