# scm/registry.py
from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, Optional, Tuple

from ..errors import UnresolvableDependencyError
from ..model import Dependency
from .base import SCM


class SCMRegistry:
    """
    Ordered list of SCM backends.

    Writes (registration, normally at startup) are serialized by a lock and
    publish a new tuple; reads just grab the current tuple, no locking.
    """

    def __init__(self, backends: Iterable[SCM] = ()):
        self._lock = threading.Lock()
        self._backends: Tuple[SCM, ...] = ()
        for b in backends:
            self.register(b)

    def register(self, backend: SCM) -> None:
        """
        Append `backend`. Registering it again, or another instance of the
        same class under the same key, is a no-op; a different class reusing
        a taken key is rejected.
        """
        with self._lock:
            self._add(backend)

    def register_builtin(self) -> None:
        """Register git first, then raw. First to claim a dependency wins."""
        from .git import GitSCM
        from .raw import RawSCM

        with self._lock:
            for cls in (GitSCM, RawSCM):
                if not any(isinstance(b, cls) for b in self._backends):
                    self._add(cls())

    def _add(self, backend: SCM) -> None:
        # caller holds self._lock
        key = getattr(backend, "key", None)
        if not isinstance(key, str) or not key:
            raise ValueError(f"SCM backend {backend!r} has no key")

        for existing in self._backends:
            if existing is backend:
                return
            if existing.key == key and type(existing) is type(backend):
                return
            if existing.key == key:
                raise ValueError(f"An SCM with key {key!r} is already registered: {existing!r}")
        self._backends = self._backends + (backend,)

    def available(self) -> Tuple[SCM, ...]:
        return self._backends

    def reset(self, backends: Iterable[SCM] = ()) -> None:
        """Replace the whole list (mostly for tests)."""
        fresh = SCMRegistry(backends)
        with self._lock:
            self._backends = fresh._backends

    def get(self, key: str) -> Optional[SCM]:
        for b in self._backends:
            if b.key == key:
                return b
        return None

    def resolve(self, dep: Dependency) -> Tuple[SCM, Dict[str, Any]]:
        """
        Linear scan in registration order; the first backend whose
        `consumes` claims the options handles the dependency.
        """
        for b in self._backends:
            opts = b.consumes(dep.scm_opts())
            if opts is not None:
                return b, opts
        raise UnresolvableDependencyError(dep, [b.key for b in self._backends])

    def keys(self) -> list[str]:
        return [b.key for b in self._backends]


# Process-wide registry, created by the CLI at startup
_registry: Optional[SCMRegistry] = None


def get_registry() -> SCMRegistry:
    """Get the global registry (builtins registered on first use)."""
    global _registry
    if _registry is None:
        _registry = SCMRegistry()
        _registry.register_builtin()
    return _registry


def set_registry(registry: Optional[SCMRegistry]) -> None:
    """Set (or drop, with None) the global registry."""
    global _registry
    _registry = registry
