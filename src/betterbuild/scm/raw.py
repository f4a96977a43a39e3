# scm/raw.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import SCMError
from ..model import Lock
from .base import Opts


def _norm(p: Any) -> str:
    return os.path.normpath(str(Path(str(p)).expanduser()))


class RawSCM:
    """
    Dependencies that already live on disk (`path: "../other_project"`).

    The working copy is the directory itself, so there is nothing to fetch,
    nothing to lock and nothing to clean.
    """

    key = "raw"

    def consumes(self, opts: Opts) -> Optional[Dict[str, Any]]:
        raw = opts.get("path")
        if not raw:
            return None
        out = dict(opts)
        out["dest"] = _norm(raw)
        return out

    def is_available(self, path: Path, opts: Opts) -> bool:
        return Path(path).is_dir()

    def checkout(self, path: Path, opts: Opts) -> Optional[Lock]:
        self._ensure_exists(path, "checkout")
        return None

    def update(self, path: Path, opts: Opts) -> Optional[Lock]:
        self._ensure_exists(path, "update")
        return None

    def check(self, path: Path, opts: Opts) -> bool:
        return True

    def matches(self, opts1: Opts, opts2: Opts) -> bool:
        a, b = opts1.get("path"), opts2.get("path")
        if not a or not b:
            return False
        return _norm(a) == _norm(b)

    def clean(self, path: Path, opts: Opts) -> None:
        """Leaves the directory in place; it belongs to the user."""

    def _ensure_exists(self, path: Path, operation: str) -> None:
        if not Path(path).is_dir():
            raise SCMError(
                dependency=str(path),
                operation=operation,
                message="source directory does not exist",
            )
