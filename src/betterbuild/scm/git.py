# scm/git.py
from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import SCMError
from ..git_facts import git
from ..git_facts.git import GitCommandError
from ..model import Lock
from .base import Opts, lock_of


def _normalize_url(url: str) -> str:
    url = str(url).strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


class GitSCM:
    """
    Dependencies living in git repositories.

    Options:
      - git: clone URL
      - github: "owner/repo" shorthand (normalized into `git`)
      - branch / tag / ref: what to check out when there is no lock
    """

    key = "git"

    def consumes(self, opts: Opts) -> Optional[Dict[str, Any]]:
        if opts.get("git"):
            return dict(opts)

        gh = opts.get("github")
        if gh:
            out = {k: v for k, v in opts.items() if k != "github"}
            out["git"] = f"https://github.com/{gh}.git"
            return out

        return None

    def is_available(self, path: Path, opts: Opts) -> bool:
        return git.is_work_tree(path)

    def checkout(self, path: Path, opts: Opts) -> Optional[Lock]:
        path = Path(path)
        url = opts["git"]
        if path.exists() and (not path.is_dir() or any(path.iterdir())):
            raise SCMError(
                dependency=str(path),
                operation="checkout",
                message="destination exists and is not a git working copy",
                details={"url": url},
            )
        path.parent.mkdir(parents=True, exist_ok=True)

        # Clone next to the destination, move into place only once it is usable
        tmp = Path(tempfile.mkdtemp(prefix=f".{path.name}-", dir=str(path.parent)))
        try:
            git.clone(url, tmp)
            self._checkout_target(tmp, opts, operation="checkout")
            lock = Lock(self.key, git.head_sha(tmp))
            tmp.replace(path)
        except (GitCommandError, OSError) as e:
            raise SCMError(
                dependency=str(path),
                operation="checkout",
                message=str(e),
                details={"url": url},
            ) from e
        finally:
            if tmp.exists():
                shutil.rmtree(tmp, ignore_errors=True)

        return lock

    def update(self, path: Path, opts: Opts) -> Optional[Lock]:
        path = Path(path)
        url = opts["git"]
        lock = lock_of(opts, self.key)

        try:
            if _normalize_url(git.remote_url(path)) != _normalize_url(url):
                git.set_remote_url(url, path)

            # A locked revision we already have does not need the network
            if lock is None or not self._has_commit(path, lock.value):
                git.fetch(path)

            self._checkout_target(path, opts, operation="update")
            return Lock(self.key, git.head_sha(path))
        except GitCommandError as e:
            raise SCMError(
                dependency=str(path),
                operation="update",
                message=str(e),
                details={"url": url},
            ) from e

    def check(self, path: Path, opts: Opts) -> bool:
        lock = opts.get("lock")
        if not isinstance(lock, Lock) or not lock.belongs_to(self.key):
            return False
        if not self.is_available(path, opts):
            return False
        try:
            return git.head_sha(path) == lock.value
        except GitCommandError:
            return False

    def matches(self, opts1: Opts, opts2: Opts) -> bool:
        a = self.consumes(opts1)
        b = self.consumes(opts2)
        if a is None or b is None:
            return False
        return _normalize_url(a["git"]) == _normalize_url(b["git"])

    def clean(self, path: Path, opts: Opts) -> None:
        path = Path(path)
        if path.exists():
            shutil.rmtree(path)

    # ------------------------------------------------------------------

    def _has_commit(self, path: Path, sha: str) -> bool:
        try:
            git.rev_parse(sha, cwd=path)
        except GitCommandError:
            return False
        return True

    def _target(self, path: Path, opts: Opts) -> str:
        lock = lock_of(opts, self.key)
        if lock is not None:
            return lock.value
        if opts.get("ref"):
            return str(opts["ref"])
        if opts.get("tag"):
            return f"refs/tags/{opts['tag']}"
        if opts.get("branch"):
            return f"origin/{opts['branch']}"
        return git.default_branch(path) or "origin/HEAD"

    def _checkout_target(self, path: Path, opts: Opts, *, operation: str) -> None:
        target = self._target(path, opts)
        try:
            sha = git.rev_parse(target, cwd=path)
        except GitCommandError as e:
            raise SCMError(
                dependency=str(path),
                operation=operation,
                message=f"revision {target!r} not found",
                details={"url": opts.get("git")},
            ) from e
        git.checkout(sha, cwd=path)
