# git.py
# Small, focused wrapper around the Git CLI.
# The git SCM backend goes through these helpers and never calls
# subprocess("git ...") directly.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional


class GitCommandError(RuntimeError):
    """git exited non-zero (or is not installed)."""

    def __init__(self, args: List[str], returncode: int, stderr: str):
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git {' '.join(args)} failed (exit={returncode}): {stderr.strip()}")


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    This is the single low-level entry point for all Git operations in this file.

    Args:
        args: List of git arguments (e.g. ["status", "--porcelain"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        GitCommandError: git is missing or exited with a non-zero status.
    """
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=str(cwd) if cwd is not None else None,
            text=True,
            capture_output=True,
        )
    except FileNotFoundError:
        raise GitCommandError(args, 127, "git command not found. Please install Git.")

    if proc.returncode != 0:
        raise GitCommandError(args, proc.returncode, proc.stderr or "")

    return proc.stdout.strip()


def is_work_tree(path: str | Path) -> bool:
    """True if `path` is the top level of a git working copy."""
    p = Path(path)
    if not (p / ".git").exists():
        return False
    try:
        top = _git(["rev-parse", "--show-toplevel"], cwd=p)
    except GitCommandError:
        return False
    return Path(top).resolve() == p.resolve()


def head_sha(cwd: Optional[str | Path] = None) -> str:
    """
    Return the full SHA hash of the current HEAD commit.

    Used as the lock value of a git dependency.
    """
    return _git(["rev-parse", "HEAD"], cwd=cwd)


def rev_parse(ref: str, cwd: Optional[str | Path] = None) -> str:
    """Resolve any ref (branch, tag, short sha) to a full commit SHA."""
    return _git(["rev-parse", "--verify", f"{ref}^{{commit}}"], cwd=cwd)


def clone(url: str, dest: str | Path) -> None:
    # --no-checkout: the caller decides which revision to put in the tree
    _git(["clone", "--no-checkout", "--quiet", url, str(dest)])


def fetch(cwd: str | Path, remote: str = "origin") -> None:
    _git(["fetch", "--quiet", "--tags", "--force", remote], cwd=cwd)


def checkout(ref: str, cwd: str | Path) -> None:
    _git(["checkout", "--quiet", "--force", "--detach", ref], cwd=cwd)


def remote_url(cwd: str | Path, remote: str = "origin") -> str:
    return _git(["config", "--get", f"remote.{remote}.url"], cwd=cwd)


def set_remote_url(url: str, cwd: str | Path, remote: str = "origin") -> None:
    _git(["remote", "set-url", remote, url], cwd=cwd)


def default_branch(cwd: str | Path, remote: str = "origin") -> Optional[str]:
    """
    Return `origin/<branch>` for the remote's HEAD, or None if the remote
    does not advertise one.
    """
    try:
        ref = _git(["symbolic-ref", "--quiet", f"refs/remotes/{remote}/HEAD"], cwd=cwd)
    except GitCommandError:
        return None
    return ref.replace("refs/remotes/", "", 1)
