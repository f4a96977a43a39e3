from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from betterbuild.bootstrap import make_context
from betterbuild.config import ProjectConfig
from betterbuild.model import BuildContext
from betterbuild.scm.registry import SCMRegistry, set_registry
from betterbuild.tasks import TaskRegistry, set_tasks
from betterbuild.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def _fresh_globals():
    set_tasks(None)
    set_registry(None)
    set_console(Console())
    yield
    set_tasks(None)
    set_registry(None)


@pytest.fixture
def project(tmp_path: Path) -> ProjectConfig:
    return ProjectConfig(app="demo", project_dir=tmp_path)


@pytest.fixture
def build_ctx(project: ProjectConfig) -> BuildContext:
    return make_context(
        project,
        console=Console(),
        tasks=TaskRegistry(),
        registry=SCMRegistry(),
    )


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(*args: str, cwd: Path) -> str:
    out = subprocess.check_output(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=str(cwd),
        text=True,
    )
    return out.strip()


@pytest.fixture
def upstream(tmp_path: Path) -> Path:
    """A local git repository with two commits on `main`."""
    repo = tmp_path / "upstream"
    repo.mkdir()
    git("init", "--quiet", cwd=repo)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=repo)
    (repo / "lib.py").write_text("VERSION = 1\n", encoding="utf-8")
    git("add", ".", cwd=repo)
    git("commit", "--quiet", "-m", "first", cwd=repo)
    (repo / "lib.py").write_text("VERSION = 2\n", encoding="utf-8")
    git("commit", "--quiet", "-am", "second", cwd=repo)
    return repo
