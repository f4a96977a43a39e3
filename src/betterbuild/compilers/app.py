# compilers/app.py
from __future__ import annotations

import json
from pathlib import Path
from typing import List

from ..config import ProjectConfig
from ..model import BuildContext, Changed, NoOp, StepResult
from ..tasks import TaskRegistry


def module_names(compile_dir: Path) -> List[str]:
    """Dotted module names for every .pyc under `compile_dir`."""
    if not compile_dir.is_dir():
        return []
    names = []
    for f in sorted(compile_dir.rglob("*.pyc")):
        parts = list(f.relative_to(compile_dir).with_suffix("").parts)
        if parts[-1] == "__init__":
            parts = parts[:-1]
        if parts:
            names.append(".".join(parts))
    return sorted(set(names))


def app_file(project: ProjectConfig) -> Path:
    return project.compile_dir / f"{project.app}.app.json"


def render_app(project: ProjectConfig) -> str:
    payload = {
        "app": project.app,
        "version": project.version,
        "modules": module_names(project.compile_dir),
        "deps": [d.name for d in project.deps],
    }
    return json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def run_app(ctx: BuildContext, args: List[str]) -> StepResult:
    """
    Writes <compile_path>/<app>.app.json with the app name, version,
    compiled modules and dependency names. Only rewritten when the content
    changes.
    """
    project = ctx.project
    if project is None:
        return NoOp("no project")

    target = app_file(project)
    content = render_app(project)
    if target.exists() and target.read_text(encoding="utf-8") == content:
        return NoOp("app file up to date")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    ctx.console.print_generated(str(target))
    return Changed(str(target))


def register(tasks: TaskRegistry) -> None:
    tasks.task("compile.app", shortdoc="Writes app resource file")(run_app)
