# config.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .model import Dependency


class DepSpec(BaseModel):
    """One entry of `deps`. Everything besides name/requirement is SCM options."""

    name: str
    requirement: Optional[str] = None
    opts: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("dependency name must be non-empty")
        return normalized


class ProjectConfig(BaseModel):
    """
    Project settings, as returned by `project()` (or `PROJECT`) in the
    project file.

    - compilers:     compilers to run, None means the defaults
    - source_paths:  directories to find source files in
    - compile_path:  output directory; also touched when anything was compiled
    - compile_first: files compiled before everything else
    - watch_exts:    extensions whose change forces a full recompile
    - compile_exts:  extensions that get compiled
    """

    app: str
    version: str = "0.1.0"
    compilers: Optional[List[str]] = None
    source_paths: List[str] = Field(default_factory=lambda: ["src"])
    compile_path: str = "build"
    compile_first: List[str] = Field(default_factory=list)
    watch_exts: List[str] = Field(default_factory=lambda: [".py"])
    compile_exts: List[str] = Field(default_factory=lambda: [".py"])
    deps_path: str = "deps"
    deps: List[DepSpec] = Field(default_factory=list)

    # directory of the project file; relative paths are resolved against it
    project_dir: Path = Field(default_factory=Path.cwd, exclude=True)

    @field_validator("watch_exts", "compile_exts")
    @classmethod
    def validate_exts(cls, value: List[str]) -> List[str]:
        return [e if e.startswith(".") else f".{e}" for e in (v.strip() for v in value) if e]

    @field_validator("deps", mode="before")
    @classmethod
    def validate_deps(cls, value: Any) -> Any:
        # accept ("name", "req", {opts}), ("name", {opts}) and flat dicts too
        out = []
        for item in value or []:
            if isinstance(item, (tuple, list)):
                if len(item) == 3:
                    name, req, opts = item
                elif len(item) == 2:
                    name, opts = item
                    req = None
                else:
                    raise ValueError(f"invalid dependency declaration: {item!r}")
                out.append({"name": name, "requirement": req, "opts": dict(opts)})
            elif isinstance(item, dict) and "opts" not in item:
                rest = {k: v for k, v in item.items() if k not in ("name", "requirement")}
                out.append({"name": item.get("name", ""), "requirement": item.get("requirement"), "opts": rest})
            else:
                out.append(item)
        return out

    def path(self, rel: str) -> Path:
        p = Path(rel).expanduser()
        return p if p.is_absolute() else self.project_dir / p

    @property
    def compile_dir(self) -> Path:
        return self.path(self.compile_path)

    @property
    def deps_dir(self) -> Path:
        return self.path(self.deps_path)

    def dependencies(self) -> List[Dependency]:
        deps: List[Dependency] = []
        for spec in self.deps:
            opts = dict(spec.opts)
            # local paths are relative to the project, not to the cwd
            if opts.get("path"):
                opts["path"] = str(self.path(str(opts["path"])))
            deps.append(Dependency(name=spec.name, opts=opts, requirement=spec.requirement))
        return deps


def load_project(path: str | Path) -> ProjectConfig:
    """
    Load a project from a python file.

    The file must define either:
      - project() -> dict
      - PROJECT = {...}

    It may also define extra tasks with `@betterbuild.task(...)`.
    """
    project_path = Path(path).expanduser().resolve()
    if not project_path.exists():
        raise ConfigError(f"Project file not found: {project_path}")
    if project_path.suffix != ".py":
        raise ConfigError(f"Project file must be a .py file, got: {project_path.name}")

    module_name = f"betterbuild_project_{project_path.stem}"
    globals_dict = runpy.run_path(str(project_path), run_name=module_name)

    if "project" in globals_dict and callable(globals_dict["project"]):
        data = globals_dict["project"]()
    elif "PROJECT" in globals_dict:
        data = globals_dict["PROJECT"]
    else:
        raise ConfigError(
            f"{project_path.name} must define project() -> dict or PROJECT = {{...}}"
        )

    if not isinstance(data, dict):
        raise ConfigError(f"project() must return a dict, got {type(data).__name__}")

    try:
        return ProjectConfig.model_validate({**data, "project_dir": project_path.parent})
    except ValidationError as e:
        raise ConfigError(f"Invalid project in {project_path.name}:\n{e}") from e


def find_project(path: str | Path | None = None) -> Optional[ProjectConfig]:
    """Load `path` (or the default project file) if it exists, else None."""
    from .settings import PROJECT_FILE

    candidate = Path(path) if path else Path(PROJECT_FILE)
    if not candidate.exists():
        if path:
            raise ConfigError(f"Project file not found: {candidate}")
        return None
    return load_project(candidate)
