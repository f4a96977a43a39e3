# cli.py
from __future__ import annotations

import sys

import click

from .bootstrap import make_context
from .config import find_project
from .errors import BuildError, NoTaskError
from .scm.registry import SCMRegistry, set_registry
from .settings import DEBUG, PROJECT_FILE
from .ui.console import Console, get_console, set_console


def _run(ctx: click.Context, name: str, args: list[str]) -> None:
    """Run a task, turning BuildErrors into a clean message + exit 1."""
    console = get_console()
    try:
        build_ctx = ctx.obj.get("build")
        if build_ctx is None:
            project = find_project(ctx.obj.get("project_file"))
            build_ctx = make_context(project, console=console)
            ctx.obj["build"] = build_ctx
        build_ctx.tasks.clear_invoked()
        build_ctx.run_task(name, args)
    except NoTaskError as e:
        console.print_error(
            "Unknown task",
            str(e),
            suggestion="List available tasks with:\n  betterbuild tasks",
        )
        sys.exit(1)
    except BuildError as e:
        console.print_exception(e)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        # custom tasks from a project file can raise anything
        console.print_exception(e)
        sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=DEBUG,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--project",
    "project_file",
    default=None,
    help=f"Project file (defaults to {PROJECT_FILE} if present)",
)
@click.pass_context
def cli(ctx, debug, project_file):
    """betterbuild: dependency fetching and a configurable compile pipeline."""
    console = Console(debug=debug)
    set_console(console)

    # startup owns the SCM registry
    registry = SCMRegistry()
    registry.register_builtin()
    set_registry(registry)

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["project_file"] = project_file


@cli.command()
@click.option("--list", "list_", is_flag=True, default=False, help="List all compilers and the enabled ones")
@click.option("--force", is_flag=True, default=False, help="Recompile everything")
@click.option("--no-deps-check", is_flag=True, default=False, help="Do not check dependencies first")
@click.pass_context
def compile(ctx, list_, force, no_deps_check):
    """Compile source files."""
    args = []
    if list_:
        args.append("--list")
    if force:
        args.append("--force")
    if no_deps_check:
        args.append("--no-deps-check")
    _run(ctx, "compile", args)


@cli.group(invoke_without_command=True)
@click.pass_context
def deps(ctx):
    """List dependencies and their status."""
    if ctx.invoked_subcommand is None:
        _run(ctx, "deps", [])


@deps.command("get")
@click.argument("names", nargs=-1)
@click.pass_context
def deps_get(ctx, names):
    """Get all out of date dependencies."""
    _run(ctx, "deps.get", list(names))


@deps.command("update")
@click.argument("names", nargs=-1)
@click.pass_context
def deps_update(ctx, names):
    """Update dependencies, ignoring locks."""
    _run(ctx, "deps.update", list(names))


@deps.command("check")
@click.pass_context
def deps_check(ctx):
    """Check if all dependencies are ok."""
    _run(ctx, "deps.check", [])


@deps.command("clean")
@click.argument("names", nargs=-1)
@click.pass_context
def deps_clean(ctx, names):
    """Remove dependencies files."""
    _run(ctx, "deps.clean", list(names))


@cli.command()
@click.pass_context
def tasks(ctx):
    """List all tasks."""
    console = get_console()
    try:
        project = find_project(ctx.obj.get("project_file"))
    except BuildError as e:
        console.print_exception(e)
        sys.exit(1)
    build_ctx = make_context(project, console=console)
    rows = [(t.name, t.shortdoc) for t in build_ctx.tasks.all() if t.shortdoc]
    console.print_table(rows, prefix="betterbuild ")


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("name")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, name, args):
    """Run any task by name, passing ARGS through."""
    _run(ctx, name, list(args))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
