from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Dict, List, Optional

import typer
from dotenv import find_dotenv, load_dotenv

from .config import DEFAULT_CONFIG, load_registry
from .core import HandlerSpec, Registry
from .errors import StepExecutionError, TaskRunnerError
from .logging import add_log_file, configure_logging, get_logger


app = typer.Typer(add_completion=False, help="Build and publish the book site")
log = get_logger("taskrunner.cli")

HANDLERS_PKG = "booktasks"


def discover_handlers(package: str = HANDLERS_PKG) -> Dict[str, HandlerSpec]:
    """Import all modules in the handlers package and collect decorated functions."""
    specs: Dict[str, HandlerSpec] = {}
    try:
        pkg = importlib.import_module(package)
    except ModuleNotFoundError:
        log.warning("No handlers package found: %s", package)
        return specs
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{package}."):
        try:
            mod = importlib.import_module(m.name)
        except Exception as e:  # noqa: BLE001
            log.warning("Failed to import %s: %s", m.name, e)
            continue
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = getattr(obj, "_handler_spec", None)
            if isinstance(spec, HandlerSpec):
                specs[spec.family] = spec
    return specs


def _registry(config: str) -> Registry:
    try:
        return load_registry(config, discover_handlers())
    except TaskRunnerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command("list")
def list_tasks(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML task declarations"),
):
    """List pipelines and task families."""
    registry = _registry(config)
    names = registry.tasks()
    if not names:
        typer.echo("No tasks declared.")
        raise typer.Exit(code=0)
    typer.echo("Available tasks:")
    for name in names:
        if name in registry.pipelines:
            typer.echo(f"- {name}: " + ", ".join(registry.pipelines[name]))
        else:
            targets = ", ".join(registry.configs.get(name, {}))
            typer.echo(f"- {name} [{targets}]")


@app.command()
def plan(
    name: str = typer.Argument("default", help="Task or pipeline name"),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML task declarations"),
):
    """Print the steps a task would run, in order, without running them."""
    registry = _registry(config)
    try:
        steps = registry.resolve(name)
    except TaskRunnerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    for i, step in enumerate(steps, 1):
        typer.echo(f"{i}. {step.name}")


@app.command()
def run(
    names: Optional[List[str]] = typer.Argument(
        None, help="Tasks to run in order (default: 'default')"
    ),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML task declarations"),
    log_level: str = typer.Option("", help="Override BOOKPIPE_LOG_LEVEL"),
    log_file: Optional[Path] = typer.Option(None, help="Also write logs to this file"),
):
    """Run one or more tasks; stops at the first failing step."""
    if log_level:
        configure_logging(log_level)
    if log_file:
        add_log_file(log_file)
    registry = _registry(config)
    for name in names or ["default"]:
        try:
            result = registry.run(name)
        except StepExecutionError as e:
            log.error("Task '%s' failed at step %s: %s", name, e.step.name, e.cause)
            typer.echo(f"Error: task '{name}' failed at step {e.step.name}: {e.cause}", err=True)
            raise typer.Exit(code=1)
        except TaskRunnerError as e:
            log.error("Task '%s' aborted: %s", name, e)
            typer.echo(f"Error: task '{name}' aborted: {e}", err=True)
            raise typer.Exit(code=1)
        log.info("Task '%s' done (%d steps)", name, len(result.steps))


def main():
    # .env may set BOOKPIPE_LOG_LEVEL; loggers already exist by now
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging()
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
