"""Load task declarations from YAML and populate a Registry from them.

The declarations file has these top-level keys::

    root: ..                  # optional, base for relative target paths
    tasks:
      <family>:
        options: {...}        # optional, shared by every target
        <target>: <config>
    pipelines:
      <name>: [<task>, ...]   # or a single task name
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable

import yaml

from .core import HandlerSpec, Registry
from .errors import ConfigurationError
from .logging import get_logger


DEFAULT_CONFIG = "configs/base.yaml"

log = get_logger("taskrunner.config")


def load_config(path: str | Path) -> dict:
    p = Path(path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            params = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {p}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(params, dict):
        raise ConfigurationError(f"{p}: top level must be a mapping")
    return params


def build_registry(
    params: dict,
    handlers: Iterable[HandlerSpec] | Dict[str, HandlerSpec],
    root: Path | None = None,
) -> Registry:
    """Register ``handlers``, then every target and pipeline declared in ``params``."""
    registry = Registry(root=root)
    specs = handlers.values() if isinstance(handlers, dict) else handlers
    for spec in specs:
        registry.register_handler(spec.family, spec.fn)

    tasks = params.get("tasks") or {}
    if not isinstance(tasks, dict):
        raise ConfigurationError("'tasks' must be a mapping of family -> targets")
    for family, targets in tasks.items():
        if not isinstance(targets, dict):
            raise ConfigurationError(f"tasks.{family} must be a mapping of target -> config")
        for target, config in targets.items():
            registry.configure(str(family), str(target), config)

    pipelines = params.get("pipelines") or {}
    if not isinstance(pipelines, dict):
        raise ConfigurationError("'pipelines' must be a mapping of name -> task list")
    for name, seq in pipelines.items():
        if not isinstance(seq, (str, list)):
            raise ConfigurationError(f"pipelines.{name} must be a task name or a list")
        registry.register_pipeline(str(name), seq)

    log.debug(
        "Registry ready: %d handlers, %d families configured, %d pipelines",
        len(registry.handlers),
        len(registry.configs),
        len(registry.pipelines),
    )
    return registry


def load_registry(
    path: str | Path, handlers: Iterable[HandlerSpec] | Dict[str, HandlerSpec]
) -> Registry:
    """Build a Registry from a declarations file.

    Target paths resolve against the optional top-level ``root`` key, itself
    relative to the file's directory (default: the file's directory).
    """
    p = Path(path).resolve()
    params = load_config(p)
    root = (p.parent / str(params.get("root", "."))).resolve()
    return build_registry(params, handlers, root=root)
