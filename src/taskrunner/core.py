from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Union, List

from .errors import (
    ConfigurationError,
    CyclicPipelineError,
    DuplicateRegistrationError,
    StepExecutionError,
    UnknownTaskReferenceError,
)
from .logging import get_logger


OPTIONS_KEY = "options"

# A pipeline may be declared as a single task name or an ordered list of names
PipelineSpec = Union[str, List[str]]


@dataclass
class TargetConfig:
    """What a handler receives for one target: its data plus merged options."""

    family: str
    name: str
    data: object
    options: dict = field(default_factory=dict)
    root: Path = field(default_factory=Path.cwd)

    def path(self, value: str | Path) -> Path:
        """Resolve ``value`` against the declarations' root directory."""
        p = Path(value)
        return p if p.is_absolute() else self.root / p


@dataclass
class HandlerSpec:
    family: str
    fn: Callable[[TargetConfig], None]
    description: str = ""


def handler(family: str, description: str = ""):
    """Decorator to declare a function as the handler of a task family.

    The wrapped function receives a single ``TargetConfig`` and is called once per
    configured target of the family.
    """

    def deco(fn: Callable[[TargetConfig], None]):
        spec = HandlerSpec(
            family=family, fn=fn, description=description or (fn.__doc__ or "").strip()
        )
        setattr(fn, "_handler_spec", spec)
        return fn

    return deco


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Step:
    family: str
    target: str
    status: StepStatus = StepStatus.PENDING
    error: str | None = None

    @property
    def name(self) -> str:
        return f"{self.family}:{self.target}"


@dataclass
class PipelineRun:
    name: str
    steps: list[Step]

    @property
    def status(self) -> StepStatus:
        statuses = [s.status for s in self.steps]
        if StepStatus.FAILED in statuses:
            return StepStatus.FAILED
        if all(s is StepStatus.SUCCEEDED for s in statuses):
            return StepStatus.SUCCEEDED
        if StepStatus.RUNNING in statuses:
            return StepStatus.RUNNING
        return StepStatus.PENDING

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.SUCCEEDED


class Registry:
    """Named leaf handlers, their target configs and composite pipelines."""

    def __init__(self, root: Path | None = None):
        self.root = Path(root) if root is not None else Path.cwd()
        self.handlers: dict[str, HandlerSpec] = {}
        self.configs: dict[str, dict[str, object]] = {}
        self.family_options: dict[str, dict] = {}
        self.pipelines: dict[str, list[str]] = {}
        self.logger = get_logger("taskrunner.registry")

    # Registration

    def register_handler(self, family: str, fn: Callable[[TargetConfig], None]) -> None:
        if family in self.handlers:
            raise DuplicateRegistrationError("Handler", family)
        if family in self.pipelines:
            raise DuplicateRegistrationError("Pipeline", family)
        spec = getattr(fn, "_handler_spec", None)
        if not isinstance(spec, HandlerSpec) or spec.family != family:
            spec = HandlerSpec(family=family, fn=fn)
        self.handlers[family] = spec

    def configure(self, family: str, target: str, config: object) -> None:
        if target == OPTIONS_KEY:
            if not isinstance(config, dict):
                raise ConfigurationError(f"{family}.options must be a mapping")
            self.family_options[family] = copy.deepcopy(config)
            return
        targets = self.configs.setdefault(family, {})
        if target in targets:
            raise DuplicateRegistrationError("Target", f"{family}:{target}")
        targets[target] = copy.deepcopy(config)

    def register_pipeline(self, name: str, tasks: PipelineSpec) -> None:
        if name in self.pipelines:
            raise DuplicateRegistrationError("Pipeline", name)
        if name in self.handlers:
            raise DuplicateRegistrationError("Handler", name)
        if isinstance(tasks, str):
            tasks = [tasks]
        bad = [t for t in tasks if not isinstance(t, str) or not t]
        if bad:
            raise ConfigurationError(
                f"pipeline {name}: task names must be non-empty strings, got {bad!r}"
            )
        self.pipelines[name] = list(tasks)

    def tasks(self) -> list[str]:
        """Public task names: pipelines first, then configured families."""
        families = [f for f in self.configs if f not in self.pipelines]
        return sorted(self.pipelines) + sorted(families)

    # Resolution

    def resolve(self, name: str) -> list[Step]:
        """Flatten ``name`` into the ordered (family, target) steps it would run."""
        return [Step(family=f, target=t) for f, t in self._expand(name, [], None)]

    def _expand(
        self, name: str, stack: list[str], referenced_by: str | None
    ) -> Iterable[tuple[str, str]]:
        if name in self.pipelines:
            if name in stack:
                raise CyclicPipelineError(stack[stack.index(name):] + [name])
            stack.append(name)
            out: list[tuple[str, str]] = []
            for child in self.pipelines[name]:
                out.extend(self._expand(child, stack, name))
            stack.pop()
            return out

        family, _, target = name.partition(":")
        if family not in self.handlers:
            reason = "no handler registered" if family in self.configs else ""
            raise UnknownTaskReferenceError(name, referenced_by, reason)
        targets = self.configs.get(family, {})
        if not targets:
            raise UnknownTaskReferenceError(name, referenced_by, "no targets configured")
        if target:
            if target not in targets:
                raise UnknownTaskReferenceError(name, referenced_by, "no such target")
            return [(family, target)]
        return [(family, t) for t in targets]

    def target_config(self, family: str, target: str) -> TargetConfig:
        data = copy.deepcopy(self.configs[family][target])
        options = copy.deepcopy(self.family_options.get(family, {}))
        if isinstance(data, dict) and isinstance(data.get(OPTIONS_KEY), dict):
            options.update(data.pop(OPTIONS_KEY))
        return TargetConfig(
            family=family, name=target, data=data, options=options, root=self.root
        )

    # Execution

    def run(self, name: str) -> PipelineRun:
        steps = self.resolve(name)
        run = PipelineRun(name=name, steps=steps)
        self.logger.info("Selected steps: %s", " → ".join(s.name for s in steps))

        for step in steps:
            spec = self.handlers[step.family]
            step_logger = get_logger(f"taskrunner.{name}.{step.family}")
            step.status = StepStatus.RUNNING
            try:
                step_logger.info("Run: %s", step.name)
                spec.fn(self.target_config(step.family, step.target))
            except Exception as e:  # noqa: BLE001
                step.status = StepStatus.FAILED
                step.error = str(e)
                step_logger.exception("Step failed (%s)", step.name)
                raise StepExecutionError(step, e, run) from e
            step.status = StepStatus.SUCCEEDED
        return run
