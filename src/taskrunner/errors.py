"""Exceptions raised while registering, resolving and running tasks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .core import PipelineRun, Step


class TaskRunnerError(Exception):
    """Base class for every error the runner raises on purpose."""


class ConfigurationError(TaskRunnerError):
    """The task declarations file is malformed."""


class DuplicateRegistrationError(TaskRunnerError):
    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} already registered: {name}")


class UnknownTaskReferenceError(TaskRunnerError):
    def __init__(self, name: str, referenced_by: str | None = None, reason: str = ""):
        self.name = name
        self.referenced_by = referenced_by
        msg = f"Unknown task: {name}"
        if referenced_by:
            msg += f" (referenced by {referenced_by})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CyclicPipelineError(TaskRunnerError):
    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        super().__init__("Cycle detected in pipeline: " + " → ".join(self.cycle))


class StepExecutionError(TaskRunnerError):
    """A handler failed; the run stopped at ``step``.

    ``cause`` is the exception the handler raised, ``run`` the partial run with
    per-step statuses.
    """

    def __init__(self, step: "Step", cause: BaseException, run: "PipelineRun | None" = None):
        self.step = step
        self.cause = cause
        self.run = run
        super().__init__(f"Step failed ({step.name}): {cause}")

    @property
    def family(self) -> str:
        return self.step.family

    @property
    def target(self) -> str:
        return self.step.target


class TaskConfigError(TaskRunnerError):
    """A handler found its target configuration incomplete or invalid."""

    def __init__(self, family: str, target: str, message: str):
        self.family = family
        self.target = target
        super().__init__(f"{family}:{target}: {message}")
