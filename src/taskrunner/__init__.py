"""Declarative task-pipeline runner for the book build.

Provides a Registry of task-family handlers, their per-target configuration and
named pipelines, plus a Typer CLI that loads declarations from YAML.
"""

from .core import PipelineRun, Registry, Step, StepStatus, TargetConfig, handler  # re-export for convenience
from .errors import (
    ConfigurationError,
    CyclicPipelineError,
    DuplicateRegistrationError,
    StepExecutionError,
    TaskConfigError,
    TaskRunnerError,
    UnknownTaskReferenceError,
)

__all__ = [
    "PipelineRun",
    "Registry",
    "Step",
    "StepStatus",
    "TargetConfig",
    "handler",
    "ConfigurationError",
    "CyclicPipelineError",
    "DuplicateRegistrationError",
    "StepExecutionError",
    "TaskConfigError",
    "TaskRunnerError",
    "UnknownTaskReferenceError",
]
