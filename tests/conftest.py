from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from taskrunner import Registry, TargetConfig


class Recorder:
    """Handler factory that records (family, target, config) per call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, TargetConfig]] = []

    def handler(self, fail: bool = False) -> Callable[[TargetConfig], None]:
        def fn(target: TargetConfig) -> None:
            self.calls.append((target.family, target.name, target))
            if fail:
                raise RuntimeError(f"{target.family} exploded")

        return fn

    @property
    def order(self) -> list[str]:
        return [f"{family}:{target}" for family, target, _ in self.calls]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def book_registry(recorder: Recorder, tmp_path: Path) -> Registry:
    """The publish/default layout with recording handlers."""
    registry = Registry(root=tmp_path)
    for family in ("gitbook", "gh-pages", "clean"):
        registry.register_handler(family, recorder.handler())
    registry.configure(
        "gitbook", "development", {"dest": "out", "input": "./", "title": "T"}
    )
    registry.configure("gh-pages", "options", {"base": "out"})
    registry.configure("gh-pages", "src", ["**"])
    registry.configure("clean", "files", ".build")
    registry.register_pipeline("publish", ["gitbook", "gh-pages", "clean"])
    registry.register_pipeline("default", "gitbook")
    return registry
