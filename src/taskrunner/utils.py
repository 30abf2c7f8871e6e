from __future__ import annotations

"""Small helpers handlers use to read their target configuration."""

from pathlib import Path
from typing import Any, List

from .core import TargetConfig
from .errors import TaskConfigError


_MISSING = object()


def setting(target: TargetConfig, key: str, default: Any = None) -> Any:
    """Look ``key`` up in the target data first, then in its options."""
    value = target.data.get(key) if isinstance(target.data, dict) else None
    if value is None:
        value = target.options.get(key)
    return default if value is None else value


def require(target: TargetConfig, key: str) -> Any:
    value = setting(target, key, _MISSING)
    if value is _MISSING or value == "":
        raise TaskConfigError(target.family, target.name, f"missing required field '{key}'")
    return value


def as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, Path)):
        return [str(value)]
    return [str(v) for v in value]


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def expand_globs(base: Path, patterns: List[str]) -> List[Path]:
    """Expand ``patterns`` relative to ``base``; ``**`` matches recursively.

    Plain (non-glob) patterns are returned as-is whether or not they exist.
    """
    paths: list[Path] = []
    seen: set[Path] = set()
    for pat in patterns:
        if any(ch in pat for ch in "*?["):
            matches = sorted(base.glob(pat))
        else:
            matches = [base / pat]
        for p in matches:
            if p not in seen:
                seen.add(p)
                paths.append(p)
    return paths
