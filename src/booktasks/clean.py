"""Delete build directories and files."""

from __future__ import annotations

import shutil
from pathlib import Path

from taskrunner import TargetConfig, TaskConfigError, handler
from taskrunner.logging import get_logger
from taskrunner.utils import as_bool, as_list, expand_globs, setting


def _inside(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


@handler("clean", description="Remove build output")
def clean(target: TargetConfig):
    logger = get_logger("booktasks.clean")
    data = target.data
    if isinstance(data, dict):
        data = data.get("src", data.get("files"))
    patterns = as_list(data)
    if not patterns:
        raise TaskConfigError(target.family, target.name, "no paths to clean")
    force = as_bool(setting(target, "force", False))
    root = target.root.resolve()

    removed = 0
    for p in expand_globs(target.root, patterns):
        resolved = p.resolve()
        if not force:
            if resolved == root:
                raise PermissionError(f"Refusing to delete the project root: {p}")
            if not _inside(resolved, root):
                raise PermissionError(f"Refusing to delete outside the project root: {p}")
        if p.is_symlink() or p.is_file():
            p.unlink()
        elif p.is_dir():
            shutil.rmtree(p)
        else:
            logger.debug("Already gone: %s", p)
            continue
        logger.info("Removed %s", p)
        removed += 1
    return removed
