"""Shared subprocess helper for handlers that drive external tools."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, List, Optional

from taskrunner.logging import get_logger


log = get_logger("booktasks.process")

REDACTED = "***"


def redact(text: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def run_command(
    args: List[str],
    cwd: Optional[Path] = None,
    capture: bool = False,
    secrets: Iterable[str] = (),
) -> str:
    """Run ``args`` to completion, raising CalledProcessError on a non-zero exit.

    Returns stripped stdout when ``capture`` is set, else an empty string.
    Any of ``secrets`` found in the command line is replaced by ``***`` in logs
    and in the raised error.
    """
    secrets = [s for s in secrets if s]
    shown = [redact(a, secrets) for a in args]
    log.debug("$ %s (cwd=%s)", " ".join(shown), cwd or ".")
    try:
        proc = subprocess.run(
            args,
            cwd=str(cwd) if cwd else None,
            check=True,
            capture_output=capture,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        if not secrets:
            raise
        raise subprocess.CalledProcessError(
            e.returncode,
            shown,
            output=redact(e.output or "", secrets),
            stderr=redact(e.stderr or "", secrets),
        ) from None
    return (proc.stdout or "").strip() if capture else ""
