"""Publish a built site to a hosting branch (gh-pages) with git.

Clones the repository into a cache directory, checks out the branch (creating it
as an orphan if the remote has none), replaces its contents with the files from
`base` matching the target's source globs, commits and pushes.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from taskrunner import TargetConfig, handler
from taskrunner.logging import get_logger
from taskrunner.utils import as_bool, as_list, expand_globs, require, setting

from .process import run_command

load_dotenv()

GITHUB_HTTPS = "https://github.com/"


def _source_patterns(target: TargetConfig) -> List[str]:
    data = target.data
    if isinstance(data, dict):
        data = data.get("src")
    return as_list(data) or ["**"]


def _token() -> str:
    return os.getenv("GH_TOKEN", "")


def _with_token(repo: str) -> str:
    token = _token()
    if token and repo.startswith(GITHUB_HTTPS):
        return repo.replace("https://", f"https://x-access-token:{token}@", 1)
    return repo


def _mask(repo: str) -> str:
    if "@" in repo and repo.startswith("https://"):
        return "https://***@" + repo.split("@", 1)[1]
    return repo


def collect_files(base: Path, patterns: List[str], dotfiles: bool = False) -> List[Path]:
    """Files under ``base`` matching ``patterns``, as paths relative to ``base``."""
    files: list[Path] = []
    seen: set[Path] = set()
    for p in expand_globs(base, patterns):
        candidates = sorted(p.rglob("*")) if p.is_dir() else [p]
        for c in candidates:
            if not c.is_file():
                continue
            rel = c.relative_to(base)
            if ".git" in rel.parts:
                continue
            if not dotfiles and any(part.startswith(".") for part in rel.parts):
                continue
            if rel not in seen:
                seen.add(rel)
                files.append(rel)
    return files


def _git(clone: Path, *args: str, user: dict | None = None, capture: bool = False) -> str:
    """Run git in ``clone`` with the token redacted from logs and errors."""
    cmd = ["git"]
    for key in ("name", "email"):
        if user and user.get(key):
            cmd += ["-c", f"user.{key}={user[key]}"]
    return run_command(cmd + list(args), cwd=clone, capture=capture, secrets=[_token()])


@handler("gh-pages", description="Push the built site to the hosting branch")
def gh_pages(target: TargetConfig):
    logger = get_logger("booktasks.gh_pages")
    base = target.path(require(target, "base"))
    if not base.is_dir():
        raise FileNotFoundError(f"Publish base directory not found: {base}")

    branch = str(setting(target, "branch", "gh-pages"))
    remote = str(setting(target, "remote", "origin"))
    message = str(setting(target, "message", "Updates"))
    clone = target.path(setting(target, "clone", ".build/gh-pages"))
    push = as_bool(setting(target, "push", True))
    add = as_bool(setting(target, "add", False))
    dotfiles = as_bool(setting(target, "dotfiles", False))
    user = setting(target, "user")

    repo = setting(target, "repo")
    if not repo:
        repo = run_command(
            ["git", "config", "--get", f"remote.{remote}.url"], cwd=target.root, capture=True
        )
    repo = _with_token(str(repo))

    files = collect_files(base, _source_patterns(target), dotfiles=dotfiles)
    if not files:
        raise FileNotFoundError(f"No files to publish under {base}")

    if clone.exists():
        shutil.rmtree(clone)
    clone.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Cloning %s into %s", _mask(repo), clone)
    run_command(
        ["git", "clone", "--origin", remote, repo, str(clone)], secrets=[_token()]
    )

    if _git(clone, "ls-remote", "--heads", remote, branch, capture=True):
        _git(clone, "checkout", branch)
    else:
        logger.info("Remote has no '%s' branch; creating it", branch)
        _git(clone, "checkout", "--orphan", branch)

    if not add:
        _git(clone, "rm", "-r", "-f", "--quiet", "--ignore-unmatch", ".")

    logger.info("Copying %d files from %s", len(files), base)
    for rel in files:
        dst = clone / rel
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(base / rel, dst)

    _git(clone, "add", "--all", ".")
    if not _git(clone, "status", "--porcelain", capture=True):
        logger.info("Nothing changed on '%s'; skipping commit", branch)
        return False
    _git(clone, "commit", "-m", message, user=user if isinstance(user, dict) else None)

    if push:
        logger.info("Pushing '%s' to %s", branch, remote)
        _git(clone, "push", "--tags", remote, branch)
    return True
