"""Documentation site generation via the `gitbook` command-line tool.

Builds the book found at `input` into `dest`. Title, description and GitHub repo
are handed to gitbook through a temporary `book.json` when the book has none.
"""

from __future__ import annotations

import json

from taskrunner import TargetConfig, handler
from taskrunner.logging import get_logger
from taskrunner.utils import require, setting

from .process import run_command


BOOK_JSON = "book.json"
METADATA_FIELDS = ("title", "description", "github")


@handler("gitbook", description="Render the book into a static site")
def gitbook(target: TargetConfig):
    logger = get_logger("booktasks.gitbook")
    input_dir = target.path(require(target, "input"))
    dest = target.path(require(target, "dest"))
    command = str(setting(target, "command", "gitbook"))

    if not input_dir.is_dir():
        raise FileNotFoundError(f"Book input directory not found: {input_dir}")

    metadata = {k: setting(target, k) for k in METADATA_FIELDS if setting(target, k)}
    book_json = input_dir / BOOK_JSON
    wrote_book_json = False
    if metadata and not book_json.exists():
        book_json.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
        wrote_book_json = True
    elif metadata:
        logger.debug("%s exists; leaving book metadata to it", book_json)

    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Building '%s' from %s into %s", metadata.get("title", input_dir.name), input_dir, dest)
    try:
        run_command([command, "build", str(input_dir), str(dest)])
    finally:
        if wrote_book_json:
            book_json.unlink()

    if not (dest / "index.html").exists():
        logger.warning("No index.html produced under %s", dest)
    return dest
