from __future__ import annotations

import json
from pathlib import Path

import pytest

from booktasks import gitbook as gitbook_mod
from taskrunner import TargetConfig, TaskConfigError


@pytest.fixture
def book(tmp_path: Path) -> Path:
    (tmp_path / "README.md").write_text("# Build Your Own Lisp\n", encoding="utf-8")
    (tmp_path / "SUMMARY.md").write_text("* [Intro](README.md)\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def commands(monkeypatch: pytest.MonkeyPatch):
    seen: list[dict] = []

    def fake_run(args, cwd=None, capture=False):
        input_dir = Path(args[2])
        book_json = input_dir / "book.json"
        seen.append(
            {
                "args": args,
                "book_json": json.loads(book_json.read_text(encoding="utf-8"))
                if book_json.exists()
                else None,
            }
        )
        return ""

    monkeypatch.setattr(gitbook_mod, "run_command", fake_run)
    return seen


def _target(root: Path, **data) -> TargetConfig:
    return TargetConfig(family="gitbook", name="development", data=data, root=root)


def test_builds_with_temporary_metadata(book: Path, commands) -> None:
    dest = gitbook_mod.gitbook(
        _target(
            book,
            input="./",
            dest=".build/gitbook",
            title="Build Your Own Lisp",
            description="Learn C and make a Lisp Dialect",
            github="TheThirdOne/BuildYourOwnLispGitbook",
        )
    )

    assert dest == book / ".build" / "gitbook"
    assert commands[0]["args"] == ["gitbook", "build", str(book / "./"), str(dest)]
    assert commands[0]["book_json"] == {
        "title": "Build Your Own Lisp",
        "description": "Learn C and make a Lisp Dialect",
        "github": "TheThirdOne/BuildYourOwnLispGitbook",
    }
    assert not (book / "book.json").exists()


def test_existing_book_json_is_left_alone(book: Path, commands) -> None:
    (book / "book.json").write_text('{"title": "Own"}', encoding="utf-8")

    gitbook_mod.gitbook(_target(book, input=".", dest="out", title="Other"))

    assert commands[0]["book_json"] == {"title": "Own"}
    assert json.loads((book / "book.json").read_text(encoding="utf-8")) == {"title": "Own"}


def test_temporary_metadata_removed_when_build_fails(book: Path, monkeypatch) -> None:
    def boom(args, cwd=None, capture=False):
        raise RuntimeError("gitbook crashed")

    monkeypatch.setattr(gitbook_mod, "run_command", boom)

    with pytest.raises(RuntimeError):
        gitbook_mod.gitbook(_target(book, input=".", dest="out", title="T"))
    assert not (book / "book.json").exists()


def test_command_option_overrides_executable(book: Path, commands) -> None:
    target = _target(book, input=".", dest="out")
    target.options = {"command": "/opt/gitbook/bin/gitbook"}

    gitbook_mod.gitbook(target)

    assert commands[0]["args"][0] == "/opt/gitbook/bin/gitbook"


@pytest.mark.parametrize("missing", ["input", "dest"])
def test_missing_required_field(book: Path, commands, missing: str) -> None:
    data = {"input": ".", "dest": "out"}
    del data[missing]

    with pytest.raises(TaskConfigError, match=missing):
        gitbook_mod.gitbook(_target(book, **data))
    assert commands == []


def test_missing_input_directory(book: Path, commands) -> None:
    with pytest.raises(FileNotFoundError):
        gitbook_mod.gitbook(_target(book, input="chapters", dest="out"))
