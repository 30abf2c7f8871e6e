from __future__ import annotations

from pathlib import Path

import pytest

from taskrunner import ConfigurationError, Registry
from taskrunner.config import build_registry, load_config, load_registry
from taskrunner.core import HandlerSpec

REPO_ROOT = Path(__file__).resolve().parent.parent


def _specs(recorder, *families: str) -> list[HandlerSpec]:
    return [HandlerSpec(family=f, fn=recorder.handler()) for f in families]


def test_shipped_declarations_define_publish_and_default(recorder) -> None:
    registry = load_registry(
        REPO_ROOT / "configs" / "base.yaml", _specs(recorder, "gitbook", "gh-pages", "clean")
    )

    assert registry.root == REPO_ROOT
    assert registry.pipelines == {
        "publish": ["gitbook", "gh-pages", "clean"],
        "default": ["gitbook"],
    }
    assert [s.name for s in registry.resolve("publish")] == [
        "gitbook:development",
        "gh-pages:src",
        "clean:files",
    ]
    gitbook = registry.target_config("gitbook", "development")
    assert gitbook.data["title"] == "Build Your Own Lisp"
    assert gitbook.data["github"] == "TheThirdOne/BuildYourOwnLispGitbook"
    gh_pages = registry.target_config("gh-pages", "src")
    assert gh_pages.options["base"] == ".build/gitbook"
    assert gh_pages.data == ["**"]


def test_build_registry_from_mapping(recorder, tmp_path: Path) -> None:
    params = {
        "tasks": {"gitbook": {"development": {"dest": "out", "input": "./", "title": "T"}}},
        "pipelines": {"default": "gitbook"},
    }

    registry = build_registry(params, _specs(recorder, "gitbook"), root=tmp_path)
    result = registry.run("default")

    assert isinstance(registry, Registry)
    assert result.ok
    assert recorder.calls[0][2].data == {"dest": "out", "input": "./", "title": "T"}


def test_build_registry_accepts_handler_dict(recorder) -> None:
    specs = {s.family: s for s in _specs(recorder, "clean")}

    registry = build_registry({"tasks": {"clean": {"files": ".build"}}}, specs)

    assert list(registry.handlers) == ["clean"]


def test_root_key_is_relative_to_config_file(recorder, tmp_path: Path) -> None:
    cfg_dir = tmp_path / "configs"
    cfg_dir.mkdir()
    cfg = cfg_dir / "tasks.yaml"
    cfg.write_text("root: ..\ntasks:\n  clean:\n    files: .build\n", encoding="utf-8")

    registry = load_registry(cfg, _specs(recorder, "clean"))

    assert registry.root == tmp_path.resolve()


@pytest.mark.parametrize(
    "params",
    [
        {"tasks": ["gitbook"]},
        {"tasks": {"gitbook": "development"}},
        {"pipelines": ["publish"]},
        {"pipelines": {"publish": {"gitbook": 1}}},
        {"pipelines": {"publish": ["gitbook", 3]}},
        {"pipelines": {"publish": ["gitbook", None]}},
        {"pipelines": {"publish": ["gitbook", ""]}},
        {"tasks": {"gh-pages": {"options": "base"}}},
    ],
)
def test_malformed_declarations_are_rejected(params, recorder) -> None:
    with pytest.raises(ConfigurationError):
        build_registry(params, [])


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    cfg = tmp_path / "list.yaml"
    cfg.write_text("- gitbook\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(cfg)


def test_load_config_empty_file_is_empty_mapping(tmp_path: Path) -> None:
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")

    assert load_config(cfg) == {}
