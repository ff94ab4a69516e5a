from __future__ import annotations

from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from apps.boardfix.config import load_profile, resolve_store_path
from apps.boardfix.utils.errors import BoardfixConfigError


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("BOARDFIX_PROFILE", raising=False)
    monkeypatch.delenv("BOARDFIX_STORE", raising=False)
    monkeypatch.setenv("BOARDFIX_PROJECT_ROOT", str(tmp_path / "project"))


def test_load_profile_merges_precedence(tmp_path: Path) -> None:
    _write(
        tmp_path / "home" / ".config" / "boardfix" / "boardfix.toml",
        """
default_profile = "ops"

[profiles.ops]
store = "/srv/user-blocks.json"
actor = "user-actor"
""".strip()
        + "\n",
    )
    _write(
        tmp_path / "project" / "boardfix.toml",
        """
[profiles.ops]
actor = "project-actor"
""".strip()
        + "\n",
    )
    workspace = tmp_path / "workspace"
    _write(
        workspace / "boardfix.toml",
        """
[profiles.ops]
parent_kind = "page"
""".strip()
        + "\n",
    )

    context = load_profile(workspace=workspace)

    assert context.name == "ops"
    assert context.data == {
        "store": "/srv/user-blocks.json",
        "actor": "project-actor",
        "parent_kind": "page",
    }
    assert context.actor == "project-actor"
    assert context.parent_kind == "page"
    assert len(context.sources) == 3


def test_load_profile_defaults_without_files() -> None:
    context = load_profile()

    assert context.name == "default"
    assert context.data == {}
    assert context.actor == "boardfix"
    assert context.parent_kind == "card"
    assert resolve_store_path(context) == Path("blocks.json")


def test_env_profile_selection(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    _write(
        tmp_path / "project" / "boardfix.toml",
        """
[profiles.a]
actor = "a"

[profiles.b]
actor = "b"
""".strip()
        + "\n",
    )
    monkeypatch.setenv("BOARDFIX_PROFILE", "b")

    assert load_profile().actor == "b"
    assert load_profile(profile="a").actor == "a"


def test_unknown_profile_raises(tmp_path: Path) -> None:
    _write(tmp_path / "project" / "boardfix.toml", "[profiles.a]\nactor = 'a'\n")

    with pytest.raises(BoardfixConfigError, match="Available profiles: a"):
        load_profile(profile="missing")


def test_invalid_toml_raises(tmp_path: Path) -> None:
    _write(tmp_path / "project" / "boardfix.toml", "profiles = [\n")

    with pytest.raises(BoardfixConfigError):
        load_profile()


def test_store_path_precedence(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    _write(tmp_path / "project" / "boardfix.toml", "[profiles.default]\nstore = 'profile.json'\n")
    context = load_profile()

    assert resolve_store_path(context) == Path("profile.json")

    monkeypatch.setenv("BOARDFIX_STORE", str(tmp_path / "env.json"))
    assert resolve_store_path(context) == tmp_path / "env.json"
    assert resolve_store_path(context, tmp_path / "cli.json") == tmp_path / "cli.json"
