"""Utilities for loading boardfix configuration profiles."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

from apps.boardfix.utils.errors import BoardfixConfigError
from libraries.blocks.models import TYPE_CARD

CONFIG_FILENAME = "boardfix.toml"
STORE_ENV = "BOARDFIX_STORE"
DEFAULT_STORE_PATH = Path("blocks.json")
DEFAULT_ACTOR = "boardfix"


@dataclass(frozen=True)
class ProfileContext:
    """Container describing a resolved configuration profile."""

    name: str
    data: Mapping[str, Any]
    sources: tuple[Path, ...]

    @property
    def actor(self) -> str:
        return str(self.data.get("actor") or DEFAULT_ACTOR)

    @property
    def parent_kind(self) -> str:
        return str(self.data.get("parent_kind") or TYPE_CARD)


def load_profile(
    *,
    profile: str | None = None,
    workspace: Path | None = None,
    project_root: Path | None = None,
) -> ProfileContext:
    """Load and merge boardfix configuration before selecting *profile*.

    Configuration files are read from the user, project, and workspace
    locations, lowest precedence first, and deep-merged.  Each may define a
    ``profiles`` table of named settings and a ``default_profile``.

    The profile name comes from *profile*, then ``BOARDFIX_PROFILE``, then the
    merged ``default_profile``, and finally ``"default"``.
    """

    merged_config: Dict[str, Any] = {}
    sources: list[Path] = []

    for path in _iter_config_paths(workspace=workspace, project_root=project_root):
        try:
            document = _load_toml(path)
        except OSError as exc:  # pragma: no cover - filesystem errors are rare.
            raise BoardfixConfigError(
                f"Unable to read configuration file '{path}': {exc}"
            ) from exc
        except tomllib.TOMLDecodeError as exc:
            raise BoardfixConfigError(
                f"Configuration file '{path}' is not valid TOML: {exc}"
            ) from exc
        merged_config = _deep_merge(merged_config, document)
        sources.append(path)

    profiles = merged_config.get("profiles", {})
    if not isinstance(profiles, Mapping):
        raise BoardfixConfigError(
            "The 'profiles' table must contain mappings of settings"
        )

    selected_profile = _determine_profile_name(merged_config, profile)

    profile_data: Mapping[str, Any]
    if selected_profile in profiles:
        raw_data = profiles[selected_profile]
        if not isinstance(raw_data, Mapping):
            raise BoardfixConfigError(
                f"Profile '{selected_profile}' must be a mapping of configuration values"
            )
        profile_data = dict(raw_data)
    elif selected_profile == "default" or not profiles:
        profile_data = {}
    else:
        available = ", ".join(sorted(str(name) for name in profiles))
        raise BoardfixConfigError(
            f"Profile '{selected_profile}' was not found. Available profiles: {available}."
        )

    return ProfileContext(
        name=selected_profile,
        data=profile_data,
        sources=tuple(sources),
    )


def resolve_store_path(context: ProfileContext, override: Path | None = None) -> Path:
    """Return the block store path for *context*.

    ``--store`` wins over ``BOARDFIX_STORE``, which wins over the profile.
    """

    if override is not None:
        return override
    env_store = os.environ.get(STORE_ENV)
    if env_store:
        return Path(env_store)
    configured = context.data.get("store")
    if configured is None:
        return DEFAULT_STORE_PATH
    if not isinstance(configured, str) or not configured:
        raise BoardfixConfigError(
            f"Profile '{context.name}' has an invalid 'store' value: {configured!r}"
        )
    return Path(configured).expanduser()


def _iter_config_paths(
    *, workspace: Path | None, project_root: Path | None
) -> Iterable[Path]:
    yielded: set[Path] = set()

    for path in _user_config_paths():
        if path.exists() and path not in yielded:
            yielded.add(path)
            yield path

    project_candidate = _normalise_project_root(project_root)
    for path in _project_config_paths(project_candidate):
        if path.exists() and path not in yielded:
            yielded.add(path)
            yield path

    if workspace is not None:
        workspace_path = workspace / CONFIG_FILENAME
        if workspace_path.exists() and workspace_path not in yielded:
            yielded.add(workspace_path)
            yield workspace_path


def _user_config_paths() -> tuple[Path, ...]:
    home = Path(os.path.expanduser("~"))
    xdg_config = os.environ.get("XDG_CONFIG_HOME")

    candidates = []
    if xdg_config:
        candidates.append(Path(xdg_config) / "boardfix" / CONFIG_FILENAME)

    candidates.append(home / ".config" / "boardfix" / CONFIG_FILENAME)
    candidates.append(home / ".boardfix" / CONFIG_FILENAME)
    candidates.append(home / CONFIG_FILENAME)

    return tuple(candidates)


def _project_config_paths(project_root: Path) -> tuple[Path, ...]:
    return (
        project_root / CONFIG_FILENAME,
        project_root / ".boardfix" / CONFIG_FILENAME,
    )


def _normalise_project_root(project_root: Path | None) -> Path:
    if project_root is not None:
        return project_root
    env_root = os.environ.get("BOARDFIX_PROJECT_ROOT")
    if env_root:
        return Path(env_root)
    return Path.cwd()


def _load_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _deep_merge(base: Dict[str, Any], new: Mapping[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {**base}
    for key, value in new.items():
        if (
            key in merged
            and isinstance(merged[key], Mapping)
            and isinstance(value, Mapping)
        ):
            merged[key] = _deep_merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


def _determine_profile_name(config: Mapping[str, Any], override: str | None) -> str:
    if override:
        return override

    env_profile = os.environ.get("BOARDFIX_PROFILE")
    if env_profile:
        return env_profile

    default_profile = config.get("default_profile")
    if isinstance(default_profile, str) and default_profile:
        return default_profile

    return "default"
