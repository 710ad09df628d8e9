"""Locating and reading ``realmctl.toml``.

A config file is chosen in this order:

1. the ``--config`` path given on the command line;
2. the file named by ``REALMCTL_CONFIG``;
3. the nearest ``realmctl.toml`` in the working directory or one of its
   ancestors.

A path given explicitly (1 or 2) that does not exist is not an error: the
code defaults apply. Discovery does not fall through to the walk-up, so a
typo never picks up an unrelated project's file.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from realmctl.config.models import RealmConfig

CONFIG_FILENAME = "realmctl.toml"
CONFIG_ENV_VAR = "REALMCTL_CONFIG"


def _existing(raw: str) -> Path | None:
    path = Path(raw).expanduser()
    return path if path.is_file() else None


def find_config(start: Path | None = None) -> Path | None:
    """The file named by ``REALMCTL_CONFIG``, else the nearest ``realmctl.toml``
    at or above *start* (default: cwd). None when neither exists.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return _existing(env_path)

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config(config_path: str | None = None, start: Path | None = None) -> Path | None:
    """Apply the full precedence: ``--config`` first, then :func:`find_config`."""
    if config_path:
        return _existing(config_path)
    return find_config(start)


def load_config(path: Path | None = None, cwd: Path | None = None) -> RealmConfig:
    """Validate the ``[client]`` and ``[browse]`` sections of a config file.

    Without *path* the file is discovered from *cwd*; no file at all yields
    the defaults.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return RealmConfig()

    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return RealmConfig.model_validate(data)
