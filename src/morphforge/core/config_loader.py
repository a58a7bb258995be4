"""JSON config file loading utilities."""

import json
from pathlib import Path
from typing import Any

from morphforge.constants import CONFIG_DIR, VERSION_PROFILES_FILE
from morphforge.core.versions import VersionContext


def load_json(path: Path) -> Any:
    """Load and return parsed JSON from a file."""
    with open(path) as f:
        return json.load(f)


def load_config(name: str) -> Any:
    """Load a config file from assets/config/."""
    return load_json(CONFIG_DIR / name)


def load_version_profiles() -> dict[str, dict]:
    """Load all named version profiles."""
    return load_config(VERSION_PROFILES_FILE)


def load_version_profile(name: str) -> VersionContext:
    """Build the :class:`VersionContext` for a named profile."""
    profiles = load_version_profiles()
    if name not in profiles:
        raise KeyError(
            f"Unknown version profile {name!r}; known: {', '.join(sorted(profiles))}")
    return VersionContext.from_config(profiles[name])
