"""Layered TOML configuration files.

A deployment reads ``default.toml`` and then ``{SLOTWISE_ENV}.toml`` from the
config directory; later layers win key by key. Either file may be absent.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "SLOTWISE_CONFIG_DIR"
ENVIRONMENT_VAR = "SLOTWISE_ENV"
DEFAULT_ENVIRONMENT = "development"

# How many parent directories of the working directory are searched
_SEARCH_DEPTH = 5


def find_config_dir(start: Path | None = None) -> Path:
    """Locate the config directory.

    An explicit ``SLOTWISE_CONFIG_DIR`` must exist. Otherwise the nearest
    ``config/`` directory at or above ``start`` (default: cwd) is used, and
    a relative ``config`` path when none is found.
    """
    explicit = os.environ.get(CONFIG_DIR_VAR)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"{CONFIG_DIR_VAR} points to a missing directory: {explicit}")
        return path

    directory = (start or Path.cwd()).resolve()
    for candidate in [directory, *directory.parents][:_SEARCH_DEPTH]:
        if (candidate / "config").is_dir():
            return candidate / "config"
    return Path("config")


def current_environment() -> str:
    return os.environ.get(ENVIRONMENT_VAR) or DEFAULT_ENVIRONMENT


def read_toml(path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return tomllib.loads(path.read_text(encoding="utf-8"))


def merge(base: dict[str, Any], *overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge tables recursively; scalars and arrays of later layers replace earlier ones.

    Inputs are left untouched.
    """
    merged = dict(base)
    for layer in overrides:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = merge(current, value)
            else:
                merged[key] = value
    return merged


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """Existing layer files for ``environment``, lowest precedence first."""
    names = ["default.toml"]
    if environment != "default":
        names.append(f"{environment}.toml")
    return [config_dir / name for name in names if (config_dir / name).is_file()]


def load_config(
    environment: str | None = None, config_dir: Path | None = None
) -> dict[str, Any]:
    """Read and merge every layer; an empty dict means model defaults apply."""
    directory = config_dir or find_config_dir()
    layers = config_layers(directory, environment or current_environment())
    return merge({}, *(read_toml(path) for path in layers))
