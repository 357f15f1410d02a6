"""Configuration loading and precedence resolution.

Settings for a conversion run come from four layers, highest first:

1. CLI flags (passed to :func:`resolve_config` as keyword overrides)
2. Environment variables (``OPENAPI2MOONWALK_INDENT``, ...; see
   :data:`ENV_VARS`)
3. Project config ``./openapi2moonwalk.json``
4. Defaults of :class:`~openapi2moonwalk.models.ConverterConfig`

The crash-log directory follows the XDG Base Directory spec on Linux/BSD
(``~/.local/share/openapi2moonwalk``) and ``~/.openapi2moonwalk`` elsewhere.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from openapi2moonwalk.exceptions import ConfigError
from openapi2moonwalk.models import ConverterConfig

_APP_NAME = "openapi2moonwalk"
PROJECT_CONFIG_FILENAME = "openapi2moonwalk.json"

ENV_VARS: dict[str, str] = {
    "target_version": "OPENAPI2MOONWALK_TARGET_VERSION",
    "indent": "OPENAPI2MOONWALK_INDENT",
    "validate_input": "OPENAPI2MOONWALK_VALIDATE",
    "on_conflict": "OPENAPI2MOONWALK_ON_CONFLICT",
    "collect_security": "OPENAPI2MOONWALK_COLLECT_SECURITY",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory used for crash logs, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/openapi2moonwalk/`` (default
    ``~/.local/share/openapi2moonwalk/``). Elsewhere: ``~/.openapi2moonwalk/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Layers ---


def load_project_config(directory: Optional[Path] = None) -> dict[str, Any]:
    """Load ``openapi2moonwalk.json`` from *directory* (default: the working directory).

    Returns:
        The parsed object, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not an object.
    """
    path = (directory or Path.cwd()) / PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


def load_env_config() -> dict[str, str]:
    """Return the settings present in the environment, keyed by field name.

    Values stay strings; Pydantic coerces them (``"1"``/``"true"`` for
    booleans, digits for ``indent``).
    """
    values: dict[str, str] = {}
    for field_name, var in ENV_VARS.items():
        value = os.environ.get(var)
        if value:
            values[field_name] = value
    return values


def resolve_config(
    directory: Optional[Path] = None,
    **cli_overrides: Any,
) -> ConverterConfig:
    """Merge all configuration layers into a :class:`ConverterConfig`.

    Args:
        directory: Where to look for the project config file.
        **cli_overrides: Values from CLI flags. ``None`` means "flag not
            given" and does not override lower layers.

    Returns:
        The effective configuration.

    Raises:
        ConfigError: If the project file is unreadable or any layer holds an
            invalid value.

    Example::

        config = resolve_config(indent=4, on_conflict=None)
    """
    merged: dict[str, Any] = {}
    merged.update(load_project_config(directory))
    merged.update(load_env_config())
    merged.update({key: value for key, value in cli_overrides.items() if value is not None})

    try:
        return ConverterConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
