"""Settings loading with deterministic precedence.

The cascade is always:
1) explicit overrides passed by the caller
2) environment variables
3) the YAML config file
4) built-in model defaults

Environment variable format:
- Prefix: ``LABELER_``
- Nested keys: ``__`` separator
- Example: ``LABELER_COMPONENTS__SERVICE__LABEL_LEDGER__MAX_LABELS=6``

The YAML path defaults to ``~/.config/labeler/labeler.yaml`` and can be moved
with ``LABELER_CONFIG_FILE``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar

from .models import DEFAULT_CONFIG_PATH, LabelerSettings

CONFIG_FILE_ENV = "LABELER_CONFIG_FILE"


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Return the YAML path to read, honoring ``LABELER_CONFIG_FILE``."""
    if config_path is not None:
        return Path(config_path).expanduser()
    from_env = os.environ.get(CONFIG_FILE_ENV, "").strip()
    if from_env:
        return Path(from_env).expanduser()
    return DEFAULT_CONFIG_PATH


def load_settings(
    *,
    config_path: str | Path | None = None,
    **overrides: Any,
) -> LabelerSettings:
    """Load root settings from overrides, environment, and YAML."""
    path = resolve_config_path(config_path)

    class _FileBoundSettings(LabelerSettings):
        _config_path: ClassVar[Path] = path

    return _FileBoundSettings(**overrides)
