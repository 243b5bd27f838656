"""calcjit Configuration — JIT engine settings.

Settings may be supplied directly as a ``JitConfig`` or loaded from a
``.calcjitrc.json`` (or ``calcjit.config.json``) file found by walking up
from a start directory.

Example .calcjitrc.json:
    {
      "opt_level": 2,
      "entry_name": "calcjit_expr",
      "module_name": "calcjit",
      "verify": true
    }
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, fields
from typing import Any, Optional

from calcjit.codegen import DEFAULT_ENTRY_NAME
from calcjit.errors import ConfigError

logger = logging.getLogger(__name__)

_SYMBOL_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


@dataclass(frozen=True)
class JitConfig:
    """Settings for one pipeline run."""
    # Target machine optimization level, 0-3
    opt_level: int = 0
    # Symbol name of the compiled nullary function
    entry_name: str = DEFAULT_ENTRY_NAME
    module_name: str = "calcjit"
    # Run LLVM module verification before compiling
    verify: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.opt_level, bool) or not isinstance(self.opt_level, int) \
                or not 0 <= self.opt_level <= 3:
            raise ConfigError(f"opt_level must be an integer from 0 to 3, got {self.opt_level!r}",
                              key="opt_level")
        for key in ("entry_name", "module_name"):
            value = getattr(self, key)
            if not isinstance(value, str) or not _SYMBOL_RE.match(value):
                raise ConfigError(f"{key} must be a valid symbol name, got {value!r}", key=key)
        if not isinstance(self.verify, bool):
            raise ConfigError(f"verify must be a boolean, got {self.verify!r}", key="verify")


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".calcjitrc.json",
    "calcjit.config.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def config_from_dict(data: dict[str, Any]) -> JitConfig:
    """Build a JitConfig from a mapping. Unknown keys are ignored."""
    known = {f.name for f in fields(JitConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("ignoring unknown config keys: %s", ", ".join(unknown))
    return JitConfig(**{k: v for k, v in data.items() if k in known})


def load_config(path: Optional[str] = None, start_dir: str = ".") -> JitConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found or it cannot be read, returns defaults.
    Invalid values raise ConfigError.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return JitConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("could not read config %s: %s", path, e)
        return JitConfig()

    if not isinstance(data, dict):
        logger.warning("config %s is not a JSON object, using defaults", path)
        return JitConfig()

    logger.debug("loaded config from %s", path)
    return config_from_dict(data)
