#!/usr/bin/env python3
"""
Parser options and configuration loading.

Options come from three layers with increasing precedence:
1. Built-in defaults
2. A JSON config file
3. Explicit overrides passed by the caller
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_DELIMITERS = " _.&+,|"


@dataclass
class Options:
    """Switches controlling which parser passes run."""
    allowed_delimiters: str = DEFAULT_DELIMITERS
    parse_episode_number: bool = True
    parse_episode_title: bool = True
    parse_file_extension: bool = True
    parse_release_group: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_OPTION_TYPES = {f.name: (str if f.name == "allowed_delimiters" else bool) for f in fields(Options)}


def _validate(source: str, values: Mapping[str, Any]) -> Dict[str, Any]:
    """Reject unknown keys and wrongly typed values."""
    validated: Dict[str, Any] = {}
    for key, value in values.items():
        expected = _OPTION_TYPES.get(key)
        if expected is None:
            raise ValueError(f"Unknown option '{key}' in {source}")
        if not isinstance(value, expected):
            raise ValueError(
                f"Option '{key}' in {source} must be {expected.__name__}, got {type(value).__name__}"
            )
        validated[key] = value
    return validated


def load_options(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Mapping[str, Any]] = None
) -> Options:
    """
    Build parser options from defaults, an optional config file and overrides.

    Args:
        path: JSON config file holding an object of option values. A missing or
              unreadable file is logged and ignored.
        overrides: Option values that win over the file

    Returns:
        Options instance

    Raises:
        ValueError: On unknown option names, wrong value types, or a config
                    file whose top level is not an object
    """
    merged = Options().to_dict()

    if path is not None:
        config_path = Path(path)
        file_config: Any = {}
        try:
            file_config = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read config %s (%s); using defaults", config_path, exc)
            file_config = {}
        if not isinstance(file_config, dict):
            raise ValueError(f"Config {config_path} must contain a JSON object")
        merged.update(_validate(str(config_path), file_config))

    if overrides:
        merged.update(_validate("overrides", overrides))

    return Options(**merged)
