# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Configuration helpers: environment lookup, duration parsing and config files.
"""

import json
import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

ENV_PREFIX = "CONTENTGATE_"


def get_config_value(key: str, default: Any = None,
                     cast_type: Optional[type] = None,
                     env_prefix: str = ENV_PREFIX) -> Any:
    """
    Get configuration value from environment or return default.
    Optionally cast to specified type.
    """
    env_key = f"{env_prefix}{key.upper()}"
    value = os.environ.get(env_key, default)

    if value is None or cast_type is None:
        return value

    try:
        if cast_type == bool:
            if isinstance(value, str):
                return value.lower() in ('true', '1', 'yes', 'on')
            return bool(value)
        elif cast_type == list:
            # Comma-separated
            if isinstance(value, str):
                return [item.strip() for item in value.split(',') if item.strip()]
            return list(value) if value else []
        else:
            return cast_type(value)
    except (ValueError, TypeError):
        return default


def get_bool_config(key: str, default: bool = False,
                    env_prefix: str = ENV_PREFIX) -> bool:
    """Get boolean configuration value."""
    return get_config_value(key, default, bool, env_prefix)


def get_float_config(key: str, default: float = 0.0,
                     env_prefix: str = ENV_PREFIX) -> float:
    """Get float configuration value."""
    return get_config_value(key, default, float, env_prefix)


def get_list_config(key: str, default: Optional[List[str]] = None,
                    env_prefix: str = ENV_PREFIX) -> List[str]:
    """Get list configuration value (comma-separated)."""
    if default is None:
        default = []
    return get_config_value(key, default, list, env_prefix)


def parse_duration(value: Any) -> timedelta:
    """
    Parse a duration given as a timedelta, a number of seconds, or a string
    like '30s', '5m', '2h', '1d'.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    duration_str = value.strip().lower()
    if re.match(r'^\d+(?:\.\d+)?$', duration_str):
        return timedelta(seconds=float(duration_str))

    match = re.match(r'^(\d+(?:\.\d+)?)\s*([smhd])$', duration_str)
    if not match:
        raise ValueError(f"Invalid duration format: {value}")

    amount, unit = match.groups()
    amount = float(amount)

    if unit == 's':
        return timedelta(seconds=amount)
    elif unit == 'm':
        return timedelta(minutes=amount)
    elif unit == 'h':
        return timedelta(hours=amount)
    return timedelta(days=amount)


def load_config_file(file_path: str) -> Dict[str, Any]:
    """Load configuration from a JSON or YAML file."""
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    file_ext = Path(file_path).suffix.lower()

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_ext == '.json':
            data = json.load(f)
        elif file_ext in ('.yaml', '.yml'):
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {file_ext}")

    return data or {}
