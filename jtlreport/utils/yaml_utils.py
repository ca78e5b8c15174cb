"""Helpers for reading YAML configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Union

import yaml


def normalize_yaml_dict_keys(data: Dict[Any, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` whose keys are all strings.

    YAML 1.1 turns bare ``yes``/``no``/``on``/``off`` keys into booleans; they
    come back as ``"True"``/``"False"`` so they fail the unknown-key check
    instead of silently matching nothing.

    Examples:
        >>> normalize_yaml_dict_keys({True: 1, "label_length": 70})
        {'True': 1, 'label_length': 70}
    """
    return {str(key): value for key, value in data.items()}


def load_yaml_mapping(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML file that must hold a mapping (or nothing at all).

    Args:
        path: File to read.

    Returns:
        The mapping with string keys; empty when the file is empty.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the document is not a mapping or is not valid YAML.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return normalize_yaml_dict_keys(data)
