"""Configuration schema and defaults for template filling."""

from typing import Any
from pathlib import Path
import copy
import json

from .errors import NotFoundError, ShapeError

DEFAULT_CONFIG: dict[str, Any] = {
    "data_file": "data2.json",
    "template_dir": ".",
    "out_dir": "out",
    "classcode": {
        "base": 18,
        "block_size": 20
    },
    "fill": {
        "template": "template3.xlsx",
        "sheet": "data",
        "cells": {
            "C1": "name",
            "C2": "year",
            "C3": "school",
            "C4": "address",
            "C5": "address2",
            "C6": "classcode"
        }
    },
    "clone": {
        "template": "template-all.xlsx",
        "sheet": "form",
        "sheet_prefix": "STT-",
        "cells": {
            "C6": "name",
            "C7": ["year", "name"],
            "C8": "school",
            "C9": "address",
            "C10": "address2"
        },
        "labels": {
            "F6": "Mã lớp: {classcode}"
        },
        "output_file": "template-all-filled.xlsx"
    },
    "selection": {
        "start": 0,
        "end": None
    }
}

_SECTIONS = ("classcode", "fill", "clone", "selection")
_SCALARS = ("data_file", "template_dir", "out_dir")


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(user_config: dict[str, Any]) -> dict[str, Any]:
    """
    Merge user configuration with defaults.

    User config values override defaults. Missing keys use default values.
    Cell maps and labels are replaced as a whole, not merged key by key.
    """
    result = get_default_config()

    for key in _SCALARS:
        if key in user_config:
            result[key] = user_config[key]

    for section in _SECTIONS:
        if section in user_config:
            result[section].update(copy.deepcopy(user_config[section]))

    return result


def load_config(config_path: str | Path) -> dict[str, Any]:
    """Load a JSON config file and merge it over the defaults."""
    path = Path(config_path)
    if not path.exists():
        raise NotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8-sig") as f:
        try:
            user_config = json.load(f)
        except json.JSONDecodeError as exc:
            raise ShapeError(f"Config file is not valid JSON: {path} ({exc})") from exc

    if not isinstance(user_config, dict):
        raise ShapeError(f"Config file does not contain an object: {path}")

    return merge_config(user_config)


def resolve_path(value: str | Path, base_dir: str | Path) -> Path:
    """Resolve a config path against base_dir unless it is already absolute."""
    path = Path(value)
    if path.is_absolute():
        return path
    return Path(base_dir) / path
