"""Filling spreadsheet templates with student records."""

from .config_schema import DEFAULT_CONFIG, get_default_config, load_config, merge_config, resolve_path
from .errors import MissingSheetError, NotFoundError, RosterFormsError, ShapeError
from .records import (
    build_records,
    classcode_for,
    field_value,
    load_records,
    records_to_frame,
    render_label,
    select_classcode,
    select_slice,
)
from .validators import validate_config, validate_records
from .merge_map import MergeMap
from .template_filler import fill_data_to_template, fill_worksheet
from .sheet_cloner import CloneResult, SkippedRange, clone_records, clone_records_to_template

__all__ = [
    "DEFAULT_CONFIG",
    "get_default_config",
    "load_config",
    "merge_config",
    "resolve_path",
    "MissingSheetError",
    "NotFoundError",
    "RosterFormsError",
    "ShapeError",
    "build_records",
    "classcode_for",
    "field_value",
    "load_records",
    "records_to_frame",
    "render_label",
    "select_classcode",
    "select_slice",
    "validate_config",
    "validate_records",
    "MergeMap",
    "fill_data_to_template",
    "fill_worksheet",
    "CloneResult",
    "SkippedRange",
    "clone_records",
    "clone_records_to_template",
]
