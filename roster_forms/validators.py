"""Validation utilities for records and configuration."""

from typing import Any

from openpyxl.utils.cell import coordinate_from_string
from openpyxl.utils.exceptions import CellCoordinatesException


def _check_cells(section: str, cells: dict[str, Any], issues: list[dict[str, str]]) -> None:
    for address, fields in cells.items():
        try:
            coordinate_from_string(str(address).replace("$", "").upper())
        except CellCoordinatesException:
            issues.append({
                "type": "error",
                "message": f"{section}: '{address}' is not a valid cell address"
            })
            continue

        names = [fields] if isinstance(fields, str) else fields
        if not isinstance(names, list) or not names or not all(isinstance(n, str) and n for n in names):
            issues.append({
                "type": "error",
                "message": f"{section}: cell {address} must map to a field name or a list of field names"
            })


def validate_config(config: dict[str, Any]) -> list[dict[str, str]]:
    """
    Validate configuration and return list of issues.

    Returns:
        List of dicts with 'type' (error/warning) and 'message'.
    """
    issues = []

    block_size = config.get("classcode", {}).get("block_size", 0)
    if not isinstance(block_size, int) or block_size < 1:
        issues.append({
            "type": "error",
            "message": f"Class code block size must be a positive integer (got {block_size!r})"
        })

    fill = config.get("fill", {})
    clone = config.get("clone", {})

    for section, settings in (("fill", fill), ("clone", clone)):
        if not settings.get("template"):
            issues.append({
                "type": "error",
                "message": f"{section}: no template file configured"
            })
        if not settings.get("sheet"):
            issues.append({
                "type": "error",
                "message": f"{section}: no worksheet name configured"
            })
        _check_cells(section, settings.get("cells", {}), issues)

    for address, label in clone.get("labels", {}).items():
        if not isinstance(label, str):
            issues.append({
                "type": "error",
                "message": f"clone: label for {address} must be a string"
            })

    if not clone.get("cells") and not clone.get("labels"):
        issues.append({
            "type": "warning",
            "message": "clone: no cells or labels configured, clones will be blank copies"
        })

    selection = config.get("selection", {})
    start = selection.get("start") or 0
    end = selection.get("end")
    if end is not None and end < start:
        issues.append({
            "type": "error",
            "message": f"Selection end ({end}) is before start ({start})"
        })

    return issues


def validate_records(records: list[dict[str, Any]]) -> list[dict[str, str]]:
    """
    Validate loaded records and return issues.

    Returns:
        List of dicts with 'type' and 'message'.
    """
    issues = []

    if not records:
        issues.append({
            "type": "error",
            "message": "No records provided"
        })
        return issues

    # Records without a name produce blank forms
    unnamed = [str(i) for i, r in enumerate(records) if not str(r.get("name") or "").strip()]
    if unnamed:
        issues.append({
            "type": "warning",
            "message": f"{len(unnamed)} record(s) without a name (positions {', '.join(unnamed[:10])})"
        })

    seen = set()
    duplicates = []
    for record in records:
        name = str(record.get("name") or "").strip()
        if not name:
            continue
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)

    if duplicates:
        issues.append({
            "type": "warning",
            "message": f"Duplicate student names: {', '.join(duplicates)}"
        })

    return issues
