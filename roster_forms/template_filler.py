"""Filling a single-sheet template with one record."""

from typing import Any
from pathlib import Path
import logging

from openpyxl.worksheet.worksheet import Worksheet

from .config_schema import DEFAULT_CONFIG
from .merge_map import MergeMap
from .records import field_value
from .workbook_io import get_sheet, open_workbook, save_workbook

logger = logging.getLogger(__name__)


def fill_worksheet(
    ws: Worksheet,
    entry: dict[str, Any],
    cells: dict[str, str | list[str]] | None = None,
) -> dict[str, str]:
    """
    Write record fields into fixed cell addresses of ``ws``.

    Addresses inside a merged range are written on the range's master cell.

    Returns:
        Mapping of each requested address to the address actually written.
    """
    if cells is None:
        cells = DEFAULT_CONFIG["fill"]["cells"]

    merge_map = MergeMap.from_worksheet(ws)
    written = {}
    for address, field in cells.items():
        written[address] = merge_map.set_value(ws, address, field_value(entry, field))
    return written


def fill_data_to_template(
    entry: dict[str, Any],
    out_filename: str,
    *,
    template_dir: str | Path | None = None,
    out_dir: str | Path | None = None,
    template_name: str = DEFAULT_CONFIG["fill"]["template"],
    sheet_name: str = DEFAULT_CONFIG["fill"]["sheet"],
    cells: dict[str, str | list[str]] | None = None,
) -> Path:
    """
    Fill the single-record template and save it as a new workbook.

    Args:
        entry: Record with name, year, school, address, address2, classcode.
        out_filename: File name of the output workbook (eg. 'filled_341.xlsx').
        template_dir: Directory holding the template (defaults to cwd).
        out_dir: Output directory, created if needed (defaults to ``out``
            under ``template_dir``).
        template_name: Template file name, or an absolute path.
        sheet_name: Worksheet to fill.
        cells: Address -> field map; defaults to C1..C6.

    Returns:
        Full path of the saved workbook.
    """
    root = Path(template_dir) if template_dir is not None else Path.cwd()
    template_path = root / template_name
    target_dir = Path(out_dir) if out_dir is not None else root / DEFAULT_CONFIG["out_dir"]

    with open_workbook(template_path) as wb:
        ws = get_sheet(wb, sheet_name)
        written = fill_worksheet(ws, entry, cells)
        logger.debug("Filled %s: %s", sheet_name, written)
        return save_workbook(wb, target_dir / out_filename)
