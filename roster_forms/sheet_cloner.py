"""Cloning a styled form worksheet once per record."""

from copy import copy, deepcopy
from dataclasses import dataclass, field
from typing import Any
from pathlib import Path
import logging

from openpyxl import Workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.utils import column_index_from_string
from openpyxl.worksheet.cell_range import CellRange
from openpyxl.worksheet.worksheet import Worksheet

from .config_schema import DEFAULT_CONFIG
from .merge_map import MergeMap
from .records import field_value, render_label
from .workbook_io import get_sheet, open_workbook, save_workbook

logger = logging.getLogger(__name__)

# Attributes of PrintPageSetup copied onto a clone; ``id`` points at a
# printer-settings part that belongs to the source sheet only.
PAGE_SETUP_ATTRS = (
    "orientation", "paperSize", "scale", "fitToHeight", "fitToWidth",
    "firstPageNumber", "useFirstPageNumber", "paperHeight", "paperWidth",
    "pageOrder", "usePrinterDefaults", "blackAndWhite", "draft",
    "cellComments", "errors", "horizontalDpi", "verticalDpi", "copies",
)


@dataclass(frozen=True)
class SkippedRange:
    """A merge range that could not be applied to a cloned sheet."""

    sheet: str
    range: str
    reason: str


@dataclass
class CloneResult:
    """Outcome of a cloning run."""

    path: Path | None
    sheet_names: list[str] = field(default_factory=list)
    skipped_ranges: list[SkippedRange] = field(default_factory=list)


def copy_style(source, target) -> None:
    """Give ``target`` an independent copy of the style bundle of ``source``.

    Works for cells and for row/column dimensions.
    """
    if not source.has_style:
        return
    target.font = copy(source.font)
    target.fill = copy(source.fill)
    target.border = copy(source.border)
    target.alignment = copy(source.alignment)
    target.number_format = source.number_format
    target.protection = copy(source.protection)


def copy_cell(source, target) -> None:
    """Copy value, data type, hyperlink, comment and style of one cell."""
    target.value = deepcopy(source.value)
    target.data_type = source.data_type
    if source.hyperlink is not None:
        target.hyperlink = copy(source.hyperlink)
    if source.comment is not None:
        target.comment = copy(source.comment)
    copy_style(source, target)


def copy_sheet_setup(source: Worksheet, target: Worksheet) -> None:
    """Carry page setup, print options, sheet properties and views over."""
    for name in PAGE_SETUP_ATTRS:
        setattr(target.page_setup, name, getattr(source.page_setup, name))
    target.print_options = deepcopy(source.print_options)
    target.sheet_properties = deepcopy(source.sheet_properties)
    target.sheet_format = deepcopy(source.sheet_format)
    target.views = deepcopy(source.views)
    # Only one tab may be selected when the workbook opens.
    for view in target.views.sheetView:
        view.tabSelected = False


def copy_columns(source: Worksheet, target: Worksheet) -> None:
    ordered = sorted(source.column_dimensions.items(), key=lambda item: column_index_from_string(item[0]))
    for key, dim in ordered:
        new_dim = target.column_dimensions[key]
        new_dim.width = dim.width
        new_dim.hidden = dim.hidden
        new_dim.outlineLevel = dim.outlineLevel
        new_dim.collapsed = dim.collapsed
        new_dim.bestFit = dim.bestFit
        new_dim.min = dim.min
        new_dim.max = dim.max
        copy_style(dim, new_dim)


def copy_rows(source: Worksheet, target: Worksheet) -> None:
    # Formatted rows below the last used cell are not counted in max_row.
    for row_idx in sorted(source.row_dimensions):
        dim = source.row_dimensions[row_idx]
        new_dim = target.row_dimensions[row_idx]
        new_dim.height = dim.height
        new_dim.hidden = dim.hidden
        new_dim.outlineLevel = dim.outlineLevel
        new_dim.collapsed = dim.collapsed
        copy_style(dim, new_dim)


def copy_master_cells(source: Worksheet, target: Worksheet, merge_map: MergeMap) -> int:
    """Copy every master cell of ``source``; merge members are left to the merge ranges."""
    copied = 0
    for row in source.iter_rows(min_row=1, max_row=source.max_row, max_col=source.max_column):
        for cell in row:
            if isinstance(cell, MergedCell) or not merge_map.is_master(cell.coordinate):
                continue
            if cell.value is None and not cell.has_style and cell.hyperlink is None and cell.comment is None:
                continue
            copy_cell(cell, target.cell(row=cell.row, column=cell.column))
            copied += 1
    return copied


def apply_merge_ranges(ws: Worksheet, ranges: list[str]) -> list[SkippedRange]:
    """
    Merge each range on ``ws``, skipping ranges that cannot be applied.

    A range that is already merged is left alone, so applying the same
    list twice changes nothing.
    """
    skipped = []
    for range_string in ranges:
        try:
            cr = CellRange(range_string)
        except (ValueError, TypeError) as exc:
            skipped.append(SkippedRange(ws.title, str(range_string), f"malformed: {exc}"))
            continue

        if any(existing.coord == cr.coord for existing in ws.merged_cells.ranges):
            continue

        conflict = next((r for r in ws.merged_cells.ranges if not r.isdisjoint(cr)), None)
        if conflict is not None:
            skipped.append(SkippedRange(ws.title, cr.coord, f"overlaps {conflict.coord}"))
            continue

        try:
            ws.merge_cells(cr.coord)
        except ValueError as exc:
            skipped.append(SkippedRange(ws.title, cr.coord, str(exc)))

    for item in skipped:
        logger.warning("Skipped merge %s on %s: %s", item.range, item.sheet, item.reason)
    return skipped


def copy_page_layout(source: Worksheet, target: Worksheet) -> None:
    target.page_margins = deepcopy(source.page_margins)
    target.HeaderFooter = deepcopy(source.HeaderFooter)
    if source.sheet_properties.tabColor is not None:
        target.sheet_properties.tabColor = deepcopy(source.sheet_properties.tabColor)


def _new_sheet(wb: Workbook, title: str, source: Worksheet) -> Worksheet:
    """Create sheet ``title``, replacing an earlier sheet of that name in place."""
    if title == source.title:
        raise ValueError(f'Clone name "{title}" collides with the source sheet')
    index = None
    if title in wb.sheetnames:
        index = wb.sheetnames.index(title)
        wb.remove(wb[title])
        logger.debug("Replacing existing sheet %s", title)
    return wb.create_sheet(title=title, index=index)


def clone_sheet(wb: Workbook, source: Worksheet, title: str, merge_map: MergeMap) -> tuple[Worksheet, list[SkippedRange]]:
    """Create ``title`` as a styled copy of ``source`` inside ``wb``."""
    target = _new_sheet(wb, title, source)
    copy_sheet_setup(source, target)
    copy_columns(source, target)
    copy_rows(source, target)
    copy_master_cells(source, target, merge_map)
    skipped = apply_merge_ranges(target, merge_map.ranges)
    copy_page_layout(source, target)
    return target, skipped


def write_record(
    ws: Worksheet,
    record: dict[str, Any],
    cells: dict[str, str | list[str]],
    labels: dict[str, str],
) -> None:
    """Write record fields and labels onto a cloned sheet through its merge masters."""
    merge_map = MergeMap.from_worksheet(ws)
    for address, field_name in cells.items():
        merge_map.set_value(ws, address, field_value(record, field_name))
    for address, template in labels.items():
        merge_map.set_value(ws, address, render_label(template, record))


def clone_records(
    wb: Workbook,
    source: Worksheet,
    records: list[dict[str, Any]],
    cells: dict[str, str | list[str]] | None = None,
    labels: dict[str, str] | None = None,
    sheet_prefix: str = DEFAULT_CONFIG["clone"]["sheet_prefix"],
) -> CloneResult:
    """
    Add one filled copy of ``source`` per record to ``wb``.

    Sheets are named ``<sheet_prefix><i>`` by position in ``records``; an
    existing sheet of the same name is replaced. Nothing is saved.
    """
    if cells is None:
        cells = DEFAULT_CONFIG["clone"]["cells"]
    if labels is None:
        labels = DEFAULT_CONFIG["clone"]["labels"]

    source_map = MergeMap.from_worksheet(source)
    result = CloneResult(path=None)

    for idx, record in enumerate(records):
        title = f"{sheet_prefix}{idx}"
        target, skipped = clone_sheet(wb, source, title, source_map)
        write_record(target, record, cells, labels)
        already_skipped = {s.range for s in skipped}
        skipped += apply_merge_ranges(target, [r for r in source_map.ranges if r not in already_skipped])

        result.sheet_names.append(title)
        result.skipped_ranges.extend(skipped)
        logger.debug("Cloned %s for %s", title, record.get("name", ""))

    logger.info(
        "Cloned %d sheet(s) from %s, %d merge range(s) skipped",
        len(result.sheet_names), source.title, len(result.skipped_ranges),
    )
    return result


def clone_records_to_template(
    records: list[dict[str, Any]],
    out_filename: str,
    *,
    template_dir: str | Path | None = None,
    out_dir: str | Path | None = None,
    template_name: str = DEFAULT_CONFIG["clone"]["template"],
    sheet_name: str = DEFAULT_CONFIG["clone"]["sheet"],
    cells: dict[str, str | list[str]] | None = None,
    labels: dict[str, str] | None = None,
    sheet_prefix: str = DEFAULT_CONFIG["clone"]["sheet_prefix"],
) -> CloneResult:
    """
    Clone the form sheet of a template once per record and save the workbook.

    Args:
        records: Records with classcode already assigned.
        out_filename: File name of the output workbook.
        template_dir: Directory holding the template (defaults to cwd).
        out_dir: Output directory, created if needed (defaults to ``out``
            under ``template_dir``).
        template_name: Template file name, or an absolute path. Passing an
            earlier output here updates its clones in place.
        sheet_name: Name of the sheet to clone.
        cells: Address -> field (or fallback list of fields) map.
        labels: Address -> format string rendered with record fields.
        sheet_prefix: Prefix of the clone sheet names.

    Returns:
        CloneResult with the saved path, clone names and skipped merges.
    """
    root = Path(template_dir) if template_dir is not None else Path.cwd()
    template_path = root / template_name
    target_dir = Path(out_dir) if out_dir is not None else root / DEFAULT_CONFIG["out_dir"]

    with open_workbook(template_path) as wb:
        source = get_sheet(wb, sheet_name)
        result = clone_records(wb, source, records, cells, labels, sheet_prefix)
        result.path = save_workbook(wb, target_dir / out_filename)
    return result
