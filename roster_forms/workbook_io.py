"""Opening template workbooks and saving filled ones."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from zipfile import BadZipFile
import logging
import os
import tempfile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from .errors import MissingSheetError, NotFoundError, ShapeError

logger = logging.getLogger(__name__)


@contextmanager
def open_workbook(path: str | Path) -> Iterator[Workbook]:
    """
    Load a workbook from ``path`` and close it when the block exits.

    The file handle is released as soon as the workbook is parsed, and the
    workbook is closed on every exit path, errors included.
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"Template not found: {path}")

    with path.open("rb") as fh:
        try:
            wb = load_workbook(fh, rich_text=True)
        except (BadZipFile, InvalidFileException, KeyError) as exc:
            raise ShapeError(f"Template is not a valid .xlsx workbook: {path} ({exc})") from exc
    logger.debug("Opened workbook %s (%s)", path, ", ".join(wb.sheetnames))
    try:
        yield wb
    finally:
        wb.close()


def get_sheet(wb: Workbook, sheet_name: str) -> Worksheet:
    """Return the named worksheet or raise ``MissingSheetError``."""
    if sheet_name not in wb.sheetnames:
        raise MissingSheetError(f'Worksheet "{sheet_name}" not found in template')
    return wb[sheet_name]


def save_workbook(wb: Workbook, out_path: str | Path) -> Path:
    """
    Save ``wb`` to ``out_path``, creating parent directories.

    The workbook is written to a temporary file next to the target and
    moved into place, so a failed save never leaves a truncated file and
    the target may also be the file the workbook was loaded from.
    """
    out_path = Path(out_path).resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(suffix=".xlsx", dir=out_path.parent)
    os.close(fd)
    try:
        wb.save(tmp_name)
        os.replace(tmp_name, out_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Saved workbook %s", out_path)
    return out_path
