"""Merge-master lookup for worksheet cell addresses."""

from typing import Any

from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import coordinate_from_string
from openpyxl.worksheet.cell_range import CellRange
from openpyxl.worksheet.worksheet import Worksheet


def normalize_address(address: str) -> str:
    """Return ``address`` upper-cased with ``$`` anchors removed (``$c$6`` -> ``C6``)."""
    column, row = coordinate_from_string(address.replace("$", "").upper())
    return f"{column}{row}"


class MergeMap:
    """
    Map every cell address of a sheet to the master address holding its value.

    Addresses outside any merged range are their own master. Only the
    master (top-left) cell of a merged range may be written; the other
    members are read-only placeholders in openpyxl.
    """

    def __init__(self, ranges: list[str] | None = None):
        self._ranges: list[str] = []
        self._masters: dict[str, str] = {}
        for range_string in ranges or []:
            self.add_range(range_string)

    @classmethod
    def from_worksheet(cls, ws: Worksheet) -> "MergeMap":
        ordered = sorted(ws.merged_cells.ranges, key=lambda r: (r.min_row, r.min_col, r.max_row, r.max_col))
        return cls([r.coord for r in ordered])

    def add_range(self, range_string: str) -> None:
        cr = CellRange(range_string)
        master = f"{get_column_letter(cr.min_col)}{cr.min_row}"
        for row, col in cr.cells:
            self._masters[f"{get_column_letter(col)}{row}"] = master
        self._ranges.append(cr.coord)

    @property
    def ranges(self) -> list[str]:
        return list(self._ranges)

    def master_of(self, address: str) -> str:
        key = normalize_address(address)
        return self._masters.get(key, key)

    def is_master(self, address: str) -> bool:
        key = normalize_address(address)
        return self._masters.get(key, key) == key

    def set_value(self, ws: Worksheet, address: str, value: Any) -> str:
        """Write ``value`` to the master of ``address`` and return that master."""
        master = self.master_of(address)
        ws[master].value = value
        return master

    def get_value(self, ws: Worksheet, address: str) -> Any:
        return ws[self.master_of(address)].value

    def __len__(self) -> int:
        return len(self._ranges)

    def __contains__(self, address: str) -> bool:
        return normalize_address(address) in self._masters
