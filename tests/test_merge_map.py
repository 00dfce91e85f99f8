from openpyxl import Workbook

from roster_forms import MergeMap
from roster_forms.merge_map import normalize_address


def _sheet():
    wb = Workbook()
    ws = wb.active
    ws.merge_cells("B2:D3")
    ws.merge_cells("F6:H6")
    return ws


def test_members_resolve_to_top_left():
    merge_map = MergeMap.from_worksheet(_sheet())
    assert merge_map.master_of("C3") == "B2"
    assert merge_map.master_of("D2") == "B2"
    assert merge_map.master_of("B2") == "B2"
    assert merge_map.master_of("G6") == "F6"


def test_unmerged_address_is_its_own_master():
    merge_map = MergeMap.from_worksheet(_sheet())
    assert merge_map.master_of("A1") == "A1"
    assert merge_map.is_master("A1")
    assert "A1" not in merge_map


def test_is_master():
    merge_map = MergeMap.from_worksheet(_sheet())
    assert merge_map.is_master("B2")
    assert not merge_map.is_master("C2")
    assert "C2" in merge_map


def test_addresses_are_normalized():
    assert normalize_address("$c$6") == "C6"
    merge_map = MergeMap.from_worksheet(_sheet())
    assert merge_map.master_of("$d$3") == "B2"


def test_ranges_sorted_by_position():
    merge_map = MergeMap.from_worksheet(_sheet())
    assert merge_map.ranges == ["B2:D3", "F6:H6"]
    assert len(merge_map) == 2


def test_set_value_writes_master():
    ws = _sheet()
    merge_map = MergeMap.from_worksheet(ws)
    written = merge_map.set_value(ws, "D3", "hello")
    assert written == "B2"
    assert ws["B2"].value == "hello"
    assert merge_map.get_value(ws, "C2") == "hello"
