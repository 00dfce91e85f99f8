import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.cell.rich_text import CellRichText
from openpyxl.styles import Font

from roster_forms import (
    MissingSheetError,
    NotFoundError,
    ShapeError,
    build_records,
    clone_records,
    clone_records_to_template,
)
from roster_forms.sample_templates import FORM_MERGES, FORM_WIDTHS, build_form_template
from roster_forms.sheet_cloner import apply_merge_ranges, write_record


def _clone(template_dir, out_dir, items, **kwargs):
    return clone_records_to_template(
        build_records(items), "template-all-filled.xlsx",
        template_dir=template_dir, out_dir=out_dir, **kwargs
    )


def test_two_records_scenario(template_dir, tmp_path):
    result = _clone(template_dir, tmp_path / "out", [{"name": "A"}, {"name": "B"}])

    assert result.sheet_names == ["STT-0", "STT-1"]
    assert result.skipped_ranges == []

    wb = load_workbook(result.path)
    assert wb["STT-0"]["C6"].value == "A"
    assert wb["STT-1"]["C6"].value == "B"
    assert wb["STT-0"]["F6"].value == "Mã lớp: 18"
    assert wb["STT-1"]["F6"].value == "Mã lớp: 18"


def test_output_keeps_template_sheets(template_dir, tmp_path, students):
    result = _clone(template_dir, tmp_path, students)
    wb = load_workbook(result.path)
    assert wb.sheetnames == ["form", "huong-dan", "STT-0", "STT-1"]
    assert wb["form"]["C6"].value is None


def test_clones_keep_merges_and_widths(template_dir, tmp_path):
    items = [{"name": f"S{i}"} for i in range(3)]
    result = _clone(template_dir, tmp_path, items)
    wb = load_workbook(result.path)

    for title in result.sheet_names:
        ws = wb[title]
        assert {r.coord for r in ws.merged_cells.ranges} == set(FORM_MERGES)
        for col, width in FORM_WIDTHS.items():
            assert ws.column_dimensions[col].width == pytest.approx(width)
        assert ws.column_dimensions["I"].hidden
        assert ws.row_dimensions[1].height == pytest.approx(28)
        assert ws.row_dimensions[4].height == pytest.approx(8)


def test_clones_keep_values_and_styles(template_dir, tmp_path, students):
    result = _clone(template_dir, tmp_path, students)
    wb = load_workbook(result.path, rich_text=True)
    ws = wb["STT-0"]

    assert ws["A1"].value == "PHIẾU THÔNG TIN HỌC SINH"
    assert ws["A1"].font.b
    assert ws["A1"].font.sz == 14
    assert ws["A1"].alignment.horizontal == "center"
    assert ws["B6"].value == "Họ và tên:"
    assert ws["C6"].border.bottom.style == "dotted"
    assert ws["C15"].value == "=LEN(C6)"
    assert isinstance(ws["A12"].value, CellRichText)
    assert "kiểm tra lại" in str(ws["A12"].value)


def test_clones_keep_page_layout(template_dir, tmp_path, students):
    result = _clone(template_dir, tmp_path, students)
    ws = load_workbook(result.path)["STT-1"]

    assert ws.page_setup.orientation == "portrait"
    assert ws.page_setup.fitToHeight == 0
    assert ws.page_margins.top == pytest.approx(0.6)
    assert ws.oddHeader.center.text == "Phiếu học sinh"
    assert ws.oddFooter.right.text == "Trang &P / &N"
    assert ws.sheet_properties.tabColor.rgb.endswith("1F4E79")
    assert not ws.sheet_view.tabSelected


def test_record_values_and_year_fallback(template_dir, tmp_path, students):
    result = _clone(template_dir, tmp_path, students)
    wb = load_workbook(result.path)
    first, second = wb["STT-0"], wb["STT-1"]

    assert first["C7"].value == "2010"
    assert first["C8"].value == "THCS Lê Quý Đôn"
    assert first["C9"].value == "12 Trần Hưng Đạo"
    assert first["C10"].value == "Quận 1"
    # no year: the name is used instead
    assert second["C7"].value == "Trần Thị Bình"
    assert second["C10"].value in ("", None)


def test_classcode_label_follows_position(template_dir, tmp_path):
    items = [{"name": f"S{i}"} for i in range(22)]
    result = _clone(template_dir, tmp_path, items)
    wb = load_workbook(result.path)
    assert wb["STT-19"]["F6"].value == "Mã lớp: 18"
    assert wb["STT-20"]["F6"].value == "Mã lớp: 19"


def test_rerun_replaces_existing_clone(template_dir, tmp_path):
    out_dir = tmp_path / "out"
    first = _clone(template_dir, out_dir, [{"name": "A"}, {"name": "B"}])

    second = clone_records_to_template(
        build_records([{"name": "Z"}]), "template-all-filled.xlsx",
        template_dir=template_dir, out_dir=out_dir, template_name=str(first.path),
    )

    assert second.path == first.path
    wb = load_workbook(second.path)
    assert wb.sheetnames.count("STT-0") == 1
    assert wb.sheetnames == ["form", "huong-dan", "STT-0", "STT-1"]
    assert wb["STT-0"]["C6"].value == "Z"
    assert wb["STT-1"]["C6"].value == "B"


def test_clone_styles_are_independent(template_dir):
    wb = load_workbook(template_dir / "template-all.xlsx")
    source = wb["form"]
    clone_records(wb, source, build_records([{"name": "A"}]))

    wb["STT-0"]["A1"].font = Font(name="Arial", size=8)
    assert source["A1"].font.name == "Times New Roman"
    assert source["A1"].font.sz == 14


def test_custom_prefix_and_labels(template_dir, tmp_path):
    result = _clone(
        template_dir, tmp_path, [{"name": "A", "code": "HS9"}],
        sheet_prefix="HS-", cells={"C6": "code"}, labels={"A2": "Lớp {classcode} - {name}"},
    )
    ws = load_workbook(result.path)["HS-0"]
    assert ws["C6"].value == "HS9"
    # A2 is the master of A2:H2
    assert ws["A2"].value == "Lớp 18 - A"


def test_bad_merge_ranges_are_skipped():
    wb = Workbook()
    ws = wb.active
    skipped = apply_merge_ranges(ws, ["A1:B2", "B2:C3", "not-a-range", "D1:E1"])

    assert {r.coord for r in ws.merged_cells.ranges} == {"A1:B2", "D1:E1"}
    assert [s.range for s in skipped] == ["B2:C3", "not-a-range"]
    assert skipped[0].reason == "overlaps A1:B2"


def test_reapplying_merges_is_a_noop():
    wb = Workbook()
    ws = wb.active
    apply_merge_ranges(ws, ["A1:B2"])
    ws["A1"] = "kept"
    assert apply_merge_ranges(ws, ["A1:B2"]) == []
    assert len(ws.merged_cells.ranges) == 1
    assert ws["A1"].value == "kept"


def test_missing_template(tmp_path):
    with pytest.raises(NotFoundError):
        _clone(tmp_path, tmp_path, [{"name": "A"}])


def test_missing_form_sheet(tmp_path):
    build_form_template(tmp_path / "template-all.xlsx")
    with pytest.raises(MissingSheetError):
        _clone(tmp_path, tmp_path / "out", [{"name": "A"}], sheet_name="missing")


def test_formatted_rows_below_last_cell_are_copied(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.title = "form"
    ws["A1"] = "x"
    ws.row_dimensions[3].height = 40
    ws.row_dimensions[5].hidden = True
    wb.save(tmp_path / "template-all.xlsx")

    result = _clone(tmp_path, tmp_path / "out", [{"name": "A"}])

    clone = load_workbook(result.path)["STT-0"]
    assert clone.row_dimensions[3].height == pytest.approx(40)
    assert clone.row_dimensions[5].hidden


def test_corrupt_template(tmp_path):
    (tmp_path / "template-all.xlsx").write_bytes(b"not a zip")
    with pytest.raises(ShapeError, match="not a valid .xlsx workbook"):
        _clone(tmp_path, tmp_path / "out", [{"name": "A"}])


def test_write_record_writes_through_masters():
    wb = Workbook()
    ws = wb.active
    ws.merge_cells("C6:E6")

    assert write_record(ws, {"name": "A", "classcode": 18}, {"D6": "name"}, {"F6": "Mã lớp: {classcode}"}) is None
    assert ws["C6"].value == "A"
    assert ws["F6"].value == "Mã lớp: 18"
