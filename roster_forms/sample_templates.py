"""Demo templates matching the default cell maps.

Real deployments ship their own ``template3.xlsx`` and ``template-all.xlsx``;
these builders produce workbooks with the same sheet names and cell layout
so the tool and its tests can run without binary fixtures.
"""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.page import PageMargins
from openpyxl.worksheet.properties import PageSetupProperties

FONT_TITLE = Font(name="Times New Roman", size=14, bold=True)
FONT_LABEL = Font(name="Times New Roman", size=11, bold=True)
FONT_VALUE = Font(name="Times New Roman", size=11)
LABEL_FILL = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")
CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
LEFT = Alignment(horizontal="left", vertical="center")
BOTTOM_DOTTED = Border(bottom=Side(style="dotted"))
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin")
)

DATA_LABELS = ["Họ và tên", "Năm sinh", "Trường", "Địa chỉ", "Địa chỉ 2", "Mã lớp"]
FORM_LABELS = ["Họ và tên:", "Năm sinh:", "Trường:", "Địa chỉ:", "Địa chỉ 2:"]

# Merged ranges of the "form" sheet, in the order they are created.
FORM_MERGES = [
    "A1:H1", "A2:H2",
    "C6:E6", "C7:E7", "C8:E8", "C9:E9", "C10:E10",
    "F6:H6",
    "A12:H13",
]

FORM_WIDTHS = {"A": 4, "B": 14, "C": 12, "D": 12, "E": 12, "F": 10, "G": 10, "H": 10}


def _apply_print(ws) -> None:
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.orientation = ws.ORIENTATION_PORTRAIT
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0
    if ws.sheet_properties.pageSetUpPr is None:
        ws.sheet_properties.pageSetUpPr = PageSetupProperties()
    ws.sheet_properties.pageSetUpPr.fitToPage = True
    ws.page_margins = PageMargins(
        left=0.5, right=0.5, top=0.6, bottom=0.6, header=0.3, footer=0.3
    )


def build_data_template(path: str | Path) -> Path:
    """Write ``template3.xlsx``: sheet ``data`` with values merged over B:D."""
    wb = Workbook()
    ws = wb.active
    ws.title = "data"

    for row, label in enumerate(DATA_LABELS, start=1):
        label_cell = ws.cell(row=row, column=1, value=label)
        label_cell.font = FONT_LABEL
        label_cell.fill = LABEL_FILL
        label_cell.border = THIN_BORDER

        value_cell = ws.cell(row=row, column=2)
        value_cell.font = FONT_VALUE
        value_cell.alignment = LEFT
        value_cell.border = THIN_BORDER
        ws.merge_cells(start_row=row, start_column=2, end_row=row, end_column=4)

    ws.column_dimensions["A"].width = 16
    for col in ("B", "C", "D"):
        ws.column_dimensions[col].width = 14

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def build_form_template(path: str | Path) -> Path:
    """Write ``template-all.xlsx``: a styled ``form`` sheet plus an instructions sheet."""
    wb = Workbook()
    ws = wb.active
    ws.title = "form"

    ws["A1"] = "PHIẾU THÔNG TIN HỌC SINH"
    ws["A1"].font = FONT_TITLE
    ws["A1"].alignment = CENTER
    ws["A2"] = "Năm học 2024 - 2025"
    ws["A2"].font = Font(name="Times New Roman", size=11, italic=True)
    ws["A2"].alignment = CENTER
    ws.row_dimensions[1].height = 28
    ws.row_dimensions[4].height = 8

    for offset, label in enumerate(FORM_LABELS):
        row = 6 + offset
        ws.cell(row=row, column=2, value=label).font = FONT_LABEL
        value_cell = ws.cell(row=row, column=3)
        value_cell.font = FONT_VALUE
        value_cell.alignment = LEFT
        value_cell.border = BOTTOM_DOTTED
        ws.row_dimensions[row].height = 20

    ws["F6"].font = FONT_LABEL
    ws["F6"].alignment = CENTER
    ws["F6"].border = THIN_BORDER

    ws["A12"] = CellRichText(
        "Ghi chú: ",
        TextBlock(InlineFont(b=True, i=True), "kiểm tra lại thông tin trước khi in"),
    )
    ws["A12"].alignment = Alignment(wrap_text=True, vertical="top")

    ws["B15"] = "Số ký tự họ tên:"
    ws["C15"] = "=LEN(C6)"
    ws["C15"].number_format = "0"

    for range_string in FORM_MERGES:
        ws.merge_cells(range_string)

    for col, width in FORM_WIDTHS.items():
        ws.column_dimensions[col].width = width
    ws.column_dimensions["I"].hidden = True

    _apply_print(ws)
    ws.oddHeader.center.text = "Phiếu học sinh"
    ws.oddFooter.right.text = "Trang &P / &N"
    ws.sheet_properties.tabColor = "1F4E79"

    info = wb.create_sheet(title="huong-dan")
    info["A1"] = "Hướng dẫn"
    info["A1"].font = Font(bold=True, size=14)
    info["A3"] = "Mỗi học sinh được sao chép từ trang 'form' thành một trang STT-<số thứ tự>."
    info.column_dimensions["A"].width = 80

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def build_all(directory: str | Path) -> list[Path]:
    """Write both demo templates into ``directory``."""
    directory = Path(directory)
    return [
        build_data_template(directory / "template3.xlsx"),
        build_form_template(directory / "template-all.xlsx"),
    ]
