import logging
from io import BytesIO

import pytest
from openpyxl import load_workbook

from timetable_engine.core.exceptions import UnsupportedExportFormatError
from timetable_engine.schemas.timetable import ExportMatrix
from timetable_engine.services.encoders import (
    PDF_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    encode_pdf,
    encode_text,
    encode_xlsx,
    export_timetable,
)


@pytest.fixture
def small_matrix():
    return ExportMatrix(
        header=["Time", "Mon"],
        rows=[["9:00-10:00", "Math"], ["10:00-11:00 (LUNCH)", "Lunch"]],
        filename_stem="Class_10_A",
    )


def test_text_columns_are_padded(small_matrix):
    lines = encode_text(small_matrix).decode("utf-8").split("\n")
    assert lines == [
        "Time".ljust(19) + " | " + "Mon  ",
        "9:00-10:00".ljust(19) + " | " + "Math ",
        "10:00-11:00 (LUNCH) | Lunch",
    ]


def test_xlsx_sheet_contents(settings, small_matrix):
    workbook = load_workbook(BytesIO(encode_xlsx(small_matrix, settings=settings)))
    sheet = workbook["Timetable"]

    assert [cell.value for cell in sheet[1]] == ["Time", "Mon"]
    assert sheet["B2"].value == "Math"
    assert sheet["A3"].value == "10:00-11:00 (LUNCH)"
    assert sheet["A1"].font.bold
    assert sheet.column_dimensions["A"].width == settings.xlsx_time_column_width
    assert sheet.column_dimensions["B"].width == settings.xlsx_day_column_width


def test_pdf_breaks_long_tables_across_pages(settings, caplog):
    matrix = ExportMatrix(
        header=["Time", "Mon"],
        rows=[[f"{9 + i % 8}:00-{10 + i % 8}:00", "Math"] for i in range(60)],
    )
    caplog.set_level(logging.DEBUG, logger="timetable_engine.services.encoders")

    content = encode_pdf(matrix, title="10A — Weekly Timetable", settings=settings)

    assert content.startswith(b"%PDF")
    assert "Rendered 60 timetable row(s) across 2 PDF page(s)" in caplog.text


def test_pdf_wraps_long_cells(settings, caplog):
    long_text = ", ".join(f"Option {n} (elective)" for n in range(12))
    matrix = ExportMatrix(header=["Time", "Mon", "Tue"], rows=[["9:00-10:00", long_text, "Free"]])
    caplog.set_level(logging.DEBUG, logger="timetable_engine.services.encoders")

    assert encode_pdf(matrix, title="Class", settings=settings).startswith(b"%PDF")
    assert "across 1 PDF page(s)" in caplog.text


def test_export_timetable_names_artifacts(settings, small_matrix):
    text = export_timetable(small_matrix, "txt", identifier="Class 10-A", settings=settings)
    assert text.filename == "Class_10_A_timetable.txt"
    assert text.content == encode_text(small_matrix)

    sheet = export_timetable(small_matrix, "XLSX", settings=settings)
    assert sheet.filename == "Class_10_A_timetable.xlsx"
    assert sheet.media_type == XLSX_MEDIA_TYPE

    document = export_timetable(small_matrix, ".pdf", identifier="Class 10-A", settings=settings)
    assert document.media_type == PDF_MEDIA_TYPE
    assert document.content.startswith(b"%PDF")


def test_unknown_format_is_rejected(settings, small_matrix):
    with pytest.raises(UnsupportedExportFormatError) as exc_info:
        export_timetable(small_matrix, "docx", settings=settings)
    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"supported": ["pdf", "txt", "xlsx"]}
