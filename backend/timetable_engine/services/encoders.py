from __future__ import annotations

import logging
from io import BytesIO
from typing import Callable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas as pdf_canvas

from timetable_engine.core.config import Settings, get_settings
from timetable_engine.core.exceptions import UnsupportedExportFormatError
from timetable_engine.schemas.timetable import ExportArtifact, ExportMatrix

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"
PDF_MEDIA_TYPE = "application/pdf"

BODY_LINE_HEIGHT = 12


def encode_text(matrix: ExportMatrix, *, separator: str = " | ") -> bytes:
    data = matrix.as_rows()
    if not data:
        return b""
    columns = len(data[0])
    widths = [0] * columns
    for row in data:
        for index in range(columns):
            value = row[index] if index < len(row) else ""
            widths[index] = max(widths[index], len(str(value)))

    lines = []
    for row in data:
        cells = [str(row[index] if index < len(row) else "").ljust(widths[index]) for index in range(columns)]
        lines.append(separator.join(cells))
    return "\n".join(lines).encode("utf-8")


def encode_xlsx(matrix: ExportMatrix, *, settings: Settings | None = None) -> bytes:
    settings = settings or get_settings()
    wb = Workbook()
    ws = wb.active
    ws.title = settings.xlsx_sheet_title

    for row in matrix.as_rows():
        ws.append(row)

    thin = Side(style="thin")
    for row in ws.iter_rows(min_row=1, max_row=ws.max_row):
        for cell in row:
            cell.alignment = Alignment(vertical="top", wrap_text=True)
            cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.fill = PatternFill(start_color="ECECF0", end_color="ECECF0", fill_type="solid")

    for index in range(1, matrix.column_count + 1):
        width = settings.xlsx_time_column_width if index == 1 else settings.xlsx_day_column_width
        ws.column_dimensions[get_column_letter(index)].width = width

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def encode_pdf(matrix: ExportMatrix, *, title: str, settings: Settings | None = None) -> bytes:
    """Draw the matrix as a ruled table, starting a new page when a row does not fit."""
    settings = settings or get_settings()
    data = matrix.as_rows()
    buffer = BytesIO()
    page_width, page_height = A4
    margin = settings.pdf_margin_points
    line_height = settings.pdf_line_height
    c = pdf_canvas.Canvas(buffer, pagesize=A4)

    c.setFont("Helvetica-Bold", 14)
    c.drawString(margin, page_height - margin, title)

    columns = len(data[0]) if data else 0
    time_width = settings.pdf_time_column_width
    day_width = (page_width - margin * 2 - time_width) // max(1, columns - 1)
    widths = [time_width if index == 0 else day_width for index in range(columns)]

    # ``y`` is measured from the top edge; reportlab draws from the bottom.
    y = margin + 20
    header_height = line_height + 6
    c.setFont("Helvetica-Bold", 11)
    x = margin
    for index in range(columns):
        c.setFillColorRGB(236 / 255, 236 / 255, 240 / 255)
        c.rect(x, page_height - y - header_height, widths[index], header_height, stroke=0, fill=1)
        c.setFillColorRGB(10 / 255, 10 / 255, 10 / 255)
        c.drawString(x + 6, page_height - y - line_height, str(data[0][index]))
        x += widths[index]
    y += header_height

    pages = 1
    for row in data[1:]:
        wrapped = []
        row_height = header_height
        for index in range(columns):
            text = str(row[index] if index < len(row) else "")
            lines = simpleSplit(text, "Helvetica", 10, max(20, widths[index] - 12)) or [""]
            wrapped.append(lines)
            row_height = max(row_height, len(lines) * BODY_LINE_HEIGHT + 8)

        if y + row_height > page_height - margin:
            c.showPage()
            pages += 1
            y = margin

        c.setFont("Helvetica", 10)
        c.setStrokeGray(220 / 255)
        c.setFillColorRGB(10 / 255, 10 / 255, 10 / 255)
        x = margin
        for index in range(columns):
            c.rect(x, page_height - y - row_height, widths[index], row_height, stroke=1, fill=0)
            text_y = y + 14
            for line in wrapped[index]:
                c.drawString(x + 6, page_height - text_y, line)
                text_y += BODY_LINE_HEIGHT
            x += widths[index]
        y += row_height

    c.save()
    logger.debug("Rendered %d timetable row(s) across %d PDF page(s)", len(data) - 1, pages)
    return buffer.getvalue()


def _xlsx(matrix: ExportMatrix, title: str, settings: Settings) -> bytes:
    return encode_xlsx(matrix, settings=settings)


def _text(matrix: ExportMatrix, title: str, settings: Settings) -> bytes:
    return encode_text(matrix)


def _pdf(matrix: ExportMatrix, title: str, settings: Settings) -> bytes:
    return encode_pdf(matrix, title=title, settings=settings)


ENCODERS: dict[str, tuple[Callable[[ExportMatrix, str, Settings], bytes], str]] = {
    "xlsx": (_xlsx, XLSX_MEDIA_TYPE),
    "txt": (_text, TEXT_MEDIA_TYPE),
    "pdf": (_pdf, PDF_MEDIA_TYPE),
}


def export_timetable(
    matrix: ExportMatrix,
    fmt: str,
    *,
    identifier: object = None,
    settings: Settings | None = None,
) -> ExportArtifact:
    settings = settings or get_settings()
    key = (fmt or "").strip().lower().lstrip(".")
    if key not in ENCODERS:
        raise UnsupportedExportFormatError(fmt, sorted(ENCODERS))

    encoder, media_type = ENCODERS[key]
    title = f"{identifier or 'Class'} — Weekly Timetable"
    content = encoder(matrix, title, settings)
    filename = f"{matrix.filename_stem}_timetable.{key}"
    logger.info("Exported %s (%d bytes)", filename, len(content))
    return ExportArtifact(filename=filename, media_type=media_type, content=content)
