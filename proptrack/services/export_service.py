import csv
import enum
import io
import os
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas


# ── Font registration (₱ and other non-Latin-1 glyphs) ────────────────────────
_FONT_REGULAR = "Helvetica"
_FONT_BOLD = "Helvetica-Bold"
_UNICODE_FONT = False

_FONT_PAIRS = [
    (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "PTDejaVu", "PTDejaVuBold",
    ),
    (
        "/usr/share/fonts/ttf-dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/ttf-dejavu/DejaVuSans-Bold.ttf",
        "PTDejaVu", "PTDejaVuBold",
    ),
]


def _init_export_fonts() -> None:
    global _FONT_REGULAR, _FONT_BOLD, _UNICODE_FONT
    if _UNICODE_FONT:
        return
    for reg_path, bold_path, reg_name, bold_name in _FONT_PAIRS:
        if not os.path.exists(reg_path):
            continue
        try:
            pdfmetrics.registerFont(TTFont(reg_name, reg_path))
            _FONT_REGULAR = reg_name
            if os.path.exists(bold_path):
                pdfmetrics.registerFont(TTFont(bold_name, bold_path))
                _FONT_BOLD = bold_name
            else:
                _FONT_BOLD = reg_name
            _UNICODE_FONT = True
            break
        except Exception:
            continue


_init_export_fonts()


@dataclass
class ExportArtifact:
    content: bytes
    filename: str
    mime_type: str


def cell_value(value: Any):
    """Render a row value the same way in every export format."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def project_row(row: dict[str, Any], columns: dict[str, str]) -> list:
    """Declared columns only, in declared order; missing keys become ``""``."""
    return [cell_value(row.get(key)) for key in columns]


def _summary_lines(summary: dict[str, Any]) -> list[tuple[str, str]]:
    lines = []
    for key, value in summary.items():
        label = key.replace("_", " ").title()
        if isinstance(value, list):
            parts = [", ".join(f"{k}: {cell_value(v)}" for k, v in entry.items()) if isinstance(entry, dict)
                     else str(cell_value(entry)) for entry in value]
            lines.append((label, "; ".join(parts)))
        else:
            lines.append((label, str(cell_value(value))))
    return lines


class Exporter:
    format: str = ""
    extension: str = ""
    mime_type: str = ""

    def filename(self, report_name: str) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
        return f"{report_name}_{timestamp}.{self.extension}"

    def render(self, title: str, rows: list[dict], columns: dict[str, str], summary: dict) -> bytes:
        raise NotImplementedError

    def export(
        self,
        report_name: str,
        report_title: str,
        rows: list[dict],
        columns: dict[str, str],
        summary: dict | None = None,
    ) -> ExportArtifact:
        content = self.render(report_title, rows, columns, summary or {})
        return ExportArtifact(content=content, filename=self.filename(report_name), mime_type=self.mime_type)


class ExcelExporter(Exporter):
    format = "excel"
    extension = "xlsx"
    mime_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    # Row of the column header on the report sheet
    HEADER_ROW = 3

    def render(self, title: str, rows: list[dict], columns: dict[str, str], summary: dict) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = "Report"

        ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1,
                value=f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M')} UTC").font = Font(
            italic=True, size=9, color="666666")

        header_fill = PatternFill(start_color="1C2D42", end_color="1C2D42", fill_type="solid")
        header_font = Font(bold=True, color="F5A623", size=11)
        for col, label in enumerate(columns.values(), 1):
            cell = ws.cell(row=self.HEADER_ROW, column=col, value=label)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        widths = [len(label) for label in columns.values()]
        for row_num, row in enumerate(rows, self.HEADER_ROW + 1):
            for col, value in enumerate(project_row(row, columns), 1):
                ws.cell(row=row_num, column=col, value=value)
                widths[col - 1] = max(widths[col - 1], len(str(value)))

        for i, w in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(i)].width = min(w + 2, 50)
        ws.row_dimensions[self.HEADER_ROW].height = 22
        ws.freeze_panes = f"A{self.HEADER_ROW + 1}"

        if summary:
            ws2 = wb.create_sheet("Summary")
            for col, h in enumerate(["Metric", "Value"], 1):
                ws2.cell(row=1, column=col, value=h).font = Font(bold=True)
            for row_num, (label, value) in enumerate(_summary_lines(summary), 2):
                ws2.cell(row=row_num, column=1, value=label)
                ws2.cell(row=row_num, column=2, value=value)
            ws2.column_dimensions["A"].width = 30
            ws2.column_dimensions["B"].width = 80

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()


class PdfExporter(Exporter):
    format = "pdf"
    extension = "pdf"
    mime_type = "application/pdf"

    def render(self, title: str, rows: list[dict], columns: dict[str, str], summary: dict) -> bytes:
        buf = io.BytesIO()
        pagesize = landscape(A4)
        c = canvas.Canvas(buf, pagesize=pagesize)
        c.setTitle(title)
        pw, ph = pagesize
        margin = 12 * mm
        content_w = pw - 2 * margin
        header_h = 18 * mm
        footer_h = 10 * mm
        row_h = 6 * mm
        top_y = ph - header_h - 6 * mm
        bottom_y = footer_h + 4 * mm
        col_w = content_w / max(len(columns), 1)
        # characters that fit a column at 7pt
        max_chars = max(int(col_w / (7 * 0.5)), 4)
        printed_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M")

        page_num = [1]

        def _draw_header():
            c.setFillColor(colors.HexColor("#1C2D42"))
            c.rect(0, ph - header_h, pw, header_h, fill=True, stroke=False)
            c.setFillColor(colors.white)
            c.setFont(_FONT_BOLD, 14)
            c.drawString(margin, ph - 9 * mm, title)
            c.setFont(_FONT_REGULAR, 8)
            c.drawString(margin, ph - 14 * mm, f"{len(rows)} records  |  Generated: {printed_at} UTC")

        def _draw_footer():
            c.setFillColor(colors.HexColor("#f0f0f0"))
            c.rect(0, 0, pw, footer_h, fill=True, stroke=False)
            c.setFillColor(colors.HexColor("#888888"))
            c.setFont(_FONT_REGULAR, 7)
            c.drawString(margin, 4 * mm, "PropTrack")
            c.drawRightString(pw - margin, 4 * mm, f"Page {page_num[0]}")

        def _draw_table_header(y: float) -> float:
            c.setFillColor(colors.HexColor("#333333"))
            c.rect(margin, y - row_h, content_w, row_h, fill=True, stroke=False)
            c.setFillColor(colors.white)
            c.setFont(_FONT_BOLD, 7)
            for i, label in enumerate(columns.values()):
                c.drawString(margin + i * col_w + 1 * mm, y - 4 * mm, str(label)[:max_chars])
            c.setFillColor(colors.black)
            return y - row_h

        def _new_page() -> float:
            _draw_footer()
            c.showPage()
            page_num[0] += 1
            _draw_header()
            return top_y

        _draw_header()
        y = _draw_table_header(top_y)

        for n, row in enumerate(rows):
            if y - row_h < bottom_y:
                y = _draw_table_header(_new_page())
            if n % 2 == 0:
                c.setFillColor(colors.HexColor("#fafafa"))
                c.rect(margin, y - row_h, content_w, row_h, fill=True, stroke=False)
            c.setFillColor(colors.black)
            c.setFont(_FONT_REGULAR, 7)
            for i, value in enumerate(project_row(row, columns)):
                c.drawString(margin + i * col_w + 1 * mm, y - 4 * mm, str(value)[:max_chars])
            y -= row_h

        if summary:
            lines = _summary_lines(summary)
            if y - (len(lines) + 2) * row_h < bottom_y:
                y = _new_page()
            y -= 4 * mm
            c.setFillColor(colors.HexColor("#404040"))
            c.rect(margin, y - row_h, content_w, row_h, fill=True, stroke=False)
            c.setFillColor(colors.white)
            c.setFont(_FONT_BOLD, 8)
            c.drawString(margin + 2 * mm, y - 4 * mm, "SUMMARY")
            c.setFillColor(colors.black)
            y -= row_h + 1 * mm
            for label, value in lines:
                if y - row_h < bottom_y:
                    y = _new_page()
                c.setFont(_FONT_BOLD, 8)
                c.drawString(margin + 2 * mm, y - 4 * mm, label)
                c.setFont(_FONT_REGULAR, 8)
                c.drawString(margin + 60 * mm, y - 4 * mm, value[:150])
                y -= row_h

        _draw_footer()
        c.save()
        return buf.getvalue()


class CsvExporter(Exporter):
    format = "csv"
    extension = "csv"
    mime_type = "text/csv"

    def render(self, title: str, rows: list[dict], columns: dict[str, str], summary: dict) -> bytes:
        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(list(columns.values()))
        for row in rows:
            writer.writerow(project_row(row, columns))
        return out.getvalue().encode("utf-8")


EXPORTERS: dict[str, type[Exporter]] = {
    ExcelExporter.format: ExcelExporter,
    CsvExporter.format: CsvExporter,
    PdfExporter.format: PdfExporter,
}
