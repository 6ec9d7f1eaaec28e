# formstore/services/export/writers.py
"""
Tabular writers for bucket exports.

Each writer takes the header row, the value rows and the document metadata
and returns the file as bytes. Every cell is written as text so values such
as "=SUM(A1:A9)" or "0049..." are never interpreted by spreadsheet software.
"""

import csv
import html
import io
from collections.abc import Callable
from dataclasses import dataclass

import xlwt
from odf import dc, meta
from odf.opendocument import OpenDocumentSpreadsheet
from odf.style import ParagraphProperties, Style, TextProperties
from odf.table import Table, TableCell, TableRow
from odf.text import P
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font

# Excel limits sheet titles to 31 characters and cells to 32767
SHEET_TITLE_MAX_CHARS = 31
CELL_MAX_CHARS = 32767


@dataclass(frozen=True)
class ExportMetadata:
    """Document properties written into spreadsheet formats."""

    creator: str = "formstore"
    title: str = "Form Storage"
    subject: str = "Form Storage Export"

    @property
    def sheet_title(self) -> str:
        title = self.title
        for char in "[]:*?/\\":
            title = title.replace(char, " ")
        return title[:SHEET_TITLE_MAX_CHARS] or "Sheet1"


Rows = list[list[str]]
Writer = Callable[[list[str], Rows, ExportMetadata], bytes]


def write_xlsx(labels: list[str], rows: Rows, metadata: ExportMetadata) -> bytes:
    workbook = Workbook()
    workbook.properties.creator = metadata.creator
    workbook.properties.title = metadata.title
    workbook.properties.subject = metadata.subject

    sheet = workbook.active
    sheet.title = metadata.sheet_title

    header_font = Font(bold=True)
    header_alignment = Alignment(horizontal="center", vertical="center")

    for row_index, values in enumerate([labels, *rows], start=1):
        for column_index, value in enumerate(values, start=1):
            cell = sheet.cell(row=row_index, column=column_index, value=ILLEGAL_CHARACTERS_RE.sub("", value))
            cell.data_type = "s"
            if row_index == 1:
                cell.font = header_font
                cell.alignment = header_alignment

    stream = io.BytesIO()
    workbook.save(stream)
    return stream.getvalue()


def write_xls(labels: list[str], rows: Rows, metadata: ExportMetadata) -> bytes:
    workbook = xlwt.Workbook(encoding="utf-8")
    sheet = workbook.add_sheet(metadata.sheet_title)
    header_style = xlwt.easyxf("font: bold on; align: horiz center, vert center")

    for column_index, label in enumerate(labels):
        sheet.write(0, column_index, label[:CELL_MAX_CHARS], header_style)
    for row_index, values in enumerate(rows, start=1):
        for column_index, value in enumerate(values):
            sheet.write(row_index, column_index, value[:CELL_MAX_CHARS])

    stream = io.BytesIO()
    workbook.save(stream)
    return stream.getvalue()


def write_ods(labels: list[str], rows: Rows, metadata: ExportMetadata) -> bytes:
    document = OpenDocumentSpreadsheet()
    document.meta.addElement(meta.InitialCreator(text=metadata.creator))
    document.meta.addElement(dc.Title(text=metadata.title))
    document.meta.addElement(dc.Subject(text=metadata.subject))

    header_style = Style(name="HeaderCell", family="table-cell")
    header_style.addElement(TextProperties(fontweight="bold"))
    header_style.addElement(ParagraphProperties(textalign="center"))
    document.automaticstyles.addElement(header_style)

    table = Table(name=metadata.sheet_title)
    for row_index, values in enumerate([labels, *rows]):
        table_row = TableRow()
        for value in values:
            if row_index == 0:
                cell = TableCell(valuetype="string", stylename=header_style)
            else:
                cell = TableCell(valuetype="string")
            for line in value.split("\r\n"):
                cell.addElement(P(text=line))
            table_row.addElement(cell)
        table.addElement(table_row)
    document.spreadsheet.addElement(table)

    stream = io.BytesIO()
    document.write(stream)
    return stream.getvalue()


def write_csv(labels: list[str], rows: Rows, metadata: ExportMetadata) -> bytes:
    stream = io.StringIO()
    writer = csv.writer(stream)
    writer.writerow(labels)
    writer.writerows(rows)
    return stream.getvalue().encode("utf-8")


def write_html(labels: list[str], rows: Rows, metadata: ExportMetadata) -> bytes:
    def cell(tag: str, value: str) -> str:
        return f"<{tag}>{html.escape(value).replace(chr(13) + chr(10), '<br />')}</{tag}>"

    lines = [
        "<!DOCTYPE html>",
        '<html><head><meta charset="utf-8">',
        f"<title>{html.escape(metadata.title)}</title>",
        f'<meta name="author" content="{html.escape(metadata.creator)}">',
        f'<meta name="description" content="{html.escape(metadata.subject)}">',
        "</head><body><table>",
        "<thead><tr>" + "".join(cell("th", label) for label in labels) + "</tr></thead>",
        "<tbody>",
    ]
    for values in rows:
        lines.append("<tr>" + "".join(cell("td", value) for value in values) + "</tr>")
    lines.append("</tbody></table></body></html>")
    return "\n".join(lines).encode("utf-8")


DEFAULT_WRITERS: dict[str, Writer] = {
    "Xlsx": write_xlsx,
    "Xls": write_xls,
    "Ods": write_ods,
    "Csv": write_csv,
    "Html": write_html,
}
