"""CSV and Excel download helpers."""
import csv

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Font

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _cell(obj, field):
    if callable(field):
        return field(obj)
    value = obj
    for part in field.split("__"):
        value = getattr(value, part, None)
        if value is None:
            return ""
    return value


def queryset_to_csv_response(queryset, columns, filename):
    """Stream *queryset* as a CSV attachment.

    *columns* is a list of ``(field, header)`` pairs. ``field`` is either an
    attribute path using ``__`` to follow relations (``"setter__email"``) or a
    callable receiving the object.
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
    # UTF-8 BOM for Excel compatibility
    response.write("\ufeff")

    writer = csv.writer(response)
    writer.writerow([header for _, header in columns])
    for obj in queryset.iterator():
        writer.writerow([str(_cell(obj, field)) for field, _ in columns])
    return response


def rows_to_xlsx_response(title, rows, filename, header=None):
    """Write ``(label, value)`` style *rows* to a one-sheet workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    ws.append([title])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])
    if header:
        ws.append(list(header))
        for cell in ws[ws.max_row]:
            cell.font = Font(bold=True)
    for row in rows:
        ws.append(list(row))
    ws.column_dimensions["A"].width = 32
    ws.column_dimensions["B"].width = 18

    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}.xlsx"'
    wb.save(response)
    return response
