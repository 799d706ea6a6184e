"""
Export utilities for ledgers and voucher registers.
Supports Excel (.xlsx), CSV (.csv), and Text (.txt) formats.
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'
    TXT = 'txt'

    CHOICES = [EXCEL, CSV, TXT]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
        TXT: 'text/plain',
    }


DEFAULT_DATE_FORMAT = 'dd/mm/yyyy'


def strftime_pattern(display_format: str) -> str:
    """Translate a company date format such as "dd/mm/yyyy" to "%d/%m/%Y"."""
    pattern = (display_format or DEFAULT_DATE_FORMAT).lower()
    return pattern.replace('yyyy', '%Y').replace('mm', '%m').replace('dd', '%d')


def format_date(value: date, display_format: str = DEFAULT_DATE_FORMAT) -> str:
    return value.strftime(strftime_pattern(display_format))


def format_amount(value) -> str:
    """Two decimals; a zero or missing amount is "0.00"."""
    if not value:
        return '0.00'
    return f"{Decimal(value):.2f}"


def format_value(value: Any) -> str:
    """Format a value for export."""
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    return str(value)


def export_to_excel(
    data: list[dict],
    columns: list[dict],
    title: str = 'Export',
    sheet_name: str = 'Data',
) -> bytes:
    """
    Export data to Excel format.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions with 'key', 'header', and optional 'width'
        title: Title for the export (used in header row)
        sheet_name: Name of the worksheet

    Returns:
        Bytes of the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
    header_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))
    title_cell = ws.cell(row=1, column=1, value=title)
    title_cell.font = Font(bold=True, size=14)
    title_cell.alignment = Alignment(horizontal='center')

    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=len(columns))
    timestamp_cell = ws.cell(row=2, column=1, value=f"Exported: {timezone.now().strftime('%Y-%m-%d %H:%M:%S')}")
    timestamp_cell.alignment = Alignment(horizontal='center')
    timestamp_cell.font = Font(italic=True, size=10, color='666666')

    header_row = 4
    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=col['header'])
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border
        ws.column_dimensions[get_column_letter(col_idx)].width = col.get('width', 15)

    for row_idx, row_data in enumerate(data, header_row + 1):
        for col_idx, col in enumerate(columns, 1):
            value = row_data.get(col['key'], '')
            cell = ws.cell(row=row_idx, column=col_idx, value=format_value(value))
            cell.border = thin_border
            if col.get('numeric'):
                cell.alignment = Alignment(horizontal='right')

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def export_to_csv(
    data: list[dict],
    columns: list[dict],
    delimiter: str = ',',
    quoting: int = csv.QUOTE_MINIMAL,
    lineterminator: str = '\r\n',
) -> str:
    """
    Export data to CSV format.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions with 'key' and 'header'
        delimiter: CSV delimiter character
        quoting: csv module quoting mode
        lineterminator: Row separator

    Returns:
        CSV string
    """
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=quoting, lineterminator=lineterminator)

    writer.writerow([col['header'] for col in columns])
    for row_data in data:
        writer.writerow([format_value(row_data.get(col['key'], '')) for col in columns])

    return output.getvalue()


def export_to_txt(
    data: list[dict],
    columns: list[dict],
    separator: str = '\t',
) -> str:
    """Fixed-width text rendering; columns are capped at 50 characters."""
    lines = []

    col_widths = []
    for col in columns:
        width = col.get('width', len(col['header']))
        for row_data in data:
            width = max(width, len(format_value(row_data.get(col['key'], ''))))
        col_widths.append(min(width, 50))

    lines.append(separator.join(
        col['header'].ljust(col_widths[idx]) for idx, col in enumerate(columns)
    ))
    lines.append(separator.join('-' * width for width in col_widths))

    for row_data in data:
        row_parts = []
        for idx, col in enumerate(columns):
            value = format_value(row_data.get(col['key'], ''))
            if len(value) > col_widths[idx]:
                value = value[:col_widths[idx] - 3] + '...'
            if col.get('numeric'):
                row_parts.append(value.rjust(col_widths[idx]))
            else:
                row_parts.append(value.ljust(col_widths[idx]))
        lines.append(separator.join(row_parts))

    return '\n'.join(lines)


def create_export_response(
    data: list[dict],
    columns: list[dict],
    format: str,
    filename: str,
    title: str = 'Export',
    csv_quoting: int = csv.QUOTE_MINIMAL,
    csv_lineterminator: str = '\r\n',
    csv_bom: bool = True,
) -> HttpResponse:
    """
    Create an HTTP response with the exported file.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions
        format: Export format (xlsx, csv, txt)
        filename: Base filename (without extension)
        title: Title for Excel export
        csv_quoting, csv_lineterminator: CSV dialect
        csv_bom: Prefix a UTF-8 BOM so Excel detects the encoding

    Returns:
        HttpResponse with the file content
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    content_type = ExportFormat.CONTENT_TYPES[format]
    full_filename = f"{filename}.{format}"

    if format == ExportFormat.EXCEL:
        content = export_to_excel(data, columns, title=title)
        response = HttpResponse(content, content_type=content_type)
    elif format == ExportFormat.CSV:
        content = export_to_csv(data, columns, quoting=csv_quoting, lineterminator=csv_lineterminator)
        response = HttpResponse(content, content_type=content_type)
        response.charset = 'utf-8-sig' if csv_bom else 'utf-8'
    else:
        content = export_to_txt(data, columns)
        response = HttpResponse(content, content_type=content_type)

    response['Content-Disposition'] = f'attachment; filename="{full_filename}"'
    return response


# =============================================================================
# Account Ledger Export Configuration
# =============================================================================

LEDGER_EXPORT_COLUMNS = [
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'voucher_number', 'header': 'Voucher No', 'width': 15},
    {'key': 'voucher_type', 'header': 'Type', 'width': 12},
    {'key': 'particulars', 'header': 'Particulars', 'width': 30},
    {'key': 'debit', 'header': 'Debit', 'width': 15, 'numeric': True},
    {'key': 'credit', 'header': 'Credit', 'width': 15, 'numeric': True},
    {'key': 'balance', 'header': 'Balance', 'width': 15, 'numeric': True},
]


def prepare_ledger_export_data(ledger, date_format: str = DEFAULT_DATE_FORMAT) -> list[dict]:
    """
    One row per ledger line. Amounts are two-decimal strings; the balance
    keeps its sign (negative is a credit balance).
    """
    return [
        {
            'date': format_date(line.date, date_format),
            'voucher_number': line.voucher_number,
            'voucher_type': line.voucher_type,
            'particulars': line.particulars,
            'debit': format_amount(line.debit),
            'credit': format_amount(line.credit),
            'balance': format_amount(line.running_balance),
        }
        for line in ledger.lines
    ]


def ledger_export_filename(account_code: str, export_date: date | None = None) -> str:
    """ledger_<account code>_<YYYY-MM-DD>, without extension."""
    export_date = export_date or timezone.localdate()
    return f"ledger_{account_code}_{export_date.isoformat()}"


def render_ledger_csv(ledger, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Every field double-quoted, header row first, rows separated by "\\n"."""
    return export_to_csv(
        prepare_ledger_export_data(ledger, date_format),
        LEDGER_EXPORT_COLUMNS,
        quoting=csv.QUOTE_ALL,
        lineterminator='\n',
    )


def create_ledger_export_response(ledger, format: str, date_format: str = DEFAULT_DATE_FORMAT) -> HttpResponse:
    return create_export_response(
        prepare_ledger_export_data(ledger, date_format),
        LEDGER_EXPORT_COLUMNS,
        format,
        ledger_export_filename(ledger.account.code),
        title=f"Ledger: {ledger.account.code} - {ledger.account.name}",
        csv_quoting=csv.QUOTE_ALL,
        csv_lineterminator='\n',
        csv_bom=False,
    )


# =============================================================================
# Voucher Register Export Configuration
# =============================================================================

VOUCHER_EXPORT_COLUMNS = [
    {'key': 'voucher_number', 'header': 'Voucher No', 'width': 15},
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'voucher_type', 'header': 'Type', 'width': 12},
    {'key': 'reference_number', 'header': 'Reference', 'width': 15},
    {'key': 'narration', 'header': 'Narration', 'width': 35},
    {'key': 'status', 'header': 'Status', 'width': 10},
    {'key': 'total_amount', 'header': 'Amount', 'width': 15, 'numeric': True},
]


def prepare_voucher_export_data(vouchers, date_format: str = DEFAULT_DATE_FORMAT) -> list[dict]:
    return [
        {
            'voucher_number': voucher.voucher_number,
            'date': format_date(voucher.voucher_date, date_format),
            'voucher_type': voucher.voucher_type.name,
            'reference_number': voucher.reference_number,
            'narration': voucher.narration,
            'status': voucher.get_status_display(),
            'total_amount': format_amount(voucher.total_amount),
        }
        for voucher in vouchers
    ]
