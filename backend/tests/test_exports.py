# tests/test_exports.py
"""
Ledger and voucher register exports.
"""

from datetime import date
from decimal import Decimal
from io import BytesIO
from types import SimpleNamespace

import pytest
from openpyxl import load_workbook

from accounting.exports import (
    create_ledger_export_response,
    format_amount,
    format_date,
    ledger_export_filename,
    prepare_voucher_export_data,
    render_ledger_csv,
)
from projections.ledger import LedgerLine, project_ledger


def make_line(**overrides):
    values = dict(
        transaction_id=1,
        date=date(2026, 4, 1),
        voucher_id=1,
        voucher_number="RCT-000001",
        voucher_type="Receipt",
        voucher_type_id=2,
        particulars="Sales A/c",
        narration="",
        debit=Decimal("5000.00"),
        credit=Decimal("0.00"),
        running_balance=Decimal("5000.00"),
    )
    values.update(overrides)
    return LedgerLine(**values)


def make_ledger(lines):
    account = SimpleNamespace(code="1000", name="Cash A/c")
    return SimpleNamespace(account=account, lines=lines)


class TestFormatting:
    def test_date_formats(self):
        assert format_date(date(2026, 4, 1)) == "01/04/2026"
        assert format_date(date(2026, 4, 1), "yyyy-mm-dd") == "2026-04-01"
        assert format_date(date(2026, 4, 1), "MM/DD/YYYY") == "04/01/2026"

    @pytest.mark.parametrize("value,expected", [
        (None, "0.00"),
        (Decimal("0"), "0.00"),
        (Decimal("12.5"), "12.50"),
        (Decimal("-300"), "-300.00"),
    ])
    def test_amounts(self, value, expected):
        assert format_amount(value) == expected

    def test_filename(self):
        assert ledger_export_filename("1000", date(2026, 4, 30)) == "ledger_1000_2026-04-30"


class TestLedgerCsv:
    def test_header_and_quoted_rows(self):
        ledger = make_ledger([
            make_line(),
            make_line(
                transaction_id=2, voucher_number="PAY-000001", voucher_type="Payment",
                particulars="Rent A/c", debit=Decimal("0.00"), credit=Decimal("8000.00"),
                running_balance=Decimal("-3000.00"), date=date(2026, 4, 2),
            ),
        ])

        assert render_ledger_csv(ledger) == (
            '"Date","Voucher No","Type","Particulars","Debit","Credit","Balance"\n'
            '"01/04/2026","RCT-000001","Receipt","Sales A/c","5000.00","0.00","5000.00"\n'
            '"02/04/2026","PAY-000001","Payment","Rent A/c","0.00","8000.00","-3000.00"\n'
        )

    def test_embedded_quotes_and_commas(self):
        ledger = make_ledger([make_line(particulars='Smith, "Jr" & Co')])
        row = render_ledger_csv(ledger).splitlines()[1]
        assert '"Smith, ""Jr"" & Co"' in row

    def test_empty_ledger_is_header_only(self):
        assert render_ledger_csv(make_ledger([])) == (
            '"Date","Voucher No","Type","Particulars","Debit","Credit","Balance"\n'
        )


class TestExportResponses:
    def test_csv_response(self):
        response = create_ledger_export_response(make_ledger([make_line()]), "csv")

        assert response["Content-Type"].startswith("text/csv")
        assert response["Content-Disposition"].startswith('attachment; filename="ledger_1000_')
        assert response["Content-Disposition"].endswith('.csv"')
        body = response.content.decode("utf-8")
        assert not body.startswith("﻿")
        assert body.splitlines()[1].startswith('"01/04/2026"')

    def test_xlsx_response(self):
        response = create_ledger_export_response(make_ledger([make_line()]), "xlsx")

        sheet = load_workbook(BytesIO(response.content)).active
        assert sheet.cell(row=1, column=1).value == "Ledger: 1000 - Cash A/c"
        assert [sheet.cell(row=4, column=c).value for c in range(1, 8)] == [
            "Date", "Voucher No", "Type", "Particulars", "Debit", "Credit", "Balance",
        ]
        assert sheet.cell(row=5, column=2).value == "RCT-000001"

    def test_txt_response(self):
        response = create_ledger_export_response(make_ledger([make_line()]), "txt")
        lines = response.content.decode().splitlines()
        assert lines[0].startswith("Date")
        assert "RCT-000001" in lines[2]

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            create_ledger_export_response(make_ledger([]), "pdf")


@pytest.mark.django_db
class TestExportFromLedger:
    def test_projected_ledger_uses_company_date_format(self, company, make_posted, accounts, entry):
        company.date_format = "yyyy-mm-dd"
        make_posted([entry(accounts["cash"], debit="5000"), entry(accounts["sales"], credit="5000")],
                    voucher_type="RECEIPT")

        sales = project_ledger(company, accounts["sales"].pk)
        rows = render_ledger_csv(sales, company.date_format).splitlines()

        assert rows[1] == '"2026-04-01","RCT-000001","Receipt","Cash A/c","0.00","5000.00","-5000.00"'

    def test_voucher_register_rows(self, make_draft, accounts, entry):
        voucher = make_draft(
            [entry(accounts["rent"], debit="250"), entry(accounts["cash"], credit="250")],
            voucher_type="PAYMENT", narration="April rent", reference_number="CHQ-11",
        )

        [row] = prepare_voucher_export_data([voucher])

        assert row == {
            "voucher_number": "PAY-000001",
            "date": "01/04/2026",
            "voucher_type": "Payment",
            "reference_number": "CHQ-11",
            "narration": "April rent",
            "status": "Draft",
            "total_amount": "250.00",
        }
