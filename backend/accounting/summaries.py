# accounting/summaries.py
"""
Read-side helpers for voucher lists, cards and the print view.
"""

from dataclasses import dataclass
from decimal import Decimal

from django.db.models import Count, Q, Sum

from accounting.models import Voucher, VoucherType

ZERO = Decimal("0.00")
MULTIPLE_ENTRIES = "Multiple entries"
NO_LEDGER_ENTRIES = "No ledger entries"


@dataclass(frozen=True)
class VoucherTile:
    primary: str
    secondary: str = ""


def voucher_tile(voucher: Voucher) -> VoucherTile:
    """
    Two-line card text for a voucher.

    A voucher of exactly one debit line and one credit line shows
    "debit account" over "credit account". Without a debit or without a
    credit line it shows "No ledger entries"; anything else is
    "Multiple entries". Uses voucher.entries.all() so list views can
    prefetch "entries__account".
    """
    entries = list(voucher.entries.all())
    debits = [e for e in entries if e.debit_amount > 0]
    credits = [e for e in entries if e.credit_amount > 0]

    if not debits or not credits:
        return VoucherTile(NO_LEDGER_ENTRIES)
    if len(entries) == 2 and len(debits) == 1 and len(credits) == 1:
        return VoucherTile(debits[0].account.name, credits[0].account.name)
    return VoucherTile(MULTIPLE_ENTRIES)


def filter_vouchers(qs, voucher_type_id=None, status=None, search=""):
    if voucher_type_id:
        qs = qs.filter(voucher_type_id=voucher_type_id)
    if status:
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(
            Q(voucher_number__icontains=search)
            | Q(narration__icontains=search)
            | Q(reference_number__icontains=search)
        )
    return qs


def voucher_type_totals(company, status=None) -> list[dict]:
    """Per voucher type: number of vouchers and the sum of their total_amount."""
    voucher_filter = Q(vouchers__status=status) if status else Q()
    types = VoucherType.objects.filter(company=company).annotate(
        voucher_count=Count("vouchers", filter=voucher_filter),
        amount=Sum("vouchers__total_amount", filter=voucher_filter),
    ).order_by("name")
    return [
        {
            "voucher_type_id": vt.pk,
            "name": vt.name,
            "code": vt.code,
            "count": vt.voucher_count,
            "total_amount": str(vt.amount or ZERO),
        }
        for vt in types
    ]


def voucher_detail(voucher: Voucher) -> dict:
    """Entries in line order with resolved account names, plus a totals row."""
    lines = []
    total_debit = ZERO
    total_credit = ZERO
    for entry in voucher.entries.select_related("account").order_by("line_no"):
        lines.append({
            "line_no": entry.line_no,
            "account_id": entry.account_id,
            "account_code": entry.account.code,
            "account_name": entry.account.name,
            "debit": str(entry.debit_amount),
            "credit": str(entry.credit_amount),
            "narration": entry.narration,
        })
        total_debit += entry.debit_amount
        total_credit += entry.credit_amount

    return {
        "lines": lines,
        "totals": {
            "debit": str(total_debit),
            "credit": str(total_credit),
        },
    }
