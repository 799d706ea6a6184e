# accounting/materializer.py
"""
Turns voucher transitions into LedgerTransaction rows.

materialize(voucher): one row per entry, dated at the voucher date.
reverse(voucher, on_date): one row per original row with debit/credit swapped,
    dated at cancellation.

Both run inside a single atomic block and insert all rows of the voucher with
one bulk_create, so a voucher is either fully in the ledger or not at all.
Existing rows are never touched. Every row of one call shares a single
created_at stamp; `sequence` preserves insertion order among them.
"""

from datetime import date

from django.db import transaction
from django.utils import timezone

from accounting.models import LedgerTransaction, Voucher
from accounting.sequences import LEDGER_SEQUENCE, next_company_sequence
from projections.write_barrier import ledger_writes_allowed


def _insert(company, rows: list[LedgerTransaction]) -> list[LedgerTransaction]:
    if not rows:
        return rows
    first = next_company_sequence(company, LEDGER_SEQUENCE, count=len(rows))
    stamp = timezone.now()
    for offset, row in enumerate(rows):
        row.sequence = first + offset
        row.created_at = stamp
    with ledger_writes_allowed():
        return LedgerTransaction.objects.bulk_create(rows)


@transaction.atomic
def materialize(voucher: Voucher) -> list[LedgerTransaction]:
    if LedgerTransaction.objects.filter(voucher=voucher).exists():
        raise RuntimeError(f"Voucher {voucher.voucher_number} is already in the ledger.")

    rows = [
        LedgerTransaction(
            company_id=voucher.company_id,
            voucher=voucher,
            account_id=entry.account_id,
            line_no=entry.line_no,
            transaction_date=voucher.voucher_date,
            debit=entry.debit_amount,
            credit=entry.credit_amount,
            narration=entry.narration or voucher.narration or "",
        )
        for entry in voucher.entries.order_by("line_no")
    ]
    return _insert(voucher.company, rows)


@transaction.atomic
def reverse(voucher: Voucher, on_date: date | None = None) -> list[LedgerTransaction]:
    originals = list(
        LedgerTransaction.objects.filter(
            voucher=voucher,
            reverses__isnull=True,
        ).order_by("sequence")
    )
    if LedgerTransaction.objects.filter(voucher=voucher, reverses__isnull=False).exists():
        raise RuntimeError(f"Voucher {voucher.voucher_number} is already reversed.")

    on_date = on_date or timezone.localdate()
    prefix = f"Reversal of {voucher.voucher_number}"
    rows = [
        LedgerTransaction(
            company_id=voucher.company_id,
            voucher=voucher,
            account_id=original.account_id,
            line_no=original.line_no,
            reverses=original,
            transaction_date=on_date,
            debit=original.credit,
            credit=original.debit,
            narration=(f"{prefix}: {original.narration}" if original.narration else prefix)[:500],
        )
        for original in originals
    ]
    return _insert(voucher.company, rows)
