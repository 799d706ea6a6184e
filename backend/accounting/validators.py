# accounting/validators.py
"""
Structural and balance checks for a proposed set of voucher entries.

Pure functions: no database access, no side effects. The caller supplies the
set of account ids that resolve in the chart of accounts.

Rules, checked in order:
1. At least one entry                      -> EmptyVoucher
2. Exactly one side strictly positive      -> MixedOrEmptyLine
3. Every account resolves                  -> UnknownAccount
4. Sum(debit) == Sum(credit) within EPSILON -> UnbalancedVoucher
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Iterable, Sequence

from accounting.errors import (
    EmptyVoucher,
    MixedOrEmptyLine,
    UnbalancedVoucher,
    UnknownAccount,
    VoucherError,
)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
EPSILON = Decimal("0.005")


@dataclass(frozen=True)
class EntryInput:
    account_id: int
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    narration: str = ""

    @property
    def is_blank(self) -> bool:
        return self.debit == 0 and self.credit == 0


def to_amount(value) -> Decimal:
    """
    Parse an entry amount. Raises ValueError for text that is not a number,
    for NaN/Infinity, and for fractions of a cent.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    if amount != amount.quantize(CENT, rounding=ROUND_DOWN):
        raise ValueError(f"Amount {value} has more than two decimal places.")
    return amount


def coerce_entries(raw: Iterable) -> list[EntryInput]:
    """Accept EntryInput instances or dicts with account_id/debit/credit/narration."""
    entries = []
    for item in raw:
        if isinstance(item, EntryInput):
            to_amount(item.debit)
            to_amount(item.credit)
            entries.append(item)
            continue
        entries.append(EntryInput(
            account_id=item.get("account_id", item.get("account")),
            debit=to_amount(item.get("debit", item.get("debit_amount"))),
            credit=to_amount(item.get("credit", item.get("credit_amount"))),
            narration=item.get("narration") or "",
        ))
    return entries


def _line_error(entries: Sequence[EntryInput]) -> VoucherError | None:
    for line_no, entry in enumerate(entries, start=1):
        debit_positive = entry.debit > 0
        credit_positive = entry.credit > 0
        if debit_positive == credit_positive or entry.debit < 0 or entry.credit < 0:
            return MixedOrEmptyLine(line_no)
    return None


def _account_error(entries: Sequence[EntryInput], known_account_ids: set) -> VoucherError | None:
    for line_no, entry in enumerate(entries, start=1):
        if entry.account_id not in known_account_ids:
            return UnknownAccount(entry.account_id, line_no=line_no)
    return None


def totals(entries: Iterable[EntryInput]) -> tuple[Decimal, Decimal]:
    total_debit = sum((e.debit for e in entries), ZERO)
    total_credit = sum((e.credit for e in entries), ZERO)
    return total_debit.quantize(CENT), total_credit.quantize(CENT)


def validate_entries(
    entries: Sequence[EntryInput],
    known_account_ids: set,
    epsilon: Decimal = EPSILON,
) -> VoucherError | None:
    """Return the first rule violation, or None when the entries may be posted."""
    if not entries:
        return EmptyVoucher()

    error = _line_error(entries) or _account_error(entries, known_account_ids)
    if error:
        return error

    total_debit, total_credit = totals(entries)
    if abs(total_debit - total_credit) > epsilon:
        return UnbalancedVoucher(total_debit, total_credit)
    return None


def clean_draft_entries(
    entries: Sequence[EntryInput],
    known_account_ids: set,
) -> tuple[list[EntryInput], VoucherError | None]:
    """
    Early feedback for a draft save.

    Blank lines (no debit, no credit) are discarded; the remaining lines must
    satisfy rules 2 and 3. Emptiness and balance are only enforced at posting.
    """
    kept = [e for e in entries if not e.is_blank]
    error = _line_error(kept) or _account_error(kept, known_account_ids)
    return kept, error
