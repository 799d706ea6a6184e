# projections/ledger.py
"""
Account ledger projection.

Rebuilds an account's ledger from LedgerTransaction rows on every call; there
is no stored balance. Order of operations:

1. Fetch the account's rows in chronological order
   (transaction_date, created_at, sequence), restricted to the date window.
2. Accumulate running_balance += debit - credit over that full window.
3. Resolve particulars (the counterpart account) per row.
4. Apply presentation filters to the finished lines.
5. Total the filtered lines; closing balance is the last filtered line's
   running balance.

Filtering after accumulation keeps every displayed running balance equal to
the true balance at that point in the window.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Sum

from accounting import chart
from accounting.models import Account, LedgerTransaction

ZERO = Decimal("0.00")
MULTIPLE_ENTRIES = "Multiple entries"
NO_PARTICULARS = "-"


def balance_side(amount: Decimal) -> str:
    return "Dr" if amount >= 0 else "Cr"


def format_balance(amount: Decimal) -> str:
    """abs(balance) with two decimals and its Dr/Cr suffix, e.g. "5000.00 Cr"."""
    return f"{abs(amount):.2f} {balance_side(amount)}"


@dataclass(frozen=True)
class LedgerLine:
    transaction_id: int
    date: date
    voucher_id: int
    voucher_number: str
    voucher_type: str
    voucher_type_id: int
    particulars: str
    narration: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal
    is_reversal: bool = False

    @property
    def balance_side(self) -> str:
        return balance_side(self.running_balance)

    @property
    def display_balance(self) -> str:
        return format_balance(self.running_balance)

    @property
    def amount(self) -> Decimal:
        """The nonzero side."""
        return self.debit if self.debit > 0 else self.credit


@dataclass(frozen=True)
class LedgerFilters:
    """Presentation filters. They never change running balances."""

    search: str = ""
    voucher_type_id: Optional[int] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    side: Optional[str] = None  # "debit" or "credit"

    @property
    def is_empty(self) -> bool:
        return (
            not self.search
            and self.voucher_type_id is None
            and self.min_amount is None
            and self.max_amount is None
            and not self.side
        )

    def matches(self, line: LedgerLine) -> bool:
        if self.search:
            needle = self.search.lower()
            haystack = (line.voucher_number, line.narration, line.voucher_type, line.particulars)
            if not any(needle in (value or "").lower() for value in haystack):
                return False
        if self.voucher_type_id is not None and line.voucher_type_id != self.voucher_type_id:
            return False
        if self.min_amount is not None and line.amount < self.min_amount:
            return False
        if self.max_amount is not None and line.amount > self.max_amount:
            return False
        if self.side == "debit" and not line.debit > 0:
            return False
        if self.side == "credit" and not line.credit > 0:
            return False
        return True


@dataclass
class AccountLedger:
    account: Account
    lines: list[LedgerLine] = field(default_factory=list)
    opening_balance: Decimal = ZERO
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO
    closing_balance: Decimal = ZERO
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def closing_side(self) -> str:
        return balance_side(self.closing_balance)


def _counterparts(company, account_id, voucher_ids) -> dict[int, dict[int, str]]:
    """voucher_id -> {account_id: account name} for the other accounts of each voucher."""
    result: dict[int, dict[int, str]] = {}
    rows = (
        LedgerTransaction.objects.filter(company=company, voucher_id__in=voucher_ids)
        .exclude(account_id=account_id)
        .order_by()
        .values_list("voucher_id", "account_id", "account__name")
        .distinct()
    )
    for voucher_id, other_id, name in rows:
        result.setdefault(voucher_id, {})[other_id] = name
    return result


def resolve_particulars(counterparts: dict[int, str], narration: str) -> str:
    if len(counterparts) == 1:
        return next(iter(counterparts.values()))
    if len(counterparts) > 1:
        return MULTIPLE_ENTRIES
    return narration or NO_PARTICULARS


def opening_balance(company, account_id, before: date) -> Decimal:
    sums = LedgerTransaction.objects.filter(
        company=company,
        account_id=account_id,
        transaction_date__lt=before,
    ).aggregate(debit=Sum("debit"), credit=Sum("credit"))
    return (sums["debit"] or ZERO) - (sums["credit"] or ZERO)


def project_ledger(
    company,
    account_id,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    filters: Optional[LedgerFilters] = None,
    include_opening_balance: bool = False,
) -> AccountLedger:
    """
    Build the ledger of one account.

    By default the running balance starts at zero at the beginning of the
    window. With include_opening_balance and a date_from, it starts at the
    net of all earlier transactions instead.

    Raises AccountNotFound for an id outside the company's chart.
    """
    account = chart.lookup(company, account_id)
    filters = filters or LedgerFilters()

    qs = LedgerTransaction.objects.for_account(company, account.pk).select_related(
        "voucher", "voucher__voucher_type"
    )
    if date_from:
        qs = qs.filter(transaction_date__gte=date_from)
    if date_to:
        qs = qs.filter(transaction_date__lte=date_to)
    rows = list(qs)

    start = ZERO
    if include_opening_balance and date_from:
        start = opening_balance(company, account.pk, date_from)

    counterparts = _counterparts(company, account.pk, {row.voucher_id for row in rows})

    running = start
    lines = []
    for row in rows:
        running += row.debit - row.credit
        lines.append(LedgerLine(
            transaction_id=row.pk,
            date=row.transaction_date,
            voucher_id=row.voucher_id,
            voucher_number=row.voucher.voucher_number,
            voucher_type=row.voucher.voucher_type.name,
            voucher_type_id=row.voucher.voucher_type_id,
            particulars=resolve_particulars(counterparts.get(row.voucher_id, {}), row.narration),
            narration=row.narration,
            debit=row.debit,
            credit=row.credit,
            running_balance=running,
            is_reversal=row.reverses_id is not None,
        ))

    if not filters.is_empty:
        lines = [line for line in lines if filters.matches(line)]

    return AccountLedger(
        account=account,
        lines=lines,
        opening_balance=start,
        total_debit=sum((line.debit for line in lines), ZERO),
        total_credit=sum((line.credit for line in lines), ZERO),
        closing_balance=lines[-1].running_balance if lines else start,
        date_from=date_from,
        date_to=date_to,
    )
