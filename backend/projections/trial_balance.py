# projections/trial_balance.py
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from django.db.models import Sum

from accounting.models import Account, LedgerTransaction

ZERO = Decimal("0.00")


def get_trial_balance(company, as_of: Optional[date] = None) -> Dict[str, Any]:
    """
    Trial balance computed from the ledger.

    Each account with activity shows its net balance in the debit column
    (net >= 0) or the credit column (net < 0).

    Returns:
        {
            "as_of_date": "2026-01-26" or None,
            "accounts": [
                {"account_id": 1, "code": "1000", "name": "Cash", "group": "Cash-in-hand",
                 "total_debit": "6000.00", "total_credit": "1000.00",
                 "debit": "5000.00", "credit": "0.00", "balance": "5000.00"},
                ...
            ],
            "total_debit": "10000.00",
            "total_credit": "10000.00",
            "is_balanced": True,
        }
    """
    qs = LedgerTransaction.objects.filter(company=company)
    if as_of:
        qs = qs.filter(transaction_date__lte=as_of)

    sums = {
        row["account_id"]: (row["debit"] or ZERO, row["credit"] or ZERO)
        for row in qs.order_by().values("account_id").annotate(
            debit=Sum("debit"), credit=Sum("credit"),
        )
    }
    accounts_qs = Account.objects.filter(
        company=company, pk__in=sums.keys(),
    ).select_related("group").order_by("code")

    accounts = []
    total_debit = ZERO
    total_credit = ZERO
    for account in accounts_qs:
        debit_sum, credit_sum = sums[account.pk]
        balance = debit_sum - credit_sum
        debit = balance if balance >= 0 else ZERO
        credit = -balance if balance < 0 else ZERO

        accounts.append({
            "account_id": account.pk,
            "code": account.code,
            "name": account.name,
            "group": account.group_name,
            "total_debit": str(debit_sum),
            "total_credit": str(credit_sum),
            "debit": str(debit),
            "credit": str(credit),
            "balance": str(balance),
        })
        total_debit += debit
        total_credit += credit

    return {
        "as_of_date": as_of.isoformat() if as_of else None,
        "accounts": accounts,
        "total_debit": str(total_debit),
        "total_credit": str(total_credit),
        "is_balanced": total_debit == total_credit,
    }
