# accounting/errors.py
"""
Typed failures of the voucher engine.

All of these are local precondition failures. Commands return them inside a
CommandResult (never partially applying their effect); views translate them
to HTTP responses with `code` as a stable machine-readable key.
"""

from decimal import Decimal


class VoucherError(Exception):
    code = "voucher_error"

    def to_dict(self) -> dict:
        return {"detail": str(self), "code": self.code}


class EmptyVoucher(VoucherError):
    code = "empty_voucher"

    def __init__(self):
        super().__init__("Voucher must have at least one entry.")


class MixedOrEmptyLine(VoucherError):
    code = "mixed_or_empty_line"

    def __init__(self, line_no: int):
        self.line_no = line_no
        super().__init__(
            f"Line {line_no}: enter either a debit or a credit amount, not both or neither."
        )

    def to_dict(self) -> dict:
        return {**super().to_dict(), "line_no": self.line_no}


class UnknownAccount(VoucherError):
    code = "unknown_account"

    def __init__(self, account_id, line_no: int | None = None):
        self.account_id = account_id
        self.line_no = line_no
        where = f"Line {line_no}: " if line_no is not None else ""
        super().__init__(f"{where}Account {account_id} not found.")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "account_id": self.account_id, "line_no": self.line_no}


class UnbalancedVoucher(VoucherError):
    """Debits and credits differ; `delta` is debit minus credit."""

    code = "unbalanced_voucher"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.delta = total_debit - total_credit
        super().__init__(
            f"Voucher is not balanced. Debit={total_debit} Credit={total_credit} "
            f"Difference={abs(self.delta)}"
        )

    @property
    def difference(self) -> Decimal:
        return abs(self.delta)

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "total_debit": str(self.total_debit),
            "total_credit": str(self.total_credit),
            "difference": str(self.difference),
        }


class InvalidTransition(VoucherError):
    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot move a {from_status} voucher to {to_status}.")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "from": self.from_status, "to": self.to_status}


class ReversalBeforeVoucherDate(VoucherError):
    code = "reversal_before_voucher_date"

    def __init__(self, on_date, voucher_date):
        self.on_date = on_date
        self.voucher_date = voucher_date
        super().__init__(
            f"Cancellation date {on_date.isoformat()} is before the voucher date "
            f"{voucher_date.isoformat()}."
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "on_date": self.on_date.isoformat(),
            "voucher_date": self.voucher_date.isoformat(),
        }


class NotFound(VoucherError):
    code = "not_found"
    label = "Record"

    def __init__(self, key):
        self.key = key
        super().__init__(f"{self.label} {key} not found.")


class AccountNotFound(NotFound):
    label = "Account"


class VoucherNotFound(NotFound):
    label = "Voucher"


class VoucherTypeNotFound(NotFound):
    label = "Voucher type"
