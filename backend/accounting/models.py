# accounting/models.py
"""
Voucher and ledger models.

Vouchers and their entries are the INTENT: mutable while in draft, owned by
the command layer (accounting/commands.py).

LedgerTransaction is the EFFECT: an append-only per-account log written only
by the materializer (accounting/materializer.py). Rows are never updated;
cancellation appends reversing rows instead.

DO NOT:
- Call .save()/.create()/.delete() on vouchers outside command_writes_allowed()
- Insert LedgerTransaction rows outside ledger_writes_allowed()
- Update LedgerTransaction rows at all

Models:
- AccountGroup: Grouping of accounts by nature (asset, liability, ...)
- Account: Chart of Accounts
- VoucherType: Payment/Receipt/Journal/Contra/...; owns the numbering prefix
- Voucher: Voucher header
- VoucherEntry: Debit or credit line of a voucher
- LedgerTransaction: Immutable posted effect of one entry on one account
- CompanySequence: Per-company counters (voucher numbers, ledger order)
"""

from decimal import Decimal
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounts.models import Company
from projections.write_barrier import assert_write_context


COMMAND_CONTEXTS = {"command", "bootstrap", "admin_emergency"}


def _command_guard(model_name: str, action: str) -> None:
    if getattr(settings, "TESTING", False):
        return
    assert_write_context(COMMAND_CONTEXTS, model_name, action)


class CommandWriteQuerySet(models.QuerySet):
    """QuerySet whose bulk writes require a command write context."""

    def create(self, **kwargs):
        _command_guard(self.model.__name__, "create")
        return super().create(**kwargs)

    def bulk_create(self, objs, *args, **kwargs):
        _command_guard(self.model.__name__, "bulk_create")
        return super().bulk_create(objs, *args, **kwargs)

    def update(self, **kwargs):
        _command_guard(self.model.__name__, "update")
        return super().update(**kwargs)

    def delete(self):
        _command_guard(self.model.__name__, "delete")
        return super().delete()


CommandWriteManager = models.Manager.from_queryset(CommandWriteQuerySet)


class CommandWriteModel(models.Model):
    objects = CommandWriteManager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        _command_guard(self.__class__.__name__, "save")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        _command_guard(self.__class__.__name__, "delete")
        return super().delete(*args, **kwargs)


class CompanySequence(CommandWriteModel):
    """
    Per-company counters for sequential identifiers.

    Commands allocate from it under select_for_update so concurrent
    callers never receive the same value.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="sequences",
    )
    name = models.CharField(max_length=100)
    next_value = models.BigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_company_sequence_name",
            ),
        ]

    def __str__(self):
        return f"{self.company_id}:{self.name}={self.next_value}"


class AccountGroup(CommandWriteModel):
    class AccountType(models.TextChoices):
        ASSET = "asset", "Asset"
        LIABILITY = "liability", "Liability"
        INCOME = "income", "Income"
        EXPENSE = "expense", "Expense"
        EQUITY = "equity", "Equity"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="account_groups",
    )
    name = models.CharField(max_length=255)
    account_type = models.CharField(max_length=20, choices=AccountType.choices)
    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_account_group_name",
            ),
        ]

    def __str__(self):
        return self.name


class Account(CommandWriteModel):
    """
    Chart of Accounts entry.

    Identity (code, name) is immutable from the engine's point of view;
    is_active only gates selection for new entries, never history.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="accounts",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    group = models.ForeignKey(
        AccountGroup,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="accounts",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_account_company_code",
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def group_name(self) -> str:
        return self.group.name if self.group_id else ""


class VoucherType(CommandWriteModel):
    """Which capture form produced a voucher. Posting mechanics ignore it."""

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="voucher_types",
    )
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20)
    prefix = models.CharField(max_length=10, blank=True, default="")
    number_width = models.PositiveSmallIntegerField(default=6)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_voucher_type_code",
            ),
        ]

    def __str__(self):
        return self.name

    def format_number(self, value: int) -> str:
        prefix = self.prefix or self.code
        return f"{prefix}-{value:0{self.number_width}d}"


class Voucher(CommandWriteModel):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"
        CANCELLED = "cancelled", "Cancelled"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="vouchers",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    voucher_type = models.ForeignKey(
        VoucherType,
        on_delete=models.PROTECT,
        related_name="vouchers",
    )
    voucher_number = models.CharField(max_length=50)
    voucher_date = models.DateField()
    reference_number = models.CharField(max_length=100, blank=True, default="")
    narration = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    posted_at = models.DateTimeField(null=True, blank=True)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-voucher_date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_number"],
                name="uniq_voucher_company_number",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"], name="voucher_company_status_idx"),
            models.Index(fields=["company", "voucher_date"], name="voucher_company_date_idx"),
        ]

    def __str__(self):
        return self.voucher_number

    @property
    def is_draft(self) -> bool:
        return self.status == self.Status.DRAFT


class VoucherEntry(CommandWriteModel):
    """A single debit or credit line. Exactly one side is positive."""

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="voucher_entries",
    )
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.CASCADE,
        related_name="entries",
    )
    line_no = models.PositiveIntegerField()
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="voucher_entries",
    )
    debit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    narration = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["voucher_id", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["voucher", "line_no"],
                name="uniq_voucher_entry_line",
            ),
            models.CheckConstraint(
                condition=~(Q(debit_amount__gt=0) & Q(credit_amount__gt=0)),
                name="chk_entry_not_both_sides",
            ),
            models.CheckConstraint(
                condition=~(Q(debit_amount=0) & Q(credit_amount=0)),
                name="chk_entry_not_both_zero",
            ),
            models.CheckConstraint(
                condition=Q(debit_amount__gte=0) & Q(credit_amount__gte=0),
                name="chk_entry_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_id} L{self.line_no}"


class LedgerTransactionQuerySet(models.QuerySet):
    """
    Append-only access to the ledger.

    Inserts need ledger_writes_allowed(); deletes need
    admin_emergency_writes_allowed(); updates are refused outright.
    There is no TESTING bypass here.
    """

    def create(self, **kwargs):
        assert_write_context({"ledger"}, "LedgerTransaction", "create")
        return super().create(**kwargs)

    def bulk_create(self, objs, *args, **kwargs):
        assert_write_context({"ledger"}, "LedgerTransaction", "bulk_create")
        return super().bulk_create(objs, *args, **kwargs)

    def update(self, **kwargs):
        raise RuntimeError("LedgerTransaction rows are append-only and cannot be updated.")

    def bulk_update(self, objs, fields, batch_size=None):
        raise RuntimeError("LedgerTransaction rows are append-only and cannot be updated.")

    def delete(self):
        assert_write_context({"admin_emergency"}, "LedgerTransaction", "delete")
        return super().delete()

    def for_account(self, company, account_id):
        return self.filter(company=company, account_id=account_id).order_by(
            *LedgerTransaction.CHRONOLOGICAL_ORDER
        )


class LedgerTransaction(models.Model):
    """
    Immutable effect of one voucher entry on one account.

    `sequence` is a per-company insertion counter; together with
    (transaction_date, created_at) it gives a deterministic chronological order
    independent of primary key values.
    """

    CHRONOLOGICAL_ORDER = ("transaction_date", "created_at", "sequence")

    objects = models.Manager.from_queryset(LedgerTransactionQuerySet)()

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="ledger_transactions",
    )
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name="ledger_transactions",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="ledger_transactions",
    )
    line_no = models.PositiveIntegerField()
    reverses = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="reversals",
    )
    transaction_date = models.DateField()
    debit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    narration = models.CharField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)
    sequence = models.BigIntegerField()

    class Meta:
        ordering = ["transaction_date", "created_at", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "sequence"],
                name="uniq_ledger_company_sequence",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__gt=0) & Q(credit__gt=0)),
                name="chk_ledger_not_both_sides",
            ),
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_ledger_non_negative",
            ),
        ]
        indexes = [
            models.Index(
                fields=["company", "account", "transaction_date"],
                name="ledger_account_date_idx",
            ),
            models.Index(fields=["company", "voucher"], name="ledger_voucher_idx"),
        ]

    def __str__(self):
        return f"{self.voucher_id}:{self.account_id} Dr {self.debit} Cr {self.credit}"

    @property
    def is_reversal(self) -> bool:
        return self.reverses_id is not None

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("LedgerTransaction rows are append-only and cannot be updated.")
        assert_write_context({"ledger"}, "LedgerTransaction", "save")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        assert_write_context({"admin_emergency"}, "LedgerTransaction", "delete")
        return super().delete(*args, **kwargs)
