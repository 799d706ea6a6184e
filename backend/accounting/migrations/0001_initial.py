import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CompanySequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("next_value", models.BigIntegerField(default=1)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sequences", to="accounts.company")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("company", "name"), name="uniq_company_sequence_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccountGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("account_type", models.CharField(choices=[("asset", "Asset"), ("liability", "Liability"), ("income", "Income"), ("expense", "Expense"), ("equity", "Equity")], max_length=20)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="account_groups", to="accounts.company")),
                ("parent", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="children", to="accounting.accountgroup")),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "name"), name="uniq_account_group_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to="accounts.company")),
                ("group", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="accounts", to="accounting.accountgroup")),
            ],
            options={
                "ordering": ["code"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "code"), name="uniq_account_company_code"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("code", models.CharField(max_length=20)),
                ("prefix", models.CharField(blank=True, default="", max_length=10)),
                ("number_width", models.PositiveSmallIntegerField(default=6)),
                ("is_active", models.BooleanField(default=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="voucher_types", to="accounts.company")),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "code"), name="uniq_voucher_type_code"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("voucher_number", models.CharField(max_length=50)),
                ("voucher_date", models.DateField()),
                ("reference_number", models.CharField(blank=True, default="", max_length=100)),
                ("narration", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=[("draft", "Draft"), ("posted", "Posted"), ("cancelled", "Cancelled")], default="draft", max_length=20)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="vouchers", to="accounts.company")),
                ("voucher_type", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="vouchers", to="accounting.vouchertype")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("posted_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("cancelled_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-voucher_date", "-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "voucher_number"), name="uniq_voucher_company_number"),
                ],
                "indexes": [
                    models.Index(fields=["company", "status"], name="voucher_company_status_idx"),
                    models.Index(fields=["company", "voucher_date"], name="voucher_company_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("debit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("credit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("narration", models.CharField(blank=True, default="", max_length=255)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="voucher_entries", to="accounts.company")),
                ("voucher", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="entries", to="accounting.voucher")),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="voucher_entries", to="accounting.account")),
            ],
            options={
                "ordering": ["voucher_id", "line_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("voucher", "line_no"), name="uniq_voucher_entry_line"),
                    models.CheckConstraint(condition=models.Q(("debit_amount__gt", 0), ("credit_amount__gt", 0), _negated=True), name="chk_entry_not_both_sides"),
                    models.CheckConstraint(condition=models.Q(("debit_amount", 0), ("credit_amount", 0), _negated=True), name="chk_entry_not_both_zero"),
                    models.CheckConstraint(condition=models.Q(("debit_amount__gte", 0), ("credit_amount__gte", 0)), name="chk_entry_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("transaction_date", models.DateField()),
                ("debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("narration", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("sequence", models.BigIntegerField()),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_transactions", to="accounts.company")),
                ("voucher", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ledger_transactions", to="accounting.voucher")),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ledger_transactions", to="accounting.account")),
                ("reverses", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="reversals", to="accounting.ledgertransaction")),
            ],
            options={
                "ordering": ["transaction_date", "created_at", "sequence"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "sequence"), name="uniq_ledger_company_sequence"),
                    models.CheckConstraint(condition=models.Q(("debit__gt", 0), ("credit__gt", 0), _negated=True), name="chk_ledger_not_both_sides"),
                    models.CheckConstraint(condition=models.Q(("debit__gte", 0), ("credit__gte", 0)), name="chk_ledger_non_negative"),
                ],
                "indexes": [
                    models.Index(fields=["company", "account", "transaction_date"], name="ledger_account_date_idx"),
                    models.Index(fields=["company", "voucher"], name="ledger_voucher_idx"),
                ],
            },
        ),
    ]
