# accounting/admin.py
"""
Django admin configuration for accounting models.

The admin is for viewing only. Voucher changes go through the command layer
(accounting/commands.py) and ledger rows are written only by posting and
cancelling, so every model here is registered read-only.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Account,
    AccountGroup,
    LedgerTransaction,
    Voucher,
    VoucherEntry,
    VoucherType,
)


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """
    Base admin class for read-only models.

    To modify these models, use the command layer (accounting/commands.py).
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def changeform_view(self, request, object_id=None, form_url="", extra_context=None):
        extra_context = extra_context or {}
        extra_context["show_save"] = False
        extra_context["show_save_and_continue"] = False
        extra_context["show_save_and_add_another"] = False
        extra_context["readonly_message"] = (
            "This record is read-only here. Use the API/command layer to make changes."
        )
        return super().changeform_view(request, object_id, form_url, extra_context)


class ReadOnlyInline(admin.TabularInline):
    """Base inline class for read-only models."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class VoucherEntryInline(ReadOnlyInline):
    model = VoucherEntry
    extra = 0
    readonly_fields = ["line_no", "account", "debit_amount", "credit_amount", "narration"]
    fields = ["line_no", "account", "debit_amount", "credit_amount", "narration"]


# =============================================================================
# Chart of Accounts
# =============================================================================

@admin.register(AccountGroup)
class AccountGroupAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "account_type", "parent", "company"]
    list_filter = ["company", "account_type"]
    search_fields = ["name"]


@admin.register(Account)
class AccountAdmin(ReadOnlyModelAdmin):
    """Admin interface for Chart of Accounts (read-only)."""

    list_display = ["code", "name", "group", "is_active", "company"]
    list_filter = ["company", "is_active", "group__account_type"]
    search_fields = ["code", "name"]
    list_select_related = ["company", "group"]
    ordering = ["company", "code"]
    readonly_fields = ["company", "public_id", "code", "name", "group", "is_active", "created_at"]


@admin.register(VoucherType)
class VoucherTypeAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "code", "prefix", "number_width", "is_active", "company"]
    list_filter = ["company", "is_active"]


# =============================================================================
# Voucher Admin
# =============================================================================

@admin.register(Voucher)
class VoucherAdmin(ReadOnlyModelAdmin):
    """Admin interface for Vouchers (read-only)."""

    list_display = [
        "voucher_number", "voucher_date", "voucher_type", "narration_truncated",
        "status_colored", "total_amount", "company",
    ]
    list_filter = ["company", "status", "voucher_type", "voucher_date"]
    search_fields = ["voucher_number", "narration", "reference_number"]
    date_hierarchy = "voucher_date"
    list_select_related = ["company", "voucher_type"]
    ordering = ["-voucher_date", "-id"]

    fieldsets = (
        (None, {
            "fields": ("company", "voucher_type", "voucher_number", "voucher_date"),
        }),
        ("Content", {
            "fields": ("reference_number", "narration", "total_amount"),
        }),
        ("Status & Workflow", {
            "fields": ("status", "posted_at", "posted_by", "cancelled_at", "cancelled_by"),
        }),
        ("Audit", {
            "fields": ("created_at", "created_by", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    readonly_fields = [
        "company", "voucher_type", "voucher_number", "voucher_date",
        "reference_number", "narration", "total_amount",
        "status", "posted_at", "posted_by", "cancelled_at", "cancelled_by",
        "created_at", "created_by", "updated_at",
    ]
    inlines = [VoucherEntryInline]

    def narration_truncated(self, obj):
        if len(obj.narration) > 50:
            return f"{obj.narration[:50]}..."
        return obj.narration
    narration_truncated.short_description = "Narration"

    def status_colored(self, obj):
        colors = {
            Voucher.Status.DRAFT: "#007bff",
            Voucher.Status.POSTED: "#28a745",
            Voucher.Status.CANCELLED: "#dc3545",
        }
        color = colors.get(obj.status, "#000")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_status_display(),
        )
    status_colored.short_description = "Status"
    status_colored.admin_order_field = "status"


# =============================================================================
# Ledger Admin
# =============================================================================

@admin.register(LedgerTransaction)
class LedgerTransactionAdmin(ReadOnlyModelAdmin):
    """Append-only ledger rows."""

    list_display = [
        "sequence", "transaction_date", "account", "voucher",
        "debit", "credit", "is_reversal", "company",
    ]
    list_filter = ["company", "transaction_date"]
    search_fields = ["voucher__voucher_number", "account__code", "account__name", "narration"]
    list_select_related = ["account", "voucher", "company"]
    ordering = ["company", "sequence"]

    def is_reversal(self, obj):
        return obj.is_reversal
    is_reversal.boolean = True
