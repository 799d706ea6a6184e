# accounting/serializers.py
"""
Serializers for the voucher API.

Note: These serializers are used for:
1. Input validation
2. Output formatting

The actual business logic happens in commands.py.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Account, Voucher, VoucherEntry, VoucherType
from .summaries import voucher_tile


def _account_id(value, line_index: int) -> int:
    """
    Validate account_id is a valid integer.

    Contract: value MUST be an integer account ID.
    """
    if value is None:
        raise serializers.ValidationError(f"Line {line_index}: account_id is required.")

    if isinstance(value, bool):
        raise serializers.ValidationError(f"Line {line_index}: account_id must be an integer.")

    if isinstance(value, int):
        return value

    if isinstance(value, str) and value.isdigit():
        return int(value)

    raise serializers.ValidationError(f"Line {line_index}: account_id must be an integer.")


# =============================================================================
# Chart of Accounts / Voucher Types
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    group_name = serializers.CharField(read_only=True)

    class Meta:
        model = Account
        fields = ["id", "public_id", "code", "name", "group", "group_name", "is_active"]
        read_only_fields = fields


class VoucherTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = VoucherType
        fields = ["id", "name", "code", "prefix", "number_width", "is_active"]
        read_only_fields = fields


# =============================================================================
# Voucher Serializers
# =============================================================================

class VoucherEntrySerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = VoucherEntry
        fields = [
            "line_no", "account", "account_code", "account_name",
            "debit_amount", "credit_amount", "narration",
        ]
        read_only_fields = fields


class VoucherSerializer(serializers.ModelSerializer):
    """Voucher with its entries and the two-line card text."""

    voucher_type_name = serializers.CharField(source="voucher_type.name", read_only=True)
    entries = VoucherEntrySerializer(many=True, read_only=True)
    tile = serializers.SerializerMethodField()

    class Meta:
        model = Voucher
        fields = [
            "id", "public_id", "voucher_type", "voucher_type_name",
            "voucher_number", "voucher_date", "reference_number", "narration",
            "status", "total_amount", "entries", "tile",
            "created_at", "updated_at", "posted_at", "cancelled_at",
        ]
        read_only_fields = fields

    def get_tile(self, obj):
        tile = voucher_tile(obj)
        return {"primary": tile.primary, "secondary": tile.secondary}


class VoucherEntryInputSerializer(serializers.Serializer):
    account_id = serializers.JSONField()
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=Decimal("0"))
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=Decimal("0"))
    narration = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class VoucherInputSerializer(serializers.Serializer):
    """
    Header plus entries for create and draft update.

    Entries are parsed here into {account_id, debit, credit, narration};
    structural and balance rules are enforced by the commands.
    """

    voucher_type_id = serializers.IntegerField(required=False)
    voucher_date = serializers.DateField(required=False)
    voucher_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    reference_number = serializers.CharField(required=False, allow_blank=True, max_length=100)
    narration = serializers.CharField(required=False, allow_blank=True)
    entries = VoucherEntryInputSerializer(many=True, required=False)

    def validate_entries(self, value):
        parsed = []
        for index, line in enumerate(value, start=1):
            parsed.append({
                "account_id": _account_id(line.get("account_id"), index),
                "debit": line.get("debit", Decimal("0")),
                "credit": line.get("credit", Decimal("0")),
                "narration": line.get("narration", ""),
            })
        return parsed

    def validate(self, attrs):
        if not self.partial:
            missing = [f for f in ("voucher_type_id", "voucher_date") if f not in attrs]
            if missing:
                raise serializers.ValidationError({f: "This field is required." for f in missing})
        return attrs


class CancelVoucherSerializer(serializers.Serializer):
    on_date = serializers.DateField(required=False)


class PurgeVoucherSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
