# accounting/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: permissions, lifecycle rules, validation, ledger writes.

All voucher mutations MUST go through commands. Views never call .save()
on models.
"""

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from django.shortcuts import get_object_or_404

from accounts.authz import resolve_actor, require
from . import chart
from .errors import NotFound
from .models import Voucher, VoucherType
from .serializers import (
    AccountSerializer,
    CancelVoucherSerializer,
    PurgeVoucherSerializer,
    VoucherInputSerializer,
    VoucherSerializer,
    VoucherTypeSerializer,
)
from .commands import (
    cancel_voucher,
    create_voucher,
    delete_voucher,
    post_voucher,
    purge_voucher,
    update_voucher,
)
from .summaries import filter_vouchers, voucher_detail, voucher_type_totals


def failure_response(result) -> Response:
    """Map a failed CommandResult to a 400 (404 for unknown records)."""
    if result.failure is None:
        return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
    code = status.HTTP_404_NOT_FOUND if isinstance(result.failure, NotFound) else status.HTTP_400_BAD_REQUEST
    return Response(result.failure.to_dict(), status=code)


def _voucher_queryset(actor):
    return Voucher.objects.filter(company=actor.company).select_related(
        "voucher_type"
    ).prefetch_related("entries", "entries__account")


def _voucher_filters(params) -> dict:
    """List/export query params as filter_vouchers() keyword arguments."""
    voucher_type = params.get("voucher_type") or None
    if voucher_type is not None:
        try:
            voucher_type = int(voucher_type)
        except ValueError:
            raise ValidationError({"voucher_type": "Must be an integer."})
    return {
        "voucher_type_id": voucher_type,
        "status": params.get("status") or None,
        "search": params.get("search", "").strip(),
    }


# =============================================================================
# Chart of Accounts / Voucher Types
# =============================================================================

class AccountListView(APIView):
    """
    GET /api/accounting/accounts/ -> active accounts of the active company

    Query params:
        include_inactive: "true" to list every account
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        if request.query_params.get("include_inactive") == "true":
            accounts = actor.company.accounts.select_related("group").order_by("code")
        else:
            accounts = chart.list_active(actor.company)
        return Response(AccountSerializer(accounts, many=True).data)


class VoucherTypeListView(APIView):
    """GET /api/accounting/voucher-types/ -> voucher types of the active company"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "vouchers.view")

        types = VoucherType.objects.filter(company=actor.company).order_by("name")
        return Response(VoucherTypeSerializer(types, many=True).data)


class VoucherTypeSummaryView(APIView):
    """
    GET /api/accounting/voucher-types/summary/ -> count and amount per type

    Query params:
        status: draft, posted or cancelled (optional)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "vouchers.view")

        status_filter = request.query_params.get("status") or None
        if status_filter and status_filter not in Voucher.Status.values:
            return Response(
                {"detail": f"Invalid status. Must be one of: {', '.join(Voucher.Status.values)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(voucher_type_totals(actor.company, status=status_filter))


# =============================================================================
# Voucher Views
# =============================================================================

class VoucherListCreateView(APIView):
    """
    GET /api/accounting/vouchers/ -> list vouchers
    POST /api/accounting/vouchers/ -> create a draft voucher

    GET query params:
        voucher_type: voucher type id (optional)
        status: draft, posted or cancelled (optional)
        search: matches voucher number, narration or reference (optional)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "vouchers.view")

        vouchers = filter_vouchers(_voucher_queryset(actor), **_voucher_filters(request.query_params))
        return Response(VoucherSerializer(vouchers, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        # Permission check happens in command

        input_serializer = VoucherInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = create_voucher(
            actor,
            voucher_type_id=data["voucher_type_id"],
            voucher_date=data["voucher_date"],
            voucher_number=data.get("voucher_number", ""),
            reference_number=data.get("reference_number", ""),
            narration=data.get("narration", ""),
            entries=data.get("entries"),
        )
        if not result.success:
            return failure_response(result)

        voucher = _voucher_queryset(actor).get(pk=result.data.pk)
        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)


class VoucherDetailView(APIView):
    """
    GET /api/accounting/vouchers/<pk>/ -> voucher with print-view lines and totals
    PATCH /api/accounting/vouchers/<pk>/ -> edit a draft
    DELETE /api/accounting/vouchers/<pk>/ -> delete a draft
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "vouchers.view")

        voucher = get_object_or_404(_voucher_queryset(actor), pk=pk)
        data = VoucherSerializer(voucher).data
        data["detail"] = voucher_detail(voucher)
        return Response(data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        # Permission check happens in command

        input_serializer = VoucherInputSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)
        data = dict(input_serializer.validated_data)
        entries = data.pop("entries", None)

        result = update_voucher(actor, pk, entries=entries, **data)
        if not result.success:
            return failure_response(result)

        voucher = _voucher_queryset(actor).get(pk=result.data.pk)
        return Response(VoucherSerializer(voucher).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = delete_voucher(actor, pk)
        if not result.success:
            return failure_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class VoucherPostView(APIView):
    """POST /api/accounting/vouchers/<pk>/post/ -> post a draft"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        result = post_voucher(actor, pk)
        if not result.success:
            return failure_response(result)

        voucher = result.data
        return Response({
            "id": voucher.id,
            "status": voucher.status,
            "voucher_number": voucher.voucher_number,
            "total_amount": str(voucher.total_amount),
            "posted_at": voucher.posted_at,
            "posted_by": voucher.posted_by_id,
        })


class VoucherCancelView(APIView):
    """
    POST /api/accounting/vouchers/<pk>/cancel/ -> cancel a posted voucher

    Body:
        on_date: date of the reversing rows (optional, not before the voucher date)
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = CancelVoucherSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = cancel_voucher(actor, pk, on_date=input_serializer.validated_data.get("on_date"))
        if not result.success:
            return failure_response(result)

        voucher = result.data
        return Response({
            "id": voucher.id,
            "status": voucher.status,
            "voucher_number": voucher.voucher_number,
            "cancelled_at": voucher.cancelled_at,
            "cancelled_by": voucher.cancelled_by_id,
        })


class VoucherPurgeView(APIView):
    """POST /api/accounting/vouchers/<pk>/purge/ -> remove a voucher and its ledger rows"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = PurgeVoucherSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = purge_voucher(actor, pk, reason=input_serializer.validated_data["reason"])
        if not result.success:
            return failure_response(result)
        return Response(result.data)


class VoucherExportView(APIView):
    """
    GET /api/accounting/vouchers/export/ -> export the voucher register

    Query params:
        format: xlsx, csv, txt (default: xlsx)
        voucher_type, status, search: same as the list view
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        from django.utils import timezone
        from .exports import (
            ExportFormat,
            VOUCHER_EXPORT_COLUMNS,
            create_export_response,
            prepare_voucher_export_data,
        )

        actor = resolve_actor(request)
        require(actor, "reports.export")

        export_format = request.query_params.get("format", ExportFormat.EXCEL)
        if export_format not in ExportFormat.CHOICES:
            return Response(
                {"detail": f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        vouchers = filter_vouchers(
            Voucher.objects.filter(company=actor.company).select_related("voucher_type"),
            **_voucher_filters(request.query_params),
        )

        return create_export_response(
            data=prepare_voucher_export_data(vouchers, actor.company.date_format),
            columns=VOUCHER_EXPORT_COLUMNS,
            format=export_format,
            filename=f"vouchers_{timezone.localdate().isoformat()}",
            title="Voucher Register",
        )
