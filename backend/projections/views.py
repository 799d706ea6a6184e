# projections/views.py
"""
API views for ledger reports.

Every report is rebuilt from LedgerTransaction rows on request; nothing is
read from a stored balance.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from accounting.errors import AccountNotFound
from accounting.exports import ExportFormat, create_ledger_export_response, format_date
from projections.ledger import LedgerFilters, project_ledger
from projections.trial_balance import get_trial_balance


class QueryParamError(ValueError):
    pass


def _parse_date(params, name):
    raw = params.get(name)
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise QueryParamError(f"Invalid {name} format. Use YYYY-MM-DD.")


def _parse_amount(params, name):
    raw = params.get(name)
    if raw in (None, ""):
        return None
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise QueryParamError(f"Invalid {name}. Must be a number.")
    if not amount.is_finite():
        raise QueryParamError(f"Invalid {name}. Must be a number.")
    return amount


def _parse_int(params, name):
    raw = params.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise QueryParamError(f"Invalid {name}. Must be an integer.")


def _ledger_arguments(params) -> dict:
    side = params.get("side") or None
    if side not in (None, "debit", "credit"):
        raise QueryParamError("Invalid side. Must be 'debit' or 'credit'.")

    return {
        "date_from": _parse_date(params, "date_from"),
        "date_to": _parse_date(params, "date_to"),
        "filters": LedgerFilters(
            search=params.get("search", "").strip(),
            voucher_type_id=_parse_int(params, "voucher_type"),
            min_amount=_parse_amount(params, "min_amount"),
            max_amount=_parse_amount(params, "max_amount"),
            side=side,
        ),
        "include_opening_balance": params.get("include_opening_balance") == "true",
    }


def _bad_request(message):
    return Response({"detail": message}, status=status.HTTP_400_BAD_REQUEST)


class LedgerView(APIView):
    """
    GET /api/reports/ledger/<account_id>/

    Returns the account ledger with running balances.

    Query params:
    - date_from, date_to: inclusive window (YYYY-MM-DD)
    - search: voucher number, narration, type or particulars
    - voucher_type: voucher type id
    - min_amount, max_amount: bounds on the nonzero side of a line
    - side: debit or credit
    - include_opening_balance: "true" to start from the balance before date_from

    Filters hide lines but never change the running balance shown on a
    remaining line.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, account_id):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        try:
            arguments = _ledger_arguments(request.query_params)
        except QueryParamError as exc:
            return _bad_request(str(exc))

        try:
            ledger = project_ledger(actor.company, account_id, **arguments)
        except AccountNotFound as exc:
            return Response(exc.to_dict(), status=status.HTTP_404_NOT_FOUND)

        date_format = actor.company.date_format
        return Response({
            "account": {
                "id": ledger.account.id,
                "code": ledger.account.code,
                "name": ledger.account.name,
                "group": ledger.account.group_name,
            },
            "date_from": ledger.date_from.isoformat() if ledger.date_from else None,
            "date_to": ledger.date_to.isoformat() if ledger.date_to else None,
            "opening_balance": str(ledger.opening_balance),
            "lines": [
                {
                    "transaction_id": line.transaction_id,
                    "date": line.date.isoformat(),
                    "display_date": format_date(line.date, date_format),
                    "voucher_id": line.voucher_id,
                    "voucher_number": line.voucher_number,
                    "voucher_type": line.voucher_type,
                    "particulars": line.particulars,
                    "narration": line.narration,
                    "debit": str(line.debit),
                    "credit": str(line.credit),
                    "running_balance": str(line.running_balance),
                    "balance_display": line.display_balance,
                    "is_reversal": line.is_reversal,
                }
                for line in ledger.lines
            ],
            "total_debit": str(ledger.total_debit),
            "total_credit": str(ledger.total_credit),
            "closing_balance": str(ledger.closing_balance),
            "closing_side": ledger.closing_side,
        })


class LedgerExportView(APIView):
    """
    GET /api/reports/ledger/<account_id>/export/

    Exports the ledger rows exactly as LedgerView returns them.

    Query params: format (csv, xlsx, txt; default csv) plus the LedgerView params.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, account_id):
        actor = resolve_actor(request)
        require(actor, "reports.export")

        export_format = request.query_params.get("format", ExportFormat.CSV)
        if export_format not in ExportFormat.CHOICES:
            return _bad_request(f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}")

        try:
            arguments = _ledger_arguments(request.query_params)
        except QueryParamError as exc:
            return _bad_request(str(exc))

        try:
            ledger = project_ledger(actor.company, account_id, **arguments)
        except AccountNotFound as exc:
            return Response(exc.to_dict(), status=status.HTTP_404_NOT_FOUND)

        return create_ledger_export_response(ledger, export_format, actor.company.date_format)


class TrialBalanceView(APIView):
    """
    GET /api/reports/trial-balance/

    Query params:
    - as_of: only ledger rows dated on or before this day (YYYY-MM-DD)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        try:
            as_of = _parse_date(request.query_params, "as_of")
        except QueryParamError as exc:
            return _bad_request(str(exc))

        return Response(get_trial_balance(actor.company, as_of=as_of))
