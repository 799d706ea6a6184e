# projections/urls.py
"""
URL configuration for ledger reports.

All these endpoints rebuild their figures from the ledger on request.

Endpoints:
- /reports/ledger/<account_id>/ - Account ledger with running balances
- /reports/ledger/<account_id>/export/ - Ledger export (csv, xlsx, txt)
- /reports/trial-balance/ - Trial balance
"""

from django.urls import path

from .views import (
    LedgerView,
    LedgerExportView,
    TrialBalanceView,
)

app_name = "projections"

urlpatterns = [
    path(
        "ledger/<int:account_id>/",
        LedgerView.as_view(),
        name="ledger",
    ),
    path(
        "ledger/<int:account_id>/export/",
        LedgerExportView.as_view(),
        name="ledger-export",
    ),
    path(
        "trial-balance/",
        TrialBalanceView.as_view(),
        name="trial-balance",
    ),
]
