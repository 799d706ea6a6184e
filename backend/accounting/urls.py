# accounting/urls.py
"""
URL configuration for the voucher API.

Endpoints:
- /accounts/ - Chart of Accounts (read-only)
- /voucher-types/ - Voucher types and per-type totals
- /vouchers/ - Voucher CRUD with lifecycle actions
"""

from django.urls import path

from .views import (
    AccountListView,
    VoucherTypeListView,
    VoucherTypeSummaryView,
    VoucherListCreateView,
    VoucherExportView,
    VoucherDetailView,
    VoucherPostView,
    VoucherCancelView,
    VoucherPurgeView,
)

app_name = "accounting"

urlpatterns = [
    # ==========================================================================
    # Chart of Accounts
    # ==========================================================================
    path(
        "accounts/",
        AccountListView.as_view(),
        name="account-list",
    ),

    # ==========================================================================
    # Voucher Types
    # ==========================================================================
    path(
        "voucher-types/",
        VoucherTypeListView.as_view(),
        name="voucher-type-list",
    ),
    path(
        "voucher-types/summary/",
        VoucherTypeSummaryView.as_view(),
        name="voucher-type-summary",
    ),

    # ==========================================================================
    # Vouchers
    # ==========================================================================
    path(
        "vouchers/",
        VoucherListCreateView.as_view(),
        name="voucher-list-create",
    ),
    path(
        "vouchers/export/",
        VoucherExportView.as_view(),
        name="voucher-export",
    ),
    path(
        "vouchers/<int:pk>/",
        VoucherDetailView.as_view(),
        name="voucher-detail",
    ),

    # Voucher lifecycle actions
    path(
        "vouchers/<int:pk>/post/",
        VoucherPostView.as_view(),
        name="voucher-post",
    ),
    path(
        "vouchers/<int:pk>/cancel/",
        VoucherCancelView.as_view(),
        name="voucher-cancel",
    ),
    path(
        "vouchers/<int:pk>/purge/",
        VoucherPurgeView.as_view(),
        name="voucher-purge",
    ),
]
