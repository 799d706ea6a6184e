# accounts/permission_defaults.py

# Capabilities that exist but are never granted by role defaults.
PRIVILEGED_CODES = {
    "vouchers.purge",
}

ROLE_DEFAULTS = {
    "OWNER": {
        # Chart of accounts
        "accounts.view",

        # Vouchers
        "vouchers.view",
        "vouchers.create",
        "vouchers.edit_draft",
        "vouchers.post",
        "vouchers.cancel",

        # Reports
        "reports.view",
        "reports.export",
    },
    "ADMIN": {
        "accounts.view",

        "vouchers.view",
        "vouchers.create",
        "vouchers.edit_draft",
        "vouchers.post",
        "vouchers.cancel",

        "reports.view",
        "reports.export",
    },
    "USER": {
        "accounts.view",

        "vouchers.view",
        "vouchers.create",
        "vouchers.edit_draft",

        "reports.view",
    },
    "VIEWER": {
        "accounts.view",
        "vouchers.view",
        "reports.view",
    },
}

def all_permission_codes() -> set[str]:
    codes: set[str] = set(PRIVILEGED_CODES)
    for s in ROLE_DEFAULTS.values():
        codes |= set(s)
    return codes
