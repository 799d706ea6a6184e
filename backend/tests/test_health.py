# tests/test_health.py
"""
Health probes under /_health/.
"""

import pytest

from ops.health import HealthCheck


def test_liveness(client):
    response = client.get("/_health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


@pytest.mark.django_db
def test_readiness(client):
    response = client.get("/_health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


@pytest.mark.django_db
def test_full_health_checks_ledger(client, make_posted, accounts, entry):
    make_posted([entry(accounts["cash"], debit="10"), entry(accounts["sales"], credit="10")])

    assert HealthCheck.check_ledger_balance() == {"status": "healthy"}
    response = client.get("/_health/full")
    assert response.status_code == 200
    assert response.json()["checks"]["ledger"]["status"] == "healthy"
