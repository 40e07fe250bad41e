"""
Tests for calculation and reference data API endpoints.
"""

import importlib
import logging

import pytest

from immorechner import main


def metrics_payload(**overrides):
    """Berlin example request; top-level groups can be replaced."""
    payload = {
        "property": {
            "purchase_price": 300000,
            "state_code": "BE",
            "notary_rate": 1.5,
            "land_registry_rate": 0.5,
            "broker_rate": 3.57,
            "include_broker": True,
        },
        "financing": {"equity": 60000, "interest_rate": 3.5, "repayment_rate": 2.0},
        "rental": {
            "monthly_rent": 1100,
            "monthly_hausgeld": 250,
            "maintenance_reserve": 50,
            "vacancy_rate": 3.0,
        },
    }
    payload.update(overrides)
    return payload


class TestHealth:
    """Test health endpoint."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestLogging:
    """Test logging setup of the server entry point."""

    def test_configure_logging_uses_level(self, monkeypatch):
        """Test root logging is configured only when requested."""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

        main.configure_logging("DEBUG")

        assert len(calls) == 1
        assert calls[0]["level"] == "DEBUG"

    def test_import_does_not_configure_logging(self, monkeypatch):
        """Test reloading the app module leaves logging untouched."""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

        importlib.reload(main)

        assert calls == []


class TestMetricsAPI:
    """Test metrics calculation endpoint."""

    def test_state_tax_rate_from_state_code(self, client):
        """Test the transfer tax rate is looked up from the state."""
        response = client.post("/api/calculate/metrics", json=metrics_payload())
        assert response.status_code == 200
        data = response.json()
        assert data["transfer_tax"] == pytest.approx(18000)
        assert data["total_purchase_costs"] == pytest.approx(34710)
        assert data["total_investment"] == pytest.approx(334710)
        assert data["loan_amount"] == pytest.approx(274710)
        assert data["monthly_mortgage"] == pytest.approx(1259.0875)
        assert data["tax"] == pytest.approx(
            {
                "total_acquisition_cost": 334710,
                "building_value": 267768,
                "land_value": 66942,
                "annual_depreciation": 5355.36,
                "effective_marginal_rate": 42,
            }
        )

    def test_explicit_state_tax_rate(self, client):
        """Test an explicit rate overrides the state table."""
        payload = metrics_payload()
        payload["property"]["state_tax_rate"] = 5.0
        response = client.post("/api/calculate/metrics", json=payload)
        assert response.status_code == 200
        assert response.json()["transfer_tax"] == pytest.approx(15000)

    def test_lowercase_state_code(self, client):
        """Test state codes are matched case-insensitively."""
        payload = metrics_payload()
        payload["property"]["state_code"] = "by"
        response = client.post("/api/calculate/metrics", json=payload)
        assert response.status_code == 200
        assert response.json()["transfer_tax"] == pytest.approx(10500)

    def test_unknown_state_code(self, client):
        """Test unknown state without explicit rate is rejected."""
        payload = metrics_payload()
        payload["property"]["state_code"] = "XX"
        response = client.post("/api/calculate/metrics", json=payload)
        assert response.status_code == 422

    def test_default_purchase_cost_rates(self, client):
        """Test omitted rates fall back to configured defaults."""
        payload = metrics_payload(property={"purchase_price": 300000})
        response = client.post("/api/calculate/metrics", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["notary_fees"] == pytest.approx(4500)
        assert data["land_registry_fees"] == pytest.approx(1500)
        assert data["broker_fees"] == pytest.approx(10710)

    def test_with_tax_inputs(self, client):
        """Test tax analysis in income mode."""
        payload = metrics_payload(
            tax={
                "tax_input_mode": "income",
                "taxable_income": 150000,
                "joint_tax_declaration": True,
                "include_soli": True,
            }
        )
        response = client.post("/api/calculate/metrics", json=payload)
        assert response.status_code == 200
        tax = response.json()["tax"]
        assert tax["effective_marginal_rate"] == pytest.approx(44.31)
        assert tax["annual_depreciation"] == pytest.approx(5355.36)
        assert tax["annual_tax_savings"] > 0
        assert "monthly_cash_flow_after_tax" in tax

    def test_invalid_tax_mode(self, client):
        """Test unknown tax input modes are rejected."""
        payload = metrics_payload(tax={"tax_input_mode": "guess"})
        response = client.post("/api/calculate/metrics", json=payload)
        assert response.status_code == 422


class TestScheduleAPI:
    """Test payment schedule endpoint."""

    def test_schedule(self, client):
        """Test schedule rows, dates and summary."""
        response = client.post(
            "/api/calculate/schedule",
            json={
                "loan_amount": 1200,
                "monthly_payment": 100,
                "interest_rate": 0,
                "start_date": "2025-03-20",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["schedule"]) == 12
        assert data["schedule"][0]["date"] == "2025-03-01"
        assert data["schedule"][-1]["date"] == "2026-02-01"
        assert data["summary"]["total_months"] == 12
        assert data["summary"]["total_principal_paid"] == pytest.approx(1200)
        assert data["summary"]["capped_at_max_months"] is False
        assert data["remaining_balance_after_fixed_rate"] is None

    def test_fixed_rate_balance(self, client):
        """Test remaining balance at the end of the fixed rate period."""
        response = client.post(
            "/api/calculate/schedule",
            json={
                "loan_amount": 274710,
                "monthly_payment": 1259.0875,
                "interest_rate": 3.5,
                "fixed_rate_years": 10,
            },
        )
        data = response.json()
        assert data["remaining_balance_after_fixed_rate"] == pytest.approx(
            data["schedule"][119]["remaining_balance"]
        )

    def test_non_amortizing(self, client):
        """Test a payment below interest returns an empty schedule."""
        response = client.post(
            "/api/calculate/schedule",
            json={"loan_amount": 500000, "monthly_payment": 2000, "interest_rate": 5},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["schedule"] == []
        assert data["summary"]["total_months"] == 0


class TestAnalysisAPI:
    """Test combined metrics and schedule endpoint."""

    def test_analysis_uses_metrics_loan(self, client):
        """Test the schedule is built from the derived loan and mortgage."""
        payload = metrics_payload(monthly_extra_repayment=200, start_date="2026-01-01")
        response = client.post("/api/calculate/analysis", json=payload)
        assert response.status_code == 200
        data = response.json()

        first = data["schedule"][0]
        assert first["interest_payment"] == pytest.approx(274710 * 0.035 / 12)
        assert first["extra_repayment"] == pytest.approx(200)
        assert first["total_payment"] == pytest.approx(1259.0875 + 200)
        assert data["summary"]["total_extra_repayment_paid"] > 0
        assert data["metrics"]["loan_amount"] == pytest.approx(274710)


class TestReferenceAPI:
    """Test reference data endpoints."""

    def test_list_states(self, client):
        response = client.get("/api/reference/states")
        assert response.status_code == 200
        assert len(response.json()) == 16

    def test_get_state(self, client):
        response = client.get("/api/reference/states/be")
        assert response.status_code == 200
        assert response.json() == {"name": "Berlin", "code": "BE", "tax_rate": 6.0}

    def test_get_state_not_found(self, client):
        response = client.get("/api/reference/states/XX")
        assert response.status_code == 404

    def test_presets(self, client):
        response = client.get("/api/reference/tax/presets")
        assert response.status_code == 200
        assert [p["label"] for p in response.json()] == ["0%", "14%", "24%", "33%", "42%", "45%"]

    def test_marginal_rate(self, client):
        response = client.get(
            "/api/reference/tax/marginal-rate", params={"taxable_income": 300000}
        )
        assert response.status_code == 200
        assert response.json()["marginal_rate"] == 45

    def test_marginal_rate_joint_with_soli(self, client):
        response = client.get(
            "/api/reference/tax/marginal-rate",
            params={"taxable_income": 300000, "joint": True, "include_soli": True},
        )
        data = response.json()
        assert data["joint_tax_declaration"] is True
        assert data["marginal_rate"] == pytest.approx(44.31)
