"""Integration tests for debts, payments, savings goals and reports"""

import pytest
from decimal import Decimal
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

pytestmark = pytest.mark.integration


def _funds(client: TestClient) -> dict:
    return {name: Decimal(value) for name, value in client.get("/v1/funds").json().items()}


def _add_income(client: TestClient, amount: str, day: str = "2024-03-01"):
    response = client.post("/v1/incomes", json={"description": "Salary", "amount": amount, "date": day})
    assert response.status_code == 201, response.text


def _create_debt(client: TestClient, **fields) -> dict:
    body = {"description": "Car loan", "total_amount": "1200", "due_date": "2024-01-15", "installment_count": 3}
    body.update(fields)
    response = client.post("/v1/debts", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _create_goal(client: TestClient, **fields) -> dict:
    body = {"title": "Vacation", "target_amount": "1000"}
    body.update(fields)
    response = client.post("/v1/goals", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _pay(client: TestClient, debt_id: str, amount: str, day: str = "2024-01-15", from_debt_fund: bool = False):
    return client.post(
        f"/v1/debts/{debt_id}/payments",
        json={"amount": amount, "date": day, "from_debt_fund": from_debt_fund},
    )


def test_create_and_list_debts(client: TestClient):
    debt = _create_debt(client, category="credit-card")

    assert debt["category"] == "credit-card"
    assert Decimal(debt["paid_amount"]) == 0
    assert [d["id"] for d in client.get("/v1/debts").json()] == [debt["id"]]


def test_create_debt_rejects_bad_total(client: TestClient):
    response = client.post(
        "/v1/debts", json={"description": "Nothing", "total_amount": "0", "due_date": "2024-01-15"}
    )

    assert response.status_code == 422
    assert response.json()["code"] == "invalid_amount"


def test_payment_advances_next_payment_date(client: TestClient):
    """Each payment moves the next date one calendar month forward"""
    debt = _create_debt(client)

    assert _pay(client, debt["id"], "400").status_code == 201
    debt = client.get("/v1/debts").json()[0]
    assert debt["next_payment_date"] == "2024-02-15"
    assert Decimal(debt["paid_amount"]) == Decimal("400")

    _pay(client, debt["id"], "400", day="2024-02-15")
    assert client.get("/v1/debts").json()[0]["next_payment_date"] == "2024-03-15"


def test_payment_next_date_clamps_to_month_end(client: TestClient):
    debt = _create_debt(client, due_date="2024-01-31")

    _pay(client, debt["id"], "100")

    assert client.get("/v1/debts").json()[0]["next_payment_date"] == "2024-02-29"


def test_payment_from_debt_fund_and_refund(client: TestClient):
    """A fund-drawn payment debits the debt fund; deleting it refunds"""
    _add_income(client, "1000")
    debt = _create_debt(client)

    payment = _pay(client, debt["id"], "200", from_debt_fund=True).json()
    assert _funds(client)["debt_fund"] == Decimal("100")

    response = client.delete(f"/v1/payments/{payment['id']}")
    assert response.status_code == 200
    assert Decimal(response.json()["paid_amount"]) == 0
    assert response.json()["payments"] == []
    assert _funds(client)["debt_fund"] == Decimal("300")


def test_payment_from_empty_debt_fund_rejected(client: TestClient):
    debt = _create_debt(client)

    response = _pay(client, debt["id"], "200", from_debt_fund=True)

    assert response.status_code == 409
    assert client.get("/v1/debts").json()[0]["payments"] == []


def test_outside_payment_does_not_touch_funds(client: TestClient):
    _add_income(client, "1000")
    debt = _create_debt(client)

    payment = _pay(client, debt["id"], "200").json()
    client.delete(f"/v1/payments/{payment['id']}")

    assert _funds(client)["debt_fund"] == Decimal("300")


def test_update_and_delete_debt(client: TestClient):
    debt = _create_debt(client)

    response = client.patch(f"/v1/debts/{debt['id']}", json={"total_amount": "1500", "description": "Car"})
    assert response.status_code == 200
    assert Decimal(response.json()["total_amount"]) == Decimal("1500")
    assert response.json()["description"] == "Car"

    assert client.delete(f"/v1/debts/{debt['id']}").status_code == 204
    assert client.get("/v1/debts").json() == []
    assert client.delete(f"/v1/debts/{debt['id']}").status_code == 404


def test_payment_on_unknown_debt(client: TestClient):
    response = _pay(client, "00000000-0000-0000-0000-000000000000", "100")
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_goal_initial_amount_is_opening_contribution(client: TestClient):
    goal = _create_goal(client, initial_amount="100")

    assert Decimal(goal["current_amount"]) == Decimal("100")
    assert len(goal["contributions"]) == 1


def test_contribution_delete_decrements_goal(client: TestClient):
    """Deleting a contribution takes exactly its amount off the goal"""
    goal = _create_goal(client, initial_amount="100")

    response = client.post(f"/v1/goals/{goal['id']}/contributions", json={"amount": "250"})
    assert response.status_code == 201
    contribution = response.json()
    assert Decimal(client.get("/v1/goals").json()[0]["current_amount"]) == Decimal("350")

    response = client.delete(f"/v1/contributions/{contribution['id']}")
    assert response.status_code == 200
    assert Decimal(response.json()["current_amount"]) == Decimal("100")


def test_fund_drawn_contributions_refunded(client: TestClient):
    """Savings-fund contributions are refunded when removed or when the goal is deleted"""
    _add_income(client, "1000")
    goal = _create_goal(client)

    first = client.post(
        f"/v1/goals/{goal['id']}/contributions", json={"amount": "150", "from_savings_fund": True}
    ).json()
    client.post(f"/v1/goals/{goal['id']}/contributions", json={"amount": "20", "from_savings_fund": True})
    assert _funds(client)["savings_fund"] == Decimal("30")

    client.delete(f"/v1/contributions/{first['id']}")
    assert _funds(client)["savings_fund"] == Decimal("180")

    assert client.delete(f"/v1/goals/{goal['id']}").status_code == 204
    assert _funds(client)["savings_fund"] == Decimal("200")


def test_contribution_from_savings_fund_insufficient(client: TestClient):
    goal = _create_goal(client)

    response = client.post(
        f"/v1/goals/{goal['id']}/contributions", json={"amount": "10", "from_savings_fund": True}
    )

    assert response.status_code == 409
    assert Decimal(client.get("/v1/goals").json()[0]["current_amount"]) == 0


def test_update_goal(client: TestClient):
    goal = _create_goal(client)

    response = client.patch(f"/v1/goals/{goal['id']}", json={"title": "Japan", "target_amount": "3000"})

    assert response.status_code == 200
    assert response.json()["title"] == "Japan"
    assert Decimal(response.json()["target_amount"]) == Decimal("3000")


def test_summary_report(client: TestClient):
    _add_income(client, "1000")
    _create_debt(client, total_amount="600", installment_count=2)

    response = client.get("/v1/reports/summary")

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["total_income"]) == Decimal("1000")
    assert Decimal(data["total_debt_remaining"]) == Decimal("600")
    assert data["debt_to_income_ratio"] == 60.0
    assert data["savings_rate"] == 20.0
    plan = data["debt_plan"]
    assert plan["strategy"] == "snowball"
    assert Decimal(plan["monthly_minimum"]) == Decimal("300")
    assert plan["estimated_months"] == 2
    assert {c["category"] for c in data["health_components"]} == {
        "debt_management",
        "savings_habit",
        "emergency_fund",
        "income_status",
    }


@patch("fundflow.infrastructure.database.repositories.SettingsRepository.get_or_create")
def test_summary_report_store_failure(mock_get_or_create, client: TestClient):
    """A store error while loading settings maps to a persistence error"""
    mock_get_or_create.side_effect = OperationalError("INSERT", {}, Exception("database unavailable"))

    response = client.get("/v1/reports/summary")

    assert response.status_code == 500
    assert response.json() == {"detail": "Something went wrong. Please try again.", "code": "persistence_error"}


def test_monthly_report(client: TestClient):
    _add_income(client, "1000", day="2024-03-05")
    _add_income(client, "500", day="2024-04-01")
    debt = _create_debt(client)
    _pay(client, debt["id"], "250", day="2024-03-20")

    response = client.get("/v1/reports/monthly", params={"month": "2024-03"})

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["total_income"]) == Decimal("1000")
    assert Decimal(data["debt_payments"]) == Decimal("250")
    assert Decimal(data["net_amount"]) == Decimal("750")
    assert data["income_count"] == 1


def test_monthly_report_bad_month(client: TestClient):
    response = client.get("/v1/reports/monthly", params={"month": "March"})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
