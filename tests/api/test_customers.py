"""
Tests for customer and event endpoints.

These test the HTTP layer: status codes, response format and
error handling. Business logic is tested in
tests/services/.
"""

from decimal import Decimal


def create_customer(client, name="Amina Yusuf", **fields):
    response = client.post("/customers", json={"name": name, **fields})
    assert response.status_code == 201
    return response.json()["id"]


def record_example(client, customer_id):
    """Sale 100, debt 50 (loan), payment 30 (cash): balance 120."""
    client.post("/sales", json={
        "customer_id": customer_id,
        "total": 100,
        "occurred_at": "2024-01-01T09:00:00",
    })
    client.post(f"/customers/{customer_id}/debts", json={
        "amount": 50,
        "reason": "loan",
        "occurred_at": "2024-01-01T10:00:00",
    })
    client.post(f"/customers/{customer_id}/payments", json={
        "amount": 30,
        "method": "cash",
        "occurred_at": "2024-01-01T11:00:00",
    })


class TestCustomerEndpoints:

    def test_create_customer_returns_201(self, client):
        response = client.post("/customers", json={
            "name": "Amina Yusuf",
            "email": "amina@example.com",
            "phone": "0711 222 333",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["id"].startswith("cust-")
        assert data["email"] == "amina@example.com"

    def test_blank_name_returns_422(self, client):
        response = client.post("/customers", json={"name": ""})
        assert response.status_code == 422

    def test_duplicate_email_returns_400(self, client):
        create_customer(client, email="a@example.com")
        response = client.post("/customers", json={
            "name": "Other", "email": "a@example.com",
        })
        assert response.status_code == 400

    def test_list_and_search(self, client):
        create_customer(client, name="Amina Yusuf")
        create_customer(client, name="Brian Otieno")

        assert len(client.get("/customers").json()) == 2
        found = client.get("/customers", params={"search": "brian"}).json()
        assert [c["name"] for c in found] == ["Brian Otieno"]

    def test_get_customer(self, client):
        customer_id = create_customer(client)
        response = client.get(f"/customers/{customer_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Amina Yusuf"

    def test_get_unknown_customer_returns_404(self, client):
        response = client.get("/customers/cust-missing")
        assert response.status_code == 404

    def test_update_customer(self, client):
        customer_id = create_customer(client)
        response = client.put(f"/customers/{customer_id}", json={
            "address": "Market Street 4",
        })
        assert response.status_code == 200
        assert response.json()["address"] == "Market Street 4"
        assert response.json()["name"] == "Amina Yusuf"

    def test_update_unknown_customer_returns_404(self, client):
        response = client.put("/customers/cust-missing", json={"name": "X"})
        assert response.status_code == 404

    def test_delete_customer(self, client):
        customer_id = create_customer(client)
        response = client.delete(f"/customers/{customer_id}")
        assert response.status_code == 204
        assert client.get(f"/customers/{customer_id}").status_code == 404

    def test_delete_customer_with_history_returns_400(self, client):
        customer_id = create_customer(client)
        record_example(client, customer_id)
        response = client.delete(f"/customers/{customer_id}")
        assert response.status_code == 400


class TestEventEndpoints:

    def test_record_sale_returns_201(self, client):
        customer_id = create_customer(client)
        response = client.post("/sales", json={
            "customer_id": customer_id, "total": 19.99,
        })
        assert response.status_code == 201
        assert Decimal(response.json()["total"]) == Decimal("19.99")

    def test_walk_in_sale(self, client):
        response = client.post("/sales", json={"total": 5})
        assert response.status_code == 201
        assert response.json()["customer_id"] is None

    def test_sale_for_unknown_customer_returns_400(self, client):
        response = client.post("/sales", json={
            "customer_id": "cust-missing", "total": 5,
        })
        assert response.status_code == 400

    def test_negative_amounts_rejected(self, client):
        customer_id = create_customer(client)
        assert client.post("/sales", json={"total": -1}).status_code == 422
        assert client.post(
            f"/customers/{customer_id}/debts",
            json={"amount": 0, "reason": "loan"},
        ).status_code == 422
        assert client.post(
            f"/customers/{customer_id}/payments", json={"amount": -10},
        ).status_code == 422

    def test_debt_requires_reason(self, client):
        customer_id = create_customer(client)
        response = client.post(
            f"/customers/{customer_id}/debts", json={"amount": 10},
        )
        assert response.status_code == 422

    def test_unknown_payment_method_rejected(self, client):
        customer_id = create_customer(client)
        response = client.post(
            f"/customers/{customer_id}/payments",
            json={"amount": 10, "method": "cheque"},
        )
        assert response.status_code == 422

    def test_payment_defaults_to_cash(self, client):
        customer_id = create_customer(client)
        response = client.post(
            f"/customers/{customer_id}/payments", json={"amount": 10},
        )
        assert response.status_code == 201
        assert response.json()["method"] == "cash"

    def test_debt_for_unknown_customer_returns_404(self, client):
        response = client.post(
            "/customers/cust-missing/debts",
            json={"amount": 10, "reason": "loan"},
        )
        assert response.status_code == 404


class TestLedgerEndpoints:

    def test_balance(self, client):
        customer_id = create_customer(client)
        record_example(client, customer_id)

        response = client.get(f"/customers/{customer_id}/balance")
        assert response.status_code == 200
        assert Decimal(response.json()["balance"]) == Decimal("120")

    def test_balance_unknown_customer_returns_404(self, client):
        assert client.get("/customers/cust-missing/balance").status_code == 404

    def test_history_most_recent_first(self, client):
        customer_id = create_customer(client)
        record_example(client, customer_id)

        data = client.get(f"/customers/{customer_id}/history").json()
        assert Decimal(data["balance"]) == Decimal("120")
        assert [r["kind"] for r in data["rows"]] == ["payment", "debt", "sale"]

        payment = data["rows"][0]
        assert Decimal(payment["balance_before"]) == Decimal("150")
        assert Decimal(payment["balance_after"]) == Decimal("120")
        assert Decimal(payment["amount"]) == Decimal("30")
        assert Decimal(payment["signed_amount"]) == Decimal("-30")

    def test_history_of_new_customer_is_empty(self, client):
        customer_id = create_customer(client)
        data = client.get(f"/customers/{customer_id}/history").json()
        assert data["rows"] == []
        assert Decimal(data["balance"]) == Decimal("0")

    def test_statement_csv(self, client):
        customer_id = create_customer(client)
        record_example(client, customer_id)

        response = client.get(f"/customers/{customer_id}/statement")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0] == "Date,Previous Debt,Amount,Method/Reason,Remaining Balance,Notes"
        assert lines[1] == "2024-01-01,150.00,30.00,CASH,120.00,-"
        assert len(lines) == 4

    def test_statement_html(self, client):
        customer_id = create_customer(client)
        record_example(client, customer_id)

        response = client.get(
            f"/customers/{customer_id}/statement", params={"format": "html"}
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Payment History - Amina Yusuf" in response.text

    def test_statement_unknown_format_returns_422(self, client):
        customer_id = create_customer(client)
        response = client.get(
            f"/customers/{customer_id}/statement", params={"format": "pdf"}
        )
        assert response.status_code == 422
