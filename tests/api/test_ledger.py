"""
Tests for the cross-customer ledger endpoints.
"""

from decimal import Decimal


def create_customer(client, name):
    return client.post("/customers", json={"name": name}).json()["id"]


class TestSummary:

    def test_empty_summary(self, client):
        data = client.get("/ledger/summary").json()
        assert data["total_customers"] == 0
        assert Decimal(data["total_owed"]) == Decimal("0")
        assert data["customers_with_debt"] == 0
        assert data["total_sales"] == 0

    def test_summary_and_balances(self, client):
        amina = create_customer(client, "Amina")
        brian = create_customer(client, "Brian")
        client.post("/sales", json={"customer_id": amina, "total": 80})
        client.post(f"/customers/{brian}/debts", json={"amount": 40, "reason": "penalty"})
        client.post(f"/customers/{brian}/payments", json={"amount": 10})
        client.post("/sales", json={"total": 15})

        summary = client.get("/ledger/summary").json()
        assert summary["total_customers"] == 2
        assert Decimal(summary["total_owed"]) == Decimal("110")
        assert summary["customers_with_debt"] == 2
        assert summary["total_sales"] == 1

        balances = {
            b["name"]: Decimal(b["balance"])
            for b in client.get("/ledger/balances").json()
        }
        assert balances == {"Amina": Decimal("80"), "Brian": Decimal("30")}


class TestReconcile:

    def test_reconcile_with_aliases(self, client):
        response = client.post("/ledger/reconcile", json={
            "customer_id": "c1",
            "sales": [
                {"id": "s1", "customerId": "c1", "total": 100,
                 "saleDate": "2024-01-01T09:00:00Z"},
                {"id": "s2", "total": 999, "saleDate": "2024-01-01T09:30:00Z"},
            ],
            "debts": [
                {"id": "d1", "customerId": "c1", "amount": 50, "reason": "loan",
                 "createdAt": "2024-01-01T10:00:00Z"},
            ],
            "payments": [
                {"id": "p1", "customer_id": "c1", "amount": 30, "method": "cash",
                 "date": "2024-01-01T11:00:00Z"},
            ],
        })
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["balance"]) == Decimal("120")
        assert [r["id"] for r in data["rows"]] == ["p1", "d1", "s1"]
        assert [Decimal(r["balance_after"]) for r in data["rows"]] == [
            Decimal("120"), Decimal("150"), Decimal("100"),
        ]

    def test_reconcile_tolerates_bad_amounts(self, client):
        response = client.post("/ledger/reconcile", json={
            "customer_id": "c1",
            "sales": [
                {"id": "s1", "customerId": "c1", "total": "garbage",
                 "createdAt": "2024-01-01T09:00:00"},
                {"id": "s2", "customerId": "c1", "total": 50,
                 "createdAt": "2024-01-02T09:00:00"},
            ],
            "payments": [
                {"id": "p1", "customerId": "c1", "amount": 80,
                 "date": "2024-01-03T09:00:00"},
            ],
        })
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["balance"]) == Decimal("-30")
        assert Decimal(data["rows"][-1]["amount"]) == Decimal("0")

    def test_reconcile_unknown_customer_is_empty(self, client):
        response = client.post("/ledger/reconcile", json={
            "customer_id": "nobody",
            "sales": [{"customerId": "c1", "total": 5}],
        })
        data = response.json()
        assert data["rows"] == []
        assert Decimal(data["balance"]) == Decimal("0")

    def test_reconcile_does_not_touch_database(self, client):
        client.post("/ledger/reconcile", json={
            "customer_id": "c1",
            "sales": [{"customerId": "c1", "total": 5}],
        })
        assert client.get("/ledger/summary").json()["total_sales"] == 0

    def test_reconcile_tolerates_odd_field_types(self, client):
        response = client.post("/ledger/reconcile", json={
            "customer_id": "c1",
            "sales": [
                {"id": 1, "customerId": "c1", "total": "9E+999999",
                 "paymentMethod": 7, "saleDate": 1704099600000},
                {"id": 2, "customerId": "c1", "total": "9E+999999",
                 "notes": {"till": 3}, "saleDate": 1704103200000},
            ],
            "debts": [
                {"id": "d1", "customerId": "c1", "amount": 50, "reason": 404,
                 "notes": ["credit"], "createdAt": 1704106800000},
            ],
            "payments": [
                {"id": "p1", "customerId": "c1", "amount": 20, "method": 3,
                 "notes": 12345, "date": 1704110400000},
            ],
        })
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["balance"]) == Decimal("30")
        assert [r["id"] for r in data["rows"]] == ["p1", "d1", "2", "1"]
        assert [r["notes"] for r in data["rows"]] == ["12345", "['credit']", "{'till': 3}", ""]
        assert [r["label"] for r in data["rows"]] == ["3", "DEBT - 404", "SALE", "7"]
