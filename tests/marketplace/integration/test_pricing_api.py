"""Integration tests for the pricing endpoints via TestClient."""


def _cart():
    return [
        {"vendor_id": "ven-1", "product_id": "jollof", "quantity": 2, "unit_price": 1500},
        {"vendor_id": "ven-2", "product_id": "suya", "quantity": 1, "unit_price": 2000},
    ]


class TestQuoteEndpoint:
    def test_two_vendor_quote(self, client):
        response = client.post("/pricing/quote", json={"zone_or_landmark": "Amarata", "cart_lines": _cart()})
        assert response.status_code == 200
        body = response.json()
        assert body["subtotal"] == 5000.0
        assert body["delivery_fee"] == 1500.0
        assert body["vat_amount"] == 375.0
        assert body["total"] == 6875.0
        assert body["commission_amount"] == 500.0
        assert body["pricing_mode"] == "landmark"
        assert body["vendor_count"] == 2

    def test_state_mode_from_environment(self, client, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_PRICING_MODE", "state")
        response = client.post("/pricing/quote", json={"zone_or_landmark": "FCT", "cart_lines": _cart()})
        assert response.status_code == 200
        assert response.json()["delivery_zone"] == "Abuja"
        assert response.json()["delivery_fee"] == 2500.0

    def test_unknown_landmark(self, client):
        response = client.post("/pricing/quote", json={"zone_or_landmark": "Atlantis", "cart_lines": _cart()})
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidDeliveryZone"

    def test_empty_cart(self, client):
        line = {"vendor_id": "ven-1", "product_id": "jollof", "quantity": 0, "unit_price": 1500}
        response = client.post("/pricing/quote", json={"zone_or_landmark": "Amarata", "cart_lines": [line]})
        assert response.status_code == 400
        assert response.json()["kind"] == "EmptyCart"

    def test_negative_price_is_rejected_by_schema(self, client):
        line = {"vendor_id": "ven-1", "product_id": "jollof", "quantity": 1, "unit_price": -5}
        response = client.post("/pricing/quote", json={"zone_or_landmark": "Amarata", "cart_lines": [line]})
        assert response.status_code == 422


class TestReferenceTables:
    def test_landmarks(self, client):
        body = client.get("/pricing/landmarks").json()
        assert "Amarata" in body["landmarks"]
        assert "Azikoro" in body["zones"]["1"]
        assert set(body["zones"]) == {"1", "2", "3", "4"}

    def test_states(self, client):
        states = client.get("/pricing/states").json()["states"]
        assert {"Bayelsa", "Rivers", "Abuja", "Lagos"} <= set(states)
