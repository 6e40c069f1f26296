"""HTTP tests for the trading journal endpoints."""

import pytest

from apps.trading.models import Trade, TradingMonth, TradingQuarter


def quarter_url(year=2025, quarter=1):
    return f"/api/trading/quarters/{year}/{quarter}"


@pytest.fixture
def bundle(api_client):
    return api_client.get(quarter_url()).json()


@pytest.fixture
def trade(api_client, bundle):
    month_id = bundle["months"][0]["id"]
    return api_client.post(f"/api/trading/months/{month_id}/trades").json()


@pytest.mark.django_db
class TestQuarterEndpoint:

    def test_get_creates_skeleton(self, api_client):
        response = api_client.get(quarter_url(2025, 4))

        assert response.status_code == 200
        data = response.json()
        assert data["year"] == 2025
        assert data["quarter"] == 4
        assert [m["month"] for m in data["months"]] == ["Octubre", "Noviembre", "Diciembre"]
        assert TradingQuarter.objects.count() == 1
        assert TradingMonth.objects.count() == 3

    def test_invalid_quarter(self, api_client):
        response = api_client.get(quarter_url(2025, 7))

        assert response.status_code == 400
        assert "error" in response.json()

    def test_requires_auth(self, anon_client):
        assert anon_client.get(quarter_url()).status_code == 401


@pytest.mark.django_db
class TestMonthEndpoint:

    def test_notes_and_completion(self, api_client, bundle):
        url = f"{quarter_url()}/months/Febrero"

        response = api_client.patch(url, {"notes": "solid month"}, format="json")
        assert response.status_code == 200
        assert response.json()["month"]["notes"] == "solid month"

        for name in ("Enero", "Febrero", "Marzo"):
            response = api_client.patch(
                f"{quarter_url()}/months/{name}", {"completed": True}, format="json"
            )
        assert response.json()["quarter_completed"] is True

    def test_month_outside_quarter(self, api_client):
        response = api_client.patch(
            f"{quarter_url()}/months/Agosto", {"notes": "x"}, format="json"
        )
        assert response.status_code == 400

    def test_empty_patch(self, api_client):
        response = api_client.patch(f"{quarter_url()}/months/Enero", {}, format="json")
        assert response.status_code == 400


@pytest.mark.django_db
class TestTradeEndpoints:

    def test_create(self, api_client, bundle):
        month_id = bundle["months"][2]["id"]

        first = api_client.post(f"/api/trading/months/{month_id}/trades")
        second = api_client.post(f"/api/trading/months/{month_id}/trades")

        assert first.status_code == 201
        assert first.json()["trade_number"] == 1
        assert second.json()["trade_number"] == 2
        assert first.json()["status"] == "draft"

    def test_create_in_foreign_month(self, api_client, other_user):
        quarter = TradingQuarter.objects.create(user=other_user, year=2025, quarter=1)
        month = TradingMonth.objects.create(quarter=quarter, month_name="Enero", year=2025)

        response = api_client.post(f"/api/trading/months/{month.id}/trades")
        assert response.status_code == 404

    def test_patch(self, api_client, trade):
        response = api_client.patch(
            f"/api/trading/trades/{trade['id']}",
            {"pair": "XAUUSD", "risk_percent": "1.5", "direction": "sell"},
            format="json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["pair"] == "XAUUSD"
        assert data["risk_percent"] == "1.5"
        assert data["direction"] == "sell"

    def test_patch_rejects_bad_choice(self, api_client, trade):
        response = api_client.patch(
            f"/api/trading/trades/{trade['id']}", {"session": "mars"}, format="json"
        )
        assert response.status_code == 400

    def test_delete(self, api_client, trade):
        response = api_client.delete(f"/api/trading/trades/{trade['id']}")

        assert response.status_code == 204
        assert not Trade.objects.exists()
        assert api_client.delete(f"/api/trading/trades/{trade['id']}").status_code == 404

    def test_open_reports_missing_fields(self, api_client, trade):
        response = api_client.post(f"/api/trading/trades/{trade['id']}/open")

        assert response.status_code == 400
        assert set(response.json()["missing"]) == {"pair", "confluences", "link_before", "image_ref"}
        assert Trade.objects.get(id=trade["id"]).status == "draft"

    def test_full_lifecycle(self, api_client, trade):
        api_client.patch(
            f"/api/trading/trades/{trade['id']}",
            {"pair": "EURUSD", "confluences": "OB", "link_before": "https://x", "image_ref": "a.png"},
            format="json",
        )

        opened = api_client.post(f"/api/trading/trades/{trade['id']}/open")
        assert opened.status_code == 200
        assert opened.json()["status"] == "open"
        assert opened.json()["opened_at"] != ""

        closed = api_client.post(
            f"/api/trading/trades/{trade['id']}/close",
            {"result": "win", "final_rr": "1:2"},
            format="json",
        )
        assert closed.status_code == 200
        assert closed.json()["status"] == "closed"
        assert closed.json()["duration"] != ""

        # closed trades keep their result
        api_client.patch(
            f"/api/trading/trades/{trade['id']}", {"result": "loss"}, format="json"
        )
        assert Trade.objects.get(id=trade["id"]).result == "win"

    def test_close_validates_payload(self, api_client, trade):
        response = api_client.post(
            f"/api/trading/trades/{trade['id']}/close", {"result": "maybe"}, format="json"
        )
        assert response.status_code == 400

    def test_close_draft(self, api_client, trade):
        response = api_client.post(
            f"/api/trading/trades/{trade['id']}/close",
            {"result": "win", "final_rr": "1:2"},
            format="json",
        )
        assert response.status_code == 400
        assert "error" in response.json()
