"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient

from conftest import NOTHING_ROLL

pytestmark = pytest.mark.integration


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/users/user_metrics/receipts", json={})

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "rewards_receipts_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    assert client.get("/health").headers["X-Request-ID"]


def test_new_user_rewards_state(client: TestClient):
    response = client.get("/v1/users/user_new/rewards")

    assert response.status_code == 200
    data = response.json()
    assert data["wallet"] == {"balance_cents": 0, "formatted": "€0.00"}
    assert data["spins_available"] == 0
    assert data["tier_progress"]["current_tier"]["name"] == "Bronze"
    assert data["tier_progress"]["receipts_needed_for_next_tier"] == 5
    assert data["tier_progress"]["next_tier"] == "Silver"
    assert data["streak"]["week_count"] == 0
    assert [e["label"] for e in data["streak"]["current_cycle"]] == ["1 spin", "1 spin", "1 spin", "€0.50"]
    assert data["streak"]["weeks_until_cash"] == 4
    assert data["coupons"] == []
    assert data["badges"] == []


def test_scan_receipt(client: TestClient):
    """Test POST /v1/users/{user_id}/receipts"""
    response = client.post(
        "/v1/users/user_scan/receipts",
        json={"store_name": "Lidl", "amount_cents": 2350},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["base_cash_cents"] == 50
    assert data["mystery_bonus"] == {"kind": "cash_bonus", "amount_cents": 10}
    assert data["coins_awarded_cents"] == 60
    assert data["spins_awarded"] == 2
    assert data["streak_week"] == 1
    assert data["streak_reward"] == "1 spin"
    assert data["tier"] == "Bronze"
    assert data["tier_changed"] is False
    assert [b["id"] for b in data["badges_unlocked"]] == ["first_scan"]
    assert data["balance_cents"] == 60
    assert data["spins_available"] == 2


def test_scan_receipt_rejects_negative_amount(client: TestClient):
    response = client.post("/v1/users/user_scan/receipts", json={"amount_cents": -1})
    assert response.status_code == 422


def test_scan_receipt_rejects_backdated_receipt(client: TestClient):
    client.put("/v1/users/user_late/sync", json={"receipts_this_month": 6})

    response = client.post(
        "/v1/users/user_late/receipts",
        json={"scanned_at": "2026-02-27T18:00:00+00:00"},
    )

    assert response.status_code == 422
    progress = client.get("/v1/users/user_late/rewards").json()["tier_progress"]
    assert progress["receipts_this_month"] == 6
    assert progress["current_tier"]["name"] == "Silver"


def test_scan_receipt_requires_timezone_on_scanned_at(client: TestClient):
    response = client.post("/v1/users/user_naive/receipts", json={"scanned_at": "2026-03-11T12:00:00"})
    assert response.status_code == 422


def test_state_reflects_scans(client: TestClient, stub_rng):
    stub_rng.uniforms.extend([NOTHING_ROLL] * 5)
    for _ in range(5):
        client.post("/v1/users/user_five/receipts", json={})

    data = client.get("/v1/users/user_five/rewards").json()

    assert data["tier_progress"]["current_tier"]["name"] == "Silver"
    assert data["tier_progress"]["receipts_this_month"] == 5
    assert data["streak"]["week_count"] == 1
    # 4 Bronze receipts (1 spin) + 1 Silver receipt (2 spins) + week-1 streak spin
    assert data["spins_available"] == 7
    assert data["wallet"]["balance_cents"] == 4 * 50 + 55


def test_spin_without_tokens(client: TestClient):
    response = client.post("/v1/users/user_broke/spins")

    assert response.status_code == 409
    assert response.json()["detail"] == "No spins available"


def test_spin_lifecycle(client: TestClient):
    client.post("/v1/users/user_spin/receipts", json={})

    response = client.post("/v1/users/user_spin/spins")
    assert response.status_code == 200
    data = response.json()
    assert data["segment_index"] == 0
    assert data["label"] == "€0.20"
    assert data["is_jackpot"] is False
    assert data["rotation_degrees"] == 5 * 360 + 337.5
    assert data["spins_available"] == 1
    assert data["balance_cents"] == 80

    blocked = client.post("/v1/users/user_spin/spins")
    assert blocked.status_code == 409
    assert blocked.json()["detail"] == "Spin already in progress"

    done = client.post("/v1/users/user_spin/spins/complete")
    assert done.json() == {"segment_index": 0, "state": "idle"}

    assert client.post("/v1/users/user_spin/spins").status_code == 200


def test_list_coupons(client: TestClient):
    response = client.get("/v1/coupons")

    assert response.status_code == 200
    coupons = response.json()
    assert [c["id"] for c in coupons] == ["c1", "c2", "c3", "c4", "c5", "c6"]
    assert coupons[0]["price_formatted"] == "€1.50"


def test_redeem_coupon(client: TestClient):
    client.put("/v1/users/user_shop/sync", json={"balance_cents": 500})

    response = client.post("/v1/users/user_shop/coupons/c1/redeem")

    assert response.status_code == 200
    data = response.json()
    assert data["qr_payload"] == "LIDL-FRESH-10PCT"
    assert data["balance_cents"] == 350
    assert [b["id"] for b in data["badges_unlocked"]] == ["coupon_buyer"]

    state = client.get("/v1/users/user_shop/rewards").json()
    assert [c["coupon_id"] for c in state["coupons"]] == ["c1"]


def test_redeem_coupon_errors(client: TestClient):
    assert client.post("/v1/users/user_err/coupons/c1/redeem").status_code == 402
    assert client.post("/v1/users/user_err/coupons/zzz/redeem").status_code == 404

    client.put("/v1/users/user_err/sync", json={"balance_cents": 1000})
    assert client.post("/v1/users/user_err/coupons/c2/redeem").status_code == 200
    assert client.post("/v1/users/user_err/coupons/c2/redeem").status_code == 409

    state = client.get("/v1/users/user_err/rewards").json()
    assert state["wallet"]["balance_cents"] == 900


def test_sync_state(client: TestClient):
    response = client.put(
        "/v1/users/user_sync/sync",
        json={"balance_cents": 2500, "spins_available": 3, "receipts_this_month": 12, "streak_weeks": 10},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["wallet"]["formatted"] == "€25.00"
    assert data["spins_available"] == 3
    assert data["tier_progress"]["current_tier"]["name"] == "Diamond"
    assert data["tier_progress"]["next_tier"] is None
    assert data["streak"]["week_count"] == 10
    assert data["streak"]["next_cash_week"] == 4
    assert data["streak"]["weeks_until_cash"] == 2


def test_sync_rejects_negative_values(client: TestClient):
    response = client.put("/v1/users/user_sync/sync", json={"balance_cents": -5})
    assert response.status_code == 422
