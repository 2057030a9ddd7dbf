"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient

CLIENT_BODY = {
    "name": "Fernando Silva",
    "bi": "004455667LA041",
    "phone": "923111222",
    "location": "Cazenga",
    "tap": "TAP-07",
}


def create_client(client: TestClient, **overrides) -> dict:
    response = client.post("/v1/clients", json={**CLIENT_BODY, **overrides})
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(logged_in_client: TestClient):
    """Test Prometheus metrics endpoint"""
    client_id = create_client(logged_in_client)["id"]
    logged_in_client.post(f"/v1/clients/{client_id}/payments", json={"amount": 3500, "method": "cash"})

    response = logged_in_client.get("/metrics")
    assert response.status_code == 200
    assert "gestornet_payments_total" in response.text
    assert "gestornet_login_attempts_total" in response.text


# --- Setup / auth ---


def test_setup_status_before_setup(client: TestClient):
    response = client.get("/v1/setup/status")

    assert response.status_code == 200
    assert response.json() == {"setup_complete": False, "logged_in": False, "manager": None}


def test_endpoints_require_setup(client: TestClient):
    assert client.get("/v1/clients").status_code == 409
    assert client.post("/v1/auth/login", json={"name": "Ana", "password": "ana1"}).status_code == 409


def test_setup_logs_in_first_manager(logged_in_client: TestClient):
    status = logged_in_client.get("/v1/setup/status").json()

    assert status["setup_complete"] is True
    assert status["logged_in"] is True
    assert status["manager"]["name"] == "Ana"
    assert "password" not in status["manager"]


def test_setup_runs_only_once(logged_in_client: TestClient):
    response = logged_in_client.post(
        "/v1/setup",
        json={
            "boss_name": "Outro",
            "boss_email": "o@example.com",
            "boss_password": "outro123",
            "manager_name": "Bruno",
            "manager_password": "bruno",
        },
    )
    assert response.status_code == 409


def test_setup_rejects_short_boss_password(client: TestClient):
    response = client.post(
        "/v1/setup",
        json={
            "boss_name": "Chefe",
            "boss_email": "c@example.com",
            "boss_password": "123",
            "manager_name": "Ana",
            "manager_password": "ana1",
        },
    )
    assert response.status_code == 422
    assert client.get("/v1/setup/status").json()["setup_complete"] is False


def test_logout_then_login(logged_in_client: TestClient):
    assert logged_in_client.post("/v1/auth/logout").status_code == 204
    assert logged_in_client.get("/v1/clients").status_code == 401

    wrong_case = logged_in_client.post("/v1/auth/login", json={"name": "ana", "password": "ana1"})
    assert wrong_case.status_code == 401

    response = logged_in_client.post("/v1/auth/login", json={"name": "Ana", "password": "ana1"})
    assert response.status_code == 200
    assert logged_in_client.get("/v1/auth/me").json()["name"] == "Ana"


def test_change_own_password(logged_in_client: TestClient):
    wrong = logged_in_client.post(
        "/v1/auth/password", json={"current_password": "nope", "new_password": "nova"}
    )
    assert wrong.status_code == 403

    mismatch = logged_in_client.post(
        "/v1/auth/password",
        json={"current_password": "ana1", "new_password": "nova", "confirm_password": "novo"},
    )
    assert mismatch.status_code == 422

    ok = logged_in_client.post("/v1/auth/password", json={"current_password": "ana1", "new_password": "nova"})
    assert ok.status_code == 204

    logged_in_client.post("/v1/auth/logout")
    assert logged_in_client.post("/v1/auth/login", json={"name": "Ana", "password": "nova"}).status_code == 200


def test_change_boss_password(logged_in_client: TestClient):
    response = logged_in_client.post(
        "/v1/auth/boss-password", json={"current_password": "chefe123", "new_password": "novochefe"}
    )
    assert response.status_code == 204

    stale = logged_in_client.post(
        "/v1/managers", json={"name": "Bruno", "password": "bruno", "boss_password": "chefe123"}
    )
    assert stale.status_code == 403


# --- Managers ---


def test_register_and_delete_manager(logged_in_client: TestClient):
    created = logged_in_client.post(
        "/v1/managers", json={"name": "Bruno", "password": "bruno", "boss_password": "chefe123"}
    )
    assert created.status_code == 201
    bruno_id = created.json()["id"]

    duplicate = logged_in_client.post(
        "/v1/managers", json={"name": "BRUNO", "password": "x", "boss_password": "chefe123"}
    )
    assert duplicate.status_code == 409

    wrong = logged_in_client.delete(f"/v1/managers/{bruno_id}", headers={"X-Boss-Password": "wrong"})
    assert wrong.status_code == 403

    deleted = logged_in_client.delete(f"/v1/managers/{bruno_id}", headers={"X-Boss-Password": "chefe123"})
    assert deleted.status_code == 204
    assert [m["name"] for m in logged_in_client.get("/v1/managers").json()] == ["Ana"]


def test_cannot_delete_logged_in_manager(logged_in_client: TestClient):
    me = logged_in_client.get("/v1/auth/me").json()

    response = logged_in_client.delete(f"/v1/managers/{me['id']}", headers={"X-Boss-Password": "chefe123"})

    assert response.status_code == 403


# --- Clients ---


def test_create_client_assigns_code(logged_in_client: TestClient):
    first = create_client(logged_in_client)
    second = create_client(logged_in_client, name="filipa")

    assert first["code"] == "F1"
    assert second["code"] == "F2"
    assert first["has_signal"] is True
    assert first["is_active"] is True


def test_create_client_validation(logged_in_client: TestClient):
    response = logged_in_client.post("/v1/clients", json={**CLIENT_BODY, "tap": ""})
    assert response.status_code == 422


def test_create_client_with_initial_payment(logged_in_client: TestClient):
    created = create_client(logged_in_client, initial_payment={"amount": 1750, "method": "transfer"})

    assert len(created["payments"]) == 1
    transactions = logged_in_client.get("/v1/transactions").json()
    assert transactions[0]["description"] == "Pagamento contrato - Fernando Silva"
    assert transactions[0]["manager_name"] == "Ana"


def test_list_clients_filters(logged_in_client: TestClient):
    fernando = create_client(logged_in_client)
    create_client(logged_in_client, name="Maria", location="Viana")
    logged_in_client.patch(f"/v1/clients/{fernando['id']}", json={"months_without_payment": 3})

    inactive = logged_in_client.get("/v1/clients", params={"status": "inactive"}).json()
    active = logged_in_client.get("/v1/clients", params={"status": "active"}).json()
    search = logged_in_client.get("/v1/clients", params={"q": "viana"}).json()

    assert [c["code"] for c in inactive] == ["F1"]
    assert [c["code"] for c in active] == ["M1"]
    assert [c["code"] for c in search] == ["M1"]


def test_update_client(logged_in_client: TestClient):
    created = create_client(logged_in_client)

    response = logged_in_client.patch(f"/v1/clients/{created['id']}", json={"phone": "999", "debt": 7000})

    assert response.status_code == 200
    assert response.json()["phone"] == "999"
    assert response.json()["debt"] == 7000
    assert response.json()["name"] == "Fernando Silva"


def test_unknown_client_returns_404(logged_in_client: TestClient):
    assert logged_in_client.get("/v1/clients/missing").status_code == 404
    assert logged_in_client.patch("/v1/clients/missing", json={"name": "X"}).status_code == 404
    assert logged_in_client.delete("/v1/clients/missing").status_code == 404
    assert logged_in_client.post("/v1/clients/missing/signal").status_code == 404
    assert logged_in_client.get("/v1/clients/missing/quote").status_code == 404
    payment = logged_in_client.post("/v1/clients/missing/payments", json={"amount": 100, "method": "cash"})
    assert payment.status_code == 404


def test_toggle_signal(logged_in_client: TestClient):
    created = create_client(logged_in_client)
    logged_in_client.patch(f"/v1/clients/{created['id']}", json={"months_without_payment": 2})

    off = logged_in_client.post(f"/v1/clients/{created['id']}/signal").json()
    on = logged_in_client.post(f"/v1/clients/{created['id']}/signal").json()

    assert off["has_signal"] is False
    assert off["months_without_payment"] == 2
    assert on["has_signal"] is True
    assert on["months_without_payment"] == 0


def test_payment_flow(logged_in_client: TestClient):
    created = create_client(logged_in_client)
    logged_in_client.patch(
        f"/v1/clients/{created['id']}", json={"debt": 2000, "has_signal": False, "months_without_payment": 4}
    )

    response = logged_in_client.post(f"/v1/clients/{created['id']}/payments", json={"amount": 3500, "method": "cash"})

    assert response.status_code == 201
    data = response.json()
    assert data["client"]["debt"] == 0
    assert data["client"]["has_signal"] is True
    assert data["client"]["is_active"] is True
    assert data["payment"]["type"] == "mensalidade"

    report = logged_in_client.get("/v1/reports/daily").json()
    assert report["total_entradas"] == 3500
    assert report["breakdown"]["cash_total"] == 3500
    assert report["transactions"][0]["id"] == data["transaction_id"]


@pytest.mark.parametrize("body", [{"amount": 0, "method": "cash"}, {"amount": 100, "method": "card"}])
def test_payment_validation(logged_in_client: TestClient, body):
    created = create_client(logged_in_client)

    response = logged_in_client.post(f"/v1/clients/{created['id']}/payments", json=body)

    assert response.status_code == 422
    assert logged_in_client.get("/v1/transactions").json() == []


def test_quote_endpoint(logged_in_client: TestClient):
    created = create_client(logged_in_client, contract_date="2024-01-20T10:00:00")

    response = logged_in_client.get(f"/v1/clients/{created['id']}/quote", params={"on": "2024-02-10T09:00:00"})

    assert response.json() == {"amount": 1750, "has_late_fee": False, "reference_month": "2024-02"}


def test_delete_client(logged_in_client: TestClient):
    created = create_client(logged_in_client)

    assert logged_in_client.delete(f"/v1/clients/{created['id']}").status_code == 204
    assert logged_in_client.get("/v1/clients").json() == []


# --- Transactions / reports ---


def test_transaction_lifecycle(logged_in_client: TestClient):
    response = logged_in_client.post(
        "/v1/transactions",
        json={"type": "saida", "category": "alimentacao", "description": "Almoço", "amount": 1200, "method": "cash"},
    )
    assert response.status_code == 201
    transaction = response.json()
    assert transaction["method"] is None
    assert transaction["manager_name"] == "Ana"

    summary = logged_in_client.get("/v1/reports/summary").json()
    assert summary["total_saidas"] == 1200
    assert summary["balance"] == -1200
    assert summary["today_saidas"] == 1200

    assert logged_in_client.delete(f"/v1/transactions/{transaction['id']}").status_code == 204
    assert logged_in_client.delete(f"/v1/transactions/{transaction['id']}").status_code == 404
    assert logged_in_client.get("/v1/transactions", params={"today": True}).json() == []


def test_transaction_rejects_non_positive_amount(logged_in_client: TestClient):
    response = logged_in_client.post(
        "/v1/transactions",
        json={"type": "entrada", "category": "outro", "description": "Venda", "amount": 0},
    )
    assert response.status_code == 422


def test_daily_report_for_other_day(logged_in_client: TestClient):
    logged_in_client.post(
        "/v1/transactions",
        json={
            "type": "entrada",
            "category": "outro",
            "description": "Venda de router",
            "amount": 5000,
            "method": "transfer",
            "date": "2024-03-05T11:00:00",
        },
    )

    report = logged_in_client.get("/v1/reports/daily", params={"day": "2024-03-05"}).json()
    empty = logged_in_client.get("/v1/reports/daily", params={"day": "2024-03-06"}).json()

    assert report["balance"] == 5000
    assert report["breakdown"]["transfer_count"] == 1
    assert report["manager_name"] == "Ana"
    assert empty["transactions"] == []


def test_summary_counts_clients(logged_in_client: TestClient):
    first = create_client(logged_in_client)
    create_client(logged_in_client, name="Maria")
    logged_in_client.patch(f"/v1/clients/{first['id']}", json={"months_without_payment": 5})

    summary = logged_in_client.get("/v1/reports/summary").json()

    assert summary["total_clients"] == 2
    assert summary["active_clients"] == 1
    assert summary["inactive_clients"] == 1


# --- Backup ---


def test_backup_round_trip(logged_in_client: TestClient):
    created = create_client(logged_in_client, initial_payment={"amount": 3500, "method": "cash"})
    exported = logged_in_client.get("/v1/backup").json()

    logged_in_client.delete(f"/v1/clients/{created['id']}")
    assert logged_in_client.get("/v1/clients").json() == []

    response = logged_in_client.post("/v1/backup", json=exported)

    assert response.status_code == 200
    assert response.json() == {"managers": 1, "clients": 1, "transactions": 1}
    restored = logged_in_client.get(f"/v1/clients/{created['id']}").json()
    assert restored == created
    # The logged-in manager exists in the backup, so the session survives
    assert logged_in_client.get("/v1/auth/me").status_code == 200


def test_backup_missing_array_changes_nothing(logged_in_client: TestClient):
    create_client(logged_in_client)

    response = logged_in_client.post("/v1/backup", json={"managers": [], "clients": []})

    assert response.status_code == 400
    assert len(logged_in_client.get("/v1/clients").json()) == 1


def test_restore_without_current_manager_ends_session(logged_in_client: TestClient):
    response = logged_in_client.post("/v1/backup", json={"managers": [], "clients": [], "transactions": []})

    assert response.status_code == 200
    assert logged_in_client.get("/v1/auth/me").status_code == 401


@pytest.mark.parametrize(
    "client_record",
    [
        {"id": "c1"},
        {
            "id": "c1",
            "code": "F",
            "name": "Fernando",
            "bi": "1",
            "phone": "2",
            "location": "Viana",
            "tap": "T1",
            "contractDate": "2024-01-10T00:00:00",
        },
    ],
)
def test_backup_with_unreadable_client_changes_nothing(logged_in_client: TestClient, services, client_record):
    existing = create_client(logged_in_client)
    exported = logged_in_client.get("/v1/backup").json()

    response = logged_in_client.post("/v1/backup", json={**exported, "clients": [client_record]})

    assert response.status_code == 400
    assert [c["id"] for c in logged_in_client.get("/v1/clients").json()] == [existing["id"]]
    assert [r["id"] for r in services.store.get_all("clients")] == [existing["id"]]


def test_session_is_shared_by_every_caller(logged_in_client: TestClient):
    """The login belongs to the server instance, so a second HTTP client acts as the same manager"""
    other_caller = TestClient(logged_in_client.app)

    assert other_caller.get("/v1/auth/me").json()["name"] == "Ana"

    other_caller.post("/v1/auth/logout")
    assert logged_in_client.get("/v1/auth/me").status_code == 401
