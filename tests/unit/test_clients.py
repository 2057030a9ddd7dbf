"""Unit tests for the client registry"""

import pytest
from datetime import datetime
from gestornet.domain.clients import ClientRegistry
from gestornet.domain.exceptions import ValidationError
from gestornet.domain.models import CLIENTS, ClientUpdate


def add_client(registry: ClientRegistry, name: str = "Fernando Silva", **overrides):
    data = {
        "name": name,
        "bi": "004455667LA041",
        "phone": "923111222",
        "location": "Cazenga",
        "tap": "TAP-07",
    }
    data.update(overrides)
    return registry.add(**data)


def test_add_assigns_code_and_defaults(registry):
    client = add_client(registry)

    assert client.code == "F1"
    assert client.has_signal is True
    assert client.months_without_payment == 0
    assert client.debt == 0
    assert client.payments == []
    assert client.is_active is True


def test_add_codes_follow_first_letter(registry):
    add_client(registry, "Fernando")
    add_client(registry, "maria")
    third = add_client(registry, "Filipa")

    assert third.code == "F2"
    assert [c.code for c in registry.clients] == ["F1", "F2", "M1"]


def test_add_persists_record(registry, store):
    client = add_client(registry)

    records = store.get_all(CLIENTS)
    assert [r["id"] for r in records] == [client.id]
    assert records[0]["monthsWithoutPayment"] == 0


@pytest.mark.parametrize("field", ["name", "bi", "phone", "location", "tap"])
def test_add_rejects_missing_required_field(registry, field):
    with pytest.raises(ValidationError):
        add_client(registry, **{field: "  "})

    assert registry.clients == []


def test_update_merges_only_given_fields(registry):
    client = add_client(registry)

    updated = registry.update(client.id, ClientUpdate(phone="924000000"))

    assert updated.phone == "924000000"
    assert updated.name == client.name
    assert updated.location == client.location


def test_update_months_recomputes_activity(registry):
    client = add_client(registry)

    updated = registry.update(client.id, ClientUpdate(months_without_payment=3))

    assert updated.is_active is False


def test_update_unknown_client_is_noop(registry):
    assert registry.update("missing", ClientUpdate(name="X")) is None


def test_remove_deletes_from_memory_and_store(registry, store):
    client = add_client(registry)

    registry.remove(client.id)
    registry.remove("missing")

    assert registry.clients == []
    assert store.get_all(CLIENTS) == []


def test_toggle_signal_twice_restores_original(registry):
    client = add_client(registry)

    registry.toggle_signal(client.id)
    back = registry.toggle_signal(client.id)

    assert back.has_signal == client.has_signal


def test_toggle_signal_off_keeps_unpaid_months(registry):
    client = add_client(registry)
    registry.update(client.id, ClientUpdate(months_without_payment=2))

    off = registry.toggle_signal(client.id)

    assert off.has_signal is False
    assert off.months_without_payment == 2


def test_toggle_signal_on_resets_unpaid_months(registry):
    client = add_client(registry)
    registry.update(client.id, ClientUpdate(has_signal=False, months_without_payment=4))

    on = registry.toggle_signal(client.id)

    assert on.has_signal is True
    assert on.months_without_payment == 0
    assert on.is_active is True


def test_toggle_signal_unknown_client_is_noop(registry):
    assert registry.toggle_signal("missing") is None


def test_payment_never_leaves_negative_debt(registry):
    client = add_client(registry)
    registry.update(client.id, ClientUpdate(debt=3000))

    for amount in (1000, 5000, 250):
        registry.make_payment(client.id, amount=amount, method="cash")
        assert registry.get(client.id).debt >= 0

    assert registry.get(client.id).debt == 0


def test_payment_restores_signal_and_activity(registry):
    client = add_client(registry)
    registry.update(client.id, ClientUpdate(has_signal=False, months_without_payment=5, debt=7000))

    payment = registry.make_payment(client.id, amount=100, method="transfer", paid_at=datetime(2024, 3, 2))

    stored = registry.get(client.id)
    assert stored.has_signal is True
    assert stored.months_without_payment == 0
    assert stored.is_active is True
    assert stored.debt == 6900
    assert stored.payments[-1].id == payment.id
    assert payment.reference_month == "2024-03"
    assert payment.type == "mensalidade"


def test_payment_for_unknown_client_returns_unsaved_payment(registry, store):
    payment = registry.make_payment("missing", amount=3500, method="cash")

    assert payment.client_id == "missing"
    assert store.get_all(CLIENTS) == []


@pytest.mark.parametrize("amount, method", [(0, "cash"), (-10, "cash"), (100, "card")])
def test_payment_validation(registry, amount, method):
    client = add_client(registry)

    with pytest.raises(ValidationError):
        registry.make_payment(client.id, amount=amount, method=method)

    assert registry.get(client.id).payments == []


def test_inactive_view_includes_flag_and_threshold(make_client, writer):
    registry = ClientRegistry(
        writer,
        [
            make_client("A1", is_active=True, months_without_payment=0),
            make_client("B1", is_active=False, months_without_payment=1),
            # Marked active but already past the threshold
            make_client("C1", is_active=True, months_without_payment=3),
        ],
    )

    assert [c.code for c in registry.active_clients] == ["A1", "C1"]
    assert [c.code for c in registry.inactive_clients] == ["B1", "C1"]


def test_search_matches_name_code_and_location(registry):
    add_client(registry, "Fernando", location="Viana")
    add_client(registry, "Maria", location="Cacuaco")

    assert [c.name for c in registry.search("mar")] == ["Maria"]
    assert [c.name for c in registry.search("f1")] == ["Fernando"]
    assert [c.name for c in registry.search("cacuaco")] == ["Maria"]
    assert len(registry.search("")) == 2


def test_views_return_copies(registry):
    client = add_client(registry)

    registry.clients[0].name = "Changed"

    assert registry.get(client.id).name == "Fernando Silva"


def test_load_reads_persisted_clients(registry, store, writer):
    client = add_client(registry)
    registry.make_payment(client.id, amount=3500, method="cash")

    reloaded = ClientRegistry.load(store, writer)

    assert reloaded.get(client.id).payments[0].amount == 3500
