import pytest

from domain.ledger import (
    ValidationError,
    add_delivery,
    coerce_quantity,
    delete_delivery,
    new_delivery,
    set_inbound,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (12, 12),
        ("12", 12),
        (" 7 ", 7),
        (-3, 0),
        ("-3", 0),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (7.9, 7),
        (float("nan"), 0),
        (True, 0),
    ],
)
def test_coerce_quantity(raw, expected):
    assert coerce_quantity(raw) == expected


def test_set_inbound_replaces_whole_map(ledger):
    first = set_inbound(ledger, "Centro", {"Café": 100, "Leite": 5})
    second = set_inbound(first, "Centro", {"Açucar": 3})

    assert second.rota_inbound["Centro"] == {"Açucar": 3}


def test_set_inbound_clamps_garbage(ledger):
    updated = set_inbound(ledger, "Barra", {"Café": -10, "Leite": "x", "Açucar": "4"})

    assert updated.rota_inbound["Barra"] == {"Café": 0, "Leite": 0, "Açucar": 4}


def test_set_inbound_is_idempotent(ledger):
    once = set_inbound(ledger, "Centro", {"Café": 100})
    twice = set_inbound(once, "Centro", {"Café": 100})

    assert once == twice


def test_set_inbound_does_not_alias_previous_ledger(ledger):
    before = set_inbound(ledger, "Centro", {"Café": 100})
    after = set_inbound(before, "Tijuca", {"Café": 1})

    assert "Tijuca" not in before.rota_inbound
    assert after.rota_inbound["Centro"] is not before.rota_inbound["Centro"]


def test_set_inbound_rejects_unknown_route(ledger):
    with pytest.raises(ValidationError):
        set_inbound(ledger, "Lapa", {"Café": 1})


def test_add_delivery_prepends(ledger, make_delivery):
    first = make_delivery("a", "Padaria Sol", {"Café": 1})
    second = make_delivery("b", "Café X", {"Café": 2})

    updated = add_delivery(add_delivery(ledger, "Centro", first), "Centro", second)

    assert [d.id for d in updated.client_deliveries["Centro"]] == ["b", "a"]


def test_add_delivery_rejects_blank_client(ledger, make_delivery):
    with pytest.raises(ValidationError):
        add_delivery(ledger, "Centro", make_delivery("a", "   ", {"Café": 1}))

    assert ledger.client_deliveries == {}


def test_add_delivery_clamps_items(ledger, make_delivery):
    updated = add_delivery(ledger, "Centro", make_delivery("a", "Bar do Zé", {"Café": -5, "Leite": "3"}))

    assert updated.client_deliveries["Centro"][0].items == {"Café": 0, "Leite": 3}


def test_delete_unknown_id_is_noop(ledger, make_delivery):
    filled = add_delivery(ledger, "Centro", make_delivery("a", "Bar do Zé", {"Café": 1}))

    assert delete_delivery(filled, "Centro", "nonexistent") == filled
    assert delete_delivery(ledger, "Norte", "nonexistent") == ledger


def test_delete_keeps_order_of_the_rest(ledger, make_delivery):
    for i, name in enumerate(["A", "B", "C", "D"]):
        ledger = add_delivery(ledger, "Centro", make_delivery(f"id{i}", name, {"Café": 1}))

    updated = delete_delivery(ledger, "Centro", "id2")

    assert [d.id for d in updated.client_deliveries["Centro"]] == ["id3", "id1", "id0"]


def test_new_delivery_ids_are_unique():
    ids = {new_delivery("Centro", "Cliente", {}).id for _ in range(500)}

    assert len(ids) == 500
    assert all(i.startswith("Centro-") for i in ids)


def test_new_delivery_strips_name_and_coerces():
    delivery = new_delivery("Barra", "  Café X ", {"Café": "30", "Leite": -1})

    assert delivery.client_name == "Café X"
    assert delivery.items == {"Café": 30, "Leite": 0}
    assert delivery.rota == "Barra"
    assert delivery.timestamp.endswith("Z")
