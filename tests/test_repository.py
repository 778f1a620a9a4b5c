import pytest

from storefront import models
from storefront.db import SessionLocal
from storefront.domain.order.status import (
    gateway_transition_sources,
    order_status_for_gateway,
    parse_order_status,
)
from storefront.errors import AmbiguousReference, DuplicateOrderId, NotFound
from storefront.repository import OrderRepository
from storefront.services.orders import update_order_status

AWAITING = models.OrderStatus.awaiting_payment
APPROVED = models.OrderStatus.approved
REJECTED = models.OrderStatus.rejected
SHIPPED = models.OrderStatus.shipped


def _order(order_id, status=AWAITING, tracking_code=None):
    order = models.Order(
        id=order_id,
        customer_name="João",
        customer_email="joao@example.com",
        customer_address="Rua X, 1",
        subtotal_cents=5000,
        shipping_cents=1000,
        discount_cents=0,
        total_cents=6000,
        status=status.value,
        tracking_code=tracking_code,
    )
    order.items = [
        models.OrderItem(
            position=0, name="Camiseta", unit_price_cents=5000, discounted_unit_price_cents=5000, quantity=1
        )
    ]
    return order


@pytest.fixture
def repo(db):
    return OrderRepository(db)


def test_create_and_get(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    order = repo.get("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f")
    assert order is not None
    assert order.status == AWAITING.value
    assert [item.name for item in order.items] == ["Camiseta"]
    assert repo.get("missing") is None


def test_create_duplicate_id_raises(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    with pytest.raises(DuplicateOrderId):
        repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))


def test_find_by_reference_exact_and_suffix(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    assert repo.find_by_reference("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f").id.endswith("4e5f")
    assert repo.find_by_reference("3D4E5F").id == "3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"
    assert repo.find_by_reference("  c3d4e5f ").id == "3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"


@pytest.mark.parametrize("reference", ["", "4e5f", "zzzzzz", "%4e5f", "ffffffff"])
def test_find_by_reference_not_found(repo, reference):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    with pytest.raises(NotFound):
        repo.find_by_reference(reference)


def test_find_by_reference_rejects_ambiguous_suffix(repo):
    repo.create(_order("aaaaaaaa-1111-4d2a-9c1e-00000abc123f"))
    repo.create(_order("bbbbbbbb-2222-4d2a-9c1e-11111abc123f"))
    with pytest.raises(AmbiguousReference):
        repo.find_by_reference("ABC123F")
    # A longer suffix disambiguates.
    assert repo.find_by_reference("00000abc123f").id.startswith("aaaaaaaa")


def test_transition_status_is_compare_and_set(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    first = repo.transition_status(
        "3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", APPROVED, allowed_from=[AWAITING], payment_id="pay-1"
    )
    second = repo.transition_status(
        "3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", APPROVED, allowed_from=[AWAITING], payment_id="pay-1"
    )
    assert (first, second) == (True, False)
    order = repo.get("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f")
    assert order.status == APPROVED.value
    assert order.payment_id == "pay-1"


def test_transition_status_without_sources_is_noop(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    assert repo.transition_status("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", AWAITING, allowed_from=[]) is False


def test_update_status_is_partial(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", status=SHIPPED, tracking_code="BR123"))
    change = repo.update_status("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", models.OrderStatus.delivered)
    assert change.previous_status == SHIPPED.value
    assert change.previous_tracking_code == "BR123"
    assert change.order.status == models.OrderStatus.delivered.value
    assert change.order.tracking_code == "BR123"


def test_update_status_unknown_order(repo):
    with pytest.raises(NotFound):
        repo.update_status("nope", SHIPPED, tracking_code="X")


def test_list_recent_is_newest_first(repo):
    for suffix in ("000000000001", "000000000002", "000000000003"):
        repo.create(_order(f"3f0c2b8e-1111-4d2a-9c1e-{suffix}"))
    ids = [order.id for order in repo.list_recent()]
    assert ids == [
        "3f0c2b8e-1111-4d2a-9c1e-000000000003",
        "3f0c2b8e-1111-4d2a-9c1e-000000000002",
        "3f0c2b8e-1111-4d2a-9c1e-000000000001",
    ]
    assert repo.list_recent(APPROVED) == []


@pytest.mark.parametrize(
    "gateway_status, expected",
    [
        ("approved", APPROVED),
        ("APPROVED", APPROVED),
        ("rejected", REJECTED),
        ("pending", AWAITING),
        ("in_process", AWAITING),
        ("cancelled", AWAITING),
        (None, AWAITING),
    ],
)
def test_gateway_status_mapping(gateway_status, expected):
    assert order_status_for_gateway(gateway_status) == expected


def test_gateway_transitions_never_leave_approved():
    assert APPROVED not in gateway_transition_sources(REJECTED)
    assert SHIPPED not in gateway_transition_sources(APPROVED)
    assert gateway_transition_sources(AWAITING) == ()


def test_parse_order_status_accepts_value_or_name():
    assert parse_order_status("Enviado") == SHIPPED
    assert parse_order_status("shipped") == SHIPPED
    assert parse_order_status("Aguardando Pagamento (MP)") == AWAITING
    assert parse_order_status("Perdido") is None
    assert parse_order_status(None) is None


def test_update_status_sees_changes_made_by_another_session(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    stale = repo.get("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f")
    assert stale.status == AWAITING.value

    other = SessionLocal()
    try:
        first = OrderRepository(other).update_status("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", SHIPPED, "BR1")
    finally:
        other.close()
    second = repo.update_status("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", SHIPPED, "BR1")

    assert first.previous_status == AWAITING.value
    assert (second.previous_status, second.previous_tracking_code) == (SHIPPED.value, "BR1")
    assert second.order.tracking_code == "BR1"


def test_second_concurrent_shipment_sends_no_email(repo):
    repo.create(_order("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f"))
    repo.get("3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f")  # loaded before the other session ships it

    other = SessionLocal()
    try:
        first = update_order_status(OrderRepository(other), "3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", "Enviado", "BR1")
        assert first.shipped_notice is not None
    finally:
        other.close()
    second = update_order_status(repo, "3f0c2b8e-1111-4d2a-9c1e-0a1b2c3d4e5f", "Enviado", "BR1")

    assert second.shipped_notice is None
