from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lavajato.database_models import Product, Service, WorkOrder, work_order_services
from lavajato.exceptions import NotFoundError, ValidationError
from lavajato.models.work_order import PaymentMethod, WorkOrderStatus
from lavajato.services.catalog import CatalogStore
from lavajato.services.registry import CustomerRegistry
from lavajato.services.work_orders import WorkOrderEngine


def stock_of(db, product_id):
    db.expire_all()
    return db.get(Product, product_id).stock


@pytest.fixture
def engine(db, clock):
    return WorkOrderEngine(db, clock=clock)


def test_create_sums_service_prices_and_starts_waiting(engine, catalog, customer, clock):
    work_order = engine.create(
        customer["id"], customer["vehicle_id"], [catalog["wash"], catalog["waxing"]],
        employee="João", damage_log="Risco na porta traseira",
    )

    assert work_order.total == Decimal("80.00")
    assert work_order.status == WorkOrderStatus.WAITING.value
    assert work_order.is_paid is False
    assert work_order.checkout_time is None
    assert work_order.checkin_time == clock.now
    assert work_order.checkin_time.tzinfo is not None
    assert [s.id for s in work_order.services] == sorted([catalog["wash"], catalog["waxing"]])
    assert work_order.employee == "João"


def test_create_ignores_repeated_service_ids(engine, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"], catalog["wash"]])

    assert work_order.total == Decimal("50.00")
    assert len(work_order.services) == 1


def test_create_with_unknown_service_persists_nothing(engine, db, catalog, customer):
    with pytest.raises(NotFoundError):
        engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"], 9999])

    assert db.query(WorkOrder).count() == 0
    assert db.execute(work_order_services.select()).first() is None


def test_create_requires_at_least_one_service(engine, customer):
    with pytest.raises(ValidationError):
        engine.create(customer["id"], customer["vehicle_id"], [])


def test_create_with_unknown_customer_or_vehicle(engine, catalog, customer):
    with pytest.raises(NotFoundError):
        engine.create(9999, customer["vehicle_id"], [catalog["wash"]])
    with pytest.raises(NotFoundError):
        engine.create(customer["id"], 9999, [catalog["wash"]])


def test_create_rejects_vehicle_of_another_customer(engine, db, catalog, customer):
    other = CustomerRegistry(db).register_customer(
        {"name": "Carlos Lima"}, [{"plate": "XYZ9K87", "model": "HB20", "color": "Branco"}]
    )

    with pytest.raises(ValidationError):
        engine.create(customer["id"], other.vehicles[0].id, [catalog["wash"]])
    assert db.query(WorkOrder).count() == 0


def test_total_is_frozen_when_catalog_price_changes(engine, db, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])

    CatalogStore(db).update_service(catalog["wash"], price=Decimal("65.00"))

    assert engine.get(work_order.id).total == Decimal("50.00")


@pytest.mark.parametrize("status", list(WorkOrderStatus))
def test_checkout_time_only_for_finished_or_delivered(engine, catalog, customer, status):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])

    updated = engine.update_status(work_order.id, status)

    assert updated.status == status.value
    if status in (WorkOrderStatus.FINISHED, WorkOrderStatus.DELIVERED):
        assert updated.checkout_time is not None
    else:
        assert updated.checkout_time is None


def test_going_back_to_in_progress_clears_checkout(engine, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])
    engine.update_status(work_order.id, WorkOrderStatus.FINISHED)

    reopened = engine.update_status(work_order.id, WorkOrderStatus.IN_PROGRESS)

    assert reopened.checkout_time is None


def test_transitions_are_unguarded_by_default(engine, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])

    engine.update_status(work_order.id, WorkOrderStatus.DELIVERED)
    back = engine.update_status(work_order.id, WorkOrderStatus.WAITING)

    assert back.status == WorkOrderStatus.WAITING.value


def test_enforced_transitions_follow_the_flow(db, clock, catalog, customer):
    strict = WorkOrderEngine(db, clock=clock, enforce_transitions=True)
    work_order = strict.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])

    with pytest.raises(ValidationError):
        strict.update_status(work_order.id, WorkOrderStatus.DELIVERED)

    strict.update_status(work_order.id, WorkOrderStatus.IN_PROGRESS)
    strict.update_status(work_order.id, WorkOrderStatus.FINISHED)
    assert strict.update_status(work_order.id, WorkOrderStatus.DELIVERED).status == "Entregue"


def test_update_unknown_work_order(engine):
    with pytest.raises(NotFoundError):
        engine.update_status(12345, WorkOrderStatus.IN_PROGRESS)


@pytest.mark.parametrize("status, payment_method", [
    ("Cancelado", None),
    ("Entregue", "bitcoin"),
])
def test_malformed_status_or_payment_is_rejected(engine, db, catalog, customer, status, payment_method):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])

    with pytest.raises(ValidationError):
        engine.update_status(work_order.id, status, is_paid=True, payment_method=payment_method)

    db.expire_all()
    stored = db.get(WorkOrder, work_order.id)
    assert stored.status == WorkOrderStatus.WAITING.value
    assert stored.is_paid is False
    assert stored.stock_consumed_at is None


def test_timestamps_are_stored_in_utc(db, catalog, customer):
    sao_paulo = timezone(timedelta(hours=-3))
    local = WorkOrderEngine(db, clock=lambda: datetime(2026, 5, 10, 21, 30, tzinfo=sao_paulo))
    work_order = local.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])
    finished = local.update_status(work_order.id, WorkOrderStatus.FINISHED)

    db.expire_all()
    stored = db.get(WorkOrder, work_order.id)
    assert stored.checkin_time == datetime(2026, 5, 11, 0, 30, tzinfo=timezone.utc)
    assert stored.checkin_time.utcoffset() == timedelta(0)
    assert finished.checkout_time.tzinfo is not None


def test_payment_consumes_bill_of_materials_once(engine, db, catalog, customer):
    work_order = engine.create(
        customer["id"], customer["vehicle_id"], [catalog["wash"], catalog["waxing"]]
    )

    paid = engine.update_status(
        work_order.id, WorkOrderStatus.DELIVERED, is_paid=True, payment_method=PaymentMethod.PIX
    )
    assert paid.is_paid is True
    assert paid.payment_method == "pix"
    # Shampoo: 10 - 1.5 (lavagem) - 0.5 (cera); Cera: 5 - 1
    assert stock_of(db, catalog["shampoo"]) == Decimal("8")
    assert stock_of(db, catalog["wax"]) == Decimal("4")

    # Mesmo pagamento de novo: não baixa outra vez
    engine.update_status(work_order.id, WorkOrderStatus.DELIVERED, is_paid=True)
    assert stock_of(db, catalog["shampoo"]) == Decimal("8")
    assert stock_of(db, catalog["wax"]) == Decimal("4")


def test_unpay_and_pay_again_does_not_consume_twice(engine, db, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])

    engine.update_status(work_order.id, WorkOrderStatus.FINISHED, is_paid=True)
    engine.update_status(work_order.id, WorkOrderStatus.FINISHED, is_paid=False)
    engine.update_status(work_order.id, WorkOrderStatus.DELIVERED, is_paid=True)

    assert stock_of(db, catalog["shampoo"]) == Decimal("8.5")


def test_status_change_without_payment_keeps_stock(engine, db, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])

    engine.update_status(work_order.id, WorkOrderStatus.IN_PROGRESS)
    updated = engine.update_status(work_order.id, WorkOrderStatus.FINISHED)

    assert updated.is_paid is False
    assert stock_of(db, catalog["shampoo"]) == Decimal("10")


def test_payment_fields_are_kept_when_omitted(engine, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])
    engine.update_status(work_order.id, WorkOrderStatus.FINISHED, is_paid=True, payment_method="cash")

    updated = engine.update_status(work_order.id, WorkOrderStatus.DELIVERED)

    assert updated.is_paid is True
    assert updated.payment_method == "cash"


def test_failed_consumption_rolls_back_whole_update(engine, db, catalog, customer):
    work_order = engine.create(
        customer["id"], customer["vehicle_id"], [catalog["wash"], catalog["waxing"]]
    )
    original = engine.catalog.decrement_stock
    calls = []

    def flaky_decrement(product_id, quantity):
        calls.append(product_id)
        if len(calls) == 2:
            raise NotFoundError("Produto", product_id)
        original(product_id, quantity)

    engine.catalog.decrement_stock = flaky_decrement

    with pytest.raises(NotFoundError):
        engine.update_status(work_order.id, WorkOrderStatus.DELIVERED, is_paid=True)

    db.expire_all()
    stored = db.get(WorkOrder, work_order.id)
    assert stored.status == WorkOrderStatus.WAITING.value
    assert stored.is_paid is False
    assert stored.stock_consumed_at is None
    assert stock_of(db, catalog["shampoo"]) == Decimal("10")
    assert stock_of(db, catalog["wax"]) == Decimal("5")


def test_stock_may_go_negative(engine, db, catalog, customer):
    CatalogStore(db).update_product(catalog["wax"], {"stock": Decimal("0.5")})
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["waxing"]])

    engine.update_status(work_order.id, WorkOrderStatus.DELIVERED, is_paid=True)

    assert stock_of(db, catalog["wax"]) == Decimal("-0.5")


def test_delete_removes_associations_without_restocking(engine, db, catalog, customer):
    work_order = engine.create(customer["id"], customer["vehicle_id"], [catalog["wash"], catalog["waxing"]])
    engine.update_status(work_order.id, WorkOrderStatus.DELIVERED, is_paid=True)

    engine.delete(work_order.id)

    assert db.query(WorkOrder).count() == 0
    assert db.execute(work_order_services.select()).first() is None
    assert db.query(Service).count() == 3
    assert stock_of(db, catalog["shampoo"]) == Decimal("8")
    assert stock_of(db, catalog["wax"]) == Decimal("4")


def test_delete_unknown_work_order(engine):
    with pytest.raises(NotFoundError):
        engine.delete(4242)


def test_list_is_ordered_by_checkin_desc(db, catalog, customer):
    early = WorkOrderEngine(db, clock=lambda: datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc))
    late = WorkOrderEngine(db, clock=lambda: datetime(2026, 3, 5, 8, 0, tzinfo=timezone.utc))
    first = early.create(customer["id"], customer["vehicle_id"], [catalog["wash"]])
    second = late.create(customer["id"], customer["vehicle_id"], [catalog["waxing"]])

    assert [wo.id for wo in early.list()] == [second.id, first.id]
