"""
Unit tests for the purchase/sales order status machine.
"""
from datetime import date
from decimal import Decimal

import pytest

from crud import order_status
from crud import orders as orders_crud
from database import SessionLocal
from exceptions import EmptyOrder, InvalidTransition, NegativeLineTotal, OrderLocked, ProductNotFound
from models.order_items import OrderItem, OrderStatus, OrderType
from schemas.order_items import OrderItemCreateRequest
from schemas.purchase_orders import PurchaseOrderCreate, PurchaseOrderUpdate
from schemas.sales_orders import SalesOrderCreate


def _line(product, quantity="2", unit_price="100", tax="20", discount="0"):
    return OrderItemCreateRequest(
        product_id=product.id,
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        tax_amount=Decimal(tax),
        discount_amount=Decimal(discount),
    )


@pytest.fixture
def draft_po(db, vendor, product, tenant_id):
    order = orders_crud.create_order(
        db, OrderType.PURCHASE,
        PurchaseOrderCreate(vendor_id=vendor.id, order_date=date(2026, 3, 5), items=[_line(product)]),
        tenant_id,
    )
    db.commit()
    return order


@pytest.fixture
def empty_po(db, vendor, tenant_id):
    order = orders_crud.create_order(
        db, OrderType.PURCHASE,
        PurchaseOrderCreate(vendor_id=vendor.id, order_date=date(2026, 3, 5)),
        tenant_id,
    )
    db.commit()
    return order


def _items_sum(db, order):
    return sum((i.total_amount for i in db.query(OrderItem).filter(
        OrderItem.order_id == order.id, OrderItem.order_type == order.order_type
    )), Decimal("0"))


@pytest.mark.unit
class TestTransitionTable:
    """The allowed-target table and the transition operation."""

    @pytest.mark.parametrize("current,target", [
        (OrderStatus.DRAFT, OrderStatus.CONFIRMED),
        (OrderStatus.DRAFT, OrderStatus.CANCELLED),
        (OrderStatus.CONFIRMED, OrderStatus.IN_PROGRESS),
        (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
        (OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED),
        (OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED),
    ])
    def test_allowed(self, current, target):
        assert order_status.can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        (OrderStatus.DRAFT, OrderStatus.DRAFT),
        (OrderStatus.DRAFT, OrderStatus.COMPLETED),
        (OrderStatus.CONFIRMED, OrderStatus.DRAFT),
        (OrderStatus.IN_PROGRESS, OrderStatus.CONFIRMED),
        (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
        (OrderStatus.CANCELLED, OrderStatus.DRAFT),
    ])
    def test_rejected(self, current, target):
        assert not order_status.can_transition(current, target)

    def test_terminal_states_have_no_targets(self):
        for status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
            assert all(not order_status.can_transition(status, t) for t in OrderStatus)

    def test_draft_order_with_items_totals_and_confirms(self, db, draft_po):
        """2 x 100 + 20 tax = 220; confirm works, going back to DRAFT does not."""
        assert draft_po.total_amount == Decimal("220.00")
        assert draft_po.number.startswith("PO-202603-")

        order_status.transition(db, draft_po, OrderStatus.CONFIRMED)
        db.commit()
        assert draft_po.status == OrderStatus.CONFIRMED

        with pytest.raises(InvalidTransition) as exc_info:
            order_status.transition(db, draft_po, OrderStatus.DRAFT)
        assert str(exc_info.value) == "Cannot transition from CONFIRMED to DRAFT"
        assert draft_po.status == OrderStatus.CONFIRMED

    def test_confirming_empty_order_fails_and_keeps_draft(self, db, empty_po):
        with pytest.raises(EmptyOrder):
            order_status.transition(db, empty_po, OrderStatus.CONFIRMED)
        db.rollback()
        db.refresh(empty_po)
        assert empty_po.status == OrderStatus.DRAFT

    def test_self_transition_fails_every_time(self, db, draft_po):
        for _ in range(2):
            with pytest.raises(InvalidTransition):
                order_status.transition(db, draft_po, OrderStatus.DRAFT)
        assert draft_po.status == OrderStatus.DRAFT

    def test_transition_touches_status_notes_and_timestamp_only(self, db, draft_po):
        total_before = draft_po.total_amount
        order_status.transition(db, draft_po, OrderStatus.CANCELLED, notes="Supplier out of stock")
        db.commit()
        db.refresh(draft_po)
        assert draft_po.status == OrderStatus.CANCELLED
        assert draft_po.notes == "Supplier out of stock"
        assert draft_po.updated_at is not None
        assert draft_po.total_amount == total_before

    def test_notes_left_alone_when_not_given(self, db, vendor, product, tenant_id):
        order = orders_crud.create_order(
            db, OrderType.PURCHASE,
            PurchaseOrderCreate(vendor_id=vendor.id, order_date=date(2026, 3, 5), notes="Keep me", items=[_line(product)]),
            tenant_id,
        )
        order_status.transition(db, order, OrderStatus.CONFIRMED)
        assert order.notes == "Keep me"


@pytest.mark.unit
class TestItemsAndTotals:
    """Item mutations are DRAFT-only and always re-total the order."""

    def test_compute_line_total_rounds_half_up(self):
        assert order_status.compute_line_total(Decimal("3"), Decimal("0.335")) == Decimal("1.01")

    def test_compute_line_total_defaults_tax_and_discount(self):
        assert order_status.compute_line_total(Decimal("2"), Decimal("50")) == Decimal("100.00")

    def test_negative_line_total_is_rejected(self):
        with pytest.raises(NegativeLineTotal):
            order_status.compute_line_total(Decimal("1"), Decimal("10"), Decimal("0"), Decimal("25"))

    def test_add_update_delete_keep_total_in_sync(self, db, draft_po, product, tenant_id):
        item = order_status.add_item(db, draft_po, _line(product, quantity="1", unit_price="50", tax="0"), tenant_id)
        assert draft_po.total_amount == Decimal("270.00")
        assert draft_po.total_amount == _items_sum(db, draft_po)

        order_status.update_item(db, draft_po, item, {"quantity": Decimal("3")}, tenant_id)
        assert item.total_amount == Decimal("150.00")
        assert item.unit_price == Decimal("50")
        assert draft_po.total_amount == Decimal("370.00")

        order_status.delete_item(db, draft_po, item)
        assert draft_po.total_amount == Decimal("220.00")
        assert draft_po.total_amount == _items_sum(db, draft_po)

    def test_update_keeps_omitted_fields(self, db, draft_po, tenant_id):
        item = draft_po.items[0]
        order_status.update_item(db, draft_po, item, {"discount_amount": Decimal("10")}, tenant_id)
        assert item.quantity == Decimal("2")
        assert item.tax_amount == Decimal("20")
        assert item.total_amount == Decimal("210.00")

    def test_replace_items_swaps_everything(self, db, draft_po, product, tenant_id):
        order_status.replace_items(db, draft_po, [
            _line(product, quantity="1", unit_price="10", tax="0"),
            _line(product, quantity="4", unit_price="25", tax="5", discount="5"),
        ], tenant_id)
        db.commit()
        assert len(draft_po.items) == 2
        assert draft_po.total_amount == Decimal("110.00")
        assert draft_po.total_amount == _items_sum(db, draft_po)

    def test_replace_items_with_unknown_product_changes_nothing(self, db, draft_po, product, tenant_id):
        bad = OrderItemCreateRequest(product_id=9999, quantity=Decimal("1"), unit_price=Decimal("1"))
        with pytest.raises(ProductNotFound):
            order_status.replace_items(db, draft_po, [_line(product), bad], tenant_id)
        db.rollback()
        db.refresh(draft_po)
        assert len(draft_po.items) == 1
        assert draft_po.total_amount == Decimal("220.00")

    @pytest.mark.parametrize("status", [OrderStatus.CONFIRMED, OrderStatus.CANCELLED])
    def test_items_locked_outside_draft(self, db, draft_po, product, tenant_id, status):
        order_status.transition(db, draft_po, status)
        db.commit()
        with pytest.raises(OrderLocked):
            order_status.add_item(db, draft_po, _line(product), tenant_id)
        with pytest.raises(OrderLocked):
            order_status.replace_items(db, draft_po, [_line(product)], tenant_id)
        with pytest.raises(OrderLocked):
            order_status.delete_item(db, draft_po, draft_po.items[0])

    def test_purchase_and_sales_items_do_not_mix(self, db, draft_po, customer, product, tenant_id):
        sales_order = orders_crud.create_order(
            db, OrderType.SALES,
            SalesOrderCreate(customer_id=customer.id, order_date=date(2026, 3, 5), items=[_line(product, quantity="1")]),
            tenant_id,
        )
        db.commit()
        # Same numeric id space is fine: items are keyed by (order_id, order_type)
        assert sales_order.total_amount == Decimal("120.00")
        assert draft_po.total_amount == Decimal("220.00")
        assert order_status.count_items(db, sales_order) == 1


@pytest.mark.unit
class TestOrderUpdate:
    """PUT-style updates combining item replacement and status change."""

    def test_fill_and_confirm_in_one_update(self, db, empty_po, product, tenant_id):
        orders_crud.update_order(
            db, OrderType.PURCHASE, empty_po.id,
            PurchaseOrderUpdate(status=OrderStatus.CONFIRMED, items=[_line(product)]),
            tenant_id,
        )
        db.commit()
        db.refresh(empty_po)
        assert empty_po.status == OrderStatus.CONFIRMED
        assert empty_po.total_amount == Decimal("220.00")

    def test_empty_replacement_then_confirm_rolls_back(self, db, draft_po, tenant_id):
        with pytest.raises(EmptyOrder):
            orders_crud.update_order(
                db, OrderType.PURCHASE, draft_po.id,
                PurchaseOrderUpdate(status=OrderStatus.CONFIRMED, items=[]),
                tenant_id,
            )
        db.rollback()
        db.refresh(draft_po)
        assert draft_po.status == OrderStatus.DRAFT
        assert order_status.count_items(db, draft_po) == 1

    def test_document_numbers_are_sequential_per_month(self, db, vendor, tenant_id):
        numbers = [
            orders_crud.create_order(
                db, OrderType.PURCHASE,
                PurchaseOrderCreate(vendor_id=vendor.id, order_date=day),
                tenant_id,
            ).po_number
            for day in (date(2026, 3, 1), date(2026, 3, 20), date(2026, 4, 2))
        ]
        assert numbers == ["PO-202603-0001", "PO-202603-0002", "PO-202604-0001"]

    def test_document_numbers_continue_past_four_digits(self, db, vendor, tenant_id):
        def create():
            return orders_crud.create_order(
                db, OrderType.PURCHASE,
                PurchaseOrderCreate(vendor_id=vendor.id, order_date=date(2026, 3, 9)),
                tenant_id,
            )

        create().po_number = "PO-202603-9999"
        create().po_number = "PO-202603-MANUAL"
        db.flush()
        assert create().po_number == "PO-202603-10000"
        assert create().po_number == "PO-202603-10001"

    def test_update_sees_status_committed_by_another_session(self, db, draft_po, tenant_id):
        other = SessionLocal()
        try:
            stale = order_status.get_order(other, OrderType.PURCHASE, draft_po.id, tenant_id)
            assert stale.status == OrderStatus.DRAFT

            order_status.transition(db, draft_po, OrderStatus.CANCELLED)
            db.commit()

            with pytest.raises(InvalidTransition):
                orders_crud.update_order(
                    other, OrderType.PURCHASE, draft_po.id,
                    PurchaseOrderUpdate(status=OrderStatus.CONFIRMED), tenant_id,
                )
            other.rollback()
        finally:
            other.close()
        db.refresh(draft_po)
        assert draft_po.status == OrderStatus.CANCELLED
