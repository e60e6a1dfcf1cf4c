"""
Tests for engines.orders.ledger — order lifecycle and client debt.
"""

from __future__ import annotations

import pytest

from core.commands.errors import NotFoundError
from core.storage.errors import StorageIntegrityError
from engines.clients.commands import ClientDraft, DebtAdjustmentRequest
from engines.invoicing.commands import PaymentDraft
from engines.orders.commands import OrderDraft, OrderFilters, OrderItemDraft, OrderUpdate
from engines.orders.models import ORDER_STATUS_CANCELED, ORDER_STATUS_CONFIRMED, ORDER_STATUS_PENDING
from engines.products.commands import ProductDraft

pytestmark = pytest.mark.django_db


def _two_item_draft(client_id: int) -> OrderDraft:
    return OrderDraft(
        client_id=client_id,
        items=(
            OrderItemDraft(name_snapshot="Olive oil 1L", qty=2, unit_price_cents=500, currency="DZD"),
            OrderItemDraft(
                name_snapshot="Couscous 5kg",
                qty=1,
                unit_price_cents=1000,
                discount_percent=10,
                currency="DZD",
            ),
        ),
        notes="deliver Thursday",
    )


def _debt(client_store, client_id: int) -> int:
    return client_store.get(client_id).debt_cents


class TestCreateOrder:
    def test_two_item_scenario(self, order_ledger, client_store, client):
        order = order_ledger.create_order(_two_item_draft(client.id))

        assert order.status == ORDER_STATUS_PENDING
        assert order.client_debt_snapshot_cents == 1900
        assert _debt(client_store, client.id) == 1900

        detail = order_ledger.get_order_detail(order.id)
        assert detail.subtotal_cents == 2000
        assert detail.discount_cents == 100
        assert detail.total_cents == 1900
        assert [item.total_cents for item in detail.items] == [1000, 1000]
        assert detail.client.id == client.id

    def test_order_numbers_are_sequential_per_year(self, order_ledger, client):
        first = order_ledger.create_order(_two_item_draft(client.id))
        second = order_ledger.create_order(_two_item_draft(client.id))
        assert first.order_number == "ORD-2025-0001"
        assert second.order_number == "ORD-2025-0002"

    def test_order_discount_is_stored_but_not_charged(self, order_ledger, client_store, client):
        draft = OrderDraft(
            client_id=client.id,
            items=(OrderItemDraft(name_snapshot="Tea", qty=1, unit_price_cents=1000, currency="DZD"),),
            discount_percent=50,
        )
        order = order_ledger.create_order(draft)
        assert order.discount_percent == 50
        assert _debt(client_store, client.id) == 1000
        assert order_ledger.get_order_detail(order.id).total_cents == 1000

    def test_debt_accumulates_across_orders(self, order_ledger, client_store, client):
        order_ledger.create_order(_two_item_draft(client.id))
        second = order_ledger.create_order(_two_item_draft(client.id))
        assert _debt(client_store, client.id) == 3800
        assert second.client_debt_snapshot_cents == 3800

    def test_unknown_client(self, order_ledger):
        with pytest.raises(NotFoundError):
            order_ledger.create_order(_two_item_draft(9999))

    def test_issue_date_defaults_to_now(self, order_ledger, client, clock):
        order = order_ledger.create_order(_two_item_draft(client.id))
        assert order.issue_date == clock.now_utc()
        assert order.created_at == clock.now_utc()


class TestUpdateOrder:
    def test_patch_header_fields(self, order_ledger, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        updated = order_ledger.update_order(
            OrderUpdate(order_id=order.id, status=ORDER_STATUS_CONFIRMED, notes="call first")
        )
        assert updated.status == ORDER_STATUS_CONFIRMED
        assert updated.notes == "call first"
        assert updated.discount_percent == 0

    def test_replacing_items_does_not_move_debt(self, order_ledger, client_store, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        order_ledger.update_order(
            OrderUpdate(
                order_id=order.id,
                items=(OrderItemDraft(name_snapshot="Dates", qty=1, unit_price_cents=300, currency="DZD"),),
            )
        )
        detail = order_ledger.get_order_detail(order.id)
        assert detail.total_cents == 300
        assert len(detail.items) == 1
        assert _debt(client_store, client.id) == 1900

    def test_update_refreshes_snapshot_from_current_debt(self, order_ledger, client_store, client):
        first = order_ledger.create_order(_two_item_draft(client.id))
        order_ledger.create_order(_two_item_draft(client.id))
        assert order_ledger.get_order(first.id).client_debt_snapshot_cents == 1900

        refreshed = order_ledger.update_order(OrderUpdate(order_id=first.id, notes="touched"))
        assert refreshed.client_debt_snapshot_cents == 3800

    def test_unknown_order(self, order_ledger):
        with pytest.raises(NotFoundError):
            order_ledger.update_order(OrderUpdate(order_id=404, notes="x"))


class TestCancelOrder:
    def test_cancel_reverses_debt(self, order_ledger, client_store, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        assert order_ledger.cancel_order_and_adjust_debt(order.id) == 1900
        assert _debt(client_store, client.id) == 0

        canceled = order_ledger.get_order(order.id)
        assert canceled.status == ORDER_STATUS_CANCELED
        assert canceled.client_debt_snapshot_cents == 0

    def test_second_cancel_is_a_no_op(self, order_ledger, client_store, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        order_ledger.cancel_order_and_adjust_debt(order.id)
        assert order_ledger.cancel_order_and_adjust_debt(order.id) == 0
        assert _debt(client_store, client.id) == 0

    def test_cancel_with_invoice_keeps_debt(self, order_ledger, invoice_ledger, client_store, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        invoice_ledger.create_invoice_from_order(order.id)

        assert order_ledger.cancel_order_and_adjust_debt(order.id) == 0
        assert _debt(client_store, client.id) == 1900
        assert order_ledger.get_order(order.id).status == ORDER_STATUS_CANCELED

    def test_cancel_with_payment_keeps_debt(self, order_ledger, invoice_ledger, client_store, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        invoice = invoice_ledger.create_invoice_from_order(order.id)
        invoice_ledger.record_payment(
            PaymentDraft(invoice_id=invoice.id, amount_cents=500, method="CASH")
        )

        assert order_ledger.cancel_order_and_adjust_debt(order.id) == 0
        assert _debt(client_store, client.id) == 1900

    def test_debt_reduction_is_clamped_at_zero(self, order_ledger, client_store, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        client_store.adjust_debt(DebtAdjustmentRequest(client_id=client.id, delta_cents=-1500))
        assert _debt(client_store, client.id) == 400

        assert order_ledger.cancel_order_and_adjust_debt(order.id) == 400
        assert _debt(client_store, client.id) == 0

    def test_cancel_unknown_order(self, order_ledger):
        with pytest.raises(NotFoundError):
            order_ledger.cancel_order_and_adjust_debt(12345)


class TestPurgeAndUsage:
    def test_purge_removes_only_canceled(self, order_ledger, client):
        keep = order_ledger.create_order(_two_item_draft(client.id))
        drop = order_ledger.create_order(_two_item_draft(client.id))
        order_ledger.cancel_order_and_adjust_debt(drop.id)

        assert order_ledger.delete_canceled_orders_for_client(client.id) == 1
        assert order_ledger.get_order(keep.id).id == keep.id
        with pytest.raises(NotFoundError):
            order_ledger.get_order(drop.id)
        assert order_ledger.delete_canceled_orders_for_client(client.id) == 0

    def test_active_orders(self, order_ledger, client):
        assert not order_ledger.has_active_orders_for_client(client.id)
        order = order_ledger.create_order(_two_item_draft(client.id))
        assert order_ledger.has_active_orders_for_client(client.id)
        order_ledger.cancel_order_and_adjust_debt(order.id)
        assert not order_ledger.has_active_orders_for_client(client.id)

    def test_product_usage(self, order_ledger, product_store, client):
        product = product_store.create(ProductDraft(name="Semolina", unit_price_cents=250, currency="DZD"))
        order = order_ledger.create_order(
            OrderDraft(
                client_id=client.id,
                items=(
                    OrderItemDraft(
                        name_snapshot="Semolina",
                        qty=4,
                        unit_price_cents=250,
                        currency="DZD",
                        product_id=product.id,
                    ),
                ),
            )
        )
        assert order_ledger.product_order_usage(product.id) == (1, 1)
        order_ledger.cancel_order_and_adjust_debt(order.id)
        assert order_ledger.product_order_usage(product.id) == (1, 0)


class TestNumberingAfterPurge:
    def test_purged_number_is_not_reissued(self, order_ledger, client_store, client):
        other = client_store.create(ClientDraft(name="Zed Grocery"))
        first = order_ledger.create_order(_two_item_draft(client.id))
        second = order_ledger.create_order(_two_item_draft(other.id))
        order_ledger.cancel_order_and_adjust_debt(first.id)
        assert order_ledger.delete_canceled_orders_for_client(client.id) == 1

        third = order_ledger.create_order(_two_item_draft(client.id))
        assert second.order_number == "ORD-2025-0002"
        assert third.order_number == "ORD-2025-0003"


class TestFailedWritesLeaveNothing:
    def test_create_with_unknown_product_rolls_back(self, order_ledger, client_store, client):
        draft = OrderDraft(
            client_id=client.id,
            items=(
                OrderItemDraft(name_snapshot="Tea", qty=1, unit_price_cents=1000, currency="DZD"),
                OrderItemDraft(
                    name_snapshot="Ghost", qty=1, unit_price_cents=500, currency="DZD", product_id=99999
                ),
            ),
        )
        with pytest.raises(StorageIntegrityError) as exc_info:
            order_ledger.create_order(draft)

        assert exc_info.value.step == "insert_order_item"
        assert order_ledger.list_orders().total == 0
        assert _debt(client_store, client.id) == 0
        assert order_ledger.create_order(_two_item_draft(client.id)).order_number == "ORD-2025-0001"

    def test_update_with_unknown_product_keeps_items(self, order_ledger, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        with pytest.raises(StorageIntegrityError):
            order_ledger.update_order(
                OrderUpdate(
                    order_id=order.id,
                    notes="changed",
                    items=(
                        OrderItemDraft(
                            name_snapshot="Ghost", qty=1, unit_price_cents=500, currency="DZD", product_id=99999
                        ),
                    ),
                )
            )

        detail = order_ledger.get_order_detail(order.id)
        assert detail.order.notes == "deliver Thursday"
        assert detail.total_cents == 1900
        assert len(detail.items) == 2


class TestListOrders:
    def test_filters_and_paging(self, order_ledger, client_store, client):
        other = client_store.create(ClientDraft(name="Zed Grocery"))
        order_ledger.create_order(_two_item_draft(client.id))
        order_ledger.create_order(_two_item_draft(client.id))
        order_ledger.create_order(_two_item_draft(other.id))

        everything = order_ledger.list_orders(limit=2, offset=0)
        assert everything.total == 3
        assert len(everything) == 2
        assert everything.has_more
        assert everything.items[0].order.order_number == "ORD-2025-0003"

        mine = order_ledger.list_orders(OrderFilters(client_id=client.id))
        assert mine.total == 2
        assert {d.client.name for d in mine.items} == {"Amina Traders"}

        by_name = order_ledger.list_orders(OrderFilters(query="Zed"))
        assert [d.order.client_id for d in by_name.items] == [other.id]

        by_number = order_ledger.list_orders(OrderFilters(query="0002", sort="number"))
        assert [d.order.order_number for d in by_number.items] == ["ORD-2025-0002"]

    def test_status_filter_and_totals(self, order_ledger, client):
        order = order_ledger.create_order(_two_item_draft(client.id))
        order_ledger.cancel_order_and_adjust_debt(order.id)
        order_ledger.create_order(_two_item_draft(client.id))

        canceled = order_ledger.list_orders(OrderFilters(status=ORDER_STATUS_CANCELED))
        assert canceled.total == 1
        assert canceled.items[0].total_cents == 1900

    def test_rejects_unknown_sort(self):
        with pytest.raises(ValueError, match="sort"):
            OrderFilters(sort="id; DROP TABLE client")
