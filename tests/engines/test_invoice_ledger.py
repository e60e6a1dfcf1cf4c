"""
Tests for engines.invoicing.ledger — invoices, payments and balances.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.commands.errors import NotFoundError
from engines.invoicing.commands import (
    InvoiceDraft,
    InvoiceItemDraft,
    InvoiceOverrides,
    InvoiceUpdate,
    PaymentDraft,
)
from engines.invoicing.models import INVOICE_STATUS_DRAFT, INVOICE_STATUS_ISSUED
from engines.orders.commands import OrderDraft, OrderItemDraft

pytestmark = pytest.mark.django_db


def _invoice_draft(client_id: int, **header) -> InvoiceDraft:
    return InvoiceDraft(
        client_id=client_id,
        items=(InvoiceItemDraft(name_snapshot="Catering tray", qty=3, unit_price_cents=700),),
        discount_percent=header.pop("discount_percent", 10),
        tax_percent=header.pop("tax_percent", 5),
        currency=header.pop("currency", "DZD"),
        **header,
    )


class TestCreateInvoice:
    def test_totals_scenario(self, invoice_ledger, client):
        invoice = invoice_ledger.create_invoice(_invoice_draft(client.id))

        assert invoice.invoice_number == "INV-2025-0001"
        assert invoice.status == INVOICE_STATUS_DRAFT
        assert invoice.subtotal_cents == 2100
        assert invoice.total_cents == 1984
        assert invoice.currency == "DZD"

        detail = invoice_ledger.get_invoice_detail(invoice.id)
        assert [item.total_cents for item in detail.items] == [2100]
        assert detail.items[0].currency == "DZD"
        assert detail.paid_cents == 0
        assert detail.balance_cents == 1984

    def test_invoice_never_touches_client_debt(self, invoice_ledger, client_store, client):
        invoice_ledger.create_invoice(_invoice_draft(client.id))
        assert client_store.get(client.id).debt_cents == 0

    def test_currency_defaults_from_ledger(self, invoice_ledger, client):
        invoice = invoice_ledger.create_invoice(_invoice_draft(client.id, currency=""))
        assert invoice.currency == "USD"

    def test_unknown_client_rolls_back_number(self, invoice_ledger, client):
        with pytest.raises(NotFoundError):
            invoice_ledger.create_invoice(_invoice_draft(9999))
        assert invoice_ledger.create_invoice(_invoice_draft(client.id)).invoice_number == "INV-2025-0001"


class TestCreateInvoiceFromOrder:
    def test_copies_order_snapshots(self, order_ledger, invoice_ledger, client):
        order = order_ledger.create_order(
            OrderDraft(
                client_id=client.id,
                items=(
                    OrderItemDraft(name_snapshot="Olive oil 1L", qty=2, unit_price_cents=500, currency="EUR"),
                    OrderItemDraft(name_snapshot="Honey", qty=1, unit_price_cents=1000, currency="EUR"),
                ),
                notes="from order",
                discount_percent=5,
            )
        )
        invoice = invoice_ledger.create_invoice_from_order(order.id)

        assert invoice.order_id == order.id
        assert invoice.client_id == client.id
        assert invoice.currency == "EUR"
        assert invoice.notes == "from order"
        assert invoice.discount_percent == 5
        assert invoice.subtotal_cents == 2000
        assert invoice.total_cents == 1900

        names = [item.name_snapshot for item in invoice_ledger.get_invoice_detail(invoice.id).items]
        assert names == ["Olive oil 1L", "Honey"]

    def test_overrides_replace_order_values(self, order_ledger, invoice_ledger, client):
        order = order_ledger.create_order(
            OrderDraft(
                client_id=client.id,
                items=(OrderItemDraft(name_snapshot="Bread", qty=10, unit_price_cents=100, currency="DZD"),),
                notes="order note",
            )
        )
        due = datetime(2025, 4, 1, tzinfo=timezone.utc)
        invoice = invoice_ledger.create_invoice_from_order(
            order.id,
            InvoiceOverrides(notes="invoice note", tax_percent=10, due_date=due),
        )
        assert invoice.notes == "invoice note"
        assert invoice.due_date == due
        assert invoice.total_cents == 1100

    def test_unknown_order(self, invoice_ledger):
        with pytest.raises(NotFoundError):
            invoice_ledger.create_invoice_from_order(777)


class TestUpdateInvoice:
    def test_patch_recomputes_totals(self, invoice_ledger, client):
        invoice = invoice_ledger.create_invoice(_invoice_draft(client.id))
        updated = invoice_ledger.update_invoice(
            InvoiceUpdate(invoice_id=invoice.id, status=INVOICE_STATUS_ISSUED, tax_percent=0)
        )
        assert updated.status == INVOICE_STATUS_ISSUED
        assert updated.total_cents == 1890

    def test_replacing_items(self, invoice_ledger, client):
        invoice = invoice_ledger.create_invoice(_invoice_draft(client.id, discount_percent=0, tax_percent=0))
        updated = invoice_ledger.update_invoice(
            InvoiceUpdate(
                invoice_id=invoice.id,
                items=(
                    InvoiceItemDraft(name_snapshot="Tray", qty=1, unit_price_cents=400),
                    InvoiceItemDraft(name_snapshot="Delivery", qty=1, unit_price_cents=150),
                ),
            )
        )
        assert updated.subtotal_cents == 550
        detail = invoice_ledger.get_invoice_detail(invoice.id)
        assert [item.currency for item in detail.items] == ["DZD", "DZD"]

    def test_unknown_invoice(self, invoice_ledger):
        with pytest.raises(NotFoundError):
            invoice_ledger.update_invoice(InvoiceUpdate(invoice_id=55, notes="x"))


class TestPayments:
    def test_payments_reduce_balance_without_status_change(self, invoice_ledger, clock, client):
        invoice = invoice_ledger.create_invoice(_invoice_draft(client.id))
        recorded_at = clock.now_utc()
        first = invoice_ledger.record_payment(
            PaymentDraft(invoice_id=invoice.id, amount_cents=1000, method="cash", reference="R-1")
        )
        clock.advance(60)
        invoice_ledger.record_payment(
            PaymentDraft(invoice_id=invoice.id, amount_cents=984, method="TRANSFER")
        )

        assert first.method == "CASH"
        assert first.paid_at == recorded_at

        detail = invoice_ledger.get_invoice_detail(invoice.id)
        assert [p.amount_cents for p in detail.payments] == [1000, 984]
        assert detail.paid_cents == 1984
        assert detail.balance_cents == 0
        assert detail.invoice.status == INVOICE_STATUS_DRAFT

    def test_payment_on_unknown_invoice(self, invoice_ledger):
        with pytest.raises(NotFoundError):
            invoice_ledger.record_payment(PaymentDraft(invoice_id=404, amount_cents=1, method="CASH"))


class TestListInvoices:
    def test_newest_first_with_paid_amounts(self, invoice_ledger, clock, client):
        older = invoice_ledger.create_invoice(_invoice_draft(client.id))
        clock.advance(3600)
        newer = invoice_ledger.create_invoice(_invoice_draft(client.id, discount_percent=0, tax_percent=0))
        invoice_ledger.record_payment(PaymentDraft(invoice_id=older.id, amount_cents=84, method="CARD"))

        page = invoice_ledger.list_invoices(limit=10, offset=0)
        assert page.total == 2
        assert [d.invoice.id for d in page.items] == [newer.id, older.id]
        assert page.items[1].paid_cents == 84
        assert page.items[1].balance_cents == 1900
        assert page.items[0].client.name == "Amina Traders"
