"""
Tests for the application services: validation, defaults and the
client/product deletion guards.
"""

from __future__ import annotations

import pytest

from core.commands.errors import DeletionBlockedError, NotFoundError, ValidationError
from core.commands.rejection import ReasonCode
from core.storage.errors import StorageIntegrityError
from engines.clients.commands import ClientDraft, ClientUpdate, DebtAdjustmentRequest
from engines.invoicing.commands import (
    InvoiceDraft,
    InvoiceItemDraft,
    InvoiceOverrides,
    InvoiceUpdate,
    PaymentDraft,
)
from engines.orders.commands import OrderDraft, OrderItemDraft, OrderUpdate
from engines.orders.models import (
    ORDER_STATUS_CANCELED,
    ORDER_STATUS_COMPLETED,
    ORDER_STATUS_PENDING,
)
from engines.products.commands import ProductDraft, ProductUpdate

pytestmark = pytest.mark.django_db


def _item(**overrides) -> OrderItemDraft:
    fields = {"name_snapshot": "Saffron 10g", "qty": 1, "unit_price_cents": 1200}
    fields.update(overrides)
    return OrderItemDraft(**fields)


@pytest.fixture
def customer(app):
    return app.clients.create(ClientDraft(name="  Karim Bakery  ", phone=" "))


# ── Orders ───────────────────────────────────────────────────

class TestOrderService:
    @pytest.mark.parametrize(
        "draft_kwargs, code",
        [
            ({"client_id": 0, "items": (_item(),)}, ReasonCode.CLIENT_REQUIRED),
            ({"client_id": 1, "items": ()}, ReasonCode.ITEMS_REQUIRED),
            ({"client_id": 1, "items": (_item(qty=0),)}, ReasonCode.INVALID_QUANTITY),
            ({"client_id": 1, "items": (_item(unit_price_cents=0),)}, ReasonCode.INVALID_UNIT_PRICE),
            ({"client_id": 1, "items": (_item(name_snapshot=" "),)}, ReasonCode.ITEM_NAME_REQUIRED),
        ],
    )
    def test_create_validation(self, app, draft_kwargs, code):
        with pytest.raises(ValidationError) as exc_info:
            app.orders.create(OrderDraft(**draft_kwargs))
        assert exc_info.value.code == code

    def test_create_applies_defaults(self, app, customer):
        order = app.orders.create(
            OrderDraft(client_id=customer.id, items=(_item(),), discount_percent=150)
        )
        assert order.discount_percent == 0
        detail = app.orders.get(order.id)
        assert detail.items[0].currency == "USD"
        assert app.clients.get(customer.id).debt_cents == 1200

    def test_create_for_missing_client(self, app):
        with pytest.raises(NotFoundError):
            app.orders.create(OrderDraft(client_id=321, items=(_item(),)))

    def test_update_rejects_bad_status_and_discount(self, app, customer):
        order = app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        with pytest.raises(ValidationError) as exc_info:
            app.orders.update(OrderUpdate(order_id=order.id, status="SHIPPED"))
        assert exc_info.value.code == ReasonCode.INVALID_ORDER_STATUS

        with pytest.raises(ValidationError) as exc_info:
            app.orders.update(OrderUpdate(order_id=order.id, discount_percent=101))
        assert exc_info.value.code == ReasonCode.INVALID_DISCOUNT

    def test_update_to_canceled_reverses_debt(self, app, customer):
        order = app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        updated = app.orders.update(
            OrderUpdate(order_id=order.id, status=ORDER_STATUS_CANCELED, notes="client called")
        )
        assert updated.status == ORDER_STATUS_CANCELED
        assert updated.notes == "client called"
        assert app.clients.get(customer.id).debt_cents == 0

    def test_failed_update_rolls_back_cancellation(self, app, customer):
        order = app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        with pytest.raises(StorageIntegrityError):
            app.orders.update(
                OrderUpdate(
                    order_id=order.id,
                    status=ORDER_STATUS_CANCELED,
                    items=(_item(product_id=99999),),
                )
            )
        assert app.orders.get(order.id).order.status == ORDER_STATUS_PENDING
        assert app.clients.get(customer.id).debt_cents == 1200

    def test_completed_order_cannot_be_canceled(self, app, customer):
        order = app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        app.orders.update(OrderUpdate(order_id=order.id, status=ORDER_STATUS_COMPLETED))
        with pytest.raises(ValidationError) as exc_info:
            app.orders.cancel(order.id)
        assert exc_info.value.code == ReasonCode.ORDER_COMPLETED
        assert app.clients.get(customer.id).debt_cents == 1200

    def test_list_clamps_page_size(self, app, customer):
        app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        page = app.orders.list(limit=1000)
        assert page.limit == 100
        assert page.total == 1

    def test_order_statuses(self, app):
        assert ORDER_STATUS_PENDING in app.orders.order_statuses()


# ── Clients ──────────────────────────────────────────────────

class TestClientService:
    def test_create_normalizes(self, customer):
        assert customer.name == "Karim Bakery"
        assert customer.phone is None
        assert customer.debt_cents == 0

    def test_name_required(self, app):
        with pytest.raises(ValidationError) as exc_info:
            app.clients.create(ClientDraft(name="   "))
        assert exc_info.value.code == ReasonCode.NAME_REQUIRED

    def test_update_and_search(self, app, customer):
        app.clients.update(ClientUpdate(client_id=customer.id, name="Karim & Sons"))
        app.clients.create(ClientDraft(name="Leila Market"))
        page = app.clients.list(query="Karim")
        assert [c.name for c in page.items] == ["Karim & Sons"]

    def test_update_missing_client(self, app):
        with pytest.raises(NotFoundError):
            app.clients.update(ClientUpdate(client_id=999, name="Ghost"))

    def test_adjust_debt_clamps_and_records(self, app, customer):
        app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        client, record = app.clients.adjust_debt(
            DebtAdjustmentRequest(client_id=customer.id, delta_cents=-5000, notes="cash at counter")
        )
        assert client.debt_cents == 0
        assert record.amount_cents == -1200

        history = app.clients.list_debt_payments(customer.id)
        assert history.total == 1
        assert history.items[0].notes == "cash at counter"

    def test_zero_adjustment_rejected(self, app, customer):
        with pytest.raises(ValidationError) as exc_info:
            app.clients.adjust_debt(DebtAdjustmentRequest(client_id=customer.id, delta_cents=0))
        assert exc_info.value.code == ReasonCode.INVALID_DEBT_ADJUSTMENT

    def test_delete_blocked_by_active_orders(self, app, customer):
        app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        with pytest.raises(DeletionBlockedError) as exc_info:
            app.clients.delete(customer.id)
        assert exc_info.value.code == ReasonCode.CLIENT_HAS_ACTIVE_ORDERS

    def test_delete_purges_canceled_orders(self, app, customer):
        order = app.orders.create(OrderDraft(client_id=customer.id, items=(_item(),)))
        app.orders.cancel(order.id)
        app.clients.adjust_debt(DebtAdjustmentRequest(client_id=customer.id, delta_cents=300))

        app.clients.delete(customer.id)

        with pytest.raises(NotFoundError):
            app.clients.get(customer.id)
        with pytest.raises(NotFoundError):
            app.orders.get(order.id)

    def test_delete_blocked_by_invoice(self, app, customer):
        app.invoices.create(
            InvoiceDraft(
                client_id=customer.id,
                items=(InvoiceItemDraft(name_snapshot="Consulting", qty=1, unit_price_cents=5000),),
            )
        )
        with pytest.raises(DeletionBlockedError) as exc_info:
            app.clients.delete(customer.id)
        assert exc_info.value.code == ReasonCode.CLIENT_STILL_REFERENCED
        assert app.clients.get(customer.id).id == customer.id

    def test_delete_missing_client(self, app):
        with pytest.raises(NotFoundError):
            app.clients.delete(4040)


# ── Products ─────────────────────────────────────────────────

class TestProductService:
    def test_create_defaults_currency(self, app):
        product = app.products.create(ProductDraft(name="Harissa", unit_price_cents=350, sku="HAR-1"))
        assert product.currency == "DZD"
        assert product.active

    def test_negative_price_rejected(self, app):
        with pytest.raises(ValidationError) as exc_info:
            app.products.create(ProductDraft(name="Broken", unit_price_cents=-1))
        assert exc_info.value.code == ReasonCode.INVALID_PRICE

    def test_update_activate_and_filter(self, app):
        product = app.products.create(ProductDraft(name="Harissa", unit_price_cents=350))
        app.products.update(
            ProductUpdate(product_id=product.id, name="Harissa XL", unit_price_cents=500, currency="eur")
        )
        app.products.deactivate(product.id)
        assert app.products.get(product.id).currency == "EUR"
        assert app.products.list(active=True).total == 0
        assert app.products.list(active=False).items[0].name == "Harissa XL"
        assert app.products.activate(product.id).active

    def test_delete_guarded_by_active_orders(self, app, customer):
        product = app.products.create(ProductDraft(name="Harissa", unit_price_cents=350))
        order = app.orders.create(
            OrderDraft(
                client_id=customer.id,
                items=(_item(name_snapshot="Harissa", unit_price_cents=350, product_id=product.id),),
            )
        )
        with pytest.raises(DeletionBlockedError) as exc_info:
            app.products.delete(product.id)
        assert exc_info.value.code == ReasonCode.PRODUCT_IN_USE

        # Canceled order items still reference the product row.
        app.orders.cancel(order.id)
        with pytest.raises(DeletionBlockedError):
            app.products.delete(product.id)

    def test_delete_unused(self, app):
        product = app.products.create(ProductDraft(name="Mint", unit_price_cents=90))
        app.products.delete(product.id)
        with pytest.raises(NotFoundError):
            app.products.get(product.id)


# ── Invoices ─────────────────────────────────────────────────

class TestInvoiceService:
    def test_create_validation(self, app, customer):
        with pytest.raises(ValidationError) as exc_info:
            app.invoices.create(InvoiceDraft(client_id=customer.id, items=()))
        assert exc_info.value.code == ReasonCode.ITEMS_REQUIRED

        with pytest.raises(ValidationError) as exc_info:
            app.invoices.create(
                InvoiceDraft(
                    client_id=customer.id,
                    items=(InvoiceItemDraft(name_snapshot="Tray", qty=1, unit_price_cents=100),),
                    tax_percent=120,
                )
            )
        assert exc_info.value.code == ReasonCode.INVALID_TAX

    def test_create_and_pay(self, app, customer):
        invoice = app.invoices.create(
            InvoiceDraft(
                client_id=customer.id,
                items=(InvoiceItemDraft(name_snapshot="Tray", qty=3, unit_price_cents=700),),
                discount_percent=10,
                tax_percent=5,
            )
        )
        assert invoice.currency == "USD"
        assert invoice.total_cents == 1984

        app.invoices.record_payment(PaymentDraft(invoice_id=invoice.id, amount_cents=984, method="card"))
        detail = app.invoices.get(invoice.id)
        assert detail.balance_cents == 1000
        assert app.invoices.list().total == 1

    @pytest.mark.parametrize(
        "amount, method, code",
        [
            (0, "CASH", ReasonCode.INVALID_PAYMENT_AMOUNT),
            (-10, "CASH", ReasonCode.INVALID_PAYMENT_AMOUNT),
            (100, "CHEQUE", ReasonCode.INVALID_PAYMENT_METHOD),
        ],
    )
    def test_payment_validation(self, app, amount, method, code):
        with pytest.raises(ValidationError) as exc_info:
            app.invoices.record_payment(PaymentDraft(invoice_id=1, amount_cents=amount, method=method))
        assert exc_info.value.code == code

    def test_update_validation(self, app):
        with pytest.raises(ValidationError) as exc_info:
            app.invoices.update(InvoiceUpdate(invoice_id=1, status="VOID"))
        assert exc_info.value.code == ReasonCode.INVALID_INVOICE_STATUS

    def test_create_from_order(self, app, customer):
        order = app.orders.create(OrderDraft(client_id=customer.id, items=(_item(qty=2),)))
        invoice = app.invoices.create_from_order(order.id, InvoiceOverrides(tax_percent=10))
        assert invoice.order_id == order.id
        assert invoice.total_cents == 2640
        assert app.orders.cancel(order.id) == 0

    def test_get_rejects_bad_id(self, app):
        with pytest.raises(ValidationError) as exc_info:
            app.invoices.get(0)
        assert exc_info.value.code == ReasonCode.INVALID_ID
