"""OrderDesk Invoicing - application service."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from core.config.options import OrderDeskOptions
from core.policy.common import (
    discount_must_be_in_range_policy,
    enforce,
    id_must_be_positive_policy,
    line_items_must_be_valid_policy,
    line_items_required_policy,
    tax_must_be_in_range_policy,
)
from core.storage.paging import Page
from engines.invoicing.commands import InvoiceDraft, InvoiceOverrides, InvoiceUpdate, PaymentDraft
from engines.invoicing.ledger import InvoiceLedger
from engines.invoicing.models import Invoice, InvoiceDetail, Payment
from engines.invoicing.policies import (
    invoice_status_must_be_known_policy,
    payment_amount_must_be_positive_policy,
    payment_method_must_be_known_policy,
)


class InvoiceService:
    def __init__(
        self,
        ledger: InvoiceLedger,
        options: Optional[OrderDeskOptions] = None,
    ) -> None:
        self._ledger = ledger
        self._options = options or OrderDeskOptions()

    @property
    def _locale(self) -> str:
        return self._options.locale

    def create(self, draft: InvoiceDraft) -> Invoice:
        enforce([
            id_must_be_positive_policy(draft.client_id, "client", self._locale),
            line_items_required_policy(draft.items, self._locale),
            line_items_must_be_valid_policy(draft.items, self._locale),
            discount_must_be_in_range_policy(draft.discount_percent, self._locale),
            tax_must_be_in_range_policy(draft.tax_percent, self._locale),
        ])
        if draft.order_id is not None:
            enforce([id_must_be_positive_policy(draft.order_id, "order", self._locale)])
        if not draft.currency:
            draft = replace(draft, currency=self._options.default_item_currency)
        return self._ledger.create_invoice(draft)

    def create_from_order(
        self,
        order_id: int,
        overrides: Optional[InvoiceOverrides] = None,
    ) -> Invoice:
        overrides = overrides or InvoiceOverrides()
        enforce([
            id_must_be_positive_policy(order_id, "order", self._locale),
            discount_must_be_in_range_policy(overrides.discount_percent, self._locale),
            tax_must_be_in_range_policy(overrides.tax_percent, self._locale),
        ])
        return self._ledger.create_invoice_from_order(order_id, overrides)

    def update(self, update: InvoiceUpdate) -> Invoice:
        enforce([
            id_must_be_positive_policy(update.invoice_id, "invoice", self._locale),
            invoice_status_must_be_known_policy(update.status, self._locale),
            discount_must_be_in_range_policy(update.discount_percent, self._locale),
            tax_must_be_in_range_policy(update.tax_percent, self._locale),
        ])
        if update.replaces_items:
            enforce([line_items_must_be_valid_policy(update.items, self._locale)])
        return self._ledger.update_invoice(update)

    def record_payment(self, draft: PaymentDraft) -> Payment:
        enforce([
            id_must_be_positive_policy(draft.invoice_id, "invoice", self._locale),
            payment_amount_must_be_positive_policy(draft.amount_cents, self._locale),
            payment_method_must_be_known_policy(draft.method, self._locale),
        ])
        return self._ledger.record_payment(draft)

    def get(self, invoice_id: int) -> InvoiceDetail:
        enforce([id_must_be_positive_policy(invoice_id, "invoice", self._locale)])
        return self._ledger.get_invoice_detail(invoice_id)

    def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page[InvoiceDetail]:
        limit, offset = self._options.clamp_page(limit, offset)
        return self._ledger.list_invoices(limit, offset)
