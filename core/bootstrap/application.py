"""
OrderDesk Bootstrap — Application Wiring
=========================================
Startup order:
1. Resolve options (explicit, else settings.ORDERDESK)
2. Connect the storage gateway (file, foreign keys, WAL, migrations)
3. Wire ledgers, stores and services over the one gateway

A migration or connection failure raises SystemBootstrapError and no
Application is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from core.bootstrap.errors import SystemBootstrapError
from core.config.options import OrderDeskOptions
from core.storage.errors import StorageStartupError
from core.storage.gateway import StorageGateway
from core.time.clock import Clock, SystemClock
from engines.clients.services import ClientService
from engines.clients.store import ClientStore
from engines.invoicing.ledger import InvoiceLedger
from engines.invoicing.services import InvoiceService
from engines.orders.ledger import OrderLedger
from engines.orders.services import OrderService
from engines.products.services import ProductService
from engines.products.store import ProductStore

logger = logging.getLogger("orderdesk.bootstrap")


@dataclass(frozen=True)
class Application:
    options: OrderDeskOptions
    clock: Clock
    gateway: StorageGateway
    order_ledger: OrderLedger
    invoice_ledger: InvoiceLedger
    orders: OrderService
    clients: ClientService
    products: ProductService
    invoices: InvoiceService

    @property
    def applied_migrations(self) -> List[str]:
        return self.gateway.applied_migrations

    def ensure_ready(self) -> None:
        try:
            self.gateway.ensure_ready()
        except StorageStartupError as exc:
            raise SystemBootstrapError(exc.stage, exc.detail) from exc


def build_application(
    options: Optional[OrderDeskOptions] = None,
    clock: Optional[Clock] = None,
) -> Application:
    options = options or OrderDeskOptions.from_settings()
    clock = clock or SystemClock()

    gateway = StorageGateway(options)
    try:
        gateway.connect()
    except StorageStartupError as exc:
        logger.error(f"Storage startup failed at {exc.stage}: {exc.detail}")
        raise SystemBootstrapError(exc.stage, exc.detail) from exc

    order_ledger = OrderLedger(gateway, clock)
    invoice_ledger = InvoiceLedger(gateway, clock, options.default_item_currency)
    client_store = ClientStore(gateway, clock)
    product_store = ProductStore(gateway, clock)

    return Application(
        options=options,
        clock=clock,
        gateway=gateway,
        order_ledger=order_ledger,
        invoice_ledger=invoice_ledger,
        orders=OrderService(order_ledger, client_store, options),
        clients=ClientService(client_store, order_ledger, options),
        products=ProductService(product_store, order_ledger, options),
        invoices=InvoiceService(invoice_ledger, options),
    )


_application: Optional[Application] = None


def get_application() -> Application:
    """The process-wide application, built on first use."""
    global _application
    if _application is None:
        _application = build_application()
    return _application
