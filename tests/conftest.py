from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.bootstrap.application import build_application
from core.config.options import OrderDeskOptions
from core.storage.gateway import StorageGateway
from core.time.clock import FixedClock
from engines.clients.commands import ClientDraft
from engines.clients.store import ClientStore
from engines.invoicing.ledger import InvoiceLedger
from engines.orders.ledger import OrderLedger
from engines.products.store import ProductStore

FIXED_NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def options() -> OrderDeskOptions:
    return OrderDeskOptions()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture
def gateway(db, options) -> StorageGateway:
    gateway = StorageGateway(options)
    gateway.connect()
    return gateway


@pytest.fixture
def order_ledger(gateway, clock) -> OrderLedger:
    return OrderLedger(gateway, clock)


@pytest.fixture
def invoice_ledger(gateway, clock, options) -> InvoiceLedger:
    return InvoiceLedger(gateway, clock, options.default_item_currency)


@pytest.fixture
def client_store(gateway, clock) -> ClientStore:
    return ClientStore(gateway, clock)


@pytest.fixture
def product_store(gateway, clock) -> ProductStore:
    return ProductStore(gateway, clock)


@pytest.fixture
def client(client_store):
    return client_store.create(ClientDraft(name="Amina Traders", phone="0550 12 34 56"))


@pytest.fixture
def app(db, options, clock):
    return build_application(options, clock)
