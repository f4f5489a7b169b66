"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from portal.application.session import PortalSession
from portal.infrastructure.notification.outbox_email_dispatcher import (
    OutboxEmailDispatcher,
)
from portal.infrastructure.notification.text_document_renderer import (
    TextDocumentRenderer,
)
from portal.infrastructure.persistence.json_cart_repository import JsonCartRepository
from portal.infrastructure.persistence.json_catalog_provider import JsonCatalogProvider
from portal.infrastructure.persistence.json_client_repository import (
    JsonClientRepository,
)
from portal.infrastructure.persistence.json_discount_rule_repository import (
    JsonDiscountRuleRepository,
)
from portal.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from portal.infrastructure.settings import Settings


def settings() -> Settings:
    return Settings.from_env()


def catalog_provider() -> JsonCatalogProvider:
    cfg = settings()
    return JsonCatalogProvider(
        cfg.data_dir / "products.json", cfg.data_dir / "categories.json"
    )


def client_repository() -> JsonClientRepository:
    return JsonClientRepository(settings().data_dir / "users.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(settings().data_dir / "orders.json")


def portal_session() -> PortalSession:
    cfg = settings()
    return PortalSession(
        catalog_provider=catalog_provider(),
        rule_repo=JsonDiscountRuleRepository(cfg.data_dir / "discount_rules.json"),
        cart_repo=JsonCartRepository(cfg.data_dir / "local_storage.json"),
        order_repo=order_repository(),
        renderer=TextDocumentRenderer(),
        dispatcher=OutboxEmailDispatcher(
            cfg.data_dir / "outbox.json", timeout=cfg.email_timeout
        ),
        recipient=cfg.order_email,
    )
