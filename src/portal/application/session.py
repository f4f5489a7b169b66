"""Application service: one client's ordering session.

A PortalSession owns everything that is scoped to the authenticated
client: the persisted cart, the loaded discount rules, and the
submission guard.  It is constructed once per browsing context and
driven through an explicit lifecycle:

    session = PortalSession(...)
    await session.init(client)     # login, or identity change
    session.set_quantity(...)
    await session.submit_order()
    session.teardown()             # logout

Switching identity always clears the cart before the new client can
add anything; carts are never merged across accounts.
"""

from __future__ import annotations

import logging

from portal.application.cart_service import CartService
from portal.application.dto import (
    CartDTO,
    LineDTO,
    PriceListEntryDTO,
    SubmissionResultDTO,
    TotalsDTO,
)
from portal.application.submit_order import SubmitOrderHandler
from portal.domain.exceptions import (
    DataIntegrityError,
    EntityNotFoundError,
    ValidationError,
)
from portal.domain.gateway.document_renderer import OrderDocumentRenderer
from portal.domain.gateway.email_dispatcher import EmailDispatcher
from portal.domain.model.cart import CartLine
from portal.domain.model.catalog import CatalogSnapshot, Product, Variant
from portal.domain.model.client import Client, normalize_username
from portal.domain.model.totals import OrderTotals
from portal.domain.model.value_objects import Money
from portal.domain.repository.cart_repository import CartRepository
from portal.domain.repository.catalog_provider import CatalogProvider
from portal.domain.repository.client_repository import ClientRepository
from portal.domain.repository.discount_rule_repository import DiscountRuleRepository
from portal.domain.repository.order_repository import OrderRepository
from portal.domain.service.discount_resolver import DiscountResolver
from portal.domain.service.pricing import unit_price_for

log = logging.getLogger(__name__)


async def authenticate(client_repo: ClientRepository, username: str) -> Client:
    """Resolve a username to its client profile."""
    if not username or not username.strip():
        raise ValidationError("Username is required")
    client = await client_repo.get_by_username(normalize_username(username))
    if client is None:
        raise EntityNotFoundError(f"Unknown client '{username}'")
    return client


class PortalSession:

    def __init__(
        self,
        catalog_provider: CatalogProvider,
        rule_repo: DiscountRuleRepository,
        cart_repo: CartRepository,
        order_repo: OrderRepository,
        renderer: OrderDocumentRenderer,
        dispatcher: EmailDispatcher,
        recipient: str,
    ) -> None:
        self._catalog_provider = catalog_provider
        self._resolver = DiscountResolver(rule_repo)
        self._cart = CartService(cart_repo)
        self._submitter = SubmitOrderHandler(
            self._cart, order_repo, renderer, dispatcher, recipient,
            line_check=self._check_line,
        )
        self._catalog: CatalogSnapshot | None = None
        self._client: Client | None = None
        self._notices: list[str] = []

    # --- Lifecycle ------------------------------------------------------------

    @property
    def client(self) -> Client | None:
        return self._client

    @property
    def catalog(self) -> CatalogSnapshot:
        if self._catalog is None:
            raise ValidationError("Catalog has not been loaded")
        return self._catalog

    @property
    def is_sending(self) -> bool:
        return self._submitter.is_sending

    @property
    def notices(self) -> list[str]:
        """Cart problems found while restoring, for display to the client."""
        return list(self._notices)

    async def init(self, client: Client) -> None:
        """Bind the session to *client*.

        The first call restores a persisted cart if it belongs to the same
        client; a later call with another identity clears the cart first.
        """
        if self._client is None:
            self._cart.restore(client.client_id)
        elif self._client.client_id != client.client_id:
            log.info("Identity change %s -> %s", self._client.client_id, client.client_id)
            self._resolver.reset()
            self._cart.switch_owner(client.client_id)
        self._client = client

        if self._catalog is None:
            await self.refresh_catalog()
        if self._resolver.client_id != client.client_id:
            await self._resolver.load_rules(client.client_id, self._catalog)
            self._reprice_cart()

    def teardown(self) -> None:
        """End the session: nothing of this client survives it."""
        self._cart.switch_owner(None)
        self._resolver.reset()
        self._client = None
        self._notices.clear()

    async def refresh_catalog(self) -> CatalogSnapshot:
        self._catalog = await self._catalog_provider.load()
        log.info(
            "Catalog loaded: %d product(s), %d categorie(s)",
            len(self._catalog.products), len(self._catalog.categories),
        )
        return self._catalog

    # --- Catalog --------------------------------------------------------------

    def price_list(self, category_id: str | None = None) -> list[PriceListEntryDTO]:
        client = self._require_client()
        entries = []
        for product in self.catalog.products_in_category(category_id):
            for variant in product.variants:
                price = unit_price_for(product, variant, client.category, self._resolver)
                entries.append(
                    PriceListEntryDTO(
                        product_id=product.id,
                        product_name=product.name,
                        category_id=product.category_id,
                        variant_id=variant.id,
                        size=variant.size,
                        price=str(price),
                        tax_rate=product.tax_rate.value,
                        in_stock=variant.in_stock,
                    )
                )
        return entries

    # --- Cart -----------------------------------------------------------------

    def set_quantity(self, product_id: str, variant_id: str, quantity: int) -> bool:
        product, variant = self._orderable(product_id, variant_id, quantity)
        return self._cart.set_quantity(
            product.id,
            variant.id,
            quantity,
            self._price(product, variant),
            product.tax_rate,
            product.name,
            variant.size,
        )

    def add_item(self, product_id: str, variant_id: str, quantity: int = 1) -> bool:
        product, variant = self._orderable(product_id, variant_id, quantity)
        return self._cart.add_item(
            product.id,
            variant.id,
            quantity,
            self._price(product, variant),
            product.tax_rate,
            product.name,
            variant.size,
        )

    def remove_item(self, product_id: str, variant_id: str) -> bool:
        self._require_client()
        return self._cart.remove_item(product_id, variant_id)

    def clear_cart(self) -> None:
        self._require_client()
        self._cart.clear()

    def totals(self) -> OrderTotals:
        return self._cart.totals()

    def cart(self) -> CartDTO:
        return CartDTO(
            owner=self._cart.owner,
            items=[LineDTO.from_line(line) for line in self._cart.lines],
            totals=TotalsDTO.from_totals(self._cart.totals()),
        )

    # --- Orders ---------------------------------------------------------------

    async def submit_order(self) -> SubmissionResultDTO:
        return await self._submitter.handle(self._client)

    # --- Internal helpers -----------------------------------------------------

    def _require_client(self) -> Client:
        if self._client is None:
            raise ValidationError("Please log in first")
        return self._client

    def _orderable(
        self, product_id: str, variant_id: str, quantity: int
    ) -> tuple[Product, Variant]:
        self._require_client()
        product, variant = self.catalog.get_variant(product_id, variant_id)
        if isinstance(quantity, int) and quantity > 0 and not variant.in_stock:
            raise ValidationError(
                f"{product.name} ({variant.size}) is currently out of stock"
            )
        return product, variant

    def _price(self, product: Product, variant: Variant) -> Money:
        client = self._require_client()
        return unit_price_for(product, variant, client.category, self._resolver)

    def _check_line(self, line: CartLine) -> None:
        """Raise unless the catalog still prices *line* for this client."""
        try:
            product, variant = self.catalog.get_variant(line.product_id, line.variant_id)
        except EntityNotFoundError as exc:
            raise DataIntegrityError(
                f"{line.product_name} ({line.size}) is no longer in the catalog; "
                f"please remove it from your cart"
            ) from exc
        self._price(product, variant)

    def _reprice_cart(self) -> None:
        """Bring restored lines in line with the current catalog and rules.

        Lines whose product or variant is gone are removed and reported
        through ``notices``.  Lines without a price for the client's
        category are kept as they are; submission refuses them.
        """
        for line in self._cart.lines:
            try:
                product, variant = self.catalog.get_variant(line.product_id, line.variant_id)
            except EntityNotFoundError:
                log.warning(
                    "Dropping cart line %s/%s: no longer in catalog",
                    line.product_id, line.variant_id,
                )
                self._cart.remove_item(line.product_id, line.variant_id)
                self._notices.append(
                    f"{line.product_name} ({line.size}) is no longer available "
                    f"and was removed from your cart"
                )
                continue
            try:
                price = self._price(product, variant)
            except DataIntegrityError as exc:
                log.warning("Keeping unpriced cart line %s/%s: %s", product.id, variant.id, exc)
                self._notices.append(str(exc))
                continue
            self._cart.set_quantity(
                product.id,
                variant.id,
                line.quantity.value,
                price,
                product.tax_rate,
                product.name,
                variant.size,
            )
