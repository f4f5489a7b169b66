"""Domain service: Discount Resolver.

Loads the active discount rules of one client and answers "what does
this client actually pay for this product" queries.

Resolution is first-match: rules are put in a deterministic order (by
creation time, undated rules after dated ones in load order) and the
first rule per product wins.  Later rules for the same product are
ignored and logged.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from portal.domain.exceptions import DiscountLookupError, ValidationError
from portal.domain.model.catalog import CatalogSnapshot
from portal.domain.model.client import normalize_username
from portal.domain.model.discount import DiscountRule
from portal.domain.model.value_objects import Money
from portal.domain.repository.discount_rule_repository import DiscountRuleRepository

log = logging.getLogger(__name__)

_UNDATED = datetime.max.replace(tzinfo=timezone.utc)


def _creation_order(rule: DiscountRule) -> datetime:
    if rule.created_at is None:
        return _UNDATED
    if rule.created_at.tzinfo is None:
        return rule.created_at.replace(tzinfo=timezone.utc)
    return rule.created_at


class DiscountResolver:

    def __init__(self, rule_repo: DiscountRuleRepository) -> None:
        self._rule_repo = rule_repo
        self._client_id: str | None = None
        self._rules: dict[str, DiscountRule] | None = None

    @property
    def client_id(self) -> str | None:
        return self._client_id

    @property
    def is_loaded(self) -> bool:
        return self._rules is not None

    @property
    def rules(self) -> list[DiscountRule]:
        return list((self._rules or {}).values())

    async def load_rules(
        self,
        client_id: str,
        catalog: CatalogSnapshot | None = None,
    ) -> list[DiscountRule]:
        """Load the active rules of *client_id*, replacing any loaded set.

        Raises DiscountLookupError if the store fails; the resolver is
        then left unloaded so prices cannot silently fall back to the
        catalog price.
        """
        self.reset()
        key = normalize_username(client_id)
        try:
            loaded = await self._rule_repo.list_active_for_client(key)
        except Exception as exc:
            log.error("Loading discount rules for %s failed: %s", key, exc)
            raise DiscountLookupError(
                f"Discount rules for '{key}' could not be loaded"
            ) from exc

        candidates = [
            r for r in loaded
            if r.active and normalize_username(r.client_id) == key
        ]
        if catalog is not None:
            orphans = [r for r in candidates if not catalog.has_product(r.product_id)]
            if orphans:
                raise ValidationError(
                    "Discount rule(s) reference unknown product(s): "
                    + ", ".join(f"{r.id} -> {r.product_id}" for r in orphans)
                )

        rules: dict[str, DiscountRule] = {}
        for rule in sorted(candidates, key=_creation_order):
            if rule.product_id in rules:
                log.warning(
                    "Client %s has several active rules for product %s; "
                    "using %s, ignoring %s",
                    key, rule.product_id, rules[rule.product_id].id, rule.id,
                )
                continue
            if rule.exceeds_full_price:
                log.warning(
                    "Rule %s discounts %s%%; price will be clamped to zero",
                    rule.id, rule.value,
                )
            rules[rule.product_id] = rule

        self._client_id = key
        self._rules = rules
        log.info("Loaded %d discount rule(s) for %s", len(rules), key)
        return list(rules.values())

    def effective_price(self, product_id: str, base_price: Money) -> Money:
        if self._rules is None:
            raise DiscountLookupError("Discount rules have not been loaded")
        rule = self._rules.get(product_id)
        if rule is None:
            return base_price
        price = rule.apply(base_price)
        log.debug(
            "Rule %s (%s %s) on %s: %s -> %s",
            rule.id, rule.kind.value, rule.value, product_id, base_price, price,
        )
        return price

    def reset(self) -> None:
        self._client_id = None
        self._rules = None
