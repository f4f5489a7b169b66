"""Tests for discount rules and the resolver."""

import asyncio
from decimal import Decimal

import pytest

from portal.domain.exceptions import DiscountLookupError, ValidationError
from portal.domain.model.discount import DiscountKind, DiscountRule
from portal.domain.model.value_objects import Money
from portal.domain.service.discount_resolver import DiscountResolver
from tests.builders import make_rule, sample_catalog
from tests.fakes import FakeDiscountRuleRepository


def _loaded(*rules: DiscountRule, client: str = "alice", catalog=None) -> DiscountResolver:
    resolver = DiscountResolver(FakeDiscountRuleRepository(list(rules)))
    asyncio.run(resolver.load_rules(client, catalog))
    return resolver


class TestDiscountRule:

    def test_negative_value_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            make_rule(value="-5")

    def test_percentage_above_hundred_clamps_to_zero(self):
        rule = make_rule(value="150")
        assert rule.exceeds_full_price
        assert rule.apply(Money.of("10.00")) == Money.zero()


class TestEffectivePrice:

    def test_no_rule_returns_base_price(self):
        resolver = _loaded()
        assert resolver.effective_price("p1", Money.of("10.00")) == Money.of("10.00")

    def test_scenario_b_percentage(self):
        resolver = _loaded(make_rule(kind="percentage", value="20"))
        price = resolver.effective_price("p1", Money.of("10.00"))
        assert price == Money.of("8.00")
        assert price * 2 == Money.of("16.00")

    def test_scenario_c_fixed_clamps_to_zero(self):
        resolver = _loaded(make_rule(kind="fixed", value="7.00"))
        assert resolver.effective_price("p1", Money.of("5.00")) == Money.zero()

    def test_fixed_subtracts(self):
        resolver = _loaded(make_rule(kind="fixed", value="1.25"))
        assert resolver.effective_price("p1", Money.of("5.00")) == Money.of("3.75")

    def test_rule_for_other_product_does_not_apply(self):
        resolver = _loaded(make_rule(product_id="p2"))
        assert resolver.effective_price("p1", Money.of("10.00")) == Money.of("10.00")

    def test_active_percentage_beats_inactive_fixed(self):
        resolver = _loaded(
            make_rule("r-fixed", kind="fixed", value="3", active=False, created_day=1),
            make_rule("r-pct", kind="percentage", value="10", created_day=2),
        )
        assert resolver.effective_price("p1", Money.of("10.00")) == Money.of("9.00")

    def test_unloaded_resolver_refuses_to_price(self):
        resolver = DiscountResolver(FakeDiscountRuleRepository())
        with pytest.raises(DiscountLookupError, match="not been loaded"):
            resolver.effective_price("p1", Money.of("10.00"))


class TestLoadRules:

    def test_client_id_is_case_folded(self):
        repo = FakeDiscountRuleRepository([make_rule()])
        resolver = DiscountResolver(repo)
        asyncio.run(resolver.load_rules("  ALICE "))
        assert repo.queries == ["alice"]
        assert resolver.client_id == "alice"
        assert len(resolver.rules) == 1

    def test_inactive_rules_filtered(self):
        resolver = _loaded(make_rule(active=False))
        assert resolver.rules == []

    def test_first_rule_by_creation_time_wins(self):
        later = make_rule("later", value="50", created_day=20)
        earlier = make_rule("earlier", value="10", created_day=3)
        resolver = _loaded(later, earlier)
        assert resolver.effective_price("p1", Money.of("10.00")) == Money.of("9.00")

    def test_undated_rules_keep_load_order_after_dated_ones(self):
        resolver = _loaded(
            make_rule("undated-1", value="30"),
            make_rule("undated-2", value="40"),
            make_rule("dated", value="10", created_day=1),
        )
        assert [r.id for r in resolver.rules] == ["dated"]

        resolver = _loaded(make_rule("undated-1", value="30"), make_rule("undated-2", value="40"))
        assert [r.id for r in resolver.rules] == ["undated-1"]

    def test_store_failure_is_not_no_discount(self):
        resolver = DiscountResolver(FakeDiscountRuleRepository([make_rule()], fail=True))
        with pytest.raises(DiscountLookupError, match="could not be loaded"):
            asyncio.run(resolver.load_rules("alice"))
        assert not resolver.is_loaded
        with pytest.raises(DiscountLookupError):
            resolver.effective_price("p1", Money.of("10.00"))

    def test_rule_for_unknown_product_rejected(self):
        with pytest.raises(ValidationError, match="unknown product"):
            _loaded(make_rule(product_id="ghost"), catalog=sample_catalog())

    def test_reload_replaces_previous_client(self):
        repo = FakeDiscountRuleRepository([
            make_rule("a", client_id="alice"),
            DiscountRule("b", "bob", "p2", DiscountKind.FIXED, Decimal("1")),
        ])
        resolver = DiscountResolver(repo)
        asyncio.run(resolver.load_rules("alice"))
        asyncio.run(resolver.load_rules("bob"))
        assert [r.id for r in resolver.rules] == ["b"]
        assert resolver.effective_price("p1", Money.of("10.00")) == Money.of("10.00")
