"""Tests for ai/tiers.py - tier policy table."""

import pytest
from ai.errors import InvalidTier
from ai.models import GPT_4O_LATEST, GPT_4O_MINI, ModelFeatures
from ai.tiers import DEFAULT_POLICY_TABLE, TierPolicy, TierPolicyTable, coerce_tier
from config.constants import ImageDetail, SubscriptionTier
from conftest import make_model


class TestCoerceTier:
    def test_enum_passthrough(self):
        assert coerce_tier(SubscriptionTier.FREE) is SubscriptionTier.FREE

    def test_string_value(self):
        assert coerce_tier("premium_yearly") is SubscriptionTier.PREMIUM_YEARLY

    @pytest.mark.parametrize("value", ["FREE", "premium", "", None, 3])
    def test_invalid(self, value):
        with pytest.raises(InvalidTier) as exc_info:
            coerce_tier(value)
        assert exc_info.value.tier == value

    def test_invalid_tier_is_value_error(self):
        with pytest.raises(ValueError):
            coerce_tier("enterprise")


class TestDefaultPolicies:
    def test_free(self):
        model = DEFAULT_POLICY_TABLE.get_policy_for_tier("free")
        assert model.model_id == GPT_4O_MINI.model_id
        assert model.max_tokens == 500
        assert model.image_detail is ImageDetail.LOW
        assert model.features == ModelFeatures()

    def test_premium_monthly(self):
        model = DEFAULT_POLICY_TABLE.get_policy_for_tier(SubscriptionTier.PREMIUM_MONTHLY)
        assert model.model_id == GPT_4O_MINI.model_id
        assert model.max_tokens == 1000
        assert model.image_detail is ImageDetail.HIGH
        assert model.features.premium_analysis
        assert model.features.enhanced_accuracy
        assert not model.features.long_context

    def test_premium_yearly(self):
        model = DEFAULT_POLICY_TABLE.get_policy_for_tier(SubscriptionTier.PREMIUM_YEARLY)
        assert model.model_id == GPT_4O_LATEST.model_id
        assert model.max_tokens == 2000
        assert model.features.long_context

    def test_pricing_carried_from_base(self):
        model = DEFAULT_POLICY_TABLE.get_policy_for_tier("premium_monthly")
        assert model.cost_per_million_tokens == GPT_4O_MINI.cost_per_million_tokens

    def test_base_model_not_mutated(self):
        DEFAULT_POLICY_TABLE.get_policy_for_tier("premium_monthly")
        assert GPT_4O_MINI.max_tokens == 500
        assert GPT_4O_MINI.image_detail is ImageDetail.LOW

    def test_covers_all_tiers(self):
        assert set(DEFAULT_POLICY_TABLE.tiers) == set(SubscriptionTier)

    def test_invalid_tier(self):
        with pytest.raises(InvalidTier):
            DEFAULT_POLICY_TABLE.get_policy_for_tier("gold")


class TestTierPolicy:
    def test_no_overrides_returns_base(self):
        base = make_model("base")
        assert TierPolicy(base=base).to_model_config() == base

    def test_overrides_applied(self):
        policy = TierPolicy(base=make_model("base"), max_tokens=42, image_detail=ImageDetail.AUTO)
        merged = policy.to_model_config()
        assert merged.max_tokens == 42
        assert merged.image_detail is ImageDetail.AUTO
        assert merged.model_id == "base"


class TestCustomTable:
    def test_string_keys_accepted(self):
        table = TierPolicyTable({"free": TierPolicy(base=make_model("A"))})
        assert table.get_policy_for_tier(SubscriptionTier.FREE).model_id == "A"

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidTier):
            TierPolicyTable({"platinum": TierPolicy(base=make_model("A"))})

    def test_tier_not_in_table(self):
        table = TierPolicyTable({"free": TierPolicy(base=make_model("A"))})
        with pytest.raises(InvalidTier):
            table.get_policy_for_tier("premium_yearly")
        with pytest.raises(InvalidTier):
            table.get_policy("premium_yearly")

    def test_get_policy(self):
        policy = TierPolicy(base=make_model("A"), max_tokens=10)
        table = TierPolicyTable({"free": policy})
        assert table.get_policy("free") is policy
