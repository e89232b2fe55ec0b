"""Subscription tier -> model policy table."""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

from ai.errors import InvalidTier
from ai.models import GPT_4O_LATEST, GPT_4O_MINI, ModelConfig, ModelFeatures
from config.constants import ImageDetail, SubscriptionTier


def coerce_tier(tier: SubscriptionTier | str) -> SubscriptionTier:
    """Validate a tier value. Unknown tiers raise InvalidTier."""
    try:
        return SubscriptionTier(tier)
    except ValueError:
        raise InvalidTier(tier) from None


@dataclass(frozen=True)
class TierPolicy:
    """A base model plus the tier's own budget and feature overrides."""

    base: ModelConfig
    max_tokens: int | None = None
    image_detail: ImageDetail | None = None
    features: ModelFeatures | None = None

    def to_model_config(self) -> ModelConfig:
        overrides = {}
        if self.max_tokens is not None:
            overrides["max_tokens"] = self.max_tokens
        if self.image_detail is not None:
            overrides["image_detail"] = self.image_detail
        if self.features is not None:
            overrides["features"] = self.features
        return replace(self.base, **overrides)


TIER_POLICIES: dict[SubscriptionTier, TierPolicy] = {
    SubscriptionTier.FREE: TierPolicy(
        base=GPT_4O_MINI,
        max_tokens=500,
        image_detail=ImageDetail.LOW,
    ),
    SubscriptionTier.PREMIUM_MONTHLY: TierPolicy(
        base=GPT_4O_MINI,
        max_tokens=1000,
        image_detail=ImageDetail.HIGH,
        features=ModelFeatures(premium_analysis=True, enhanced_accuracy=True),
    ),
    SubscriptionTier.PREMIUM_YEARLY: TierPolicy(
        base=GPT_4O_LATEST,
        max_tokens=2000,
        image_detail=ImageDetail.HIGH,
        features=ModelFeatures(premium_analysis=True, enhanced_accuracy=True, long_context=True),
    ),
}


class TierPolicyTable:
    """Read-only view over the per-tier policies."""

    def __init__(self, policies: Mapping[SubscriptionTier | str, TierPolicy]) -> None:
        self._policies = MappingProxyType(
            {coerce_tier(tier): policy for tier, policy in policies.items()}
        )
        # Merged once; policies never change after construction
        self._merged = MappingProxyType(
            {tier: policy.to_model_config() for tier, policy in self._policies.items()}
        )

    @property
    def tiers(self) -> tuple[SubscriptionTier, ...]:
        return tuple(self._policies)

    def get_policy(self, tier: SubscriptionTier | str) -> TierPolicy:
        resolved = coerce_tier(tier)
        if resolved not in self._policies:
            raise InvalidTier(tier)
        return self._policies[resolved]

    def get_policy_for_tier(self, tier: SubscriptionTier | str) -> ModelConfig:
        """Return the tier's model with its overrides applied."""
        resolved = coerce_tier(tier)
        if resolved not in self._merged:
            raise InvalidTier(tier)
        return self._merged[resolved]


DEFAULT_POLICY_TABLE = TierPolicyTable(TIER_POLICIES)
