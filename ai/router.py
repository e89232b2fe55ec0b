"""Subscription tier -> vision model resolution."""

from collections.abc import Mapping
from types import MappingProxyType

import structlog

from ai.models import ModelConfig
from ai.registry import DEFAULT_REGISTRY, MigrationAdvice, ModelRegistry
from ai.tiers import DEFAULT_POLICY_TABLE, TierPolicyTable, coerce_tier
from config.constants import MODEL_OVERRIDE_KEYS, SAFE_DEFAULT_MODELS, SubscriptionTier
from config.settings import Settings, settings

log = structlog.get_logger(__name__)


class ModelResolver:
    """Pick the effective model for a tier.

    Order of precedence:
      1. An operator override (``OPENAI_MODEL_<TIER>``) naming a registered
         model. Overrides are returned as-is, deprecated or not.
      2. The tier policy, with a per-tier safe default substituted when the
         policy names a model the registry does not know.
      3. Deprecation fallbacks, followed until a live model is reached.

    Missing and deprecated models never raise; only an unknown tier does.
    """

    def __init__(
        self,
        registry: ModelRegistry = DEFAULT_REGISTRY,
        policies: TierPolicyTable = DEFAULT_POLICY_TABLE,
        overrides: Mapping[str, str] | None = None,
        safe_defaults: Mapping[SubscriptionTier, str] | None = None,
    ) -> None:
        self.registry = registry
        self.policies = policies
        self.overrides = MappingProxyType(dict(overrides or {}))
        self.safe_defaults = MappingProxyType(
            {**SAFE_DEFAULT_MODELS, **(safe_defaults or {})}
        )

    @classmethod
    def from_settings(
        cls,
        config: Settings | None = None,
        registry: ModelRegistry = DEFAULT_REGISTRY,
        policies: TierPolicyTable = DEFAULT_POLICY_TABLE,
    ) -> "ModelResolver":
        config = config or settings
        return cls(
            registry=registry,
            policies=policies,
            overrides=config.model_overrides(),
            safe_defaults=config.safe_default_models(),
        )

    # ── Public API ──

    def resolve_model(self, tier: SubscriptionTier | str) -> ModelConfig:
        tier = coerce_tier(tier)

        override = self.override_model(tier)
        if override is not None:
            log.info("model_override_applied", tier=tier.value, model=override.model_id)
            return override

        config = self.policies.get_policy_for_tier(tier)
        if config.model_id not in self.registry:
            config = self._substitute_unavailable(tier, config)

        return self._follow_deprecation(tier, config)

    def should_migrate_model(self, model_id: str) -> MigrationAdvice:
        return self.registry.should_migrate_model(model_id)

    def override_model(self, tier: SubscriptionTier | str) -> ModelConfig | None:
        """The registered model an operator override selects for a tier, if any."""
        tier = coerce_tier(tier)
        key = MODEL_OVERRIDE_KEYS[tier]
        model_id = (self.overrides.get(key) or "").strip()
        if not model_id:
            return None
        model = self.registry.get_model_by_id(model_id)
        if model is None:
            log.warning("model_override_ignored", tier=tier.value, key=key, model=model_id)
        return model

    # ── Resolution steps ──

    def _safe_default(self, tier: SubscriptionTier) -> ModelConfig | None:
        model_id = self.safe_defaults.get(tier)
        return self.registry.get_model_by_id(model_id) if model_id else None

    def _substitute_unavailable(self, tier: SubscriptionTier, config: ModelConfig) -> ModelConfig:
        substitute = self._safe_default(tier)
        if substitute is None:
            log.error(
                "safe_default_unavailable",
                tier=tier.value,
                model=config.model_id,
                safe_default=self.safe_defaults.get(tier),
            )
            return config
        log.warning(
            "model_unavailable_substituted",
            tier=tier.value,
            model=config.model_id,
            substitute=substitute.model_id,
        )
        return substitute

    def _follow_deprecation(self, tier: SubscriptionTier, config: ModelConfig) -> ModelConfig:
        seen = {config.model_id}
        while config.deprecated and config.fallback_model_id:
            fallback = self.registry.get_model_by_id(config.fallback_model_id)
            if fallback is None:
                log.error(
                    "fallback_model_missing",
                    tier=tier.value,
                    model=config.model_id,
                    fallback=config.fallback_model_id,
                )
                fallback = self._safe_default(tier)
            if fallback is None or fallback.model_id in seen:
                break
            log.warning(
                "model_deprecated_fallback",
                tier=tier.value,
                model=config.model_id,
                fallback=fallback.model_id,
                deprecation_date=config.deprecation_date,
            )
            seen.add(fallback.model_id)
            config = fallback

        if config.deprecated:
            log.warning("deprecated_model_in_use", tier=tier.value, model=config.model_id)
        return config


# ── Module-level helpers (settings are re-read on every call) ──


def resolve_model(tier: SubscriptionTier | str) -> ModelConfig:
    """Resolve the model for a tier using the current settings."""
    return ModelResolver.from_settings(settings).resolve_model(tier)


def get_available_models() -> list[ModelConfig]:
    return DEFAULT_REGISTRY.get_available_models()


def should_migrate_model(model_id: str) -> MigrationAdvice:
    """Diagnostic helper: should a model currently in use be replaced?"""
    return DEFAULT_REGISTRY.should_migrate_model(model_id)
