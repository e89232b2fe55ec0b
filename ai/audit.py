"""Operator audit of the model configuration.

Resolves every tier against the current settings, checks each registered
model for deprecation and validates the registry data. Run with
``mealappeal-audit-models``; exits non-zero when something needs attention.
"""

from dataclasses import asdict
from typing import Any

import structlog

from ai.router import ModelResolver
from config.constants import SubscriptionTier
from config.logging_config import setup_logging

log = structlog.get_logger(__name__)


def audit_models(resolver: ModelResolver | None = None) -> dict[str, Any]:
    """Collect the resolved model per tier, migration advice and data errors."""
    resolver = resolver or ModelResolver.from_settings()

    tiers = {}
    for tier in SubscriptionTier:
        model = resolver.resolve_model(tier)
        tiers[tier.value] = {
            "model_id": model.model_id,
            "display_name": model.display_name,
            "max_tokens": model.max_tokens,
            "image_detail": model.image_detail.value,
            "overridden": resolver.override_model(tier) is not None,
            "migration": asdict(resolver.should_migrate_model(model.model_id)),
        }

    migrations = {}
    for model in resolver.registry:
        advice = resolver.should_migrate_model(model.model_id)
        if advice.should_migrate:
            migrations[model.model_id] = asdict(advice)

    return {
        "tiers": tiers,
        "migrations": migrations,
        "data_errors": resolver.registry.validate(),
    }


def main() -> int:
    """Log the audit. Returns 1 when a resolved model needs migration or data is invalid."""
    setup_logging()
    report = audit_models()

    for tier, info in report["tiers"].items():
        log.info("tier_model", tier=tier, **{k: v for k, v in info.items() if k != "migration"})
    for model_id, advice in report["migrations"].items():
        log.warning("registered_model_deprecated", model=model_id, **advice)
    for error in report["data_errors"]:
        log.error("model_registry_data_error", detail=error)

    needs_attention = bool(report["data_errors"]) or any(
        info["migration"]["should_migrate"] for info in report["tiers"].values()
    )
    return 1 if needs_attention else 0


if __name__ == "__main__":
    raise SystemExit(main())
