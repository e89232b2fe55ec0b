"""Read-only registry of known vision models."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType

import structlog

from ai.errors import InvalidArgument, ModelPolicyError
from ai.models import (
    ALL_MODELS,
    DEFAULT_MODEL_ID,
    GPT_41_ID,
    GPT_4O_LATEST_ID,
    GPT_4O_MINI_ID,
    ModelConfig,
)
from config.constants import UseCase

log = structlog.get_logger(__name__)


# Preferred models per use case, best first
RECOMMENDED_MODELS: dict[UseCase, tuple[str, ...]] = {
    UseCase.ACCURACY: (GPT_41_ID, GPT_4O_LATEST_ID),
    UseCase.SPEED: (GPT_4O_MINI_ID,),
    UseCase.COST: (GPT_4O_MINI_ID,),
}


@dataclass(frozen=True)
class MigrationAdvice:
    should_migrate: bool
    reason: str | None = None
    suggested_model_id: str | None = None


class ModelRegistry:
    """Immutable lookup of ModelConfig entries keyed by model ID."""

    def __init__(
        self,
        models: Iterable[ModelConfig],
        default_model_id: str = DEFAULT_MODEL_ID,
    ) -> None:
        entries: dict[str, ModelConfig] = {}
        for model in models:
            if model.model_id in entries:
                raise ValueError(f"Duplicate model id in registry: {model.model_id}")
            entries[model.model_id] = model
        self._models = MappingProxyType(entries)
        self.default_model_id = default_model_id

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[ModelConfig]:
        return iter(self._models.values())

    def get_model_by_id(self, model_id: str) -> ModelConfig | None:
        """Look up a model. Returns None when the ID is not registered.

        Deprecated models are still returned; a warning names their fallback.
        """
        model = self._models.get(model_id)
        if model is None:
            log.error("model_not_registered", model=model_id)
        elif model.deprecated and model.fallback_model_id:
            log.warning(
                "model_deprecated",
                model=model_id,
                fallback=model.fallback_model_id,
                deprecation_date=model.deprecation_date,
            )
        return model

    def get_available_models(self) -> list[ModelConfig]:
        """All registered models that are not deprecated."""
        return [m for m in self._models.values() if not m.deprecated]

    def get_recommended_model(self, use_case: UseCase | str) -> ModelConfig:
        """Pick the preferred model for a use case.

        Candidates that are missing or deprecated are skipped; the registry
        default is used when none remain.
        """
        try:
            use_case = UseCase(use_case)
        except ValueError:
            raise InvalidArgument(f"Unknown use case: {use_case!r}") from None

        for model_id in RECOMMENDED_MODELS[use_case]:
            model = self._models.get(model_id)
            if model is not None and not model.deprecated:
                return model

        default = self._models.get(self.default_model_id)
        if default is None:
            raise ModelPolicyError(
                f"No recommended model for {use_case.value} and default "
                f"{self.default_model_id} is not registered"
            )
        return default

    def should_migrate_model(self, model_id: str) -> MigrationAdvice:
        """Advise operators whether a model in use should be replaced."""
        model = self._models.get(model_id)
        if model is None:
            return MigrationAdvice(
                should_migrate=True,
                reason="Model not found in configuration",
                suggested_model_id=self.default_model_id,
            )
        if model.deprecated:
            reason = "Model deprecated"
            if model.deprecation_date:
                reason += f" on {model.deprecation_date}"
            return MigrationAdvice(
                should_migrate=True,
                reason=reason,
                suggested_model_id=model.fallback_model_id or self.default_model_id,
            )
        return MigrationAdvice(should_migrate=False)

    def validate(self) -> list[str]:
        """Report data errors in deprecation fallbacks."""
        errors = []
        for model in self._models.values():
            if not model.deprecated or model.fallback_model_id is None:
                continue
            if model.fallback_model_id == model.model_id:
                errors.append(f"{model.model_id}: fallback points at itself")
            elif model.fallback_model_id not in self._models:
                errors.append(
                    f"{model.model_id}: fallback {model.fallback_model_id} is not registered"
                )
        return errors


DEFAULT_REGISTRY = ModelRegistry(ALL_MODELS)
