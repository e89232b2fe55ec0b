"""Pydantic Settings for MealAppeal configuration."""

from pydantic_settings import BaseSettings
from pydantic import Field

from config.constants import MODEL_OVERRIDE_KEYS, SAFE_DEFAULT_MODELS, SubscriptionTier


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # OpenAI
    openai_api_key: str = ""
    openai_timeout: float = Field(default=60.0, description="Vision API request timeout (seconds)")
    openai_max_retries: int = 2

    # Per-tier model overrides (OPENAI_MODEL_<TIER>)
    openai_model_free: str | None = None
    openai_model_premium_monthly: str | None = None
    openai_model_premium_yearly: str | None = None

    # Substitutes used when a tier's configured model is not registered
    safe_default_model_free: str = SAFE_DEFAULT_MODELS[SubscriptionTier.FREE]
    safe_default_model_premium_monthly: str = SAFE_DEFAULT_MODELS[SubscriptionTier.PREMIUM_MONTHLY]
    safe_default_model_premium_yearly: str = SAFE_DEFAULT_MODELS[SubscriptionTier.PREMIUM_YEARLY]

    # Analysis cache
    analysis_cache_ttl: int = Field(default=3600, description="Seconds a meal analysis stays cached")
    analysis_cache_max_entries: int = 1000

    # Operational
    log_level: str = "INFO"
    json_logs: bool = False

    def model_overrides(self) -> dict[str, str]:
        """Return configured overrides keyed by environment variable name."""
        values = {
            SubscriptionTier.FREE: self.openai_model_free,
            SubscriptionTier.PREMIUM_MONTHLY: self.openai_model_premium_monthly,
            SubscriptionTier.PREMIUM_YEARLY: self.openai_model_premium_yearly,
        }
        return {
            MODEL_OVERRIDE_KEYS[tier]: value.strip()
            for tier, value in values.items()
            if value and value.strip()
        }

    def safe_default_models(self) -> dict[SubscriptionTier, str]:
        return {
            SubscriptionTier.FREE: self.safe_default_model_free,
            SubscriptionTier.PREMIUM_MONTHLY: self.safe_default_model_premium_monthly,
            SubscriptionTier.PREMIUM_YEARLY: self.safe_default_model_premium_yearly,
        }


settings = Settings()
