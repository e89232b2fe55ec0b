"""Constants used across the application."""

from enum import Enum


# Subscription tiers
class SubscriptionTier(str, Enum):
    FREE = "free"
    PREMIUM_MONTHLY = "premium_monthly"
    PREMIUM_YEARLY = "premium_yearly"

    @property
    def is_premium(self) -> bool:
        return self is not SubscriptionTier.FREE


# Image fidelity requested from the vision API
class ImageDetail(str, Enum):
    LOW = "low"
    HIGH = "high"
    AUTO = "auto"


class UseCase(str, Enum):
    ACCURACY = "accuracy"
    SPEED = "speed"
    COST = "cost"


# Analysis focus modes offered in the camera UI
class FocusMode(str, Enum):
    HEALTH = "health"
    FITNESS = "fitness"
    CULTURAL = "cultural"
    CHEF = "chef"
    SCIENCE = "science"
    BUDGET = "budget"


# Environment keys that pin a tier to a specific model
MODEL_OVERRIDE_KEYS = {
    SubscriptionTier.FREE: "OPENAI_MODEL_FREE",
    SubscriptionTier.PREMIUM_MONTHLY: "OPENAI_MODEL_PREMIUM_MONTHLY",
    SubscriptionTier.PREMIUM_YEARLY: "OPENAI_MODEL_PREMIUM_YEARLY",
}

# Substitutes used when a tier names a model the registry does not know
SAFE_DEFAULT_MODELS = {
    SubscriptionTier.FREE: "gpt-4o-mini-2024-07-18",
    SubscriptionTier.PREMIUM_MONTHLY: "gpt-4o-mini-2024-07-18",
    SubscriptionTier.PREMIUM_YEARLY: "gpt-4o-2024-05-13",
}

# Meal analyses per user per window
RATE_LIMITS = {
    SubscriptionTier.FREE: 10,
    SubscriptionTier.PREMIUM_MONTHLY: 100,
    SubscriptionTier.PREMIUM_YEARLY: 200,
}
RATE_LIMIT_WINDOW = 3600  # seconds
RATE_LIMIT_NOTIFY_DEBOUNCE = 300  # seconds

TOKENS_PER_MILLION = 1_000_000

# Fixed sampling seed so the same photo gets the same answer
ANALYSIS_SEED = 42
