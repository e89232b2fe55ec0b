"""Vision model configurations for meal analysis."""

from dataclasses import dataclass, field, fields

from config.constants import ImageDetail


@dataclass(frozen=True)
class TokenPricing:
    input: float   # USD per 1M tokens
    output: float  # USD per 1M tokens


@dataclass(frozen=True)
class ModelFeatures:
    premium_analysis: bool = False
    enhanced_accuracy: bool = False
    long_context: bool = False


FEATURE_NAMES = frozenset(f.name for f in fields(ModelFeatures))


@dataclass(frozen=True)
class ModelConfig:
    model_id: str
    display_name: str
    max_tokens: int
    temperature: float
    image_detail: ImageDetail
    cost_per_million_tokens: TokenPricing
    features: ModelFeatures = field(default_factory=ModelFeatures)
    deprecated: bool = False
    deprecation_date: str | None = None  # informational only
    fallback_model_id: str | None = None

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be within [0, 1], got {self.temperature}")

    def supports(self, feature: str) -> bool:
        """Check a feature flag by name. Unknown flags are unsupported."""
        if feature not in FEATURE_NAMES:
            return False
        return getattr(self.features, feature)


GPT_4O_MINI_ID = "gpt-4o-mini-2024-07-18"
GPT_41_MINI_ID = "gpt-4.1-mini"
GPT_41_ID = "gpt-4.1"
GPT_4O_LATEST_ID = "gpt-4o-2024-05-13"
GPT_4O_ID = "gpt-4o-2024-08-06"  # deprecated, use GPT_4O_LATEST_ID

DEFAULT_MODEL_ID = GPT_4O_MINI_ID


GPT_4O_MINI = ModelConfig(
    model_id=GPT_4O_MINI_ID,
    display_name="GPT-4o Mini",
    max_tokens=500,
    temperature=0.3,
    image_detail=ImageDetail.LOW,
    cost_per_million_tokens=TokenPricing(input=0.15, output=0.60),
)

# Pricing for the 4.1 family mirrors the announced preview rates
GPT_41_MINI = ModelConfig(
    model_id=GPT_41_MINI_ID,
    display_name="GPT-4.1 Mini",
    max_tokens=1000,
    temperature=0.3,
    image_detail=ImageDetail.HIGH,
    cost_per_million_tokens=TokenPricing(input=0.15, output=0.60),
    features=ModelFeatures(premium_analysis=True, enhanced_accuracy=True),
)

GPT_41 = ModelConfig(
    model_id=GPT_41_ID,
    display_name="GPT-4.1",
    max_tokens=2000,
    temperature=0.3,
    image_detail=ImageDetail.HIGH,
    cost_per_million_tokens=TokenPricing(input=0.30, output=1.20),
    features=ModelFeatures(premium_analysis=True, enhanced_accuracy=True, long_context=True),
)

GPT_4O_LATEST = ModelConfig(
    model_id=GPT_4O_LATEST_ID,
    display_name="GPT-4o Latest",
    max_tokens=2000,
    temperature=0.3,
    image_detail=ImageDetail.HIGH,
    cost_per_million_tokens=TokenPricing(input=5.00, output=15.00),
    features=ModelFeatures(premium_analysis=True, enhanced_accuracy=True, long_context=True),
)

GPT_4O = ModelConfig(
    model_id=GPT_4O_ID,
    display_name="GPT-4o",
    max_tokens=1500,
    temperature=0.3,
    image_detail=ImageDetail.HIGH,
    cost_per_million_tokens=TokenPricing(input=2.50, output=10.00),
    features=ModelFeatures(premium_analysis=True, enhanced_accuracy=True),
    deprecated=True,
    deprecation_date="2024-08-06",
    fallback_model_id=GPT_4O_LATEST_ID,
)

ALL_MODELS = (GPT_4O_MINI, GPT_41_MINI, GPT_41, GPT_4O_LATEST, GPT_4O)
