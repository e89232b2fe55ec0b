"""Exceptions raised by model policy and meal analysis."""


class ModelPolicyError(Exception):
    """Base class for model selection and pricing errors."""


class InvalidTier(ModelPolicyError, ValueError):
    def __init__(self, tier: object) -> None:
        self.tier = tier
        super().__init__(f"Unknown subscription tier: {tier!r}")


class InvalidArgument(ModelPolicyError, ValueError):
    pass


class AnalysisError(Exception):
    """Base class for failures in the meal analysis request path."""


class RateLimitExceeded(AnalysisError):
    def __init__(self, tier: str, limit: int, reset: float) -> None:
        self.tier = tier
        self.limit = limit
        self.reset = reset
        super().__init__(f"Analysis limit of {limit}/hour reached for tier {tier}")


class AnalysisFailed(AnalysisError):
    pass
