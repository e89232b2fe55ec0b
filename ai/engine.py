"""Meal analysis: tier model resolution + OpenAI vision call + cost accounting."""

import json
import time
from dataclasses import dataclass, replace
from typing import Any

import openai
import structlog
from openai import AsyncOpenAI

from ai.costs import estimate_cost_from_usage
from ai.errors import AnalysisFailed, InvalidArgument, RateLimitExceeded
from ai.models import ModelConfig
from ai.prompts.system import ANALYSIS_SYSTEM_PROMPT
from ai.prompts.templates import coerce_focus_mode, meal_analysis_prompt
from ai.router import ModelResolver
from ai.tiers import coerce_tier
from config.constants import ANALYSIS_SEED, FocusMode, SubscriptionTier
from config.settings import settings
from data.cache import TTLCache, analysis_cache_key
from data.rate_limiter import TierRateLimiter

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MealAnalysis:
    analysis: dict[str, Any]
    model_id: str
    model_display_name: str
    tier: SubscriptionTier
    focus_mode: FocusMode
    input_tokens: int
    output_tokens: int
    estimated_cost: float
    processing_ms: int
    fallback_used: bool = False
    cached: bool = False


class MealAnalyzer:
    """Runs one meal photo through the vision model chosen for the user's tier."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        resolver: ModelResolver | None = None,
        rate_limiter: TierRateLimiter | None = None,
        cache: TTLCache | None = None,
    ) -> None:
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout,
            max_retries=settings.openai_max_retries,
        )
        self.resolver = resolver or ModelResolver.from_settings(settings)
        self.rate_limiter = rate_limiter or TierRateLimiter()
        self.cache = cache if cache is not None else TTLCache(max_entries=settings.analysis_cache_max_entries)

    # ── Public API ──

    async def analyze(
        self,
        user_id: str,
        tier: SubscriptionTier | str,
        image_url: str,
        focus_mode: FocusMode | str = FocusMode.HEALTH,
    ) -> MealAnalysis:
        """Analyze a meal photo (data URL or https URL).

        Raises:
            InvalidTier: unknown subscription tier.
            InvalidArgument: empty image.
            RateLimitExceeded: the user used up the tier's hourly analyses.
            AnalysisFailed: the vision API failed or returned unusable content.
        """
        tier = coerce_tier(tier)
        focus = coerce_focus_mode(focus_mode)
        if not image_url or not image_url.strip():
            raise InvalidArgument("image_url must not be empty")

        cache_key = analysis_cache_key(image_url, focus, tier)
        cached = self.cache.get(cache_key)
        if cached is not None:
            log.info("analysis_cache_hit", user_id=user_id, tier=tier.value, focus=focus.value)
            return replace(cached, cached=True)

        limit = await self.rate_limiter.check(user_id, tier)
        if not limit.success:
            raise RateLimitExceeded(tier.value, limit.limit, limit.reset)

        model = self.resolver.resolve_model(tier)
        advice = self.resolver.should_migrate_model(model.model_id)
        if advice.should_migrate:
            log.warning(
                "model_migration_recommended",
                model=model.model_id,
                reason=advice.reason,
                suggested=advice.suggested_model_id,
            )

        prompt = meal_analysis_prompt(tier, focus)
        started = time.monotonic()
        response, model_used = await self._complete_with_fallback(model, prompt, image_url)
        processing_ms = int((time.monotonic() - started) * 1000)

        analysis = self._parse_analysis(response, model_used)
        usage = getattr(response, "usage", None)
        result = MealAnalysis(
            analysis=analysis,
            model_id=model_used.model_id,
            model_display_name=model_used.display_name,
            tier=tier,
            focus_mode=focus,
            input_tokens=getattr(usage, "prompt_tokens", None) or 0,
            output_tokens=getattr(usage, "completion_tokens", None) or 0,
            estimated_cost=estimate_cost_from_usage(model_used, usage),
            processing_ms=processing_ms,
            fallback_used=model_used.model_id != model.model_id,
        )
        log.info(
            "meal_analyzed",
            user_id=user_id,
            tier=tier.value,
            model=result.model_id,
            cost=round(result.estimated_cost, 6),
            processing_ms=processing_ms,
            fallback_used=result.fallback_used,
        )

        self.cache.set(cache_key, result, settings.analysis_cache_ttl)
        return result

    # ── Vision API ──

    async def _complete_with_fallback(
        self, model: ModelConfig, prompt: str, image_url: str,
    ) -> tuple[Any, ModelConfig]:
        try:
            return await self._complete(model, prompt, image_url), model
        except openai.NotFoundError as e:
            fallback = (
                self.resolver.registry.get_model_by_id(model.fallback_model_id)
                if model.fallback_model_id else None
            )
            if fallback is None:
                log.error("vision_model_not_found", model=model.model_id, error=str(e))
                raise AnalysisFailed(f"Model {model.model_id} is not available") from e
            log.warning(
                "primary_model_unavailable",
                model=model.model_id,
                fallback=fallback.model_id,
                error=str(e),
            )
        except openai.APIError as e:
            log.error("openai_api_error", model=model.model_id, error=str(e))
            raise AnalysisFailed(f"Vision API request failed: {e}") from e

        try:
            return await self._complete(fallback, prompt, image_url), fallback
        except openai.APIError as e:
            log.error("openai_api_error", model=fallback.model_id, error=str(e))
            raise AnalysisFailed(f"Vision API request failed: {e}") from e

    async def _complete(self, model: ModelConfig, prompt: str, image_url: str) -> Any:
        log.debug("vision_request", model=model.model_id, detail=model.image_detail.value)
        return await self.client.chat.completions.create(
            model=model.model_id,
            messages=[
                {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": image_url, "detail": model.image_detail.value},
                        },
                    ],
                },
            ],
            max_tokens=model.max_tokens,
            temperature=model.temperature,
            seed=ANALYSIS_SEED,
            response_format={"type": "json_object"},
        )

    @staticmethod
    def _parse_analysis(response: Any, model: ModelConfig) -> dict[str, Any]:
        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise AnalysisFailed(f"No analysis content received from {model.model_id}")
        try:
            analysis = json.loads(content)
        except json.JSONDecodeError as e:
            log.error("analysis_parse_failed", model=model.model_id, preview=content[:200])
            raise AnalysisFailed("Vision model returned invalid JSON") from e
        if not isinstance(analysis, dict):
            raise AnalysisFailed("Vision model returned JSON that is not an object")
        return analysis
