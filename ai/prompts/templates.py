"""Meal analysis prompt templates."""

from config.constants import FocusMode, SubscriptionTier

BASE_ANALYSIS_SCHEMA = """{
  "foodName": "Specific name of the food item",
  "confidence": 0.95,
  "ingredients": ["ingredient1", "ingredient2", "ingredient3"],
  "nutrition": {
    "calories": 250,
    "protein": 12,
    "carbs": 35,
    "fat": 8,
    "fiber": 4,
    "sugar": 8,
    "sodium": 450
  },
  "portion": {
    "estimatedWeight": 200,
    "unit": "grams",
    "servingSize": "1 plate",
    "servingsDetected": 1
  },
  "allergens": {
    "detected": ["wheat", "milk"],
    "possible": ["eggs"],
    "confidence": 0.9
  },
  "healthInsights": {
    "score": 75,
    "positives": ["High in protein", "Good fiber content"],
    "concerns": ["High sodium"],
    "recommendations": ["Add more vegetables"],
    "dietaryInfo": ["vegetarian-friendly"]
  },
  "description": "Brief description of the food",
  "tags": ["healthy", "protein-rich", "homemade"]"""

FOCUS_INSTRUCTIONS = {
    FocusMode.HEALTH: (
        "Focus on nutritional density, micronutrients, antioxidants, and overall health impact. "
        "Analyze vitamins, minerals, and phytonutrients."
    ),
    FocusMode.FITNESS: (
        "Analyze for pre/post workout suitability, muscle recovery, protein quality, "
        "glycemic index, and athletic performance optimization."
    ),
    FocusMode.CULTURAL: (
        "Identify cultural origins, traditional preparation methods, regional variations, "
        "and cultural significance of ingredients and cooking style."
    ),
    FocusMode.CHEF: (
        "Evaluate cooking techniques, ingredient quality, plating aesthetics, flavor profiles, "
        "texture combinations, and culinary skill level."
    ),
    FocusMode.SCIENCE: (
        "Provide biochemical analysis, metabolic pathways, nutrient bioavailability, "
        "food chemistry, and molecular gastronomy aspects."
    ),
    FocusMode.BUDGET: (
        "Assess ingredient costs, seasonal pricing, nutritional value per dollar, "
        "cost-saving substitutions, and meal prep efficiency."
    ),
}


def coerce_focus_mode(value: FocusMode | str | None) -> FocusMode:
    """Parse a focus mode, falling back to health for unknown values."""
    try:
        return FocusMode(value)
    except ValueError:
        return FocusMode.HEALTH


def _premium_schema(focus: FocusMode) -> str:
    mode = focus.value
    return f""",
  "premiumAnalysis": {{
    "{mode}Mode": {{
      "score": 85,
      "insights": [
        "Detailed {mode}-specific insight 1",
        "Detailed {mode}-specific insight 2",
        "Detailed {mode}-specific insight 3"
      ],
      "metrics": {{
        "key1": "value with unit",
        "key2": "value with unit",
        "key3": "value with unit"
      }},
      "recommendations": [
        "Specific actionable recommendation 1",
        "Specific actionable recommendation 2"
      ],
      "deepAnalysis": "Comprehensive {mode}-focused analysis paragraph"
    }}
  }}"""


def meal_analysis_prompt(tier: SubscriptionTier, focus_mode: FocusMode | str = FocusMode.HEALTH) -> str:
    """Build the user prompt for a meal photo. Premium tiers get a focus-mode deep dive."""
    focus = coerce_focus_mode(focus_mode)
    premium = _premium_schema(focus) if tier.is_premium else ""
    return (
        "Analyze this food image and provide nutritional information. "
        "Return ONLY valid JSON matching this EXACT structure with NO additional text or formatting:\n\n"
        f"{BASE_ANALYSIS_SCHEMA}{premium}\n}}\n\n"
        f"{FOCUS_INSTRUCTIONS[focus]}\n\n"
        "Be accurate with portion estimation based on visual cues. Identify all visible ingredients. "
        "Check for common allergens carefully. Provide realistic nutritional values."
    )
