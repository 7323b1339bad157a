"""
Prompt templates for ingredient analysis and recipe generation.

Both prompts ask Claude for JSON only. The recipe prompt is assembled from
the user's constraints in a fixed order so identical inputs always render
identical text.
"""

from typing import Sequence

# =============================================================================
# VOCABULARIES
# =============================================================================

INGREDIENT_CATEGORIES = (
    "Produce",
    "Dairy",
    "Meat",
    "Seafood",
    "Grains",
    "Condiments",
    "Beverages",
    "Snacks",
    "Frozen",
    "Other",
)

# Suggested choices for the settings screen; free-form values are accepted too.
DIETARY_OPTIONS = (
    "Vegetarian",
    "Vegan",
    "Keto",
    "Paleo",
    "Gluten-Free",
    "Low-Carb",
    "Low-Fat",
    "Mediterranean",
)

ALLERGY_OPTIONS = (
    "Nuts",
    "Peanuts",
    "Gluten",
    "Dairy",
    "Eggs",
    "Soy",
    "Shellfish",
    "Fish",
    "Sesame",
    "Wheat",
)

CUISINE_OPTIONS = (
    "Italian",
    "Mexican",
    "Chinese",
    "Japanese",
    "Indian",
    "Thai",
    "French",
    "Mediterranean",
    "American",
    "Korean",
)

RECIPE_COUNT = 5

_CATEGORY_CHOICES = ", ".join(INGREDIENT_CATEGORIES)

# =============================================================================
# INGREDIENT ANALYSIS
# =============================================================================

INGREDIENT_ANALYSIS_PROMPT = f"""Analyze this image of a fridge/food items. Identify all visible food items and ingredients.

Return your response as valid JSON with this exact structure:
{{
  "ingredients": [
    {{
      "name": "item name",
      "category": "one of: {_CATEGORY_CHOICES}",
      "estimatedQuantity": "estimated amount e.g. '2 pieces', '1 bag', '500ml'"
    }}
  ]
}}

Only return the JSON, no other text."""

# =============================================================================
# RECIPE GENERATION
# =============================================================================

RECIPE_GENERATION_INSTRUCTIONS = f"""
Suggest {RECIPE_COUNT} recipes I can make. For each recipe, provide detailed instructions.

Return your response as valid JSON with this exact structure:
{{
  "recipes": [
    {{
      "title": "Recipe Name",
      "summary": "Brief 1-2 sentence description",
      "ingredients": ["ingredient 1 with amount", "ingredient 2 with amount"],
      "steps": ["Step 1 instruction", "Step 2 instruction"],
      "prepTime": 15,
      "cookTime": 30,
      "nutritionalInfo": "Approx. 450 cal, 25g protein, 35g carbs, 18g fat per serving",
      "cuisineType": "Italian",
      "difficulty": "Easy"
    }}
  ]
}}

Only return the JSON, no other text."""

API_KEY_CHECK_PROMPT = "test"


def build_analysis_prompt() -> str:
    """Return the fixed ingredient-analysis instruction."""
    return INGREDIENT_ANALYSIS_PROMPT


def build_recipe_prompt(
    ingredients: Sequence[str],
    pantry_staples: Sequence[str] = (),
    dietary_restrictions: Sequence[str] = (),
    allergies: Sequence[str] = (),
    cuisine_preferences: Sequence[str] = (),
    serving_size: int = 2,
) -> str:
    """
    Render the recipe-generation prompt.

    Clauses appear in a fixed order; optional clauses are omitted entirely
    when their list is empty. Available ingredients and serving size are
    always included.

    Args:
        ingredients: Selected ingredient names
        pantry_staples: Names of items already in the pantry
        dietary_restrictions: e.g. ["Vegetarian", "Low-Carb"]
        allergies: Ingredients that must be avoided
        cuisine_preferences: Preferred cuisines
        serving_size: Number of people to cook for

    Returns:
        Prompt text
    """
    parts = [f"I have these ingredients available: {', '.join(ingredients)}."]

    if pantry_staples:
        parts.append(f"I also have these pantry staples: {', '.join(pantry_staples)}.")
    if dietary_restrictions:
        parts.append(f"Dietary restrictions: {', '.join(dietary_restrictions)}.")
    if allergies:
        parts.append(f"Allergies (must avoid): {', '.join(allergies)}.")
    if cuisine_preferences:
        parts.append(f"Preferred cuisines: {', '.join(cuisine_preferences)}.")
    parts.append(f"Serving size: {serving_size} people.")

    parts.append(RECIPE_GENERATION_INSTRUCTIONS)
    return "\n".join(parts)
