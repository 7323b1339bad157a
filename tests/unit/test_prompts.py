"""
Unit tests for prompt construction.

Tests the analysis prompt contract and recipe prompt clause assembly:
- Category vocabulary and JSON-only instruction
- Optional clauses omitted when empty
- Fixed clause order and byte-identical output
"""
from fridgecheck.services.prompts import (
    INGREDIENT_CATEGORIES,
    RECIPE_GENERATION_INSTRUCTIONS,
    build_analysis_prompt,
    build_recipe_prompt,
)


class TestAnalysisPrompt:
    """Tests for build_analysis_prompt()."""

    def test_lists_every_category(self):
        prompt = build_analysis_prompt()

        assert (
            "one of: Produce, Dairy, Meat, Seafood, Grains, Condiments, "
            "Beverages, Snacks, Frozen, Other" in prompt
        )
        assert len(INGREDIENT_CATEGORIES) == 10

    def test_requests_json_fields(self):
        prompt = build_analysis_prompt()

        assert '"ingredients"' in prompt
        assert '"name"' in prompt
        assert '"category"' in prompt
        assert '"estimatedQuantity"' in prompt
        assert prompt.endswith("Only return the JSON, no other text.")

    def test_is_constant(self):
        assert build_analysis_prompt() == build_analysis_prompt()


class TestRecipePrompt:
    """Tests for build_recipe_prompt()."""

    def test_minimal_prompt(self):
        """Test that only required clauses appear without constraints."""
        prompt = build_recipe_prompt(["Milk", "Eggs"], serving_size=2)

        assert prompt == (
            "I have these ingredients available: Milk, Eggs.\n"
            "Serving size: 2 people.\n" + RECIPE_GENERATION_INSTRUCTIONS
        )

    def test_empty_constraints_omit_clauses(self):
        """Test dietary, allergy and cuisine clauses are omitted when empty."""
        prompt = build_recipe_prompt(
            ["Milk"],
            pantry_staples=[],
            dietary_restrictions=[],
            allergies=[],
            cuisine_preferences=[],
            serving_size=4,
        )

        assert "pantry staples" not in prompt
        assert "Dietary restrictions" not in prompt
        assert "Allergies" not in prompt
        assert "Preferred cuisines" not in prompt
        assert "Serving size: 4 people." in prompt

    def test_all_clauses_in_fixed_order(self):
        """Test clause ordering when every constraint is present."""
        prompt = build_recipe_prompt(
            ["Chicken", "Rice"],
            pantry_staples=["Salt", "Olive oil"],
            dietary_restrictions=["Low-Carb"],
            allergies=["Peanuts", "Sesame"],
            cuisine_preferences=["Thai"],
            serving_size=3,
        )

        lines = prompt.split("\n")
        assert lines[:6] == [
            "I have these ingredients available: Chicken, Rice.",
            "I also have these pantry staples: Salt, Olive oil.",
            "Dietary restrictions: Low-Carb.",
            "Allergies (must avoid): Peanuts, Sesame.",
            "Preferred cuisines: Thai.",
            "Serving size: 3 people.",
        ]

    def test_single_optional_clause(self):
        prompt = build_recipe_prompt(["Tofu"], allergies=["Soy"], serving_size=1)

        assert "Allergies (must avoid): Soy." in prompt
        assert "Dietary restrictions" not in prompt

    def test_requests_five_recipes_as_json(self):
        prompt = build_recipe_prompt(["Milk"])

        assert "Suggest 5 recipes" in prompt
        for key in (
            '"recipes"',
            '"title"',
            '"summary"',
            '"ingredients"',
            '"steps"',
            '"prepTime"',
            '"cookTime"',
            '"nutritionalInfo"',
            '"cuisineType"',
            '"difficulty"',
        ):
            assert key in prompt
        assert prompt.endswith("Only return the JSON, no other text.")

    def test_deterministic(self):
        """Test identical inputs render byte-identical prompts."""
        kwargs = dict(
            ingredients=["Milk", "Eggs"],
            pantry_staples=("Flour",),
            dietary_restrictions=["Vegetarian"],
            allergies=[],
            cuisine_preferences=["French", "Italian"],
            serving_size=2,
        )

        assert build_recipe_prompt(**kwargs).encode() == build_recipe_prompt(**kwargs).encode()

    def test_preserves_input_order(self):
        prompt = build_recipe_prompt(["Zucchini", "Apple"])

        assert "available: Zucchini, Apple." in prompt

    def test_default_serving_size(self):
        assert "Serving size: 2 people." in build_recipe_prompt(["Milk"])
