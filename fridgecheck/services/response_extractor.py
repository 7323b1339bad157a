"""
Pull the JSON document out of a model reply and decode it.

Claude sometimes wraps JSON in prose or markdown fences even when asked not
to. extract_json() is a best-effort fallback chain, not a parser:

1. a ```json fence with a closing fence -> the text between them
2. any ``` fence with a closing fence  -> the text between the first pair
3. otherwise                            -> the whole reply

Balanced braces are not checked, so decode() may still fail; that raises
DecodingError with the offset and a snippet of the offending text.
"""

import json
import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from fridgecheck.services.ai_schemas import (
    IngredientAnalysisSchema,
    IngredientSchema,
    RecipeSchema,
    RecipeSuggestionSchema,
)
from fridgecheck.services.exceptions import DecodingError

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

FENCE = "```"
JSON_FENCE = "```json"

SNIPPET_RADIUS = 40


def _between_fences(text: str, opening: str) -> str | None:
    start = text.find(opening)
    if start == -1:
        return None
    after = text[start + len(opening):]
    end = after.find(FENCE)
    if end == -1:
        return None
    return after[:end].strip()


def extract_json(raw_text: str) -> str:
    """Return the most likely JSON payload in a model reply."""
    for opening in (JSON_FENCE, FENCE):
        fenced = _between_fences(raw_text, opening)
        if fenced is not None:
            return fenced
    return raw_text.strip()


def _snippet(text: str, pos: int) -> str:
    start = max(0, pos - SNIPPET_RADIUS)
    return text[start:pos + SNIPPET_RADIUS]


def decode(json_text: str, schema_class: type[SchemaT]) -> SchemaT:
    """
    Parse and validate JSON text against a response schema.

    Raises:
        DecodingError: Invalid JSON or shape mismatch
    """
    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as e:
        detail = f"{e.msg} at offset {e.pos} near {_snippet(json_text, e.pos)!r}"
        logger.warning("JSON decoding failed: %s", detail)
        raise DecodingError(detail) from e

    try:
        return schema_class.model_validate(parsed)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        detail = (
            f"{schema_class.__name__}: {first['msg']} at {location} "
            f"({e.error_count()} error(s)); JSON was {json_text[:2 * SNIPPET_RADIUS]!r}"
        )
        logger.warning("Response schema validation failed: %s", detail)
        raise DecodingError(detail) from e


def decode_ingredients(raw_text: str) -> list[IngredientSchema]:
    """Extract and decode an ingredient-analysis reply."""
    response = decode(extract_json(raw_text), IngredientAnalysisSchema)
    logger.info("Successfully parsed %d ingredients", len(response.ingredients))
    return response.ingredients


def decode_recipes(raw_text: str) -> list[RecipeSchema]:
    """Extract and decode a recipe-generation reply."""
    response = decode(extract_json(raw_text), RecipeSuggestionSchema)
    logger.info("Successfully parsed %d recipes", len(response.recipes))
    return response.recipes
