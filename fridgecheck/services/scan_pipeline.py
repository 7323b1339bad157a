"""
Scan-to-recipe pipeline.

Drives the two network phases and owns every piece of state between them:

    Idle -> Analyzing -> Analyzed | AnalysisFailed
    Analyzed -> Generating -> Generated | GenerationFailed
    any -> reset() -> Idle

At most one request is in flight; start calls made while Analyzing or
Generating are ignored. reset() cancels the outstanding request and bumps the
run counter, so a reply belonging to an older run is never applied.

Model, image and decoding failures become AnalysisFailed / GenerationFailed
states; they do not propagate to the caller.
"""

import asyncio
import logging
from typing import Callable, Optional, Sequence
from uuid import UUID

from fridgecheck.config import settings
from fridgecheck.services import image_service, response_extractor
from fridgecheck.services.exceptions import (
    InvalidStateError,
    NoAPIKeyError,
    NoImageError,
    ScanError,
)
from fridgecheck.services.image_service import ImageSource, PreparedImage
from fridgecheck.services.model_client import ModelClient
from fridgecheck.services.prompts import (
    RECIPE_COUNT,
    build_analysis_prompt,
    build_recipe_prompt,
)
from fridgecheck.services.scan_state import (
    BUSY_STATES,
    AnalysisFailed,
    Analyzed,
    Analyzing,
    DetectedIngredient,
    Generated,
    Generating,
    GenerationFailed,
    Idle,
    PipelineState,
    RecipeCandidate,
    RecipePreferences,
    state_error,
)
from fridgecheck.services.scan_store import ScanStore

logger = logging.getLogger(__name__)

StateListener = Callable[[PipelineState], None]

# States a start call is accepted from
ANALYSIS_ENTRY_STATES = (Idle, AnalysisFailed, Analyzed)
GENERATION_ENTRY_STATES = (Analyzed, GenerationFailed, Generated)
# States in which the detected ingredient list is available
INGREDIENT_STATES = (Analyzed, Generating, Generated, GenerationFailed)


def _item_name(item) -> str:
    return getattr(item, "name", item)


class ScanPipeline:
    """Single owner of scan state. Observers subscribe; they never write."""

    def __init__(
        self,
        client: Optional[ModelClient] = None,
        store: Optional[ScanStore] = None,
    ):
        self.client = client or ModelClient()
        self.store = store

        self._listeners: list[StateListener] = []
        self._run_id = 0
        self._request: Optional[asyncio.Future] = None
        self._clear()

    def _clear(self):
        self._state: PipelineState = Idle()
        self._images: list[ImageSource] = []
        self._prepared: list[PreparedImage] = []
        self._ingredients: tuple[DetectedIngredient, ...] = ()
        self._recipes: tuple[RecipeCandidate, ...] = ()
        self._committed_ingredient_ids: set[UUID] = set()
        self._saved_recipe_ids: set[UUID] = set()
        self._scan_record_saved = False

    # =========================================================================
    # OBSERVATION
    # =========================================================================

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return isinstance(self._state, BUSY_STATES)

    @property
    def error(self) -> Optional[ScanError]:
        return state_error(self._state)

    @property
    def error_message(self) -> Optional[str]:
        error = self.error
        return error.message if error else None

    @property
    def images(self) -> tuple[ImageSource, ...]:
        return tuple(self._images)

    @property
    def ingredients(self) -> tuple[DetectedIngredient, ...]:
        return self._ingredients

    @property
    def selected_ingredients(self) -> tuple[DetectedIngredient, ...]:
        return tuple(i for i in self._ingredients if i.is_selected)

    @property
    def recipes(self) -> tuple[RecipeCandidate, ...]:
        return self._recipes

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Call listener(state) after every state change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: PipelineState):
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    # =========================================================================
    # CAPTURE / RESET
    # =========================================================================

    def capture_images(self, images: Sequence[ImageSource]) -> bool:
        """
        Add images for the next analysis.

        Accepted while Idle, and after an analysis that failed for lack of
        images so the user can add a photo and retry. A finished run must be
        reset first.
        """
        awaiting_images = isinstance(self._state, AnalysisFailed) and not self._images
        if not isinstance(self._state, Idle) and not awaiting_images:
            logger.warning(
                "Ignoring captured images in state %s; reset first",
                type(self._state).__name__,
            )
            return False
        self._images.extend(images)
        logger.debug("Captured %d image(s), %d total", len(images), len(self._images))
        return True

    def reset(self):
        """Discard everything and return to Idle, cancelling any request."""
        self._run_id += 1
        if self._request is not None and not self._request.done():
            logger.info("Cancelling in-flight request for reset run")
            self._request.cancel()
        self._request = None
        self._clear()
        self._set_state(Idle())

    # =========================================================================
    # NETWORK PHASES
    # =========================================================================

    async def _send(self, run_id: int, prompt: str, images, api_key: str, max_tokens: int):
        """
        Issue one model request as a cancellable future.

        Returns:
            Reply text, or None if reset() cancelled the request
        """
        request = asyncio.ensure_future(
            self.client.send(prompt, images, api_key=api_key, max_tokens=max_tokens)
        )
        self._request = request
        try:
            return await request
        except asyncio.CancelledError:
            if run_id != self._run_id:
                return None
            raise
        finally:
            if self._request is request:
                self._request = None

    async def start_analysis(self, api_key: str) -> PipelineState:
        """
        Identify ingredients in the captured images.

        Accepted from Idle, AnalysisFailed (retry) and Analyzed (re-analyse).
        Missing images or key fail immediately without a request.

        Returns:
            The state after the call
        """
        if not isinstance(self._state, ANALYSIS_ENTRY_STATES):
            logger.warning("Ignoring start_analysis in state %s", type(self._state).__name__)
            return self._state

        if not self._images:
            self._set_state(AnalysisFailed(NoImageError()))
            return self._state
        if not api_key or not api_key.strip():
            logger.error("No API key set")
            self._set_state(AnalysisFailed(NoAPIKeyError()))
            return self._state

        try:
            prepared = [image_service.prepare(image) for image in self._images]
        except ScanError as e:
            self._set_state(AnalysisFailed(e))
            return self._state

        run_id = self._run_id
        logger.info("Starting image analysis (%d image(s))...", len(prepared))
        # Results of the previous analysis are superseded by this attempt
        self._prepared = []
        self._ingredients = ()
        self._recipes = ()
        self._set_state(Analyzing())
        if run_id != self._run_id:
            return self._state

        try:
            raw_text = await self._send(
                run_id,
                build_analysis_prompt(),
                prepared,
                api_key,
                settings.analysis_max_tokens,
            )
            results = response_extractor.decode_ingredients(raw_text) if raw_text is not None else None
        except ScanError as e:
            if run_id != self._run_id:
                logger.info("Discarding analysis failure from a reset run")
                return self._state
            logger.warning("Image analysis failed: %s", e.message)
            self._set_state(AnalysisFailed(e))
            return self._state

        if results is None or run_id != self._run_id:
            logger.info("Discarding analysis result from a reset run")
            return self._state

        self._prepared = prepared
        self._ingredients = tuple(DetectedIngredient.from_schema(r) for r in results)
        self._set_state(Analyzed(self._ingredients))
        return self._state

    def toggle_selection(self, ingredient_id: UUID) -> bool:
        """
        Flip is_selected on one detected ingredient.

        Returns:
            True if the ingredient was found, False for unknown ids
        """
        if not isinstance(self._state, INGREDIENT_STATES) or self.is_busy:
            return False

        for index, ingredient in enumerate(self._ingredients):
            if ingredient.id == ingredient_id:
                updated = list(self._ingredients)
                updated[index] = ingredient.toggled()
                self._ingredients = tuple(updated)
                if isinstance(self._state, Analyzed):
                    self._set_state(Analyzed(self._ingredients))
                else:
                    self._set_state(self._state)
                return True
        return False

    async def start_generation(
        self,
        preferences: Optional[RecipePreferences] = None,
        pantry_items: Sequence = (),
        api_key: str = "",
    ) -> PipelineState:
        """
        Ask for recipes built from the selected ingredients.

        Accepted from Analyzed, GenerationFailed (retry) and Generated
        (regenerate). A no-op when nothing is selected.

        Args:
            preferences: Dietary constraints; None means none and serving size 2
            pantry_items: Pantry item names (or objects with a .name)
            api_key: Anthropic API key

        Returns:
            The state after the call
        """
        if not isinstance(self._state, GENERATION_ENTRY_STATES):
            logger.warning("Ignoring start_generation in state %s", type(self._state).__name__)
            return self._state

        selected = self.selected_ingredients
        if not selected:
            logger.info("No ingredients selected; not generating recipes")
            return self._state

        if not api_key or not api_key.strip():
            logger.error("No API key set")
            self._set_state(GenerationFailed(NoAPIKeyError()))
            return self._state

        preferences = preferences or RecipePreferences()
        ingredient_names = [i.name for i in selected]
        prompt = build_recipe_prompt(
            ingredients=ingredient_names,
            pantry_staples=[_item_name(item) for item in pantry_items],
            dietary_restrictions=preferences.dietary_restrictions,
            allergies=preferences.allergies,
            cuisine_preferences=preferences.cuisine_preferences,
            serving_size=preferences.serving_size,
        )

        run_id = self._run_id
        logger.info("Generating recipes from %d ingredient(s)...", len(selected))
        self._recipes = ()
        self._set_state(Generating(selected))
        if run_id != self._run_id:
            return self._state

        try:
            raw_text = await self._send(
                run_id, prompt, None, api_key, settings.recipe_max_tokens
            )
            results = response_extractor.decode_recipes(raw_text) if raw_text is not None else None
        except ScanError as e:
            if run_id != self._run_id:
                logger.info("Discarding generation failure from a reset run")
                return self._state
            logger.warning("Recipe generation failed: %s", e.message)
            self._set_state(GenerationFailed(e))
            return self._state

        if results is None or run_id != self._run_id:
            logger.info("Discarding generated recipes from a reset run")
            return self._state

        if len(results) > RECIPE_COUNT:
            logger.warning("Model returned %d recipes, keeping %d", len(results), RECIPE_COUNT)
        self._recipes = tuple(
            RecipeCandidate.from_schema(r, source_ingredient_names=ingredient_names)
            for r in results[:RECIPE_COUNT]
        )
        self._set_state(Generated(self._recipes))
        return self._state

    # =========================================================================
    # COMMITS
    # =========================================================================

    def _require_store(self) -> ScanStore:
        if self.store is None:
            raise InvalidStateError("No store configured for this pipeline")
        return self.store

    def commit_selected_to_pantry(self) -> int:
        """
        Insert a pantry item for each selected ingredient not yet committed.

        Later deselection does not remove anything already inserted.

        Returns:
            Number of pantry items inserted
        """
        if not isinstance(self._state, INGREDIENT_STATES):
            raise InvalidStateError(
                f"No detected ingredients in state {type(self._state).__name__}"
            )
        store = self._require_store()

        inserted = 0
        for ingredient in self.selected_ingredients:
            if ingredient.id in self._committed_ingredient_ids:
                continue
            store.add_pantry_item(ingredient)
            self._committed_ingredient_ids.add(ingredient.id)
            inserted += 1

        logger.info("Added %d ingredient(s) to pantry", inserted)
        return inserted

    def is_recipe_saved(self, candidate: RecipeCandidate) -> bool:
        return candidate.id in self._saved_recipe_ids

    def save_recipe(self, candidate: RecipeCandidate) -> bool:
        """
        Persist a generated candidate once.

        Returns:
            True if a recipe was inserted, False if it was already saved
        """
        if not any(c.id == candidate.id for c in self._recipes):
            raise InvalidStateError("Recipe is not part of the current run")
        store = self._require_store()

        if candidate.id in self._saved_recipe_ids:
            return False
        store.add_recipe(candidate)
        self._saved_recipe_ids.add(candidate.id)
        return True

    def save_scan_record(self) -> bool:
        """
        Persist the processed images, ingredient names and candidates.

        Only valid once recipes have been generated; at most once per run.

        Returns:
            True if a record was inserted, False if already saved this run
        """
        if not isinstance(self._state, Generated):
            raise InvalidStateError(
                f"Scan record needs generated recipes, state is {type(self._state).__name__}"
            )
        store = self._require_store()

        if self._scan_record_saved:
            return False
        store.add_scan_record(
            images=[image.data for image in self._prepared],
            ingredient_names=[i.name for i in self._ingredients],
            recipes=self._recipes,
        )
        self._scan_record_saved = True
        return True
