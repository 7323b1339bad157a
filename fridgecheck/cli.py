"""CLI commands for FridgeCheck."""

import argparse
import asyncio
import logging
import sys

from sqlalchemy.orm import Session

from fridgecheck.config import settings
from fridgecheck.database import SessionLocal, init_db
from fridgecheck.services.exceptions import NoAPIKeyError
from fridgecheck.services.model_client import ModelClient
from fridgecheck.services.scan_pipeline import ScanPipeline
from fridgecheck.services.scan_state import Analyzed, Generated
from fridgecheck.services.scan_store import SQLAlchemyScanStore


def _resolve_api_key(store: SQLAlchemyScanStore, api_key: str | None) -> str:
    # Command line, then environment, then the key saved in preferences
    return api_key or settings.anthropic_api_key or store.get_api_key()


def print_ingredients(pipeline: ScanPipeline) -> None:
    print(f"Detected {len(pipeline.ingredients)} ingredient(s):")
    for ingredient in pipeline.ingredients:
        print(
            f"  - {ingredient.name} [{ingredient.category.value}] "
            f"{ingredient.estimated_quantity}".rstrip()
        )


def print_recipes(pipeline: ScanPipeline) -> None:
    for number, recipe in enumerate(pipeline.recipes, start=1):
        print(f"\n{number}. {recipe.title} ({recipe.cuisine_type}, {recipe.difficulty.value})")
        print(f"   {recipe.summary}")
        print(
            f"   Prep {recipe.prep_time_minutes} min, cook {recipe.cook_time_minutes} min, "
            f"total {recipe.total_time} min"
        )
        if recipe.nutrition_info:
            print(f"   {recipe.nutrition_info}")


async def run_scan(
    pipeline: ScanPipeline,
    store: SQLAlchemyScanStore,
    api_key: str,
    add_to_pantry: bool = False,
    save: bool = False,
) -> int:
    """Analyze, generate, optionally commit. Returns a process exit code."""
    state = await pipeline.start_analysis(api_key)
    if not isinstance(state, Analyzed):
        print(f"Error: {pipeline.error_message}")
        return 1
    print_ingredients(pipeline)

    # Read the pantry before committing so this scan's items are not listed twice
    pantry_items = store.list_pantry_item_names()
    if add_to_pantry:
        added = pipeline.commit_selected_to_pantry()
        print(f"Added {added} item(s) to pantry.")

    state = await pipeline.start_generation(
        preferences=store.get_preferences(),
        pantry_items=pantry_items,
        api_key=api_key,
    )
    if not isinstance(state, Generated):
        print(f"Error: {pipeline.error_message or 'No ingredients detected.'}")
        return 1
    print_recipes(pipeline)

    if save:
        for recipe in pipeline.recipes:
            pipeline.save_recipe(recipe)
        pipeline.save_scan_record()
        print(f"\nSaved {len(pipeline.recipes)} recipe(s) and scan history.")

    return 0


def scan(image_paths: list[str], api_key: str | None, add_to_pantry: bool, save: bool) -> None:
    """Scan photos and print recipe suggestions."""
    init_db()
    db: Session = SessionLocal()

    try:
        store = SQLAlchemyScanStore(db)
        pipeline = ScanPipeline(store=store)
        pipeline.capture_images(image_paths)
        code = asyncio.run(
            run_scan(
                pipeline,
                store,
                _resolve_api_key(store, api_key),
                add_to_pantry=add_to_pantry,
                save=save,
            )
        )
    finally:
        db.close()

    if code:
        sys.exit(code)


def check_key(api_key: str | None) -> None:
    """Check whether the configured API key is accepted."""
    init_db()
    db: Session = SessionLocal()

    try:
        key = _resolve_api_key(SQLAlchemyScanStore(db), api_key)
    finally:
        db.close()

    try:
        ok = asyncio.run(ModelClient().check_api_key(key))
    except NoAPIKeyError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    if not ok:
        print("API key was rejected or the API could not be reached.")
        sys.exit(1)
    print("API key OK.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="FridgeCheck CLI")
    parser.add_argument("--api-key", help="Anthropic API key (overrides settings)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # scan command
    scan_parser = subparsers.add_parser("scan", help="Suggest recipes from food photos")
    scan_parser.add_argument("images", nargs="+", help="Image files to analyze")
    scan_parser.add_argument(
        "--add-to-pantry", action="store_true", help="Add detected ingredients to the pantry"
    )
    scan_parser.add_argument(
        "--save", action="store_true", help="Save all suggested recipes and the scan"
    )

    # check-key command
    subparsers.add_parser("check-key", help="Verify the Anthropic API key")

    # init-db command
    subparsers.add_parser("init-db", help="Create database tables")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "scan":
        scan(args.images, args.api_key, args.add_to_pantry, args.save)
    elif args.command == "check-key":
        check_key(args.api_key)
    elif args.command == "init-db":
        init_db()
        print("Database tables created.")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
