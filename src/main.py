# main.py
#
# Description:
# Command-line entry point. Adds recipes from URLs through the configured
# LLM provider, lists, shows, converts and deletes saved recipes, renders
# the static site and runs an interactive cooking checklist.

import argparse
import logging
import math
import time
from typing import Callable, List, Optional

import config
from checklist import ChecklistState, toggle_step, toggle_step_ingredient, toggle_top_ingredient
from ingredients import get_flat_ingredients, get_ingredient_sections, resolve_step_ingredient
from llm_processor import LLMProcessor, OllamaProcessor
from llm_processor_gemini import GeminiProcessor
from llm_processor_lmstudio import LMStudioProcessor
from models import ExtractionErrorCode, ExtractionResult, Recipe
from page_fetcher import PageNotSupportedError, fetch_page
from recipe_store import RecipeNotFoundError, RecipeStore
from scaler import adjust_multiplier, baseline_label, format_ingredient_line, scale_multiplier, scaling_baseline
from site_generator import generate_index_page, generate_recipe_page
from utils import format_duration, setup_logging


def get_llm_processor() -> LLMProcessor:
    """
    Factory function to select and instantiate the correct LLM processor
    based on the configuration.
    """
    provider = config.LLM_PROVIDER
    if provider == "google":
        logging.info("Using Google Gemini as the LLM provider.")
        return GeminiProcessor()
    elif provider == "local":
        logging.info("Using local Ollama as the LLM provider.")
        return OllamaProcessor()
    elif provider == "lmstudio":
        logging.info("Using LM Studio as the LLM provider.")
        return LMStudioProcessor()
    else:
        raise ValueError(
            f"Invalid LLM_PROVIDER in config: '{provider}'. "
            "Choose 'local', 'google', or 'lmstudio'."
        )


def default_model() -> str:
    models = config.LLM_MODELS.get(config.LLM_PROVIDER, [])
    if not models:
        raise ValueError(f"No models defined for '{config.LLM_PROVIDER}' in config.py.")
    return models[0]


def extract_from_url(url: str, processor: LLMProcessor, language: str, target_system: str,
                     model_name: str) -> ExtractionResult:
    """Fetches the page at url and extracts a recipe from it."""
    start_time = time.time()
    try:
        page = fetch_page(url)
    except PageNotSupportedError as e:
        logging.error(f"Page not supported: {e}")
        return ExtractionResult.failure(ExtractionErrorCode.PAGE_NOT_SUPPORTED)

    result = processor.extract_recipe(page, language, target_system, model_name)
    if result.ok:
        result.processing_time = time.time() - start_time
    return result


# --- Rendering helpers ---

def format_recipe_lines(recipe: Recipe, count: float | None = None, show_original: bool = False) -> List[str]:
    """Renders a recipe as plain-text lines, scaled to count servings or batches."""
    count = count if count is not None else scaling_baseline(recipe)
    multiplier = scale_multiplier(recipe, count)
    use_original = show_original and bool(recipe.original_ingredients)

    lines = [recipe.title]
    if recipe.description:
        lines.append(recipe.description)
    meta = [f"{count:g} {baseline_label(recipe)}"]
    if recipe.time:
        meta.append(format_duration(recipe.time))
    meta.append("Original" if use_original else recipe.measure_system)
    lines.append(" | ".join(meta))

    lines.append("")
    lines.append("Ingredients:")
    sections = recipe.original_ingredients if use_original else recipe.ingredients
    for section in get_ingredient_sections(sections):
        if section.title:
            lines.append(f"  {section.title}")
        for ingredient in section.ingredients:
            lines.append(f"  - {format_ingredient_line(ingredient, multiplier, scale=not use_original)}")

    top_ingredients = get_flat_ingredients(recipe)
    lines.append("")
    lines.append("Instructions:")
    for number, step in enumerate(recipe.instructions, 1):
        lines.append(f"  {number}. {step.text}")
        for ingredient in step.ingredients:
            lines.append(f"     * {format_ingredient_line(resolve_step_ingredient(ingredient, top_ingredients), multiplier)}")
    return lines


def format_checklist_lines(recipe: Recipe, state: ChecklistState, count: float, show_original: bool) -> List[str]:
    multiplier = scale_multiplier(recipe, count)
    top_ingredients = get_flat_ingredients(recipe)
    use_original = show_original and bool(recipe.original_ingredients)

    # original ingredients are listed unscaled, checked by position
    shown = get_flat_ingredients(recipe.original_ingredients) if use_original else top_ingredients

    lines = [f"{recipe.title} ({count:g} {baseline_label(recipe)}{', original' if use_original else ''})", "Ingredients:"]
    for index, ingredient in enumerate(shown, 1):
        mark = "x" if state.is_top_checked(index - 1) else " "
        lines.append(f"  [{mark}] i{index} {format_ingredient_line(ingredient, multiplier, scale=not use_original)}")

    originals = recipe.original_instructions or []
    lines.append("Steps:")
    for step_index, step in enumerate(recipe.instructions):
        mark = "x" if state.is_step_completed(step_index) else " "
        text = step.text
        if use_original and step_index < len(originals) and originals[step_index].text:
            text = originals[step_index].text
        lines.append(f"  [{mark}] s{step_index + 1} {text}")
        for sub_index, ingredient in enumerate(step.ingredients):
            sub_mark = "x" if state.is_step_ingredient_checked(step_index, sub_index) else " "
            line = format_ingredient_line(resolve_step_ingredient(ingredient, top_ingredients), multiplier)
            lines.append(f"      [{sub_mark}] s{step_index + 1}.{sub_index + 1} {line}")
    return lines


COOK_HELP = "Commands: i N | s N | s N.M | + | - | o | q"


def run_cook_session(recipe: Recipe, input_func: Optional[Callable[[str], str]] = None,
                     print_func: Optional[Callable[[str], None]] = None) -> ChecklistState:
    """
    Interactive checklist for one recipe. State lives only for this session.

    Indexes typed by the user are 1-based.
    """
    input_func = input_func or input
    print_func = print_func or print
    top_ingredients = get_flat_ingredients(recipe)
    instructions = recipe.instructions
    state = ChecklistState()
    count: float = scaling_baseline(recipe)
    show_original = False

    print_func("\n".join(format_checklist_lines(recipe, state, count, show_original)))
    print_func(COOK_HELP)
    while True:
        try:
            command = input_func("> ").strip().lower()
        except EOFError:
            break
        if command == "q":
            break

        parts = command.split()
        try:
            if command == "+":
                count = adjust_multiplier(count, 1)
            elif command == "-":
                count = adjust_multiplier(count, -1)
            elif command == "o":
                show_original = not show_original
            elif len(parts) == 2 and parts[0] == "i":
                state = toggle_top_ingredient(state, int(parts[1]) - 1, top_ingredients, instructions)
            elif len(parts) == 2 and parts[0] == "s" and "." in parts[1]:
                step_number, sub_number = parts[1].split(".", 1)
                state = toggle_step_ingredient(state, int(step_number) - 1, int(sub_number) - 1,
                                               top_ingredients, instructions)
            elif len(parts) == 2 and parts[0] == "s":
                state = toggle_step(state, int(parts[1]) - 1, top_ingredients, instructions)
            else:
                print_func(COOK_HELP)
                continue
        except ValueError:
            print_func(COOK_HELP)
            continue
        print_func("\n".join(format_checklist_lines(recipe, state, count, show_original)))
    return state


# --- Commands ---

def cmd_add(args, store: RecipeStore) -> int:
    try:
        processor = get_llm_processor()
        model_name = args.model or default_model()
    except ValueError as e:
        logging.error(e)
        return 1

    language = args.language or store.language
    system = args.system or store.measure_system
    result = extract_from_url(args.url, processor, language, system, model_name)
    if not result.ok:
        print(f"Could not add recipe: {result.error_code.value}")
        return 1

    store.add(result.recipe)
    print(f"{result.recipe.id}  {result.recipe.title}")
    return 0


def cmd_list(args, store: RecipeStore) -> int:
    recipes = store.recipes()
    if not recipes:
        print("No recipes saved yet.")
    for recipe in recipes:
        duration = format_duration(recipe.time)
        print(f"{recipe.id}  {recipe.title}" + (f"  ({duration})" if duration else ""))
    return 0


def cmd_show(args, store: RecipeStore) -> int:
    recipe = store.get(args.id)
    print("\n".join(format_recipe_lines(recipe, args.servings, args.original)))
    return 0


def cmd_delete(args, store: RecipeStore) -> int:
    if not store.delete(args.id):
        raise RecipeNotFoundError(args.id)
    print(f"Deleted {args.id}")
    return 0


def cmd_settings(args, store: RecipeStore) -> int:
    if args.language or args.system:
        store.save_preferences(args.language, args.system)
    print(f"language: {store.language}")
    print(f"measure system: {store.measure_system}")
    print(f"configured: {'yes' if store.preferences_configured else 'no'}")
    return 0


def cmd_convert(args, store: RecipeStore) -> int:
    recipe = store.get(args.id)
    if recipe.measure_system == args.system:
        print(f"'{recipe.title}' is already {args.system}.")
        return 0
    try:
        processor = get_llm_processor()
        model_name = args.model or default_model()
    except ValueError as e:
        logging.error(e)
        return 1

    converted = processor.convert_recipe_units(recipe, args.system, model_name)
    if converted is None:
        print(f"Could not convert '{recipe.title}' to {args.system}.")
        return 1
    store.replace(converted)
    print(f"Converted '{converted.title}' to {args.system}.")
    return 0


def cmd_explain(args, store: RecipeStore) -> int:
    try:
        processor = get_llm_processor()
        model_name = args.model or default_model()
    except ValueError as e:
        logging.error(e)
        return 1

    explanation = processor.explain_ingredient(args.ingredient, args.language or store.language, model_name)
    if explanation is None:
        print(f"Could not explain '{args.ingredient}'.")
        return 1
    print(explanation.description)
    if explanation.substitutes:
        print("Substitutes: " + ", ".join(explanation.substitutes))
    return 0


def cmd_site(args, store: RecipeStore) -> int:
    output_dir = args.output or config.DOCS_DIR
    recipes = store.recipes()
    for recipe in recipes:
        generate_recipe_page(recipe, output_dir)
    index_path = generate_index_page(recipes, output_dir)
    print(index_path)
    return 0


def cmd_cook(args, store: RecipeStore) -> int:
    run_cook_session(store.get(args.id))
    return 0


def positive_count(value: str) -> float:
    """argparse type for serving and batch counts."""
    try:
        count = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: '{value}'")
    if not math.isfinite(count) or count <= 0:
        raise argparse.ArgumentTypeError(f"count must be a positive number, got '{value}'")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aptit", description="Save, scale and cook recipes from the web.")
    parser.add_argument("--store", help="Path of the recipe store JSON file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Extract a recipe from a URL and save it.")
    add.add_argument("url")
    add.add_argument("--language", choices=["en", "sv"])
    add.add_argument("--system", choices=["metric", "imperial"])
    add.add_argument("--model")
    add.set_defaults(handler=cmd_add)

    subparsers.add_parser("list", help="List saved recipes, newest first.").set_defaults(handler=cmd_list)

    show = subparsers.add_parser("show", help="Print a recipe.")
    show.add_argument("id")
    show.add_argument("--servings", type=positive_count, help="Serving (or batch) count to scale to.")
    show.add_argument("--original", action="store_true", help="Show the original, unconverted ingredients.")
    show.set_defaults(handler=cmd_show)

    delete = subparsers.add_parser("delete", help="Delete a recipe.")
    delete.add_argument("id")
    delete.set_defaults(handler=cmd_delete)

    settings = subparsers.add_parser("settings", help="Show or change preferences.")
    settings.add_argument("--language", choices=["en", "sv"])
    settings.add_argument("--system", choices=["metric", "imperial"])
    settings.set_defaults(handler=cmd_settings)

    convert = subparsers.add_parser("convert", help="Convert a recipe to another measure system.")
    convert.add_argument("id")
    convert.add_argument("--system", choices=["metric", "imperial"], required=True)
    convert.add_argument("--model")
    convert.set_defaults(handler=cmd_convert)

    explain = subparsers.add_parser("explain", help="Describe an ingredient and suggest substitutes.")
    explain.add_argument("ingredient")
    explain.add_argument("--language", choices=["en", "sv"])
    explain.add_argument("--model")
    explain.set_defaults(handler=cmd_explain)

    site = subparsers.add_parser("site", help="Render the static recipe site.")
    site.add_argument("--output")
    site.set_defaults(handler=cmd_site)

    cook = subparsers.add_parser("cook", help="Interactive cooking checklist.")
    cook.add_argument("id")
    cook.set_defaults(handler=cmd_cook)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    store = RecipeStore(args.store or config.STORE_JSON_PATH)
    try:
        return args.handler(args, store)
    except RecipeNotFoundError as e:
        print(f"No recipe with id {e.args[0]}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
