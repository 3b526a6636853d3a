# site_generator.py
#
# Description:
# This module handles the creation of static HTML pages for the saved
# recipes. It generates one page per recipe, with ingredient amounts scaled
# to a chosen serving or batch count, and an index page listing all recipes.

import html
import json
import logging
import os
import re
from datetime import datetime
from typing import List

from ingredients import get_flat_ingredients, resolve_step_ingredient
from models import Ingredient, IngredientSection, Instruction, Recipe
from scaler import baseline_label, format_ingredient_line, scale_multiplier, scaling_baseline
from utils import format_duration

_PAGE_STYLE = """
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 960px; margin: 0 auto; padding: 20px; background: #f4f7f6; color: #2c3e50; }
        h1 { font-size: 2.4em; margin-bottom: 0.2em; } h2 { color: #34495e; }
        .recipe-meta { display: flex; flex-wrap: wrap; gap: 15px; color: #7f8c8d; margin-bottom: 20px; }
        .badge { background: #e8f4fd; padding: 4px 10px; border-radius: 15px; font-size: 0.85em; }
        .recipe-thumbnail img { max-width: 100%; border-radius: 12px; }
        .ingredient-group h3 { margin-bottom: 5px; }
        .step { background: white; border-radius: 10px; padding: 15px; margin-bottom: 12px; box-shadow: 0 2px 8px rgba(0,0,0,0.07); }
        .step-ingredients { color: #16a085; font-size: 0.9em; margin-top: 8px; }
        .original-step { color: #95a5a6; font-style: italic; margin-top: 6px; }
"""


def sanitize_title(title: str) -> str:
    """Sanitizes the recipe title for safe filename usage."""
    replacements = {
        'å': 'a', 'ä': 'a', 'ö': 'o', 'Å': 'A', 'Ä': 'A', 'Ö': 'O',
        'ü': 'u', 'Ü': 'U', 'ß': 'ss',
        'é': 'e', 'è': 'e', 'ê': 'e', 'à': 'a', 'â': 'a', 'ç': 'c',
        'î': 'i', 'ô': 'o', 'û': 'u', 'ñ': 'n', 'ø': 'o', 'æ': 'ae'
    }

    for letter, replacement in replacements.items():
        title = title.replace(letter, replacement)
    title = re.sub(r'[^\w\s-]', '', title, flags=re.ASCII).strip()
    title = re.sub(r'[-\s]+', '-', title).strip('-').lower()
    return title


def get_stable_filename_base(recipe: Recipe) -> str:
    """Creates a filename base from the title and id that stays stable across re-renders."""
    recipe_id = re.sub(r'[^a-zA-Z0-9_-]', '', recipe.id)[:8]
    slug = sanitize_title(recipe.title)[:60].strip('-')
    return f"{slug}-{recipe_id}" if slug else f"recipe-{recipe_id}"


def create_json_ld(recipe: Recipe) -> dict:
    """Create schema.org compliant JSON-LD structured data for a recipe."""
    json_ld = {"@context": "https://schema.org/", "@type": "Recipe", "name": recipe.title}
    if recipe.description: json_ld["description"] = recipe.description
    if recipe.servings: json_ld["recipeYield"] = recipe.servings
    if recipe.prep_time: json_ld["prepTime"] = recipe.prep_time
    if recipe.cook_time: json_ld["cookTime"] = recipe.cook_time
    if recipe.time: json_ld["totalTime"] = recipe.time
    flat = get_flat_ingredients(recipe)
    if flat:
        json_ld["recipeIngredient"] = [format_ingredient_line(ingredient) for ingredient in flat]
    if recipe.instructions:
        json_ld["recipeInstructions"] = [{"@type": "HowToStep", "text": step.text} for step in recipe.instructions]
    if recipe.image_url and recipe.image_url.startswith('http'):
        json_ld["image"] = [recipe.image_url]
    if recipe.source_url: json_ld["url"] = recipe.source_url
    return json_ld


def _ingredient_sections_html(sections: List[IngredientSection], multiplier: float, scale: bool) -> str:
    groups = []
    for section in sections:
        title_html = f'<h3>{html.escape(section.title)}</h3>' if section.title else ''
        items = ''.join(
            f'<li>{html.escape(format_ingredient_line(ingredient, multiplier, scale=scale))}</li>'
            for ingredient in section.ingredients
        )
        groups.append(f'<div class="ingredient-group">{title_html}<ul>{items}</ul></div>')
    return ''.join(groups)


def _step_ingredients_html(step: Instruction, top_ingredients: List[Ingredient], multiplier: float) -> str:
    if not step.ingredients:
        return ''
    lines = [
        format_ingredient_line(resolve_step_ingredient(ingredient, top_ingredients), multiplier)
        for ingredient in step.ingredients
    ]
    return f'<div class="step-ingredients">{html.escape(", ".join(line for line in lines if line))}</div>'


def _steps_html(recipe: Recipe, multiplier: float, show_original: bool) -> str:
    top_ingredients = get_flat_ingredients(recipe)
    originals = recipe.original_instructions or []
    steps = []
    for number, step in enumerate(recipe.instructions, 1):
        original_html = ''
        # original steps are paired with converted ones by position only
        if show_original and number <= len(originals) and originals[number - 1].text:
            original_html = f'<div class="original-step">{html.escape(originals[number - 1].text)}</div>'
        steps.append(
            f'<li class="step"><div>{html.escape(step.text)}</div>'
            f'{_step_ingredients_html(step, top_ingredients, multiplier)}{original_html}</li>'
        )
    return f'<ol class="steps">{"".join(steps)}</ol>'


def generate_recipe_page(recipe: Recipe, output_dir: str, servings: float | None = None,
                         show_original: bool = False) -> str:
    """
    Generate an individual HTML page for a recipe.

    Args:
        recipe: The recipe to render.
        output_dir: Directory to save the HTML file.
        servings: The serving (or batch) count to scale to; defaults to the recipe's baseline.
        show_original: List the original, unconverted ingredients unscaled and show each
            original step under its converted counterpart.

    Returns:
        The path of the written file.
    """
    os.makedirs(output_dir, exist_ok=True)

    count = servings if servings is not None else scaling_baseline(recipe)
    multiplier = scale_multiplier(recipe, count)

    use_original = show_original and bool(recipe.original_ingredients)
    if use_original:
        ingredients_html = _ingredient_sections_html(recipe.original_ingredients, 1, scale=False)
        system_badge = "Original"
    else:
        ingredients_html = _ingredient_sections_html(recipe.ingredients, multiplier, scale=True)
        system_badge = recipe.measure_system.capitalize()

    meta = [
        f'<span class="badge">{html.escape(system_badge)}</span>',
        f'<span>🍽️ {count:g} {baseline_label(recipe)}</span>',
    ]
    if recipe.servings: meta.append(f'<span>({html.escape(recipe.servings)})</span>')
    if recipe.time: meta.append(f'<span>⏱️ {html.escape(format_duration(recipe.time))}</span>')
    if recipe.prep_time: meta.append(f'<span>Prep {html.escape(format_duration(recipe.prep_time))}</span>')
    if recipe.cook_time: meta.append(f'<span>🔥 {html.escape(format_duration(recipe.cook_time))}</span>')

    thumbnail_html = ''
    if recipe.image_url and recipe.image_url.startswith('http'):
        thumbnail_html = (f'<div class="recipe-thumbnail"><img src="{html.escape(recipe.image_url)}" '
                          f'alt="{html.escape(recipe.title)}" loading="lazy"></div>')
    source_html = ''
    if recipe.source_url:
        source_html = f'<p><a href="{html.escape(recipe.source_url)}">Source</a></p>'

    json_ld = json.dumps(create_json_ld(recipe), ensure_ascii=False).replace("<", "\\u003c")
    html_content = f"""<!DOCTYPE html>
<html lang="{recipe.language}">
<head>
    <meta charset="UTF-8"><meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(recipe.title)}</title>
    <script type="application/ld+json">{json_ld}</script>
    <style>{_PAGE_STYLE}</style>
</head>
<body>
    <p><a href="index.html">&larr; All recipes</a></p>
    <div class="recipe-header">
        <h1>{html.escape(recipe.title)}</h1>
        <p>{html.escape(recipe.description)}</p>
        <div class="recipe-meta">{''.join(meta)}</div>
    </div>
    {thumbnail_html}
    <div class="ingredients-section"><h2>Ingredients</h2>{ingredients_html}</div>
    <div class="instructions-section"><h2>Instructions</h2>{_steps_html(recipe, multiplier, show_original)}</div>
    {source_html}
</body>
</html>"""

    filepath = os.path.join(output_dir, f"{get_stable_filename_base(recipe)}.html")
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(html_content)
    logging.info(f"Generated recipe page: {filepath}")
    return filepath


def generate_index_page(recipes: List[Recipe], output_dir: str) -> str:
    """Generate an index page listing all recipes, in the order given (newest first)."""
    os.makedirs(output_dir, exist_ok=True)

    recipe_cards_html = []
    for recipe in recipes:
        filename = get_stable_filename_base(recipe) + ".html"
        meta = [f'<span class="badge">{scaling_baseline(recipe)} {baseline_label(recipe)}</span>']
        if recipe.time:
            meta.append(f'<span class="badge">⏱️ {html.escape(format_duration(recipe.time))}</span>')
        card = f"""<a href="{html.escape(filename)}" class="recipe-card" data-title="{html.escape(recipe.title.lower())}">
            <div class="card-content">
                <div class="recipe-title">{html.escape(recipe.title)}</div>
                <p>{html.escape(recipe.description)}</p>
                <div class="recipe-meta">{''.join(meta)}</div>
            </div>
        </a>"""
        recipe_cards_html.append(card)

    html_content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8"><meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Recipes</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 1200px; margin: 0 auto; padding: 20px; background: #f4f7f6; }}
        .header {{ text-align: center; margin-bottom: 40px; }}
        h1 {{ font-size: 3em; color: #2c3e50; }}
        .recipe-grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(280px, 1fr)); gap: 25px; }}
        .recipe-card {{ background: white; border-radius: 12px; box-shadow: 0 4px 15px rgba(0,0,0,0.08); transition: all 0.2s; text-decoration: none; color: inherit; }}
        .recipe-card:hover {{ transform: translateY(-5px); box-shadow: 0 8px 25px rgba(0,0,0,0.12); }}
        .card-content {{ padding: 20px; }}
        .recipe-title {{ font-size: 1.2em; font-weight: bold; margin-bottom: 10px; color: #2c3e50; }}
        .recipe-meta {{ display: flex; flex-wrap: wrap; gap: 5px; }}
        .badge {{ background: #e8f4fd; color: #2c3e50; padding: 4px 10px; border-radius: 15px; font-size: 0.8em; }}
        #searchInput {{ padding: 12px 20px; font-size: 16px; border: 2px solid #ddd; border-radius: 25px; width: 100%; max-width: 400px; display: block; margin: 40px auto; box-sizing: border-box; }}
    </style>
</head>
<body>
    <div class="header"><h1>🍽️ My Recipes</h1><p>{len(recipe_cards_html)} recipes • Updated: {datetime.now().strftime("%Y-%m-%d")}</p></div>
    <input type="text" id="searchInput" placeholder="Search recipes..." onkeyup="filterRecipes()">
    <div class="recipe-grid" id="recipeGrid">{''.join(recipe_cards_html)}</div>
    <script>
        function filterRecipes() {{
            const filter = document.getElementById('searchInput').value.toLowerCase();
            document.querySelectorAll('.recipe-card').forEach(card => {{
                card.style.display = card.getAttribute('data-title').includes(filter) ? '' : 'none';
            }});
        }}
    </script>
</body>
</html>"""
    filepath = os.path.join(output_dir, "index.html")
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(html_content)
    logging.info(f"Generated index page: {filepath}")
    return filepath
