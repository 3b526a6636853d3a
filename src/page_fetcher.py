# page_fetcher.py
#
# Description:
# Fetches a recipe page and reduces it to plain text for the LLM. Pages
# that embed a schema.org Recipe as JSON-LD are summarized from that block;
# everything else falls back to the visible page text.

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

import config

logger = logging.getLogger(__name__)

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml")
_STRIPPED_TAGS = ["script", "style", "nav", "header", "footer", "aside", "iframe", "noscript", "svg"]


class PageNotSupportedError(Exception):
    """Raised when a URL cannot be fetched or does not hold a readable page."""


@dataclass(frozen=True)
class FetchedPage:
    url: str
    text: str
    image_url: Optional[str] = None
    has_json_ld: bool = False


def is_valid_url(url: str) -> bool:
    parsed = urlparse((url or "").strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_recipe(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    item_type = item.get('@type')
    if isinstance(item_type, str):
        return item_type == 'Recipe'
    if isinstance(item_type, list):
        return 'Recipe' in item_type
    return False


def find_json_ld_recipe(soup: BeautifulSoup) -> Optional[dict]:
    """Returns the first schema.org Recipe object embedded as JSON-LD, if any."""
    for index, script in enumerate(soup.find_all('script', type='application/ld+json')):
        if not script.string:
            continue
        try:
            parsed = json.loads(script.string)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping unparseable JSON-LD block {index}: {e}")
            continue

        if isinstance(parsed, list):
            candidates = parsed
        elif isinstance(parsed, dict) and isinstance(parsed.get('@graph'), list):
            candidates = parsed['@graph']
        else:
            candidates = [parsed]

        recipe = next((item for item in candidates if _is_recipe(item)), None)
        if recipe is not None:
            return recipe
    return None


def _image_from_json_ld(image: Any) -> Optional[str]:
    if isinstance(image, str):
        return image or None
    if isinstance(image, list) and image:
        return _image_from_json_ld(image[0])
    if isinstance(image, dict):
        return _image_from_json_ld(image.get('url'))
    return None


def _instruction_lines(instructions: Any) -> list[str]:
    """Flattens recipeInstructions (strings, HowToStep or HowToSection) to lines."""
    if isinstance(instructions, str):
        return [instructions.strip()] if instructions.strip() else []
    if isinstance(instructions, dict):
        if 'itemListElement' in instructions:
            return _instruction_lines(instructions['itemListElement'])
        text = instructions.get('text') or instructions.get('name') or ""
        return [text.strip()] if isinstance(text, str) and text.strip() else []
    if isinstance(instructions, list):
        return [line for item in instructions for line in _instruction_lines(item)]
    return []


def json_ld_to_text(recipe: dict) -> str:
    parts = []
    if recipe.get('name'):
        parts.append(f"Recipe: {recipe['name']}")
    if recipe.get('description'):
        parts.append(f"Description: {recipe['description']}")

    recipe_yield = recipe.get('recipeYield')
    if isinstance(recipe_yield, list):
        recipe_yield = recipe_yield[0] if recipe_yield else None
    if recipe_yield:
        parts.append(f"Servings: {recipe_yield}")

    for key, label in (('prepTime', 'Prep time'), ('cookTime', 'Cook time'), ('totalTime', 'Total time')):
        if recipe.get(key):
            parts.append(f"{label}: {recipe[key]}")

    ingredients = recipe.get('recipeIngredient') or []
    if ingredients:
        parts.append("\nIngredients:")
        parts.extend(f"- {ingredient}" for ingredient in ingredients if isinstance(ingredient, str))

    steps = _instruction_lines(recipe.get('recipeInstructions'))
    if steps:
        parts.append("\nInstructions:")
        parts.extend(f"{number}. {step}" for number, step in enumerate(steps, 1))

    return '\n'.join(parts)


def visible_text(soup: BeautifulSoup) -> str:
    for element in soup(_STRIPPED_TAGS):
        element.extract()
    text = soup.get_text(separator='\n')
    lines = (line.strip() for line in text.splitlines())
    chunks = (phrase.strip() for line in lines for phrase in line.split("  "))
    return '\n'.join(chunk for chunk in chunks if chunk)


def fetch_page(url: str) -> FetchedPage:
    """
    Downloads a page and returns its recipe text.

    Raises:
        PageNotSupportedError: For an invalid URL, a network or HTTP error,
            a non-HTML response, or a page with too little text.
    """
    if not is_valid_url(url):
        raise PageNotSupportedError(f"Not a valid http(s) URL: {url!r}")
    url = url.strip()

    logger.info(f"Fetching recipe page {url}")
    try:
        response = requests.get(
            url,
            headers={"User-Agent": config.USER_AGENT},
            timeout=config.REQUEST_TIMEOUT,
            allow_redirects=True,
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise PageNotSupportedError(f"Failed to fetch {url}: {e}") from e

    content_type = response.headers.get('content-type', '').lower()
    if not any(kind in content_type for kind in _HTML_CONTENT_TYPES):
        raise PageNotSupportedError(f"Unsupported content type for {url}: {content_type or 'unknown'}")

    soup = BeautifulSoup(response.text, features="html.parser")

    og_image = soup.find('meta', property='og:image')
    image_url = og_image.get('content') if og_image else None

    recipe = find_json_ld_recipe(soup)
    if recipe is not None:
        text = json_ld_to_text(recipe)
        image_url = _image_from_json_ld(recipe.get('image')) or image_url
    else:
        text = visible_text(soup)

    if len(text) < config.MIN_PAGE_TEXT_LENGTH:
        raise PageNotSupportedError(f"Page at {url} has too little text ({len(text)} characters).")

    if len(text) > config.MAX_PAGE_TEXT_LENGTH:
        logger.debug(f"Truncating page text from {len(text)} to {config.MAX_PAGE_TEXT_LENGTH} characters.")
        text = text[:config.MAX_PAGE_TEXT_LENGTH]

    logger.debug(f"Extracted {len(text)} characters from {url} (JSON-LD: {recipe is not None}).")
    return FetchedPage(url=url, text=text, image_url=image_url, has_json_ld=recipe is not None)
