# llm_processor.py
#
# Description:
# This module defines the common interface for all LLM processors and the
# recipe operations built on top of it: extraction from a fetched page,
# measure-system conversion and ingredient explanations. It also contains
# the implementation for the local Ollama processor.

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict

import ollama
from pydantic import ValidationError

import config
from ingredients import get_flat_ingredients, get_ingredient_sections
from migrations import normalize_instructions, recipe_from_payload
from models import ExtractionErrorCode, ExtractionResult, IngredientExplanation, Recipe


def parse_json_response(text: str | None) -> Dict[str, Any] | None:
    """
    Pulls the JSON object out of a model response.

    Markdown code fences are removed and only the text between the first
    '{' and the last '}' is decoded, so chatter around the object is ignored.
    Returns None when no object can be decoded.
    """
    if not text:
        return None
    cleaned = text.replace("```json", "").replace("```", "").strip()
    first_brace = cleaned.find("{")
    last_brace = cleaned.rfind("}")
    if first_brace == -1 or last_brace == -1 or first_brace >= last_brace:
        logging.error("No JSON object found in model response.")
        logging.debug(f"Unparseable response: {text[:500]}")
        return None
    try:
        data = json.loads(cleaned[first_brace:last_brace + 1])
    except json.JSONDecodeError as e:
        logging.error(f"Model response is not valid JSON: {e}")
        logging.debug(f"Unparseable response: {text[:500]}")
        return None
    return data if isinstance(data, dict) else None


def _system_details(target_system: str, language: str) -> Dict[str, str]:
    return {
        "system_upper": target_system.upper(),
        "system_instructions": (
            config.METRIC_INSTRUCTIONS if target_system == "metric" else config.IMPERIAL_INSTRUCTIONS
        ),
        "language_name": config.LANGUAGE_NAMES.get(language, "English"),
    }


class LLMProcessor(ABC):
    """
    Abstract base class for all LLM processors.

    Providers only implement generate_json; the recipe operations are shared.
    """

    @abstractmethod
    def generate_json(self, system_prompt: str, user_prompt: str, model_name: str) -> str | None:
        """
        Sends one prompt to the model and asks for a JSON answer.

        Returns:
            The raw response text, or None if the provider call failed.
        """
        pass

    def extract_recipe(self, page, language: str, target_system: str, model_name: str) -> ExtractionResult:
        """
        Extracts a recipe from a fetched page.

        Args:
            page: A FetchedPage with the page text and source URL.
            language: The language the recipe should be written in.
            target_system: "metric" or "imperial".
            model_name: The specific model name to use for processing.
        """
        start_time = time.time()
        system_prompt = config.EXTRACTION_SYSTEM_PROMPT.format(**_system_details(target_system, language))
        user_prompt = (
            f"Extract the full recipe from this page ({page.url}). "
            f"Ensure all units are accurately converted to {target_system}.\n"
            f"--- PAGE TEXT ---\n{page.text}\n--- END PAGE TEXT ---"
        )

        payload = parse_json_response(self.generate_json(system_prompt, user_prompt, model_name))
        if payload is None:
            logging.error(f"Extraction with {model_name} returned no usable JSON for {page.url}")
            return ExtractionResult.failure(ExtractionErrorCode.EXTRACTION_FAILED)

        if not payload.get("imageUrl") and page.image_url:
            payload["imageUrl"] = page.image_url

        try:
            recipe = recipe_from_payload(payload, page.url, language, target_system)
        except ValidationError as e:
            logging.error(f"Extracted recipe for {page.url} failed validation: {e}")
            return ExtractionResult.failure(ExtractionErrorCode.EXTRACTION_FAILED)

        processing_time = time.time() - start_time
        logging.info(f"Extracted '{recipe.title}' with {model_name} in {processing_time:.2f}s")
        return ExtractionResult(recipe=recipe, processing_time=processing_time)

    def convert_recipe_units(self, recipe: Recipe, target_system: str, model_name: str) -> Recipe | None:
        """
        Asks the model to re-express a recipe in another measure system.

        Returns a new Recipe with converted ingredients and instructions, or
        None on failure. The original ingredients and instructions are kept.
        """
        system_prompt = config.CONVERSION_SYSTEM_PROMPT.format(**_system_details(target_system, recipe.language))
        body = {
            "title": recipe.title,
            "ingredients": [section.to_json_dict() for section in recipe.ingredients],
            "instructions": [step.to_json_dict() for step in recipe.instructions],
        }
        user_prompt = f"Convert the following recipe to {target_system} units: {json.dumps(body, ensure_ascii=False)}"

        payload = parse_json_response(self.generate_json(system_prompt, user_prompt, model_name))
        if payload is None:
            logging.error(f"Unit conversion of '{recipe.title}' with {model_name} failed.")
            return None

        sections = get_ingredient_sections(payload.get("ingredients") or [])
        if not sections:
            logging.error(f"Unit conversion of '{recipe.title}' returned no ingredients.")
            return None
        instructions = normalize_instructions(payload.get("instructions"), get_flat_ingredients(sections))

        converted = recipe.model_copy(update={
            "ingredients": sections,
            "instructions": instructions or recipe.instructions,
            "measure_system": target_system,
        })
        logging.info(f"Converted '{recipe.title}' to {target_system}.")
        return converted

    def explain_ingredient(self, name: str, language: str, model_name: str) -> IngredientExplanation | None:
        system_prompt = config.EXPLANATION_SYSTEM_PROMPT.format(**_system_details("metric", language))
        user_prompt = f'Explain what "{name}" is and list 2-3 common substitutes.'

        payload = parse_json_response(self.generate_json(system_prompt, user_prompt, model_name))
        if payload is None:
            return None
        try:
            return IngredientExplanation.model_validate(payload)
        except ValidationError as e:
            logging.error(f"Ingredient explanation for '{name}' failed validation: {e}")
            return None


class OllamaProcessor(LLMProcessor):
    """
    LLM processor for local models served via the Ollama API.
    """

    def generate_json(self, system_prompt: str, user_prompt: str, model_name: str) -> str | None:
        try:
            logging.debug(f"Sending prompt to Ollama ({model_name})...")
            response = ollama.chat(
                model=model_name,
                messages=[
                    {
                        'role': 'system',
                        'content': system_prompt,
                    },
                    {
                        'role': 'user',
                        'content': user_prompt,
                    }
                ],
                options={
                    "temperature": 0.0
                },
                format='json'
            )
            return response['message']['content']
        except (ollama.ResponseError, ConnectionError) as e:
            logging.error(f"Ollama call with model {model_name} failed: {e}")
            return None
