import json
import sys
import unittest
from pathlib import Path
from unittest import mock

import ollama

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from llm_processor import LLMProcessor, OllamaProcessor, parse_json_response
from llm_processor_gemini import GeminiProcessor
from llm_processor_lmstudio import LMStudioProcessor
from models import ExtractionErrorCode, Ingredient, IngredientSection, Instruction, Recipe
from page_fetcher import FetchedPage

PAGE = FetchedPage(url="https://example.com/pancakes", text="Pancakes: 3 dl flour, 6 dl milk, 3 eggs.",
                   image_url="https://example.com/og.jpg")

EXTRACTED = {
    "title": "Pancakes",
    "description": "Thin Swedish pancakes.",
    "ingredients": [{"title": "", "ingredients": [
        {"name": "flour", "amount": "3", "unit": "dl"},
        {"name": "milk", "amount": "6", "unit": "dl"},
        {"name": "eggs", "amount": "3", "unit": ""},
    ]}],
    "originalIngredients": ["3 dl flour", "6 dl milk", "3 eggs"],
    "instructions": [{"text": "Whisk flour and milk.", "ingredients": ["flour", {"name": "milk"}]}],
    "baseServingsCount": 4,
    "time": "PT30M",
}


class FakeProcessor(LLMProcessor):
    def __init__(self, response):
        self.response = response
        self.calls = []

    def generate_json(self, system_prompt, user_prompt, model_name):
        self.calls.append((system_prompt, user_prompt, model_name))
        return self.response


class ParseJsonResponseTests(unittest.TestCase):
    def test_plain_object(self) -> None:
        self.assertEqual(parse_json_response('{"a": 1}'), {"a": 1})

    def test_fenced_and_chatty_response(self) -> None:
        text = 'Sure! Here it is:\n```json\n{"a": {"b": [1, 2]}}\n```\nEnjoy.'
        self.assertEqual(parse_json_response(text), {"a": {"b": [1, 2]}})

    def test_unusable_responses(self) -> None:
        for text in (None, "", "no json here", "} backwards {", '{"a": }', "[1, 2]"):
            self.assertIsNone(parse_json_response(text), msg=repr(text))


class ExtractRecipeTests(unittest.TestCase):
    def test_successful_extraction(self) -> None:
        processor = FakeProcessor(json.dumps(EXTRACTED))
        result = processor.extract_recipe(PAGE, "sv", "imperial", "test-model")

        self.assertTrue(result.ok)
        self.assertIsNone(result.error_code)
        self.assertIsNotNone(result.processing_time)
        recipe = result.recipe
        self.assertEqual(recipe.title, "Pancakes")
        self.assertEqual(recipe.source_url, PAGE.url)
        self.assertEqual((recipe.language, recipe.measure_system), ("sv", "imperial"))
        self.assertEqual(recipe.image_url, PAGE.image_url)
        self.assertEqual(recipe.base_servings_count, 4)
        self.assertEqual(recipe.original_ingredients[0].ingredients[0], Ingredient(name="flour", amount="3 dl"))
        self.assertEqual(
            recipe.instructions[0].ingredients,
            [Ingredient(name="flour", amount="3", unit="dl"), Ingredient(name="milk", amount="6", unit="dl")],
        )

        system_prompt, user_prompt, model_name = processor.calls[0]
        self.assertIn("IMPERIAL", system_prompt)
        self.assertIn("Swedish", system_prompt)
        self.assertIn(PAGE.text, user_prompt)
        self.assertEqual(model_name, "test-model")

    def test_provider_failure(self) -> None:
        result = FakeProcessor(None).extract_recipe(PAGE, "en", "metric", "m")
        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, ExtractionErrorCode.EXTRACTION_FAILED)

    def test_payload_failing_validation(self) -> None:
        result = FakeProcessor(json.dumps(EXTRACTED)).extract_recipe(PAGE, "en", "cups", "m")
        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, ExtractionErrorCode.EXTRACTION_FAILED)

    def test_infinite_serving_count_is_clamped(self) -> None:
        response = json.dumps(EXTRACTED).replace('"baseServingsCount": 4', '"baseServingsCount": Infinity')
        result = FakeProcessor(response).extract_recipe(PAGE, "en", "metric", "m")
        self.assertTrue(result.ok)
        self.assertEqual(result.recipe.base_servings_count, 1)


class ConvertRecipeUnitsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.recipe = Recipe(
            id="r1",
            title="Pancakes",
            ingredients=[IngredientSection(ingredients=[Ingredient(name="flour", amount="3", unit="dl")])],
            instructions=[Instruction(text="Whisk.", ingredients=[Ingredient(name="flour")])],
            original_ingredients=[IngredientSection(ingredients=[Ingredient(name="flour", amount="3 dl")])],
            measure_system="metric",
        )

    def test_returns_new_converted_recipe(self) -> None:
        response = {
            "ingredients": [{"title": "", "ingredients": [{"name": "flour", "amount": "1 1/4", "unit": "cups"}]}],
            "instructions": [{"text": "Whisk well.", "ingredients": ["flour"]}],
        }
        converted = FakeProcessor(json.dumps(response)).convert_recipe_units(self.recipe, "imperial", "m")

        self.assertIsNot(converted, self.recipe)
        self.assertEqual(converted.id, "r1")
        self.assertEqual(converted.measure_system, "imperial")
        self.assertEqual(converted.ingredients[0].ingredients[0].unit, "cups")
        self.assertEqual(converted.instructions[0].ingredients[0], Ingredient(name="flour", amount="1 1/4", unit="cups"))
        self.assertEqual(converted.original_ingredients, self.recipe.original_ingredients)
        self.assertEqual(self.recipe.measure_system, "metric")

    def test_failure_returns_none(self) -> None:
        self.assertIsNone(FakeProcessor(None).convert_recipe_units(self.recipe, "imperial", "m"))
        self.assertIsNone(FakeProcessor('{"ingredients": []}').convert_recipe_units(self.recipe, "imperial", "m"))


class ExplainIngredientTests(unittest.TestCase):
    def test_explanation(self) -> None:
        processor = FakeProcessor('{"description": "A sour dairy product.", "substitutes": ["yogurt", "sour cream"]}')
        explanation = processor.explain_ingredient("crème fraîche", "en", "m")
        self.assertEqual(explanation.substitutes, ["yogurt", "sour cream"])
        self.assertIn('"crème fraîche"', processor.calls[0][1])

    def test_missing_description(self) -> None:
        self.assertIsNone(FakeProcessor('{"substitutes": []}').explain_ingredient("x", "en", "m"))


class OllamaProcessorTests(unittest.TestCase):
    @mock.patch("llm_processor.ollama.chat")
    def test_requests_json_at_zero_temperature(self, mock_chat) -> None:
        mock_chat.return_value = {"message": {"content": '{"ok": true}'}}
        self.assertEqual(OllamaProcessor().generate_json("sys", "user", "llama3"), '{"ok": true}')
        _, kwargs = mock_chat.call_args
        self.assertEqual(kwargs["format"], "json")
        self.assertEqual(kwargs["options"], {"temperature": 0.0})
        self.assertEqual(kwargs["messages"][0], {"role": "system", "content": "sys"})

    @mock.patch("llm_processor.ollama.chat")
    def test_errors_return_none(self, mock_chat) -> None:
        mock_chat.side_effect = ollama.ResponseError("model not found")
        self.assertIsNone(OllamaProcessor().generate_json("sys", "user", "llama3"))


class GeminiProcessorTests(unittest.TestCase):
    def test_missing_api_key(self) -> None:
        with mock.patch("llm_processor_gemini.genai.Client") as mock_client:
            self.assertIsNone(GeminiProcessor(api_key="").generate_json("sys", "user", "gemini-2.0-flash"))
            mock_client.assert_not_called()

    @mock.patch("llm_processor_gemini.genai.Client")
    def test_generate_json(self, mock_client) -> None:
        generate = mock_client.return_value.models.generate_content
        generate.return_value = mock.Mock(text='{"ok": true}')

        result = GeminiProcessor(api_key="key").generate_json("sys", "user", "models/gemini-2.0-flash")

        self.assertEqual(result, '{"ok": true}')
        mock_client.assert_called_once_with(api_key="key")
        _, kwargs = generate.call_args
        self.assertEqual(kwargs["model"], "gemini-2.0-flash")
        self.assertEqual(kwargs["contents"], "user")
        self.assertEqual(kwargs["config"].response_mime_type, "application/json")
        self.assertEqual(kwargs["config"].system_instruction, "sys")

    @mock.patch("llm_processor_gemini.genai.Client")
    def test_errors_and_empty_responses(self, mock_client) -> None:
        generate = mock_client.return_value.models.generate_content
        generate.return_value = mock.Mock(text="")
        self.assertIsNone(GeminiProcessor(api_key="key").generate_json("sys", "user", "m"))
        generate.side_effect = ValueError("bad request")
        self.assertIsNone(GeminiProcessor(api_key="key").generate_json("sys", "user", "m"))


class LMStudioProcessorTests(unittest.TestCase):
    @mock.patch("llm_processor_lmstudio.Chat")
    @mock.patch("llm_processor_lmstudio.lms.Client")
    def test_generate_json(self, mock_client_cls, mock_chat) -> None:
        client = mock_client_cls.return_value.__enter__.return_value
        model = client.llm.model.return_value
        model.respond.return_value = mock.Mock(content='{"ok": true}')

        result = LMStudioProcessor().generate_json("sys", "user", "google/gemma-3-12b")

        self.assertEqual(result, '{"ok": true}')
        mock_chat.assert_called_once_with("sys")
        mock_chat.return_value.add_user_message.assert_called_once_with("user")
        client.llm.model.assert_called_once_with("google/gemma-3-12b", config={"gpu": {"ratio": 0.9}})

    @mock.patch("llm_processor_lmstudio.lms.Client")
    def test_errors_return_none(self, mock_client_cls) -> None:
        import lmstudio
        mock_client_cls.return_value.__enter__.side_effect = lmstudio.LMStudioError("server not running")
        self.assertIsNone(LMStudioProcessor().generate_json("sys", "user", "m"))


if __name__ == "__main__":
    unittest.main()
