# config.py
#
# Description:
# This file contains all the configuration settings for the application.
# By keeping them in one place, it's easy to adjust paths, model names,
# prompts and scaling limits without changing the core logic.

import os

# --- File Paths ---
# All data lives in one directory. Override it with APTIT_DATA_DIR.
DATA_DIR = os.environ.get("APTIT_DATA_DIR", "data")
STORE_JSON_PATH = os.path.join(DATA_DIR, "aptit_store.json")
DOCS_DIR = os.path.join(DATA_DIR, "docs")
LOG_FILE_PATH = os.path.join(DATA_DIR, "aptit.log")

# --- Storage Keys ---
# Recipes written by older versions used different keys; those are dropped on load.
STORE_KEY_RECIPES = "recipes_v4"
STORE_KEY_LANGUAGE = "language"
STORE_KEY_SYSTEM = "measure_system"
LEGACY_STORE_KEYS = ["recipes", "recipes_v2", "recipes_v3"]

# --- Google Gemini API Settings ---
# IMPORTANT: set your API key as an environment variable.
# macOS/Linux: export GEMINI_API_KEY="your_api_key_here"
# Windows: set GEMINI_API_KEY="your_api_key_here"
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY", "")

# --- LLM Provider Settings ---
# Choose your LLM provider: "local", "google", or "lmstudio".
LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "google")

# --- LLM Model Settings ---
# The first model of the selected provider is used unless --model is given.
LLM_MODELS = {
    "local": [
        "llama3",
        "phi3:mini"
    ],
    "google": [
        "gemini-2.0-flash",
        "gemini-2.5-flash"
    ],
    "lmstudio": [
        "google/gemma-3-12b",
        "qwen/qwen3-4b-thinking-2507",
    ]
}

# --- Page Fetching Settings ---
REQUEST_TIMEOUT = 15
MAX_PAGE_TEXT_LENGTH = 20000
MIN_PAGE_TEXT_LENGTH = 200
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# --- Defaults ---
DEFAULT_LANGUAGE = "en"
DEFAULT_MEASURE_SYSTEM = "metric"
# Serving and batch counts can be stepped down to this, never below.
MIN_MULTIPLIER = 0.5

LANGUAGE_NAMES = {
    "en": "English",
    "sv": "Swedish",
}

# --- LLM Prompts ---
METRIC_INSTRUCTIONS = '''
- Weight: Use grams (g) or kilograms (kg).
- Volume: Use deciliters (dl), milliliters (ml), or liters (l).
- Temperature: Use Celsius (°C).
- Spoons: Use teaspoons (tsp) and tablespoons (tbsp).
'''

IMPERIAL_INSTRUCTIONS = '''
- Weight: Use ounces (oz) or pounds (lb).
- Volume: Use cups, fluid ounces (fl oz), or gallons.
- Temperature: Use Fahrenheit (°F).
- Spoons: Use teaspoons (tsp) and tablespoons (tbsp).
'''

EXTRACTION_SYSTEM_PROMPT = '''
You are an expert professional chef and baker. Your goal is to extract the recipe
from the provided page text and return it as a single JSON object.

**Core Directives:**
- **Literal Extraction ONLY:** Base your output on the page text. Do not invent steps or ingredients.
- **IGNORE NON-RECIPE TEXT:** Disregard navigation, ads, comments and personal stories.

**CRITICAL RULES:**
1. The target measurement system is: {system_upper}.
2. Convert ALL measurements to: {system_instructions}
3. Provide "originalIngredients" exactly as written in the source, before conversion.
4. Translate all text to {language_name}.
5. "ingredients" may be a list of sections: [{{"title": "For the sauce", "ingredients": [...]}}].
   Use a single section with an empty title when the source has no groups.
6. Each ingredient is {{"name": "flour", "amount": "2 1/2", "unit": "cups"}}. Never merge the amount into the name.
7. Each instruction lists the ingredients it uses, named like the top-level list.
8. "baseServingsCount" is the number of servings the amounts are for, as an integer.
9. "recipeType" is "baking" for breads, cakes, cookies and pastries, otherwise "food".
10. "prepTime", "cookTime" and "time" are ISO 8601 durations such as "PT1H30M".

**REQUIRED JSON STRUCTURE:**
{{
  "title": "string",
  "description": "string",
  "ingredients": [{{"title": "string", "ingredients": [{{"name": "string", "amount": "string", "unit": "string"}}]}}],
  "originalIngredients": [{{"title": "string", "ingredients": [{{"name": "string", "amount": "string", "unit": "string"}}]}}],
  "baseServingsCount": 4,
  "recipeType": "food",
  "instructions": [
    {{"text": "string", "ingredients": [{{"name": "string", "amount": "string", "unit": "string"}}]}}
  ],
  "time": "string",
  "prepTime": "string",
  "cookTime": "string",
  "servings": "string",
  "imageUrl": "string"
}}
'''

CONVERSION_SYSTEM_PROMPT = '''
You are a conversion tool for professional recipes.
Convert the recipe to {system_upper} units:
{system_instructions}
Keep the language as {language_name}. Keep the ingredient and instruction structure unchanged.
Return ONLY JSON with the keys "ingredients" and "instructions".
'''

EXPLANATION_SYSTEM_PROMPT = '''
You are a culinary expert. Explain the ingredient in {language_name}.
Return ONLY JSON: {{"description": "string", "substitutes": ["string"]}} with 2-3 common substitutes.
'''
