# llm_processor_gemini.py
#
# Description:
# This module handles all interactions with the Google Gemini API using the
# `google-genai` SDK. It conforms to the LLMProcessor interface.

import logging

from google import genai
from google.genai import types, errors

import config
from llm_processor import LLMProcessor

# Set specific Google Gemini loggers to WARNING level
logging.getLogger('google.genai').setLevel(logging.WARNING)


class GeminiProcessor(LLMProcessor):
    """
    LLM processor for the Google Gemini API using the `google-genai` SDK.
    """

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self._client = None

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate_json(self, system_prompt: str, user_prompt: str, model_name: str) -> str | None:
        if not self.api_key:
            logging.error("GEMINI_API_KEY is not set. Skipping Gemini request.")
            return None

        if model_name.startswith("models/"):
            model_name = model_name.split('/', 1)[1]

        try:
            logging.debug(f"Sending prompt to Google Gemini ({model_name})...")
            response = self.client.models.generate_content(
                model=model_name,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    response_mime_type="application/json",
                ),
            )
        except (errors.APIError, ValueError) as e:
            logging.error(f"Google API call with model {model_name} failed: {e}")
            return None

        if not response.text:
            logging.error(f"Gemini response from {model_name} was empty.")
            return None
        return response.text
