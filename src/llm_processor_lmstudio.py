# llm_processor_lmstudio.py
#
# Description:
# This module handles all interactions with the LM Studio local server
# through the native `lmstudio-python` library. The model is asked for
# plain JSON text, which the shared LLMProcessor code parses.

import logging

import lmstudio as lms
from lmstudio import Chat

from llm_processor import LLMProcessor


class LMStudioProcessor(LLMProcessor):
    """
    LLM processor for local models served via the LM Studio.
    """

    def __init__(self, load_config: dict | None = None, inference_config: dict | None = None):
        self.load_config = load_config if load_config is not None else {"gpu": {"ratio": 0.9}}
        self.inference_config = inference_config if inference_config is not None else {"temperature": 0.0}

    def generate_json(self, system_prompt: str, user_prompt: str, model_name: str) -> str | None:
        try:
            with lms.Client() as client:
                logging.debug(f"Sending prompt to LM Studio ({model_name})...")
                model = client.llm.model(model_name, config=self.load_config)

                chat = Chat(system_prompt)
                chat.add_user_message(user_prompt)

                prediction = model.respond(chat, config=self.inference_config)
        except lms.LMStudioError as e:
            logging.error(f"LM Studio call with model {model_name} failed: {e}")
            logging.error("Please ensure the model is downloaded and correctly named in your LM Studio library.")
            return None

        content = prediction.content
        if not content:
            logging.error(f"LM Studio response from {model_name} was empty.")
            return None
        return content
