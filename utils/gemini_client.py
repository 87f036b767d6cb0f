from __future__ import annotations

import os
from typing import Any

import google.generativeai as genai  # type: ignore
from loguru import logger

from utils.llm_client import LLMClient

GEMINI_MODEL = "gemini-2.5-flash"


class GeminiLLMClient(LLMClient):
    """
    LLMClient backed by Google Gemini.

    Behavior:
    - GEMINI_API_KEY is read and genai configured on the first request.
    - The system prompt goes in as the model's system instruction.
    - A reply without text parts (safety block, empty candidate) comes back
      as "", which the retry branch treats like any other empty output.
    """

    provider = "gemini"

    def __init__(self) -> None:
        self._configured = False

    def _configure(self) -> None:
        if self._configured:
            return
        api_key = os.getenv("GEMINI_API_KEY", "")
        if not api_key:
            logger.warning("GeminiLLMClient: GEMINI_API_KEY not set; requests will be rejected.")
        genai.configure(api_key=api_key)
        self._configured = True
        logger.info("GeminiLLMClient enabled with model={}", GEMINI_MODEL)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        self._configure()
        model = genai.GenerativeModel(GEMINI_MODEL, system_instruction=system_prompt)
        response = await model.generate_content_async(
            user_prompt,
            generation_config=genai.types.GenerationConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
            ),
        )
        return _response_text(response)


def _response_text(response: Any) -> str:
    # .text raises ValueError when the candidate carries no text parts.
    try:
        return response.text or ""
    except ValueError:
        feedback = getattr(response, "prompt_feedback", None)
        logger.warning("GeminiLLMClient: reply has no text (feedback: {})", feedback)
        return ""
