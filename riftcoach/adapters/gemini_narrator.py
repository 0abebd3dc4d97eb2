"""Gemini adapter for badge narration.

SOLID:
- Single Responsibility: LLM API interaction only
- Dependency Inversion: Implements BadgeNarratorPort
"""

import asyncio
import json
import re
from typing import Any

import google.generativeai as genai
from google.generativeai.types import GenerationConfig
from pydantic import ValidationError

from riftcoach.config import get_settings
from riftcoach.contracts.badges import BadgeNarration
from riftcoach.core.errors import UpstreamScoringError
from riftcoach.core.observability import logger
from riftcoach.core.ports import BadgeNarratorPort

NARRATION_PROMPT = """You are a League of Legends coach.
You receive a player's primary role, numeric player-minus-opponent diffs for
that role, and the badges a rule engine already awarded. Write one short
title, a one-sentence description and a reason citing the numbers for each
awarded badge. Do not invent badges that are not in the awarded list and
keep each badge's polarity.

Return ONLY a valid JSON object with this structure:
{
    "badges": [
        {"title": "...", "description": "...", "reason": "...", "polarity": "good|bad|neutral"}
    ]
}
"""


class GeminiBadgeNarrator(BadgeNarratorPort):
    """Adapter for Google Gemini turning badge payloads into prose."""

    def __init__(self, *, timeout: float = 30.0, max_retries: int = 2) -> None:
        settings = get_settings()
        if not settings.gemini_api_key:
            raise ValueError(
                "GEMINI_API_KEY not found in environment. "
                "Please set it in .env file or environment variables."
            )

        genai.configure(api_key=settings.gemini_api_key)

        self.model_name = settings.gemini_model
        self.timeout = timeout
        self.max_retries = max_retries
        self.model = genai.GenerativeModel(
            model_name=self.model_name,
            generation_config=GenerationConfig(
                temperature=settings.gemini_temperature,
                max_output_tokens=settings.gemini_max_output_tokens,
                response_mime_type="application/json",
            ),
        )

        logger.info(
            "gemini_narrator_initialized",
            model=self.model_name,
            temperature=settings.gemini_temperature,
            max_tokens=settings.gemini_max_output_tokens,
        )

    async def narrate(self, payload: dict[str, Any]) -> BadgeNarration:
        prompt = f"{NARRATION_PROMPT}\n## Player Data\n{json.dumps(payload, sort_keys=True)}\n"

        logger.info(
            "badge_narration_request",
            model=self.model_name,
            prompt_length=len(prompt),
            puuid=payload.get("puuid", "unknown"),
        )

        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                text = await asyncio.wait_for(self._generate_content_async(prompt), timeout=self.timeout)
                narration = self.parse_response(text)
                logger.info("badge_narration_success", attempt=attempt, badges=len(narration.badges))
                return narration
            except TimeoutError as e:
                last_error = e
                logger.warning("llm_timeout", attempt=attempt, max_retries=self.max_retries)
            except UpstreamScoringError:
                raise
            except Exception as e:  # the SDK raises a wide range of google.api_core errors
                last_error = e
                logger.error(
                    "llm_api_error",
                    attempt=attempt,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            if attempt < self.max_retries:
                await asyncio.sleep(2**attempt)

        raise UpstreamScoringError(
            f"Gemini narration failed after {self.max_retries} attempts: {last_error}"
        ) from last_error

    async def _generate_content_async(self, prompt: str) -> str:
        """Google's SDK is synchronous here, so run it in the default executor."""
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, lambda: self.model.generate_content(prompt))
        if not response.text:
            raise UpstreamScoringError("Empty response from Gemini API")
        return response.text

    @staticmethod
    def parse_response(response_text: str) -> BadgeNarration:
        """Parse the model's JSON reply.

        Raises:
            UpstreamScoringError: the reply is not JSON or does not match the schema.
        """
        fenced = re.search(r"```(?:json)?\s*(.*?)\s*```", response_text, re.DOTALL)
        if fenced:
            response_text = fenced.group(1)

        try:
            parsed = json.loads(response_text.strip())
            return BadgeNarration.model_validate({"badges": parsed.get("badges", []), "source": "llm"})
        except (json.JSONDecodeError, AttributeError, ValidationError) as e:
            logger.error(
                "llm_response_parse_error",
                error=str(e),
                response_preview=response_text[:200],
            )
            raise UpstreamScoringError(f"Malformed narration response: {e}") from e
