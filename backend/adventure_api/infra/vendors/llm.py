"""Gemini adapter for adventure copy."""
import logging
from typing import Any, Optional

import google.genai as genai
from google.genai import types

from adventure_api.domain.adventure.models import Participant
from adventure_api.domain.adventure.repositories import AdventureWriter
from adventure_api.domain.adventure.texts import (
    participant_names,
    template_description,
    template_summary,
)

logger = logging.getLogger(__name__)

DESCRIPTION_PROMPT = "\n".join([
    "You are a friendly copywriter.",
    "Input: an adventure title and the list of participants.",
    "Write one paragraph (up to 40 words) with a vivid image and no cliches.",
    "End with an emoji that matches the mood.",
])

SUMMARY_PROMPT = "\n".join([
    "You are an attentive storyteller.",
    "Input: title, participants and description of a finished adventure.",
    "Write 2 sentences: a lively recap and a gentle takeaway (50 words max).",
    "Mention every participant and do not invent new facts.",
])


class GeminiAdventureWriter(AdventureWriter):
    """Descriptions and recaps from Gemini; template copy on empty output or any error."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.6,
        client: Optional[Any] = None,
    ):
        self.model = model
        self.temperature = temperature
        self._client = client or genai.Client(api_key=api_key.strip())

    async def _generate(self, system_prompt: str, prompt: str) -> Optional[str]:
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            logger.warning("Gemini generate_content failed (%s): %s", self.model, e)
            return None
        text = (getattr(response, "text", None) or "").strip()
        return text or None

    async def generate_adventure_description(self, title: str, participants: list[Participant]) -> str:
        prompt = "\n".join([
            f"Title: {title}",
            f"Participants: {participant_names(participants)}",
            "Format: up to 40 words, emoji at the end.",
        ])
        text = await self._generate(DESCRIPTION_PROMPT, prompt)
        return text or template_description(title, participants)

    async def generate_adventure_summary(
        self, title: str, participants: list[Participant], description: str
    ) -> str:
        prompt = "\n".join([
            f"Title: {title}",
            f"Participants: {participant_names(participants)}",
            f"Description: {description}",
            "Format: 2 sentences, 50 words max, no new facts.",
        ])
        text = await self._generate(SUMMARY_PROMPT, prompt)
        return text or template_summary(title, participants, description)


def build_adventure_writer(settings) -> Optional[AdventureWriter]:
    """Gemini writer when an API key is configured, else None (service uses templates)."""
    if not (settings.gemini_api_key or "").strip():
        return None
    return GeminiAdventureWriter(
        api_key=settings.gemini_api_key,
        model=settings.llm_default_text_model or "gemini-2.0-flash",
    )
