"""Tests for the Gemini adventure writer."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from adventure_api.domain.adventure.models import Participant
from adventure_api.domain.adventure.texts import template_description, template_summary
from adventure_api.infra.vendors.llm import GeminiAdventureWriter, build_adventure_writer

CREW = [Participant(id="a", username="alice"), Participant(id="b", username="bob")]


def _client(response=None, error=None) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=error)
    return client


async def test_description_from_model():
    client = _client(SimpleNamespace(text="  Moonlit laps around the lake. 🌙 "))
    writer = GeminiAdventureWriter(api_key="key", model="gemini-test", client=client)

    text = await writer.generate_adventure_description("Night run", CREW)

    assert text == "Moonlit laps around the lake. 🌙"
    kwargs = client.aio.models.generate_content.await_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert "Title: Night run" in kwargs["contents"]
    assert "Participants: alice, bob" in kwargs["contents"]


async def test_provider_error_falls_back_to_template():
    writer = GeminiAdventureWriter(api_key="key", client=_client(error=RuntimeError("429 RESOURCE_EXHAUSTED")))

    assert await writer.generate_adventure_description("Night run", CREW) == template_description("Night run", CREW)
    assert await writer.generate_adventure_summary("Night run", CREW, "desc") == template_summary(
        "Night run", CREW, "desc"
    )


async def test_empty_output_falls_back_to_template():
    writer = GeminiAdventureWriter(api_key="key", client=_client(SimpleNamespace(text="")))

    assert await writer.generate_adventure_summary("Night run", CREW, "desc") == template_summary(
        "Night run", CREW, "desc"
    )


def test_build_adventure_writer_needs_api_key():
    assert build_adventure_writer(SimpleNamespace(gemini_api_key="  ", llm_default_text_model="m")) is None

    writer = build_adventure_writer(SimpleNamespace(gemini_api_key="key", llm_default_text_model="gemini-x"))
    assert isinstance(writer, GeminiAdventureWriter)
    assert writer.model == "gemini-x"
