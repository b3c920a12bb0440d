"""Gemini-backed oracle.

Text calls go through ``client.aio.models.generate_content`` with Google
Search grounding; artwork goes through ``client.aio.models.generate_images``.
Every call is bounded by ``ORACLE_TIMEOUT_SECONDS``. Nothing here classifies
failures: callers receive the raw exception.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from google import genai
from google.genai import types

from cosmic_clash.core.config import Settings, get_settings
from cosmic_clash.schemas.oracle import (
    Classification,
    Connection,
    ContestResult,
    Lore,
    Profile,
    RandomPair,
    Source,
)
from cosmic_clash.services.oracle import prompts
from cosmic_clash.services.oracle.errors import EmptyResponseError
from cosmic_clash.services.oracle.normalizer import parse
from cosmic_clash.services.path_resolver import ContestPath


logger = logging.getLogger(__name__)

T = TypeVar("T")

CLASSIFY_TEMPERATURE = 0.2
CONTEST_TEMPERATURE = 0.5
PROFILE_TEMPERATURE = 0.3
CONNECTION_TEMPERATURE = 0.3
LORE_TEMPERATURE = 0.4
RANDOM_PAIR_TEMPERATURE = 1.0

IMAGE_MIME_TYPE = "image/jpeg"


def extract_sources(response: Any) -> list[Source] | None:
    """Collect web grounding chunks from the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    sources = [
        Source(uri=chunk.web.uri, title=chunk.web.title or "")
        for chunk in chunks
        if getattr(chunk, "web", None) is not None and chunk.web.uri
    ]
    return sources or None


def image_data_uri(response: Any) -> str:
    """Encode the first generated image as a ``data:`` URI."""
    generated = getattr(response, "generated_images", None) or []
    if not generated or generated[0].image is None or not generated[0].image.image_bytes:
        raise EmptyResponseError("The image model returned no image.")
    encoded = base64.b64encode(generated[0].image.image_bytes).decode("ascii")
    return f"data:{IMAGE_MIME_TYPE};base64,{encoded}"


class GeminiOracle:
    """Oracle implementation on top of the ``google-genai`` SDK."""

    def __init__(
        self, api_key: str | None = None, settings: Settings | None = None
    ) -> None:
        self._settings = settings or get_settings()
        self._api_key = api_key
        self._client: genai.Client | None = None  # Lazy initialization

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self._api_key or self._settings.GEMINI_API_KEY
            )
        return self._client

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(
            call, timeout=self._settings.ORACLE_TIMEOUT_SECONDS
        )

    async def _grounded(self, prompt: str, temperature: float) -> Any:
        client = self._get_client()
        return await self._bounded(
            client.aio.models.generate_content(
                model=self._settings.TEXT_MODEL,
                contents=prompt,
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                    temperature=temperature,
                ),
            )
        )

    async def _image(self, prompt: str, aspect_ratio: str) -> str:
        client = self._get_client()
        response = await self._bounded(
            client.aio.models.generate_images(
                model=self._settings.IMAGE_MODEL,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type=IMAGE_MIME_TYPE,
                    aspect_ratio=aspect_ratio,
                ),
            )
        )
        return image_data_uri(response)

    async def classify_entity(self, name: str) -> Classification:
        logger.debug(f"Classifying '{name}'")
        response = await self._grounded(
            prompts.CLASSIFY_PROMPT.format(name=name), CLASSIFY_TEMPERATURE
        )
        classification = parse(response.text, Classification)
        classification.sources = extract_sources(response)
        return classification

    async def suggest_random_pair(self) -> RandomPair:
        client = self._get_client()
        response = await self._bounded(
            client.aio.models.generate_content(
                model=self._settings.TEXT_MODEL,
                contents=prompts.RANDOM_PAIR_PROMPT,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=RANDOM_PAIR_TEMPERATURE,
                ),
            )
        )
        return parse(response.text, RandomPair)

    async def run_contest(
        self, name1: str, name2: str, path: ContestPath
    ) -> ContestResult:
        logger.debug(f"Running contest {name1} vs {name2} on path '{path.value}'")
        response = await self._grounded(
            prompts.contest_prompt(name1, name2, path), CONTEST_TEMPERATURE
        )
        result = parse(response.text, ContestResult)
        result.sources = extract_sources(response)
        return result

    async def fetch_profile(self, name: str) -> Profile:
        response = await self._grounded(
            prompts.PROFILE_PROMPT.format(name=name), PROFILE_TEMPERATURE
        )
        profile = parse(response.text, Profile)
        if not profile.name:
            profile.name = name
        profile.sources = extract_sources(response)
        return profile

    async def fetch_lore(self, name: str) -> Lore:
        response = await self._grounded(
            prompts.LORE_PROMPT.format(name=name), LORE_TEMPERATURE
        )
        lore = parse(response.text, Lore)
        lore.name = name
        lore.sources = extract_sources(response)
        return lore

    async def fetch_connection(self, name1: str, name2: str) -> Connection:
        response = await self._grounded(
            prompts.CONNECTION_PROMPT.format(name1=name1, name2=name2),
            CONNECTION_TEMPERATURE,
        )
        connection = parse(response.text, Connection)
        connection.sources = extract_sources(response)
        return connection

    async def generate_image(
        self, query: str, aspect_ratio: str, style: str, mood: str
    ) -> str:
        return await self._image(
            prompts.image_prompt(query, style, mood), aspect_ratio
        )

    async def edit_image(
        self,
        query: str,
        edit_prompt: str,
        aspect_ratio: str,
        style: str,
        mood: str,
    ) -> str:
        return await self._image(
            prompts.edit_image_prompt(query, edit_prompt, style, mood), aspect_ratio
        )
