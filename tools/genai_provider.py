"""Content provider abstraction and the Gemini implementation.

The pipeline only needs two capabilities: schema-constrained JSON generation
and image generation conditioned on reference images plus text. Both accept an
ordered list of :class:`ContentPart` values.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Union

from google import genai
from google.genai import types
from pydantic import BaseModel

from logic.errors import FatalProviderError, InvalidCredentialError
from models.image import ImagePayload, sniff_mime_type
from tools.observability import instrument_provider_call

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentPart:
    """One ordered request or response part: text or an inline image."""

    text: Optional[str] = None
    image: Optional[ImagePayload] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.image is None):
            raise ValueError("ContentPart needs exactly one of text or image")

    @classmethod
    def of_text(cls, text: str) -> "ContentPart":
        return cls(text=text)

    @classmethod
    def of_image(cls, image: ImagePayload) -> "ContentPart":
        return cls(image=image)


def first_image(parts: Iterable[ContentPart]) -> Optional[ImagePayload]:
    """Return the first inline image in a response, if any."""

    for part in parts:
        if part.image is not None:
            return part.image
    return None


class ContentProvider(ABC):
    """Abstract multimodal content provider."""

    @abstractmethod
    async def generate_structured(
        self,
        *,
        model: str,
        parts: Sequence[ContentPart],
        response_schema: type[BaseModel],
    ) -> str:
        """Return raw JSON text constrained to ``response_schema``."""

    @abstractmethod
    async def generate_content(
        self,
        *,
        model: str,
        parts: Sequence[ContentPart],
        aspect_ratio: Optional[str] = None,
    ) -> List[ContentPart]:
        """Return the response parts for an image-generation request."""


class GeminiContentProvider(ContentProvider):
    """Gemini provider backed by the ``google-genai`` async client."""

    def __init__(self, api_key: str | None, timeout_seconds: float | None = None) -> None:
        if not api_key:
            raise InvalidCredentialError("Gemini API key is not configured")
        http_options = None
        if timeout_seconds:
            http_options = types.HttpOptions(timeout=int(timeout_seconds * 1000))
        self._client = genai.Client(api_key=api_key, http_options=http_options)

    @staticmethod
    def _to_sdk_parts(parts: Sequence[ContentPart]) -> List[types.Part]:
        sdk_parts: List[types.Part] = []
        for part in parts:
            if part.image is not None:
                sdk_parts.append(types.Part.from_bytes(data=part.image.data, mime_type=part.image.mime_type))
            else:
                sdk_parts.append(types.Part.from_text(text=part.text or ""))
        return sdk_parts

    @staticmethod
    def _from_response(response: Any) -> List[ContentPart]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates or candidates[0].content is None:
            return []
        parts: List[ContentPart] = []
        for part in candidates[0].content.parts or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                mime_type = inline.mime_type or sniff_mime_type(inline.data)
                if not mime_type.startswith("image/"):
                    LOGGER.debug("Skipping non-image inline part", extra={"mime_type": mime_type})
                    continue
                parts.append(ContentPart.of_image(ImagePayload.from_bytes(inline.data, mime_type)))
            elif getattr(part, "text", None):
                parts.append(ContentPart.of_text(part.text))
        return parts

    @instrument_provider_call("gemini.generate_structured")
    async def generate_structured(
        self,
        *,
        model: str,
        parts: Sequence[ContentPart],
        response_schema: type[BaseModel],
    ) -> str:
        response = await self._client.aio.models.generate_content(
            model=model,
            contents=self._to_sdk_parts(parts),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_schema,
            ),
        )
        return response.text or ""

    @instrument_provider_call("gemini.generate_content")
    async def generate_content(
        self,
        *,
        model: str,
        parts: Sequence[ContentPart],
        aspect_ratio: Optional[str] = None,
    ) -> List[ContentPart]:
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio) if aspect_ratio else None,
        )
        response = await self._client.aio.models.generate_content(
            model=model,
            contents=self._to_sdk_parts(parts),
            config=config,
        )
        return self._from_response(response)


@dataclass
class ProviderCall:
    """A request recorded by :class:`MockContentProvider`."""

    method: str
    model: str
    parts: List[ContentPart]
    aspect_ratio: Optional[str] = None
    response_schema: Optional[type] = None

    @property
    def images(self) -> List[ImagePayload]:
        return [part.image for part in self.parts if part.image is not None]

    @property
    def text(self) -> str:
        return "\n".join(part.text for part in self.parts if part.text is not None)


Outcome = Union[BaseException, str, ImagePayload, List[ContentPart]]


@dataclass
class MockContentProvider(ContentProvider):
    """Scripted provider for tests and offline runs.

    Each call consumes the next outcome: exceptions are raised, strings are
    returned as JSON text (or a text-only response), images and part lists are
    returned as response parts. Once the script is exhausted, structured calls
    return ``default_text`` and content calls return a fresh synthetic image.
    """

    outcomes: Sequence[Outcome] = ()
    default_text: Optional[str] = None
    calls: List[ProviderCall] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._queue: deque = deque(self.outcomes)

    def _next_outcome(self) -> Optional[Outcome]:
        if not self._queue:
            return None
        outcome = self._queue.popleft()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def generate_structured(
        self,
        *,
        model: str,
        parts: Sequence[ContentPart],
        response_schema: type[BaseModel],
    ) -> str:
        self.calls.append(
            ProviderCall("generate_structured", model, list(parts), response_schema=response_schema)
        )
        outcome = self._next_outcome()
        if outcome is None:
            if self.default_text is None:
                raise FatalProviderError("MockContentProvider has no scripted structured response")
            return self.default_text
        if not isinstance(outcome, str):
            raise TypeError(f"Structured calls expect text outcomes, got {type(outcome).__name__}")
        return outcome

    async def generate_content(
        self,
        *,
        model: str,
        parts: Sequence[ContentPart],
        aspect_ratio: Optional[str] = None,
    ) -> List[ContentPart]:
        self.calls.append(ProviderCall("generate_content", model, list(parts), aspect_ratio=aspect_ratio))
        outcome = self._next_outcome()
        if outcome is None:
            return [ContentPart.of_image(self.synthetic_image(len(self.calls)))]
        if isinstance(outcome, ImagePayload):
            return [ContentPart.of_image(outcome)]
        if isinstance(outcome, str):
            return [ContentPart.of_text(outcome)]
        return list(outcome)

    @staticmethod
    def synthetic_image(index: int) -> ImagePayload:
        return ImagePayload(data=b"\x89PNG\r\n\x1a\n" + f"mock-frame-{index}".encode(), mime_type="image/png")


__all__ = [
    "ContentPart",
    "ContentProvider",
    "GeminiContentProvider",
    "MockContentProvider",
    "ProviderCall",
    "first_image",
]
