"""Single-shot image refinement and prompt-only rendering."""

from __future__ import annotations

import logging

from logic.errors import TransientProviderError
from logic.prompts import refine_instruction
from logic.retry_policy import RetryPolicy
from models.image import ImagePayload
from studio_app.config import StudioConfig
from studio_app.logging_config import get_logger, log_event
from tools.genai_provider import ContentPart, ContentProvider, first_image

logger = get_logger(__name__)


class ImageRefiner:
    """Stateless edits of one generated image from a free-text instruction."""

    def __init__(
        self,
        config: StudioConfig,
        provider: ContentProvider,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=config.refine_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        )

    async def refine(self, image: ImagePayload, instruction: str) -> ImagePayload:
        """Return a modified copy of ``image``; the input is never returned."""

        if not instruction or not instruction.strip():
            raise ValueError("A refinement instruction is required")
        parts = [ContentPart.of_image(image), ContentPart.of_text(refine_instruction(instruction))]
        result = await self._render(parts, operation_name="refine_image")
        log_event(logger, logging.INFO, "image_refined", input_size=image.size, output_size=result.size)
        return result

    async def render(self, prompt: str) -> ImagePayload:
        """Generate a single image from text alone."""

        if not prompt or not prompt.strip():
            raise ValueError("A prompt is required")
        return await self._render([ContentPart.of_text(prompt.strip())], operation_name="render_image")

    async def _render(self, parts: list[ContentPart], operation_name: str) -> ImagePayload:
        async def _request() -> ImagePayload:
            response = await self.provider.generate_content(
                model=self.config.image_model,
                parts=parts,
                aspect_ratio=self.config.aspect_ratio,
            )
            image = first_image(response)
            if image is None:
                raise TransientProviderError("Image response did not contain an image")
            return image.copy()

        return await self.retry_policy.run(_request, operation_name=operation_name)


__all__ = ["ImageRefiner"]
