"""Garment analyzer turning an uploaded product photo into a GarmentAnalysis."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from logic.errors import TransientProviderError
from logic.prompts import ANALYSIS_INSTRUCTION
from logic.retry_policy import RetryPolicy
from models.garment import GarmentAnalysis
from models.image import ImagePayload
from studio_app.config import StudioConfig
from studio_app.logging_config import get_logger, log_event
from tools.genai_provider import ContentPart, ContentProvider

logger = get_logger(__name__)


class GarmentAnalyzer:
    """Extracts structured garment attributes with a vision-capable model."""

    def __init__(
        self,
        config: StudioConfig,
        provider: ContentProvider,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=config.analysis_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        )

    async def analyze(self, garment_image: ImagePayload) -> GarmentAnalysis:
        """Analyze one garment photo.

        Malformed or schema-violating JSON is treated as a transient provider
        failure so it is retried instead of silently defaulted.

        Raises:
            RetryExhaustedError: Transient failures outlasted the attempt budget.
            InvalidCredentialError: The provider rejected the API credential.
            FatalProviderError: Any other provider failure.
        """

        parts = [ContentPart.of_text(ANALYSIS_INSTRUCTION), ContentPart.of_image(garment_image)]

        async def _request() -> GarmentAnalysis:
            text = await self.provider.generate_structured(
                model=self.config.analysis_model,
                parts=parts,
                response_schema=GarmentAnalysis,
            )
            return self._parse(text)

        analysis = await self.retry_policy.run(_request, operation_name="analyze_garment")
        log_event(
            logger,
            logging.INFO,
            "garment_analyzed",
            garment_type=analysis.garment_type,
            color_count=len(analysis.color_palette),
            image_size=garment_image.size,
        )
        return analysis

    @staticmethod
    def _parse(text: str) -> GarmentAnalysis:
        if not text or not text.strip():
            raise TransientProviderError("Garment analysis response was empty")
        try:
            return GarmentAnalysis.model_validate_json(text)
        except ValidationError as exc:
            raise TransientProviderError(f"Garment analysis did not match the schema: {exc.error_count()} error(s)") from exc


__all__ = ["GarmentAnalyzer"]
