"""Photoshoot studio bootstrap."""

import asyncio
import logging
from typing import List, Optional, Sequence

from agents.garment_analyzer import GarmentAnalyzer
from agents.image_refiner import ImageRefiner
from agents.sequence_generator import ProgressCallback, SequenceGenerator
from logic.retry_policy import RetryPolicy
from memory.history_store import HistoryEntry, PhotoshootHistory
from memory.usage_store import UsageTracker
from models.catalog import ModelAttributes, resolve_pose_descriptions, resolve_scene_description
from models.frames import GeneratedFrame
from models.garment import GarmentAnalysis
from models.image import ImagePayload
from studio_app.config import StudioConfig
from studio_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.genai_provider import ContentProvider, GeminiContentProvider


LOGGER = get_logger(__name__)


class PhotoshootStudioApp:
    """Wires together the provider, pipeline stages and usage bookkeeping."""

    def __init__(
        self,
        config: StudioConfig | None = None,
        provider: ContentProvider | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config or StudioConfig.from_env()
        configure_logging()

        self.provider = provider or GeminiContentProvider(api_key=self.config.api_key)
        base_policy = retry_policy or RetryPolicy(
            base_delay=self.config.retry_base_delay,
            max_delay=self.config.retry_max_delay,
        )

        self.garment_analyzer = GarmentAnalyzer(
            config=self.config,
            provider=self.provider,
            retry_policy=base_policy.with_attempts(self.config.analysis_max_attempts),
        )
        self.sequence_generator = SequenceGenerator(
            config=self.config,
            provider=self.provider,
            retry_policy=base_policy.with_attempts(self.config.frame_max_attempts),
        )
        self.image_refiner = ImageRefiner(
            config=self.config,
            provider=self.provider,
            retry_policy=base_policy.with_attempts(self.config.refine_max_attempts),
        )
        self.usage_tracker = UsageTracker(
            self.config.usage_dir, daily_limit=self.config.daily_generation_limit
        )
        self.history = PhotoshootHistory(self.config.history_dir, max_entries=self.config.history_limit)

    async def analyze_garment(self, image: ImagePayload) -> GarmentAnalysis:
        with operation_context("app:analyze_garment") as correlation_id:
            log_event(
                LOGGER,
                logging.INFO,
                "app_call_started",
                method="analyze_garment",
                correlation_id=correlation_id,
                image_size=image.size,
            )
            return await self.garment_analyzer.analyze(image)

    async def produce_photoshoot(
        self,
        *,
        user_id: str,
        garment_image: ImagePayload,
        analysis: GarmentAnalysis,
        scene_id: str,
        model_attributes: ModelAttributes,
        pose_ids: Sequence[str],
        custom_scene: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[GeneratedFrame]:
        """Quota-checked photoshoot entry point.

        Units for every pose are reserved before the first provider call and
        handed back if the sequence fails or is cancelled, so a failed shoot
        costs nothing. History is only written after full success.
        """

        with operation_context("app:produce_photoshoot") as correlation_id:
            poses = resolve_pose_descriptions(pose_ids)
            scene_description = resolve_scene_description(scene_id, custom_scene)
            usage = self.usage_tracker.reserve(user_id, len(poses))

            log_event(
                LOGGER,
                logging.INFO,
                "app_call_started",
                method="produce_photoshoot",
                correlation_id=correlation_id,
                user_id=user_id,
                scene_id=scene_id,
                pose_count=len(poses),
            )

            try:
                frames = await self.sequence_generator.generate_sequence(
                    garment_image,
                    analysis,
                    scene_description,
                    model_attributes.describe(),
                    poses,
                    on_progress=on_progress,
                    cancel_event=cancel_event,
                )
            except BaseException:
                self.usage_tracker.release(user_id, len(poses))
                raise

            self.history.append(
                HistoryEntry(
                    user_id=user_id,
                    garment_type=analysis.garment_type,
                    scene_id=scene_id,
                    poses=list(poses),
                    frame_ids=[frame.id for frame in frames],
                )
            )

            log_event(
                LOGGER,
                logging.INFO,
                "app_call_completed",
                method="produce_photoshoot",
                correlation_id=correlation_id,
                frame_count=len(frames),
                usage_count=usage.count,
            )
            return frames

    async def refine_image(self, image: ImagePayload, instruction: str) -> ImagePayload:
        with operation_context("app:refine_image"):
            return await self.image_refiner.refine(image, instruction)

    async def render_image(self, prompt: str) -> ImagePayload:
        with operation_context("app:render_image"):
            return await self.image_refiner.render(prompt)


__all__ = ["PhotoshootStudioApp"]
