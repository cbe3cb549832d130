"""Sequential multi-pose generation with a master anchor for visual continuity."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from logic.errors import SequenceCancelledError, TransientProviderError
from logic.prompts import frame_instruction, production_rules
from logic.retry_policy import RetryPolicy
from models.frames import GeneratedFrame, MasterAnchor, new_frame_id
from models.garment import GarmentAnalysis
from models.image import ImagePayload
from studio_app.config import StudioConfig
from studio_app.logging_config import get_logger, log_event
from tools.genai_provider import ContentPart, ContentProvider, first_image

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, bool], None]


class SequenceGenerator:
    """Renders one frame per pose, strictly in order.

    The first successful frame becomes the master anchor and is sent as a
    second reference image with every later frame, together with an
    instruction to clone the model and environment from it. Frames cannot be
    generated in parallel: every frame after the first depends on the anchor.
    """

    def __init__(
        self,
        config: StudioConfig,
        provider: ContentProvider,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=config.frame_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        )

    async def generate_sequence(
        self,
        garment_image: ImagePayload,
        analysis: GarmentAnalysis,
        scene_description: str,
        model_description: str,
        poses: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[GeneratedFrame]:
        """Generate every pose or raise; partial sequences are never returned.

        Args:
            garment_image: Product photo, resent with every frame.
            analysis: Garment description locking type, colours and details.
            scene_description: Backdrop text.
            model_description: Casting text for the model.
            poses: Pose descriptors; order is generation order.
            on_progress: Called as ``(frame_number, total, is_retry)`` before
                every provider attempt.
            cancel_event: When set, the sequence stops before the next frame's
                provider call with :class:`SequenceCancelledError`.
        """

        if not poses:
            raise ValueError("At least one pose is required to generate a sequence")

        total = len(poses)
        rules = production_rules(analysis, model_description, scene_description)
        anchor = MasterAnchor()
        frames: List[GeneratedFrame] = []

        for index, pose in enumerate(poses):
            if cancel_event is not None and cancel_event.is_set():
                log_event(logger, logging.INFO, "sequence_cancelled", completed=index, total=total)
                raise SequenceCancelledError(f"Sequence cancelled after {index} of {total} frames")

            image = await self._generate_frame(
                index=index,
                total=total,
                pose=pose,
                rules=rules,
                garment_image=garment_image,
                anchor_image=anchor.value,
                on_progress=on_progress,
            )
            frames.append(GeneratedFrame(id=new_frame_id(index), image=image))
            if not anchor.is_set:
                anchor.set(image)
                log_event(logger, logging.DEBUG, "master_anchor_set", frame=index + 1, image_size=image.size)

        log_event(logger, logging.INFO, "sequence_completed", frames=len(frames), garment_type=analysis.garment_type)
        return frames

    async def _generate_frame(
        self,
        *,
        index: int,
        total: int,
        pose: str,
        rules: str,
        garment_image: ImagePayload,
        anchor_image: Optional[ImagePayload],
        on_progress: Optional[ProgressCallback],
    ) -> ImagePayload:
        parts = [ContentPart.of_image(garment_image)]
        if anchor_image is not None:
            parts.append(ContentPart.of_image(anchor_image))
        parts.append(ContentPart.of_text(frame_instruction(rules, pose, anchored=anchor_image is not None)))

        def _report(attempt: int) -> None:
            if on_progress is not None:
                on_progress(index + 1, total, attempt > 0)

        async def _request() -> ImagePayload:
            response = await self.provider.generate_content(
                model=self.config.image_model,
                parts=parts,
                aspect_ratio=self.config.aspect_ratio,
            )
            image = first_image(response)
            if image is None:
                raise TransientProviderError("Empty image response")
            return image

        return await self.retry_policy.run(
            _request,
            on_attempt=_report,
            operation_name=f"generate_frame_{index + 1}",
        )


__all__ = ["ProgressCallback", "SequenceGenerator"]
