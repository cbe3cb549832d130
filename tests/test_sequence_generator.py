"""Sequential photoshoot generation and master anchor continuity."""

import asyncio
from typing import List, Tuple

import pytest

from agents.sequence_generator import SequenceGenerator
from logic.errors import InvalidCredentialError, RetryExhaustedError, SequenceCancelledError
from logic.retry_policy import RetryPolicy
from models.garment import GarmentAnalysis
from models.image import ImagePayload
from studio_app.config import StudioConfig
from tools.genai_provider import MockContentProvider

GARMENT = ImagePayload(data=b"\xff\xd8\xff" + b"fixture-a-garment", mime_type="image/jpeg")


async def _no_sleep(_: float) -> None:
    return None


def _demo_config() -> StudioConfig:
    return StudioConfig(api_key="dummy-key")


def _analysis() -> GarmentAnalysis:
    return GarmentAnalysis(
        garmentType="jacket",
        fabric="wool",
        colorPalette=["navy", "gold"],
        style="tailored",
        gender="Unisex",
        uniquenessLevel="gold button embossing",
    )


def _frame(label: str) -> ImagePayload:
    return ImagePayload(data=b"\x89PNG\r\n\x1a\n" + label.encode(), mime_type="image/png")


def _generator(provider: MockContentProvider, max_attempts: int = 3) -> SequenceGenerator:
    return SequenceGenerator(
        config=_demo_config(),
        provider=provider,
        retry_policy=RetryPolicy(max_attempts=max_attempts, sleep=_no_sleep),
    )


def _run(generator: SequenceGenerator, poses: List[str], **kwargs):
    return asyncio.run(
        generator.generate_sequence(
            GARMENT,
            _analysis(),
            "Clean, minimal background for e-commerce.",
            "Female, age 18-25, Any ethnicity, Any build.",
            poses,
            **kwargs,
        )
    )


def test_front_side_back_scenario_uses_anchor_from_second_frame_on() -> None:
    provider = MockContentProvider([_frame("one"), _frame("two"), _frame("three")])

    frames = _run(_generator(provider), ["front", "side", "back"])

    assert len(frames) == 3
    assert len(provider.calls) == 3
    assert [len(call.images) for call in provider.calls] == [1, 2, 2]
    for call in provider.calls:
        assert call.images[0] is GARMENT
        assert call.aspect_ratio == "3:4"
    assert provider.calls[1].images[1].data == frames[0].image_bytes
    assert provider.calls[2].images[1].data == frames[0].image_bytes


def test_frames_follow_pose_order_and_prompts_lock_garment_details() -> None:
    provider = MockContentProvider([_frame(f"frame-{i}") for i in range(4)])
    poses = ["front view", "three quarter", "side profile", "back view"]

    frames = _run(_generator(provider), poses)

    assert [frame.image_bytes for frame in frames] == [_frame(f"frame-{i}").data for i in range(4)]
    assert len({frame.id for frame in frames}) == 4
    for pose, call in zip(poses, provider.calls):
        assert f"Pose: {pose}" in call.text or f"this pose: {pose}" in call.text
        assert "Primary: navy, Accents: gold" in call.text
        assert "gold button embossing" in call.text
    assert "Establish the definitive model identity" in provider.calls[0].text
    assert all("STRICT VISUAL CONSISTENCY" in call.text for call in provider.calls[1:])


def test_anchor_comes_from_first_successful_attempt() -> None:
    provider = MockContentProvider(
        [
            RuntimeError("503 Service Unavailable"),
            RuntimeError("The model is overloaded"),
            _frame("third-attempt"),
            _frame("second-frame"),
        ]
    )
    progress: List[Tuple[int, int, bool]] = []

    frames = _run(_generator(provider), ["front", "side"], on_progress=lambda *args: progress.append(args))

    assert len(frames) == 2
    assert frames[0].image_bytes == _frame("third-attempt").data
    assert [len(call.images) for call in provider.calls] == [1, 1, 1, 2]
    assert provider.calls[3].images[1].data == _frame("third-attempt").data
    assert progress == [(1, 2, False), (1, 2, True), (1, 2, True), (2, 2, False)]


def test_response_without_image_is_retried() -> None:
    provider = MockContentProvider(["I could not draw that right now.", _frame("recovered")])

    frames = _run(_generator(provider), ["front"])

    assert len(provider.calls) == 2
    assert frames[0].image_bytes == _frame("recovered").data


def test_exhausted_frame_aborts_whole_sequence() -> None:
    provider = MockContentProvider([_frame("one")] + [RuntimeError("503 overloaded")] * 3)

    with pytest.raises(RetryExhaustedError):
        _run(_generator(provider), ["front", "side", "back"])

    assert len(provider.calls) == 4


def test_invalid_credential_stops_after_one_attempt() -> None:
    provider = MockContentProvider([RuntimeError("API key not valid. Please pass a valid API key.")])

    with pytest.raises(InvalidCredentialError):
        _run(_generator(provider), ["front", "side"])

    assert len(provider.calls) == 1


def test_cancellation_stops_before_next_provider_call() -> None:
    cancel_event = asyncio.Event()

    def _cancel_after_first(index: int, total: int, is_retry: bool) -> None:
        if index == 2:
            cancel_event.set()

    provider = MockContentProvider([_frame("one"), _frame("two")])

    with pytest.raises(SequenceCancelledError):
        _run(_generator(provider), ["front", "side", "back"], on_progress=_cancel_after_first, cancel_event=cancel_event)

    assert len(provider.calls) == 2


def test_empty_pose_list_is_rejected_without_provider_calls() -> None:
    provider = MockContentProvider()

    with pytest.raises(ValueError):
        _run(_generator(provider), [])

    assert provider.calls == []
