"""Generated photoshoot frames and the per-sequence master anchor."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from models.image import ImagePayload


def new_frame_id(index: int) -> str:
    """Build a ``shot-<epoch ms>-<index>-<suffix>`` identifier."""

    return f"shot-{int(time.time() * 1000)}-{index}-{uuid4().hex[:5]}"


@dataclass(frozen=True)
class GeneratedFrame:
    """One rendered pose of a photoshoot sequence."""

    id: str
    image: ImagePayload

    @property
    def image_bytes(self) -> bytes:
        return self.image.data


class AnchorAlreadySetError(RuntimeError):
    """Raised when a second image is offered to an already populated anchor."""


class MasterAnchor:
    """Write-once holder for the first successful frame of a sequence.

    The anchor is resubmitted as a reference image on every later frame so the
    provider reproduces the same model and environment. Once set it never
    changes for the lifetime of the sequence call that owns it.
    """

    __slots__ = ("_image",)

    def __init__(self) -> None:
        self._image: Optional[ImagePayload] = None

    @property
    def is_set(self) -> bool:
        return self._image is not None

    @property
    def value(self) -> Optional[ImagePayload]:
        return self._image

    def set(self, image: ImagePayload) -> None:
        if self._image is not None:
            raise AnchorAlreadySetError("Master anchor is already set for this sequence")
        self._image = image


__all__ = ["AnchorAlreadySetError", "GeneratedFrame", "MasterAnchor", "new_frame_id"]
