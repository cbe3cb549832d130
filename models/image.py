"""Binary image payloads exchanged with the content provider."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Optional

DEFAULT_MIME_TYPE = "image/jpeg"

_MAGIC_NUMBERS = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_mime_type(data: bytes, default: str = DEFAULT_MIME_TYPE) -> str:
    """Guess an image MIME type from its leading bytes."""

    for signature, mime_type in _MAGIC_NUMBERS:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return default


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes plus the MIME type the provider should see."""

    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError("Image payload is empty")
        if not self.mime_type.startswith("image/"):
            raise ValueError(f"Unsupported MIME type for image payload: {self.mime_type}")

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: Optional[str] = None) -> "ImagePayload":
        return cls(data=bytes(data), mime_type=mime_type or sniff_mime_type(data))

    @classmethod
    def from_data_uri(cls, value: str, mime_type: Optional[str] = None) -> "ImagePayload":
        """Decode a ``data:<mime>;base64,<payload>`` URI or bare base64 text.

        Anything before the first comma is treated as the URI header. When the
        header does not name a MIME type the explicit ``mime_type`` argument is
        used, falling back to ``image/jpeg``.
        """

        header, _, encoded = value.partition(",")
        if not encoded:
            header, encoded = "", value
        declared = None
        if header.startswith("data:"):
            declared = header[len("data:"):].split(";", 1)[0] or None
        try:
            data = base64.b64decode(encoded.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Image data is not valid base64") from exc
        return cls(data=data, mime_type=declared or mime_type or DEFAULT_MIME_TYPE)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def copy(self) -> "ImagePayload":
        """Return an equal payload backed by a freshly allocated bytes object."""

        return ImagePayload(data=bytes(bytearray(self.data)), mime_type=self.mime_type)


__all__ = ["DEFAULT_MIME_TYPE", "ImagePayload", "sniff_mime_type"]
