"""Asset ingestion: turn an audio file into an embedded ``data:`` URI.

The router treats replacement assets as opaque strings.  Uploading reads
the file and base64-encodes it into a self-describing URI that a playback
substrate can play without any further lookup.  No decoding or format
checks happen here; the MIME type is guessed from the file name.
"""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from .errors import AssetReadError

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadedAsset:
    name: str
    size_bytes: int
    mime_type: str
    data_uri: str

    @property
    def size_kb(self) -> float:
        return round(self.size_bytes / 1024, 1)


def to_data_uri(payload: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def read_asset(path: Path) -> UploadedAsset:
    """Read ``path`` into an :class:`UploadedAsset` or raise AssetReadError."""
    path = Path(path)
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise AssetReadError(f"Failed to read {path}: {exc}") from exc
    if not payload:
        raise AssetReadError(f"{path} is empty")
    mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE
    return UploadedAsset(
        name=path.name,
        size_bytes=len(payload),
        mime_type=mime_type,
        data_uri=to_data_uri(payload, mime_type),
    )
