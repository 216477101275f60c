# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types: all imports come from core.models.
"""

from __future__ import annotations

import base64
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


# === VIDEO INPUT ===


class FileDescriptor(BaseModel):
    """Identity attributes of an uploaded video file.

    ``last_modified`` is expressed in epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    size: int = Field(ge=0)
    last_modified: int

    @classmethod
    def from_path(cls, path: Path | str) -> FileDescriptor:
        """Build a descriptor from a file on disk."""
        p = Path(path)
        st = p.stat()
        return cls(name=p.name, size=st.st_size, last_modified=int(st.st_mtime * 1000))


class VideoIdentity(BaseModel):
    """Derived cache key for a video. Not a content-equality guarantee."""

    model_config = ConfigDict(frozen=True)

    digest: str
    algorithm: str = "sha256"

    def __str__(self) -> str:
        return self.digest


class VideoMetadata(BaseModel):
    """Stream attributes reported by the decoder after loading."""

    duration_seconds: float
    width: int
    height: int


# === FRAME SAMPLING ===


class FrameSampleConfig(BaseModel):
    """Sampling parameters. ``target_frame_count=None`` selects adaptively."""

    target_frame_count: int | None = Field(default=None, gt=0)
    max_dimension: int = Field(default=600, gt=0)


class EncodedFrame(BaseModel):
    """Compressed image captured at a given timestamp."""

    index: int
    timestamp: float
    data: bytes
    media_type: str = "image/jpeg"
    width: int
    height: int
    quality: int

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.to_base64()}"


# === ANALYSIS ===

# Empty-container serializations for the structured sub-documents.
STRUCTURED_FIELD_DEFAULTS: dict[str, str] = {
    "objects": "[]",
    "people": "[]",
    "actions": "[]",
    "text_content": "[]",
    "audio_context": "{}",
    "technical_aspects": "{}",
    "metadata": "{}",
}


class AnalysisRecord(BaseModel):
    """Structured scene analysis produced by the AI collaborator.

    Every structured field holds a serialized JSON document. The record is
    stored and returned whole; its contents are never inspected here.
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    objects: str = "[]"
    people: str = "[]"
    actions: str = "[]"
    text_content: str = Field(default="[]", alias="textContent")
    audio_context: str = Field(default="{}", alias="audioContext")
    technical_aspects: str = Field(default="{}", alias="technicalAspects")
    metadata: str = "{}"

    @classmethod
    def degraded(cls, raw_text: str) -> AnalysisRecord:
        """Record holding an unparsable response verbatim as its summary."""
        return cls(summary=raw_text)
