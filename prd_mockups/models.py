"""
Data models and schemas for the PRD mockup generation pipeline.
"""

import base64
import re
from datetime import datetime
from enum import Enum
from pathlib import PurePath
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class DocumentKind(str, Enum):
    """Supported requirement document kinds."""
    WORD = "word"
    PDF = "pdf"
    IMAGE = "image"


class UploadedDocument(BaseModel):
    """A requirements document as received from the user."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def extension(self) -> str:
        """Lower-cased filename extension without the leading dot."""
        return PurePath(self.filename).suffix.lower().lstrip(".")

    @property
    def size(self) -> int:
        return len(self.content)


class TextBlock(BaseModel):
    """Plain text content sent to the model."""
    type: Literal["text"] = "text"
    text: str


class DocumentBlock(BaseModel):
    """Binary document (PDF) sent to the model, base64 encoded."""
    type: Literal["document"] = "document"
    mime_type: str = "application/pdf"
    data: str

    def raw_bytes(self) -> bytes:
        """Decode the base64 payload back to the original bytes."""
        return base64.b64decode(self.data)


class ImageBlock(BaseModel):
    """Raster image sent to the model, base64 encoded."""
    type: Literal["image"] = "image"
    mime_type: str = "image/png"
    data: str

    def raw_bytes(self) -> bytes:
        """Decode the base64 payload back to the original bytes."""
        return base64.b64decode(self.data)


ContentBlock = Annotated[
    Union[TextBlock, DocumentBlock, ImageBlock],
    Field(discriminator="type"),
]


class GenerationRequest(BaseModel):
    """
    A single generation request.

    Binary blocks come first; the instruction text block is always the last
    element of ``content_blocks``.
    """
    instruction_text: str
    content_blocks: List[ContentBlock] = Field(default_factory=list)

    def binary_blocks(self) -> List[Union[DocumentBlock, ImageBlock]]:
        return [b for b in self.content_blocks if not isinstance(b, TextBlock)]


_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


class Design(BaseModel):
    """One standalone HTML mockup extracted from the model's reply."""
    id: str
    title: str
    html: str

    def filename(self) -> str:
        """File name used when the design is downloaded or saved."""
        stem = _UNSAFE_FILENAME_CHARS.sub("_", self.title).strip(" .")
        if not stem:
            stem = f"design-{self.id}"
        return f"{stem}.html"


class GenerationResponse(BaseModel):
    """Outcome of one request: either designs or an error message."""
    success: bool
    designs: List[Design] = Field(default_factory=list)
    error: Optional[str] = None
    status_code: int = 200
    run_id: Optional[str] = None
    model_name: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    raw_text: Optional[str] = None
    generation_timestamp: datetime = Field(default_factory=datetime.now)
    generation_metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, designs: List[Design], **kwargs) -> "GenerationResponse":
        return cls(success=True, designs=designs, status_code=200, **kwargs)

    @classmethod
    def fail(cls, error: str, status_code: int = 500, **kwargs) -> "GenerationResponse":
        return cls(success=False, error=error, status_code=status_code, **kwargs)


class GeneratedMockups(BaseModel):
    """Raw generation output before the request boundary wraps it."""
    run_id: str
    designs: List[Design]
    raw_text: str
    model_name: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    generation_timestamp: datetime = Field(default_factory=datetime.now)
    generation_metadata: Dict[str, Any] = Field(default_factory=dict)
