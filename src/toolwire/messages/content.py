"""Content blocks: the tagged units a message is made of.

A block is text, or media (image, audio, file) carried either as a URL
reference or as inline base64 data with a media type.

    >>> ImageBlock(url="https://example.com/cat.png")
    >>> ImageBlock(data="iVBORw0KGgo...", media_type="image/png")
    >>> ContentBlockAdapter.validate_python({"type": "text", "text": "describe the weather"})
    TextBlock(type='text', text='describe the weather')
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

_DATA_URL = re.compile(r"^data:(?P<media_type>[\w.+-]+/[\w.+-]+)?;base64,(?P<data>.*)$", re.DOTALL)


class TextBlock(BaseModel):
    """Literal text content."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["text"] = "text"
    text: str


class MediaBlock(BaseModel):
    """Media referenced by URL or carried inline as base64.

    Exactly one of `url` or `data` must be set. Inline data requires a
    media type; when the block kind has a media family (image, audio) the
    media type must belong to it. `data:` URLs are split into data and
    media type on construction.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    family: ClassVar[str | None] = None

    url: str | None = None
    data: str | None = Field(default=None, repr=False, description="Base64-encoded payload")
    media_type: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _split_data_url(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(url := values.get("url"), str):
            if m := _DATA_URL.match(url):
                values = {**values, "url": None, "data": m["data"]}
                if not values.get("media_type"):
                    values["media_type"] = m["media_type"]
        return values

    @model_validator(mode="after")
    def _check_source(self) -> MediaBlock:
        if (self.url is None) == (self.data is None):
            raise ValueError("exactly one of 'url' or 'data' is required")
        if self.data is not None:
            if not self.media_type:
                raise ValueError("inline data requires a media_type")
            try:
                base64.b64decode(self.data, validate=True)
            except binascii.Error as e:
                raise ValueError(f"data is not valid base64: {e}") from e
        if self.media_type and self.family and not self.media_type.startswith(f"{self.family}/"):
            raise ValueError(f"media_type '{self.media_type}' is not an {self.family}/* type")
        return self

    @property
    def is_inline(self) -> bool:
        return self.data is not None

    def decode(self) -> bytes:
        """Raw bytes of an inline block."""
        if self.data is None:
            raise ValueError("block references a URL; it has no inline data")
        return base64.b64decode(self.data)

    def to_url(self) -> str:
        """The URL, or a data: URL for inline content."""
        if self.url is not None:
            return self.url
        return f"data:{self.media_type};base64,{self.data}"


class ImageBlock(MediaBlock):
    """Image content (image/*)."""

    family: ClassVar[str | None] = "image"
    type: Literal["image"] = "image"


class AudioBlock(MediaBlock):
    """Audio content (audio/*)."""

    family: ClassVar[str | None] = "audio"
    type: Literal["audio"] = "audio"


class FileBlock(MediaBlock):
    """Arbitrary document content (PDF, text, ...)."""

    type: Literal["file"] = "file"
    filename: str | None = None


ContentBlock = Annotated[
    Union[TextBlock, ImageBlock, AudioBlock, FileBlock],
    Field(discriminator="type"),
]

ContentBlockAdapter: TypeAdapter[ContentBlock] = TypeAdapter(ContentBlock)
