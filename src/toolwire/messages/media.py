"""Build media content blocks from bytes, files or URLs.

URLs stay references unless `inline=True`, in which case they are
downloaded with httpx and embedded as base64. Paths and raw bytes are
always inlined.

Example:
    >>> image_block("https://example.com/weather.jpg")               # URL reference
    >>> image_block("https://example.com/weather.jpg", inline=True)  # downloaded + base64
    >>> audio_block(Path("clip.wav"))                                  # audio/x-wav inline
    >>> image_block(png_bytes, media_type="image/png")
"""

from __future__ import annotations

import base64
import mimetypes
import os
from pathlib import Path
from typing import TypeVar
from urllib.parse import urlparse

import httpx

from toolwire.foundation.config import get_settings
from toolwire.foundation.errors import MediaError
from toolwire.observability import get_logger

from .content import AudioBlock, FileBlock, ImageBlock, MediaBlock

B = TypeVar("B", bound=MediaBlock)

Source = bytes | bytearray | str | os.PathLike[str]

log = get_logger("toolwire.media")


def encode_bytes(data: bytes | bytearray) -> str:
    """Base64-encode raw bytes to ASCII text."""
    return base64.b64encode(bytes(data)).decode("ascii")


def guess_media_type(name: str) -> str | None:
    """Guess a media type from a file name or URL path."""
    media_type, _ = mimetypes.guess_type(urlparse(name).path if "://" in name else name)
    return media_type


def _is_url(source: object) -> bool:
    return isinstance(source, str) and urlparse(source).scheme in ("http", "https")


def _check_size(data: bytes) -> bytes:
    limit = int(get_settings().media.max_bytes)
    if len(data) > limit:
        raise MediaError(f"media payload is {len(data)} bytes; limit is {limit}")
    return data


def fetch_media(url: str, *, timeout: float | None = None) -> tuple[bytes, str | None]:
    """Download `url`, returning (content, media type from the response headers)."""
    timeout = timeout or get_settings().media.fetch_timeout
    log.debug("fetching media", url=url)
    try:
        r = httpx.get(url, timeout=timeout, follow_redirects=True)
        r.raise_for_status()
    except httpx.HTTPError as e:
        raise MediaError(f"could not fetch {url}: {e}") from e
    header = r.headers.get("content-type")
    return _check_size(r.content), header.split(";")[0].strip() if header else None


def _make(kind: type[B], **fields: object) -> B:
    try:
        return kind(**fields)
    except ValueError as e:
        raise MediaError(str(e)) from e


def _build(
    kind: type[B],
    source: Source,
    media_type: str | None,
    *,
    inline: bool,
    **extra: object,
) -> B:
    if isinstance(source, (bytes, bytearray)):
        if not media_type:
            raise MediaError(f"media_type is required for raw {kind.family or 'file'} bytes")
        data = _check_size(bytes(source))
    elif _is_url(source):
        url = str(source)
        if not inline:
            return _make(kind, url=url, media_type=media_type or guess_media_type(url), **extra)
        data, served_type = fetch_media(url)
        media_type = media_type or served_type or guess_media_type(url)
    else:
        path = Path(source)
        if not path.is_file():
            raise MediaError(f"no such file: {path}")
        data = _check_size(path.read_bytes())
        media_type = media_type or guess_media_type(path.name)
        if kind is FileBlock:
            extra.setdefault("filename", path.name)

    if not media_type:
        raise MediaError(f"cannot determine media type for {kind.__name__}; pass media_type explicitly")
    return _make(kind, data=encode_bytes(data), media_type=media_type, **extra)


def image_block(source: Source, media_type: str | None = None, *, inline: bool = False) -> ImageBlock:
    """Image content block from a URL, path or bytes."""
    return _build(ImageBlock, source, media_type, inline=inline)


def audio_block(source: Source, media_type: str | None = None, *, inline: bool = False) -> AudioBlock:
    """Audio content block from a URL, path or bytes."""
    return _build(AudioBlock, source, media_type, inline=inline)


def file_block(
    source: Source,
    media_type: str | None = None,
    *,
    inline: bool = False,
    filename: str | None = None,
) -> FileBlock:
    """Document content block from a URL, path or bytes."""
    extra: dict[str, object] = {"filename": filename} if filename else {}
    return _build(FileBlock, source, media_type, inline=inline, **extra)
