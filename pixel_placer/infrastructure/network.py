from __future__ import annotations

import base64
import binascii
import io
import logging
import time
from typing import Callable
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image, UnidentifiedImageError

from ..config import SETTINGS, BotSettings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]


class DecodeFailure(RuntimeError):
    """The image source could not be fetched or decoded."""


def decode_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeFailure(f"Unreadable image data: {exc}") from exc
    return img.convert("RGBA")


def _data_url_payload(url: str) -> bytes:
    """Return the bytes embedded in a ``data:`` URL.

    Only the base64 and percent-encoded forms from RFC 2397 are understood.
    """

    header, sep, payload = url[len("data:"):].partition(",")
    if not sep:
        raise DecodeFailure("Malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeFailure(f"Malformed base64 payload: {exc}") from exc
    return unquote_to_bytes(payload)


class ImageFetcher:
    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        settings: BotSettings = SETTINGS,
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory or requests.Session
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": "pixel-placer/1.0"})
        return session

    def fetch(self, url: str) -> Image.Image:
        if url.startswith("data:"):
            return decode_image(_data_url_payload(url))

        last_exception: Exception | None = None
        for attempt in range(1, self._settings.retries + 2):
            try:
                response = self._session.get(url, timeout=self._settings.timeout)
                response.raise_for_status()
            except requests.RequestException as exc:
                last_exception = exc
                logger.warning("Fetching %s failed (attempt %d): %s", url, attempt, exc)
                time.sleep(0.4 * attempt)
                continue
            return decode_image(response.content)
        raise DecodeFailure(f"Could not fetch {url}: {last_exception}")


FETCHER = ImageFetcher()
