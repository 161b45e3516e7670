"""Clients for the external image services.

- Image generation goes through the OpenAI images API.
- Background removal goes through the remove.bg HTTP API.
- Resulting bytes are persisted with Django's default storage so URLs stay
  valid after the provider's temporary links expire.
"""

import base64
import logging
import uuid
from urllib.parse import urljoin

import httpx
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from openai import OpenAI, OpenAIError

logger = logging.getLogger("chaos.designs")

STICKER_STYLE = (
    "Die-cut sticker illustration, bold clean outlines, vibrant colors, "
    "single centered subject on a plain white background, no border text."
)


class ProviderError(Exception):
    """Raised when an upstream image service fails."""


def build_sticker_prompt(prompt: str, reference_url: str | None = None) -> str:
    """Wrap a shopper prompt with the house sticker style."""
    parts = [prompt.strip(), STICKER_STYLE]
    if reference_url:
        parts.append(f"Keep the look and composition of the reference image at {reference_url}.")
    return " ".join(parts)


def _request_timeout() -> httpx.Timeout:
    seconds = float(settings.IMAGE_DOWNLOAD_TIMEOUT_SECONDS)
    return httpx.Timeout(timeout=seconds, connect=min(seconds, 10.0))


def download_image(url: str) -> bytes:
    try:
        with httpx.Client(timeout=_request_timeout(), follow_redirects=True) as client:
            response = client.get(url)
    except httpx.HTTPError as exc:
        raise ProviderError(f"Image download failed: {exc}") from exc
    if response.status_code >= 400:
        raise ProviderError(f"Image download failed with status {response.status_code}")
    return response.content


def generate_image(prompt: str, *, reference_url: str | None = None) -> bytes:
    """Render a sticker for `prompt` and return PNG bytes."""
    if not settings.OPENAI_API_KEY:
        raise ProviderError("Image generation is not configured.")
    model = settings.IMAGE_GENERATION_MODEL
    params = {
        "model": model,
        "prompt": build_sticker_prompt(prompt, reference_url),
        "size": settings.IMAGE_GENERATION_SIZE,
        "n": 1,
    }
    if model.startswith("dall-e"):
        params["response_format"] = "b64_json"
    client = OpenAI(api_key=settings.OPENAI_API_KEY)
    try:
        result = client.images.generate(**params)
    except OpenAIError as exc:
        logger.warning("design.provider_failed", extra={"event": "design.provider_failed", "error": str(exc)})
        raise ProviderError(f"Image generation failed: {exc}") from exc

    if not result.data:
        raise ProviderError("Image generation returned no image.")
    image = result.data[0]
    if image.b64_json:
        return base64.b64decode(image.b64_json)
    if image.url:
        return download_image(image.url)
    raise ProviderError("Image generation returned no image.")


def remove_background(image_url: str) -> bytes:
    """Return PNG bytes of `image_url` with its background removed."""
    if not settings.REMOVE_BG_API_KEY:
        raise ProviderError("Background removal is not configured.")
    try:
        with httpx.Client(timeout=_request_timeout()) as client:
            response = client.post(
                settings.REMOVE_BG_URL,
                data={"image_url": image_url, "size": "auto", "format": "png"},
                headers={"X-Api-Key": settings.REMOVE_BG_API_KEY},
            )
    except httpx.HTTPError as exc:
        raise ProviderError(f"Background removal failed: {exc}") from exc
    if response.status_code >= 400:
        try:
            errors = response.json().get("errors") or []
            detail = errors[0].get("title") if errors else response.text
        except ValueError:
            detail = response.text
        raise ProviderError(f"Background removal failed: {detail}")
    return response.content


def store_image(content: bytes, *, folder: str) -> str:
    """Save PNG bytes to the default storage and return an absolute URL."""
    name = default_storage.save(f"{folder}/{uuid.uuid4().hex}.png", ContentFile(content))
    url = default_storage.url(name)
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return urljoin(settings.BACKEND_URL.rstrip("/") + "/", url.lstrip("/"))
