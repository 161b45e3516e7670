import base64
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest
from designs import providers
from designs.providers import ProviderError
from django.test import override_settings
from openai import OpenAIError


def _images_result(**image):
    return SimpleNamespace(data=[SimpleNamespace(b64_json=image.get("b64_json"), url=image.get("url"))])


def test_build_sticker_prompt_adds_style_and_reference():
    prompt = providers.build_sticker_prompt("  a happy cactus ", "https://example.com/ref.png")
    assert prompt.startswith("a happy cactus Die-cut sticker")
    assert "https://example.com/ref.png" in prompt


@patch("designs.providers.OpenAI")
def test_generate_image_decodes_b64_payload(mock_openai):
    client = mock_openai.return_value
    client.images.generate.return_value = _images_result(b64_json=base64.b64encode(b"png-bytes").decode())
    assert providers.generate_image("cat") == b"png-bytes"
    kwargs = client.images.generate.call_args.kwargs
    assert kwargs["response_format"] == "b64_json"
    assert kwargs["n"] == 1


@override_settings(IMAGE_GENERATION_MODEL="gpt-image-1")
@patch("designs.providers.download_image", return_value=b"downloaded")
@patch("designs.providers.OpenAI")
def test_generate_image_downloads_url_result(mock_openai, mock_download):
    client = mock_openai.return_value
    client.images.generate.return_value = _images_result(url="https://cdn.example.com/img.png")
    assert providers.generate_image("cat") == b"downloaded"
    assert "response_format" not in client.images.generate.call_args.kwargs
    mock_download.assert_called_once_with("https://cdn.example.com/img.png")


@patch("designs.providers.OpenAI")
def test_generate_image_wraps_sdk_errors(mock_openai):
    mock_openai.return_value.images.generate.side_effect = OpenAIError("rate limited")
    with pytest.raises(ProviderError):
        providers.generate_image("cat")


@override_settings(OPENAI_API_KEY="")
def test_generate_image_requires_api_key():
    with pytest.raises(ProviderError, match="not configured"):
        providers.generate_image("cat")


def _mock_http_client(response=None, error=None):
    http = MagicMock()
    http.__enter__.return_value = http
    if error is not None:
        http.post.side_effect = error
        http.get.side_effect = error
    else:
        http.post.return_value = response
        http.get.return_value = response
    return http


@patch("designs.providers.httpx.Client")
def test_remove_background_posts_image_url(mock_client):
    response = httpx.Response(200, content=b"transparent")
    http = _mock_http_client(response)
    mock_client.return_value = http
    assert providers.remove_background("https://example.com/a.png") == b"transparent"
    kwargs = http.post.call_args.kwargs
    assert kwargs["data"]["image_url"] == "https://example.com/a.png"
    assert kwargs["headers"] == {"X-Api-Key": "removebg-test"}


@patch("designs.providers.httpx.Client")
def test_remove_background_reports_api_error_title(mock_client):
    response = httpx.Response(402, json={"errors": [{"title": "Insufficient credits"}]})
    mock_client.return_value = _mock_http_client(response)
    with pytest.raises(ProviderError, match="Insufficient credits"):
        providers.remove_background("https://example.com/a.png")


@patch("designs.providers.httpx.Client")
def test_download_image_wraps_transport_errors(mock_client):
    mock_client.return_value = _mock_http_client(error=httpx.ConnectError("down"))
    with pytest.raises(ProviderError):
        providers.download_image("https://example.com/a.png")
