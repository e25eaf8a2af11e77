import json
import logging

import httpx
import pytest

from image_proxy.config import Settings
from image_proxy.gemini import GeminiImageClient, build_image_client
from image_proxy.schemas import Content, GenerateContentRequest, InlineData, Part


def _envelope() -> GenerateContentRequest:
    return GenerateContentRequest(
        model="gemini-2.5-flash-image-preview",
        contents=[
            Content(
                role="user",
                parts=[
                    Part(text="make it blue"),
                    Part(inline_data=InlineData(mime_type="image/jpeg", data="QUJD")),
                ],
            )
        ],
    )


@pytest.mark.asyncio
async def test_generate_content_posts_envelope_and_parses_reply() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "candidates": [
                    {
                        "content": {"parts": [{"inlineData": {"mimeType": "image/png", "data": "T1VU"}}]},
                        "finishReason": "STOP",
                    }
                ],
                "usageMetadata": {"promptTokenCount": 12},
            },
        )

    client = GeminiImageClient(
        api_key="secret",
        base_url="https://gemini.test/v1beta/",
        transport=httpx.MockTransport(_handler),
    )

    response = await client.generate_content(_envelope())

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://gemini.test/v1beta/models/gemini-2.5-flash-image-preview:generateContent"
    assert request.headers["x-goog-api-key"] == "secret"
    assert json.loads(request.content) == {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": "make it blue"},
                    {"inlineData": {"mimeType": "image/jpeg", "data": "QUJD"}},
                ],
            }
        ],
        "generationConfig": {"responseModalities": ["IMAGE"]},
    }

    candidate = response.candidates[0]
    assert candidate.finish_reason == "STOP"
    assert candidate.content.parts[0].inline_data.data == "T1VU"


@pytest.mark.asyncio
async def test_generate_content_raises_on_upstream_error_status() -> None:
    client = GeminiImageClient(
        api_key="secret",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(lambda _request: httpx.Response(429, json={"error": {"code": 429}})),
    )

    with pytest.raises(httpx.HTTPStatusError):
        await client.generate_content(_envelope())


@pytest.mark.asyncio
async def test_generate_content_raises_on_non_json_reply() -> None:
    client = GeminiImageClient(
        api_key="secret",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(lambda _request: httpx.Response(200, text="<html>oops</html>")),
    )

    with pytest.raises(ValueError):
        await client.generate_content(_envelope())


def test_build_image_client_without_key_logs_and_returns_none(caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="image_proxy.gemini"):
        client = build_image_client(Settings(gemini_api_key=""))

    assert client is None
    assert any("GEMINI_API_KEY" in record.getMessage() for record in caplog.records)


def test_build_image_client_with_key() -> None:
    client = build_image_client(Settings(gemini_api_key="secret"))

    assert isinstance(client, GeminiImageClient)
