import logging
from typing import Protocol

import httpx

from image_proxy.config import Settings
from image_proxy.schemas import GenerateContentRequest, GenerateContentResponse

logger = logging.getLogger("image_proxy.gemini")


class ImageGenerationClient(Protocol):
    async def generate_content(self, request: GenerateContentRequest) -> GenerateContentResponse: ...


class GeminiImageClient:
    """Calls the Gemini REST ``generateContent`` endpoint.

    A fresh ``httpx.AsyncClient`` is opened per call, so one instance can be
    shared by every in-flight request without synchronization.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout_s: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport

    async def generate_content(self, request: GenerateContentRequest) -> GenerateContentResponse:
        url = f"{self._base_url}/models/{request.model}:generateContent"
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
            response = await client.post(url, headers=headers, json=request.body())
            response.raise_for_status()
            return GenerateContentResponse.model_validate(response.json())


def build_image_client(settings: Settings) -> GeminiImageClient | None:
    if not settings.gemini_api_key:
        logger.error("GEMINI_API_KEY is not set; image generation is disabled")
        return None
    return GeminiImageClient(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        timeout_s=settings.gemini_timeout_s,
    )
