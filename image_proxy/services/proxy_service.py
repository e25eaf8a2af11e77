import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from image_proxy.gemini import ImageGenerationClient
from image_proxy.schemas import (
    Content,
    ErrorResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationConfig,
    InlineData,
    Part,
    ProxyRequest,
    ProxyResponse,
)

CONFIG_ERROR = "Server initialization error: API key not configured securely on Google Cloud."
MISSING_FIELDS_ERROR = "Missing prompt, image data, or mime type in request body."
SAFETY_ERROR = "The spell was rejected by the Guardian of the Nexus (Safety Filter)."
NO_IMAGE_ERROR = "The Transmutation failed to yield a visual artifact."
UPSTREAM_ERROR = "Internal Alchemy Engine Failure. Check server logs."

SAFETY_FINISH_REASON = "SAFETY"

logger = logging.getLogger("image_proxy.proxy")


@dataclass(frozen=True)
class ProxyOutcome:
    status_code: int
    content: dict[str, str]


def build_envelope(request: ProxyRequest, model: str) -> GenerateContentRequest:
    return GenerateContentRequest(
        model=model,
        contents=[
            Content(
                role="user",
                parts=[
                    Part(text=request.prompt),
                    Part(inline_data=InlineData(mime_type=request.mimeType, data=request.imageData)),
                ],
            )
        ],
        generation_config=GenerationConfig(response_modalities=["IMAGE"]),
    )


def extract_image_data(response: GenerateContentResponse) -> tuple[str | None, str | None]:
    """Return ``(base64_data, finish_reason)`` from the first candidate."""
    if not response.candidates:
        return None, None
    candidate = response.candidates[0]
    if candidate.content is None or not candidate.content.parts:
        return None, candidate.finish_reason
    for part in candidate.content.parts:
        if part.inline_data is not None:
            return part.inline_data.data or None, candidate.finish_reason
    return None, candidate.finish_reason


async def handle_proxy_request(
    body: Any,
    client: ImageGenerationClient | None,
    model: str,
) -> ProxyOutcome:
    if client is None:
        logger.error("image client is not initialized; GEMINI_API_KEY missing")
        return _error(500, CONFIG_ERROR)

    request = _parse_request(body)
    if request is None:
        return _error(400, MISSING_FIELDS_ERROR)

    envelope = build_envelope(request, model)
    try:
        response = await client.generate_content(envelope)
        base64_data, finish_reason = extract_image_data(response)
    except Exception:  # noqa: BLE001
        logger.exception("upstream image generation failed")
        return _error(500, UPSTREAM_ERROR)

    if not base64_data:
        if finish_reason == SAFETY_FINISH_REASON:
            return _error(403, SAFETY_ERROR)
        return _error(500, NO_IMAGE_ERROR)

    return ProxyOutcome(status_code=200, content=ProxyResponse(base64Data=base64_data).model_dump())


def _parse_request(body: Any) -> ProxyRequest | None:
    if not isinstance(body, dict):
        return None
    try:
        request = ProxyRequest.model_validate(body, strict=True)
    except ValidationError:
        return None
    if not (request.prompt and request.imageData and request.mimeType):
        return None
    return request


def _error(status_code: int, message: str) -> ProxyOutcome:
    return ProxyOutcome(status_code=status_code, content=ErrorResponse(error=message).model_dump())
