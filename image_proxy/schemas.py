from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _GeminiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InlineData(_GeminiModel):
    mime_type: str | None = None
    data: str | None = None


class Part(_GeminiModel):
    text: str | None = None
    inline_data: InlineData | None = None


class Content(_GeminiModel):
    role: str | None = None
    parts: list[Part] | None = None


class GenerationConfig(_GeminiModel):
    response_modalities: list[str] = Field(default_factory=lambda: ["IMAGE"])


class GenerateContentRequest(_GeminiModel):
    model: str
    contents: list[Content]
    generation_config: GenerationConfig = Field(default_factory=GenerationConfig)

    def body(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"model"}, exclude_none=True)


class Candidate(_GeminiModel):
    content: Content | None = None
    finish_reason: str | None = None


class GenerateContentResponse(_GeminiModel):
    candidates: list[Candidate] | None = None


class ProxyRequest(BaseModel):
    prompt: str | None = None
    imageData: str | None = None
    mimeType: str | None = None


class ProxyResponse(BaseModel):
    base64Data: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
    upstream_configured: bool
