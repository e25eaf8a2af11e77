import json

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from image_proxy.config import Settings, settings as default_settings
from image_proxy.gemini import ImageGenerationClient, build_image_client
from image_proxy.observability import BodySizeLimitMiddleware, RequestLoggingMiddleware, configure_logging
from image_proxy.schemas import HealthResponse
from image_proxy.services.proxy_service import handle_proxy_request


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_client(request: Request) -> ImageGenerationClient | None:
    return request.app.state.image_client


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(title="Image Proxy", version="0.1.0")
    app.state.settings = settings
    app.state.image_client = build_image_client(settings)

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/health", response_model=HealthResponse)
    def health(client: ImageGenerationClient | None = Depends(get_image_client)) -> HealthResponse:
        return HealthResponse(status="ok", service="image-proxy", upstream_configured=client is not None)

    @app.post("/api/proxy")
    async def proxy(
        request: Request,
        client: ImageGenerationClient | None = Depends(get_image_client),
        app_settings: Settings = Depends(get_settings),
    ) -> JSONResponse:
        raw = await request.body()
        try:
            body = json.loads(raw) if raw else None
        except ValueError:
            body = None

        outcome = await handle_proxy_request(body, client, model=app_settings.gemini_model)
        return JSONResponse(status_code=outcome.status_code, content=outcome.content)

    app.mount("/", StaticFiles(directory=settings.static_dir, html=True, check_dir=False), name="static")
    return app


app = create_app()
