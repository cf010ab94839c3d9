import logging
import time
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from jwt_signer.core.config import Settings, settings as default_settings
from jwt_signer.core.exceptions import SignerServiceError
from jwt_signer.core.keys import load_key_material
from jwt_signer.api.v1 import sign, wellknown
from jwt_signer.schemas.sign import HealthResponse
from jwt_signer.services.signer import TokenSigner
from jwt_signer.utils.logging import setup_logging
from jwt_signer.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    The signing key is loaded here, once. A missing or unparsable key raises
    KeyMaterialError and the process never starts serving.
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    key_material = load_key_material(settings)
    if not settings.SIGNING_SECRET:
        logger.warning("SIGNING_SECRET is not set, the signing endpoint is open to any client")

    app = FastAPI(
        title=settings.APP_NAME,
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url=None
    )

    # Read-only for the lifetime of the process
    app.state.settings = settings
    app.state.key_material = key_material
    app.state.token_signer = TokenSigner(key_material)
    app.state.rate_limiter = RateLimiter()

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    # Security Headers Middleware
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    # Exception Handlers
    @app.exception_handler(SignerServiceError)
    async def signer_exception_handler(request: Request, exc: SignerServiceError):
        if exc.status_code < 500:
            logger.info(
                "Request rejected",
                extra={
                    "path": request.url.path,
                    "status": exc.status_code,
                    "error": exc.__class__.__name__,
                    "client": request.client.host if request.client else None
                }
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error},
            headers={**getattr(request.state, "rate_limit_headers", {}), **(exc.headers or {})}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "invalid request body"
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{location}: {first.get('msg')}" if location else first.get("msg", message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": message},
            headers=getattr(request.state, "rate_limit_headers", None)
        )

    # Include Routers
    app.include_router(sign.router, tags=["Signing"])
    app.include_router(wellknown.router, prefix="/.well-known", tags=["Discovery"])

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="ok", ts=int(time.time() * 1000))

    return app

def run():
    import uvicorn

    uvicorn.run(
        "jwt_signer.main:create_app",
        factory=True,
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_config=None
    )

if __name__ == "__main__":
    run()
