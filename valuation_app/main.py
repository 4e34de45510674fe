"""
Main FastAPI application
Property valuation report service backed by Azure Blob Storage
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from google import genai

from valuation_app.api import api_router
from valuation_app.api.deps import build_services
from valuation_app.api.errors import register_exception_handlers
from valuation_app.core.config import settings
from valuation_app.core.logging import setup_logging
from valuation_app.services.azure_blob_service import AzureBlobService

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the storage adapter and AI client once per process"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    if settings.storage_configured:
        genai_client = genai.Client(api_key=settings.GEMINI_API_KEY) if settings.GEMINI_API_KEY else None
        if genai_client is None:
            logger.warning("GEMINI_API_KEY not set, AI assist endpoints will return 502")
        app.state.services = build_services(settings, AzureBlobService(), genai_client=genai_client)
    else:
        logger.warning("AZURE_STORAGE_CONNECTION_STRING not set, storage-backed endpoints will return 503")
        app.state.services = None
    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Drafts, templates and generated reports for residential property valuations",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

logger.info(f"CORS origins configured: {settings.CORS_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Tag every request with a correlation id, echoed in the response headers"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={"correlation_id": correlation_id},
    )
    return response


register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "storage": "Azure Blob Storage",
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
