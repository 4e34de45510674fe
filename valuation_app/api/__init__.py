"""API routes"""

import logging

from fastapi import APIRouter

from valuation_app.api.routes import ai, config, drafts, history, images, reports, templates

logger = logging.getLogger(__name__)

api_router = APIRouter()

api_router.include_router(drafts.router, prefix="/drafts", tags=["Drafts"])
api_router.include_router(history.router, prefix="/history", tags=["History"])
api_router.include_router(templates.router, prefix="/templates", tags=["Templates"])
api_router.include_router(images.router, prefix="/images", tags=["Images"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(config.router, prefix="/config", tags=["Configuration"])
api_router.include_router(ai.router, prefix="/ai", tags=["AI Assist"])

logger.info(f"API router initialized with {len(api_router.routes)} total routes")


@api_router.get("/")
async def api_root():
    """API root endpoint"""
    return {
        "message": "Property Valuation Report API",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "drafts": "/api/v1/drafts",
            "history": "/api/v1/history",
            "templates": "/api/v1/templates",
            "images": "/api/v1/images",
            "reports": "/api/v1/reports",
            "config": "/api/v1/config",
            "ai": "/api/v1/ai",
        },
    }
