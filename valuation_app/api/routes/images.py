"""
Image API routes
Photos uploaded for image placeholders
"""

import logging
import mimetypes
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from valuation_app.api.deps import Services, get_services
from valuation_app.core.config import settings
from valuation_app.schemas.records import DeleteResponse
from valuation_app.schemas.reports import ImageUploadResponse
from valuation_app.utils.validation import validate_upload_size

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ImageUploadResponse])
async def list_images(services: Services = Depends(get_services)):
    return [
        ImageUploadResponse(name=name, url=services.templates.image_url(name))
        for name in services.templates.list_images()
    ]


@router.post("", response_model=ImageUploadResponse)
async def upload_image(file: UploadFile = File(...), services: Services = Depends(get_services)):
    """Upload an image; it is stored under a generated name"""
    content = await file.read()
    validate_upload_size(content, settings.MAX_IMAGE_SIZE_MB, "Image")
    name = services.templates.upload_image(file.filename, content)
    return ImageUploadResponse(name=name, url=services.templates.image_url(name))


@router.get("/{name}")
async def get_image(name: str, services: Services = Depends(get_services)):
    content = services.templates.read_image(name)
    media_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    return Response(content=content, media_type=media_type)


@router.delete("/{name}", response_model=DeleteResponse)
async def delete_image(name: str, services: Services = Depends(get_services)):
    services.templates.delete_image(name)
    return DeleteResponse(deleted=True)
