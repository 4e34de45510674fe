"""
Template API routes
Report templates (.docx files with placeholder tags)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from valuation_app.api.deps import Services, get_services
from valuation_app.core.config import settings
from valuation_app.schemas.records import DeleteResponse
from valuation_app.schemas.reports import TemplateInfo
from valuation_app.utils.validation import validate_upload_size

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[TemplateInfo])
async def list_templates(services: Services = Depends(get_services)):
    return services.templates.list_templates()


@router.post("", response_model=TemplateInfo)
async def upload_template(file: UploadFile = File(...), services: Services = Depends(get_services)):
    """Upload a template, replacing any template with the same file name"""
    content = await file.read()
    validate_upload_size(content, settings.MAX_TEMPLATE_SIZE_MB, "Template")
    return services.templates.upload_template(file.filename, content)


@router.delete("/{name}", response_model=DeleteResponse)
async def delete_template(name: str, services: Services = Depends(get_services)):
    services.templates.delete_template(name)
    return DeleteResponse(deleted=True)
