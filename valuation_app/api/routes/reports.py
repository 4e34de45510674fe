"""
Report API routes
Generates reports from templates and serves previously generated ones
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from valuation_app.api.deps import Services, get_services
from valuation_app.schemas.records import DeleteResponse
from valuation_app.schemas.reports import GenerateReportRequest, GenerateReportResponse, ReportInfo
from valuation_app.utils.validation import DOCX_MIME_TYPE

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ReportInfo])
async def list_reports(services: Services = Depends(get_services)):
    """List generated reports, newest first"""
    return services.templates.list_reports()


@router.post("", response_model=GenerateReportResponse)
async def generate_report(request: GenerateReportRequest, services: Services = Depends(get_services)):
    """
    Fill a template with form data, images and selected commentary

    The rendered document is returned as a data URI and, unless disabled,
    archived under reports/ with a history snapshot.
    """
    logger.info(f"Generating report from template {request.templateFileName}")
    return services.reports.generate(request)


@router.get("/{name}")
async def download_report(name: str, services: Services = Depends(get_services)):
    content = services.templates.read_report(name)
    return Response(
        content=content,
        media_type=DOCX_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )


@router.delete("/{name}", response_model=DeleteResponse)
async def delete_report(name: str, services: Services = Depends(get_services)):
    services.templates.delete_report(name)
    return DeleteResponse(deleted=True)
