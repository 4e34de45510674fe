"""Template, image and report generation schemas"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TemplateInfo(BaseModel):
    name: str
    url: str


class ReportInfo(BaseModel):
    name: str
    timeCreated: Optional[str] = None
    url: str


class ImageUploadResponse(BaseModel):
    name: str
    url: str


class ImagePlacement(BaseModel):
    """An uploaded image bound to a template placeholder"""

    placeholder: str
    imageName: str
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)


class GenerateReportRequest(BaseModel):
    """Request model for filling a template with form data"""

    templateFileName: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)
    images: List[ImagePlacement] = Field(default_factory=list)
    # Extra text keyed by placeholder (selected commentary, multi-option text...)
    textReplacements: Dict[str, str] = Field(default_factory=dict)
    # Selected option ids per commentary or multi-option card id
    selections: Dict[str, List[str]] = Field(default_factory=dict)
    draftId: Optional[str] = None
    saveReport: bool = True
    saveHistory: bool = True


class GenerateReportResponse(BaseModel):
    generatedDocxDataUri: str
    replacementsCount: int
    imagesReplaced: int = 0
    attempt: int
    reportName: Optional[str] = None
    draftId: Optional[str] = None
