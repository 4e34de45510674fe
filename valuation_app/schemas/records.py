"""Draft and history record schemas"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FormData(BaseModel):
    """Inspection form payload as submitted by the UI.

    ``data`` holds section -> field -> value, ``uploadedImages`` maps an image
    placeholder to the stored image it should be filled with. Any other keys
    the form sends (selected commentary, multi-options...) are kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    data: Dict[str, Any] = Field(default_factory=dict)
    uploadedImages: Dict[str, Any] = Field(default_factory=dict)

    @property
    def property_address(self) -> Optional[str]:
        info = self.data.get("Info")
        if isinstance(info, dict):
            address = info.get("Property Address")
            if isinstance(address, str) and address.strip():
                return address.strip()
        return None


class DraftSummary(BaseModel):
    """Schema for draft list entries"""

    draftId: str
    propertyAddress: str
    placeId: str
    createdAt: str
    updatedAt: str


class Draft(DraftSummary):
    """Schema for a stored draft"""

    formData: FormData


class SaveDraftRequest(BaseModel):
    formData: FormData


class SaveDraftResponse(BaseModel):
    draftId: str


class HistorySummary(BaseModel):
    """Schema for history list entries"""

    draftId: str
    propertyAddress: str
    createdAt: str
    updatedAt: str
    ifReplaceText: bool = False
    ifReplaceImage: bool = False


class HistoryRecord(HistorySummary):
    """Schema for a generated-report snapshot"""

    data: Dict[str, Any] = Field(default_factory=dict)


class SaveHistoryRequest(BaseModel):
    draftId: Optional[str] = None
    propertyAddress: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    ifReplaceText: bool = False
    ifReplaceImage: bool = False


class DeleteResponse(BaseModel):
    deleted: bool


DraftsFile = List[Draft]
HistoryFile = List[HistoryRecord]
