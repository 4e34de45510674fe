"""
Draft and history record stores.

Both collections are flat JSON documents (json/drafts.json, json/history.json)
that are read in full and written back in full on every change. There is no
version check: concurrent writers race and the last one to finish wins.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from valuation_app.azure.storage_paths import DRAFTS_DOCUMENT, HISTORY_DOCUMENT
from valuation_app.core.exceptions import ValidationError
from valuation_app.schemas.records import (
    Draft,
    DraftSummary,
    FormData,
    HistoryRecord,
    HistorySummary,
)
from valuation_app.services.json_documents import JsonDocument

logger = logging.getLogger(__name__)


def _format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse the ISO-8601 strings stored in record documents"""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_timestamp(previous: Optional[str] = None) -> str:
    """Current UTC time, nudged past ``previous`` so updates always move forward"""
    now = datetime.now(timezone.utc)
    # Stored values carry milliseconds only; compare at that precision
    now = now.replace(microsecond=now.microsecond // 1000 * 1000)
    if previous:
        last = parse_timestamp(previous)
        if now <= last:
            now = last + timedelta(milliseconds=1)
    return _format_timestamp(now)


def _newest_first(records):
    return sorted(records, key=lambda r: parse_timestamp(r.updatedAt), reverse=True)


class DraftStore:
    """In-progress valuations, at most one per geocoded property"""

    def __init__(self, object_store, geocoder=None):
        self.document = JsonDocument(object_store, DRAFTS_DOCUMENT, List[Draft], list)
        self.geocoder = geocoder

    def list(self) -> List[DraftSummary]:
        drafts = self.document.load()
        return [
            DraftSummary(**d.model_dump(exclude={"formData"}))
            for d in _newest_first(drafts)
        ]

    def get(self, draft_id: str) -> Optional[Draft]:
        for draft in self.document.load():
            if draft.draftId == draft_id:
                return draft
        return None

    def save(self, form_data: FormData) -> Draft:
        """
        Save a form submission, resolving its address to a place id first

        Raises:
            ValidationError: if the form has no property address
            ExternalServiceError: if geocoding fails
        """
        address = form_data.property_address
        if not address:
            raise ValidationError("Property Address is missing, cannot save draft.")
        if self.geocoder is None:
            raise RuntimeError("DraftStore.save requires a geocoder")
        place_id = self.geocoder.place_id_for(address)
        return self.upsert(form_data, place_id, address)

    def upsert(self, form_data: FormData, place_id: str, address: str) -> Draft:
        """
        Insert a draft, or merge into the existing draft for the same place id

        ``data`` and ``uploadedImages`` are merged key by key; any other form
        keys are replaced by the incoming values. ``draftId`` and ``createdAt``
        of an existing draft are kept.
        """
        drafts = self.document.load()
        incoming = form_data.model_dump()

        for index, existing in enumerate(drafts):
            if existing.placeId != place_id:
                continue
            current = existing.formData.model_dump()
            merged = {**current, **incoming}
            merged["data"] = {**current.get("data", {}), **incoming.get("data", {})}
            merged["uploadedImages"] = {
                **current.get("uploadedImages", {}),
                **incoming.get("uploadedImages", {}),
            }
            updated = Draft(
                draftId=existing.draftId,
                propertyAddress=address,
                placeId=place_id,
                createdAt=existing.createdAt,
                updatedAt=next_timestamp(existing.updatedAt),
                formData=FormData(**merged),
            )
            drafts[index] = updated
            self.document.save(drafts)
            logger.info(f"Updated draft {updated.draftId} for place {place_id}")
            return updated

        now = next_timestamp()
        draft = Draft(
            draftId=str(uuid.uuid4()),
            propertyAddress=address,
            placeId=place_id,
            createdAt=now,
            updatedAt=now,
            formData=form_data,
        )
        drafts.append(draft)
        self.document.save(drafts)
        logger.info(f"Created draft {draft.draftId} for place {place_id}")
        return draft

    def delete_by_id(self, draft_id: str) -> bool:
        drafts = self.document.load()
        remaining = [d for d in drafts if d.draftId != draft_id]
        if len(remaining) == len(drafts):
            logger.info(f"Draft {draft_id} not found, nothing to delete")
            return False
        self.document.save(remaining)
        logger.info(f"Deleted draft {draft_id}")
        return True


class HistoryStore:
    """Snapshots of generated reports"""

    def __init__(self, object_store):
        self.document = JsonDocument(object_store, HISTORY_DOCUMENT, List[HistoryRecord], list)

    def list(self) -> List[HistorySummary]:
        records = self.document.load()
        return [
            HistorySummary(**r.model_dump(exclude={"data"}))
            for r in _newest_first(records)
        ]

    def get(self, draft_id: str) -> Optional[HistoryRecord]:
        for record in self.document.load():
            if record.draftId == draft_id:
                return record
        return None

    def save(
        self,
        data: Dict[str, Any],
        draft_id: Optional[str] = None,
        property_address: Optional[str] = None,
        if_replace_text: bool = False,
        if_replace_image: bool = False,
    ) -> HistoryRecord:
        """
        Record a generated report

        A snapshot saved with the id of an existing one refreshes it: data is
        merged over the previous data, flags are replaced, createdAt is kept.
        Otherwise a new snapshot with a fresh id is appended.
        """
        address = property_address or address_from_data(data)
        records = self.document.load()

        if draft_id:
            for index, existing in enumerate(records):
                if existing.draftId != draft_id:
                    continue
                updated = HistoryRecord(
                    draftId=existing.draftId,
                    propertyAddress=address or existing.propertyAddress,
                    createdAt=existing.createdAt,
                    updatedAt=next_timestamp(existing.updatedAt),
                    data={**existing.data, **data},
                    ifReplaceText=if_replace_text,
                    ifReplaceImage=if_replace_image,
                )
                records[index] = updated
                self.document.save(records)
                logger.info(f"Updated history record {draft_id}")
                return updated

        now = next_timestamp()
        record = HistoryRecord(
            draftId=draft_id or str(uuid.uuid4()),
            propertyAddress=address or "",
            createdAt=now,
            updatedAt=now,
            data=data,
            ifReplaceText=if_replace_text,
            ifReplaceImage=if_replace_image,
        )
        records.append(record)
        self.document.save(records)
        logger.info(f"Created history record {record.draftId}")
        return record

    def delete_by_id(self, draft_id: str) -> bool:
        records = self.document.load()
        remaining = [r for r in records if r.draftId != draft_id]
        if len(remaining) == len(records):
            logger.info(f"History record {draft_id} not found, nothing to delete")
            return False
        self.document.save(remaining)
        logger.info(f"Deleted history record {draft_id}")
        return True


def address_from_data(data: Dict[str, Any]) -> Optional[str]:
    info = data.get("Info") if isinstance(data, dict) else None
    if isinstance(info, dict):
        address = info.get("Property Address")
        if isinstance(address, str) and address.strip():
            return address.strip()
    return None
