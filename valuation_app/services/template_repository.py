"""
Template, image and generated-report blobs.

Templates are stored under the caller's file name and silently overwritten on
collision. Images get server-generated names so uploads never collide; their
rendered size travels with the placeholder mapping, not with the blob.
"""

import logging
import os
import secrets
from typing import List

from valuation_app.azure.storage_paths import (
    IMAGES_PREFIX,
    REPORTS_PREFIX,
    TEMPLATES_PREFIX,
    build_report_file_name,
    ensure_safe_name,
    image_blob_key,
    report_blob_key,
    template_blob_key,
)
from valuation_app.core.exceptions import InvalidInputError
from valuation_app.schemas.reports import ReportInfo, TemplateInfo
from valuation_app.utils.validation import DOCX_MIME_TYPE

logger = logging.getLogger(__name__)

TEMPLATE_EXTENSION = ".docx"

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
}


class TemplateRepository:
    """Manages report templates, placeholder images and generated reports"""

    def __init__(self, object_store):
        self.object_store = object_store

    # Templates

    def list_templates(self) -> List[TemplateInfo]:
        names = sorted(
            name for name in self.object_store.list(TEMPLATES_PREFIX)
            if name.lower().endswith(TEMPLATE_EXTENSION) and "/" not in name
        )
        return [
            TemplateInfo(name=name, url=self.object_store.url_for(template_blob_key(name)))
            for name in names
        ]

    def upload_template(self, name: str, content: bytes) -> TemplateInfo:
        """
        Store a template under its file name, replacing any existing one

        Raises:
            InvalidInputError: if the name contains path segments or is not a .docx
        """
        ensure_safe_name(name)
        if not name.lower().endswith(TEMPLATE_EXTENSION):
            raise InvalidInputError(f"Template must be a {TEMPLATE_EXTENSION} file: {name}")
        key = template_blob_key(name)
        replaced = self.object_store.exists(key)
        self.object_store.write(key, content, DOCX_MIME_TYPE)
        logger.info(f"Template {'replaced' if replaced else 'uploaded'}: {name} ({len(content)} bytes)")
        return TemplateInfo(name=name, url=self.object_store.url_for(key))

    def read_template(self, name: str) -> bytes:
        return self.object_store.read(template_blob_key(name))

    def delete_template(self, name: str) -> None:
        self.object_store.delete(template_blob_key(name))
        logger.info(f"Template deleted: {name}")

    # Images

    def upload_image(self, original_name: str, content: bytes) -> str:
        """
        Store an image under a generated name

        Args:
            original_name: Uploaded file name, used only for its extension
            content: Image bytes

        Returns:
            Generated blob name (random hex + original extension)
        """
        extension = os.path.splitext(original_name or "")[1].lower() or ".png"
        if extension not in IMAGE_MIME_TYPES:
            raise InvalidInputError(f"Unsupported image type: {extension}")
        name = f"{secrets.token_hex(16)}{extension}"
        self.object_store.write(image_blob_key(name), content, IMAGE_MIME_TYPES[extension])
        logger.info(f"Image uploaded: {original_name} -> {name}")
        return name

    def read_image(self, name: str) -> bytes:
        return self.object_store.read(image_blob_key(name))

    def image_url(self, name: str) -> str:
        return self.object_store.url_for(image_blob_key(name))

    def delete_image(self, name: str) -> None:
        self.object_store.delete(image_blob_key(name))

    def list_images(self) -> List[str]:
        return sorted(self.object_store.list(IMAGES_PREFIX))

    # Generated reports

    def save_report(self, content: bytes, base_name: str) -> str:
        name = build_report_file_name(base_name)
        self.object_store.write(report_blob_key(name), content, DOCX_MIME_TYPE)
        logger.info(f"Report saved: {name}")
        return name

    def list_reports(self) -> List[ReportInfo]:
        entries = [
            e for e in self.object_store.list_entries(REPORTS_PREFIX)
            if e.name.lower().endswith(TEMPLATE_EXTENSION)
        ]
        entries.sort(key=lambda e: (e.created_at is not None, e.created_at), reverse=True)
        return [
            ReportInfo(
                name=e.name,
                timeCreated=e.created_at.isoformat() if e.created_at else None,
                url=e.url,
            )
            for e in entries
        ]

    def read_report(self, name: str) -> bytes:
        return self.object_store.read(report_blob_key(name))

    def delete_report(self, name: str) -> None:
        ensure_safe_name(name)
        self.object_store.delete(report_blob_key(name))
        logger.info(f"Report deleted: {name}")
