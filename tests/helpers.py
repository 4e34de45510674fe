"""Builders and readers for .docx fixtures"""

import base64
import io
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from docx import Document

from valuation_app.core.exceptions import NotFoundError
from valuation_app.services.azure_blob_service import BlobEntry

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def build_docx(
    paragraphs: Sequence = (),
    table_rows: Optional[List[List[str]]] = None,
    header: Optional[str] = None,
) -> bytes:
    """
    Build a template in memory

    A paragraph given as a list of strings is written as one run per string,
    which is how Word splits a tag that was edited halfway through.
    """
    document = Document()
    if header is not None:
        document.sections[0].header.paragraphs[0].text = header
    for paragraph in paragraphs:
        if isinstance(paragraph, str):
            document.add_paragraph(paragraph)
        else:
            p = document.add_paragraph()
            for run_text in paragraph:
                p.add_run(run_text)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, cells in enumerate(table_rows):
            for c, text in enumerate(cells):
                table.cell(r, c).text = text
    output = io.BytesIO()
    document.save(output)
    return output.getvalue()


def open_docx(content: bytes):
    return Document(io.BytesIO(content))


def docx_text(content: bytes) -> str:
    """Body paragraph text, one line per paragraph"""
    return "\n".join(p.text for p in open_docx(content).paragraphs)


class InMemoryObjectStore:
    """Object store double with the same contract as AzureBlobService"""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.created: Dict[str, datetime] = {}
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def write(self, path: str, data, mime_type: str = "application/octet-stream") -> str:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._clock += timedelta(seconds=1)
        self.blobs[path] = bytes(data)
        self.content_types[path] = mime_type
        self.created.setdefault(path, self._clock)
        return path

    def read(self, path: str) -> bytes:
        if path not in self.blobs:
            raise NotFoundError(f"Blob not found: {path}")
        return self.blobs[path]

    def exists(self, path: str) -> bool:
        return path in self.blobs

    def list(self, prefix: str = "") -> List[str]:
        return [entry.name for entry in self.list_entries(prefix)]

    def list_entries(self, prefix: str = "") -> List[BlobEntry]:
        folder = prefix.rstrip("/") + "/" if prefix else ""
        return [
            BlobEntry(
                name=path[len(folder):],
                path=path,
                created_at=self.created[path],
                url=self.url_for(path),
            )
            for path in sorted(self.blobs)
            if path.startswith(folder) and path != folder
        ]

    def delete(self, path: str) -> None:
        self.blobs.pop(path, None)
        self.content_types.pop(path, None)
        self.created.pop(path, None)

    def url_for(self, path: str) -> str:
        return f"https://storage.test/valuation-reports/{path}"


class StaticGeocoder:
    """Geocoder double keyed on the normalized address"""

    def __init__(self):
        self.calls: List[str] = []

    def place_id_for(self, address: str) -> str:
        self.calls.append(address)
        return "place:" + " ".join(address.lower().split())
