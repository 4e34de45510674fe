"""Validation utilities"""

import base64
import binascii
import json
import re
from typing import Any, Dict, Tuple

from valuation_app.core.exceptions import InvalidInputError

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+\-/]+)?(?:;[\w\-]+=[\w\-]+)*;base64,(?P<data>.*)$", re.DOTALL)


def to_data_uri(content: bytes, mime_type: str = DOCX_MIME_TYPE) -> str:
    """Encode bytes as a base64 data URI"""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Decode a base64 data URI.

    Returns:
        (mime_type, content) tuple

    Raises:
        InvalidInputError: if the string is not a base64 data URI
    """
    match = _DATA_URI_RE.match(data_uri or "")
    if not match:
        raise InvalidInputError("Expected a base64 data URI")
    try:
        content = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"Invalid base64 payload: {e}")
    return match.group("mime") or "application/octet-stream", content


def parse_json_object(text: str) -> Dict[str, Any]:
    """Parse a JSON string that must hold an object"""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON: {e}")
    if not isinstance(parsed, dict):
        raise InvalidInputError("JSON structure must be an object")
    return parsed


def validate_upload_size(content: bytes, max_mb: int, label: str = "File") -> None:
    if not content:
        raise InvalidInputError(f"{label} is empty")
    if len(content) > max_mb * 1024 * 1024:
        raise InvalidInputError(f"{label} exceeds the {max_mb} MB limit")


def is_filled(value: Any) -> bool:
    """
    Whether a form value counts as filled in.

    Empty strings, the "N/A" sentinel and unfilled ``[extracted_...]`` markers
    left over from the extraction structure are not.
    """
    if value is None:
        return False
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return bool(value) and value != "N/A" and not value.startswith("[extracted_")
