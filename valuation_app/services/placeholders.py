"""
Placeholder resolution: nested form data -> flat template context.

A schema mirrors the shape of the form data, with placeholder keys at its
leaves:

    {"Info": {"Property Address": "Replace_Address"}}

Resolving ``{"Info": {"Property Address": "12 Test St"}}`` against it yields
``{"Replace_Address": "12 Test St"}``. Fields the schema declares but the data
lacks resolve to an empty string. One section, ``comparableSales``, is a list
of rows and is passed through as a list of flat dicts for table expansion.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from valuation_app.schemas.options import GLOBAL_CONTENT_PLACEHOLDERS
from valuation_app.utils.validation import is_filled

logger = logging.getLogger(__name__)

REPEATING_SECTION_KEY = "comparableSales"
PLACEHOLDER_PREFIX = "Replace_"
EXTRACTED_PREFIX = "extracted_"

# Outermost first; "{%" ... "}" is the single-brace closing form used in templates
_DELIMITER_PAIRS = (
    ("{{", "}}"),
    ("{%", "%}"),
    ("{%", "}"),
    ("[", "]"),
    ("{", "}"),
)


def normalize_placeholder(tag: str) -> str:
    """
    Strip surrounding delimiters and whitespace from a placeholder tag.

    "[Replace_Address]", "{%Replace_Address}" and "{{ Replace_Address }}" all
    normalize to "Replace_Address".
    """
    key = (tag or "").strip()
    stripped = True
    while stripped:
        stripped = False
        for start, end in _DELIMITER_PAIRS:
            if len(key) > len(start) + len(end) - 1 and key.startswith(start) and key.endswith(end):
                key = key[len(start):len(key) - len(end)].strip()
                stripped = True
                break
    return key


def placeholder_for_marker(marker: str) -> Optional[str]:
    """Map an extraction marker like "[extracted_Address]" to "Replace_Address"."""
    key = normalize_placeholder(marker)
    if key.startswith(EXTRACTED_PREFIX):
        return PLACEHOLDER_PREFIX + key[len(EXTRACTED_PREFIX):]
    return None


def schema_from_structure(structure: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Derive a placeholder schema from the extraction JSON structure.

    Every ``[extracted_X]`` leaf becomes a ``Replace_X`` placeholder; leaves
    without a marker and the repeating section are skipped.
    """
    schema: Dict[str, Any] = {}
    for key, value in structure.items():
        if key == REPEATING_SECTION_KEY:
            continue
        if isinstance(value, Mapping):
            nested = schema_from_structure(value)
            if nested:
                schema[key] = nested
        elif isinstance(value, str):
            placeholder = placeholder_for_marker(value)
            if placeholder:
                schema[key] = placeholder
    return schema


def iter_schema(schema: Mapping[str, Any], prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], str]]:
    """Yield (field path, placeholder) for every leaf of a schema"""
    for key, value in schema.items():
        path = prefix + (key,)
        if isinstance(value, Mapping):
            yield from iter_schema(value, path)
        elif isinstance(value, str):
            yield path, value


def _lookup(data: Any, path: Tuple[str, ...]) -> Any:
    current = data
    for part in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(as_text(v) for v in value if as_text(v))
    return str(value)


@dataclass
class ResolvedPlaceholders:
    """Flat render context plus the number of placeholders that received content"""

    values: Dict[str, Any] = field(default_factory=dict)
    populated_count: int = 0

    def set_text(self, placeholder: str, value: Any) -> None:
        text = as_text(value)
        self.values[normalize_placeholder(placeholder)] = text
        if is_filled(text):
            self.populated_count += 1

    @property
    def rows(self) -> List[Dict[str, str]]:
        return self.values.get(REPEATING_SECTION_KEY, [])


def resolve_placeholders(
    data: Mapping[str, Any],
    schema: Mapping[str, Any],
    global_content: Optional[Mapping[str, Any]] = None,
    extra_text: Optional[Mapping[str, Any]] = None,
) -> ResolvedPlaceholders:
    """
    Flatten form data into a placeholder context

    Args:
        data: Nested section -> field -> value form data
        schema: Nested section -> field -> placeholder key
        global_content: Boilerplate keyed by global content field name
        extra_text: Additional text keyed directly by placeholder

    Returns:
        ResolvedPlaceholders whose populated_count counts every non-empty,
        non-"N/A" scalar plus every field of every comparable sales row
    """
    resolved = ResolvedPlaceholders()

    for path, placeholder in iter_schema(schema):
        resolved.set_text(placeholder, _lookup(data, path))

    if global_content:
        for field_name, placeholder in GLOBAL_CONTENT_PLACEHOLDERS.items():
            resolved.set_text(placeholder, global_content.get(field_name))

    for placeholder, value in (extra_text or {}).items():
        resolved.set_text(placeholder, value)

    rows = data.get(REPEATING_SECTION_KEY) if isinstance(data, Mapping) else None
    if isinstance(rows, list):
        flat_rows = [
            {str(k): as_text(v) for k, v in row.items()}
            for row in rows
            if isinstance(row, Mapping)
        ]
        resolved.values[REPEATING_SECTION_KEY] = flat_rows
        resolved.populated_count += sum(len(row) for row in flat_rows)

    logger.info(
        f"Resolved {len(resolved.values)} placeholders, {resolved.populated_count} populated"
    )
    return resolved
