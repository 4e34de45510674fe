"""
JSON document access on top of the object store.

Every collection (drafts, history, configuration) is one JSON document that is
read in full, validated, and written back in full. A missing document is
initialized with its default and persisted before being returned.
"""

import logging
from typing import Any, Callable, Type

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from valuation_app.azure.storage_paths import json_document_key
from valuation_app.core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

JSON_MIME_TYPE = "application/json"


def describe_validation_error(error: PydanticValidationError) -> str:
    """Summarise the first reported pydantic error as `location: message`"""
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"{location}: {first.get('msg', 'invalid value')}"


class JsonDocument:
    """A single typed JSON document stored under json/<name>"""

    def __init__(self, object_store, name: str, schema: Type[Any], default_factory: Callable[[], Any]):
        self.object_store = object_store
        self.name = name
        self.path = json_document_key(name)
        self.adapter = TypeAdapter(schema)
        self.default_factory = default_factory

    def load(self) -> Any:
        """
        Read and validate the document.

        Returns:
            The parsed document, or its default if the document did not exist
            (in which case the default is written first)

        Raises:
            ValidationError: if the stored document does not match its schema
        """
        try:
            raw = self.object_store.read(self.path)
        except NotFoundError:
            logger.info(f"{self.path} not found, initializing with default")
            return self.save(self.default_factory())

        try:
            return self.adapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.error(f"Invalid document {self.path}: {describe_validation_error(e)}")
            raise ValidationError(f"{self.name} is invalid: {describe_validation_error(e)}")

    def save(self, value: Any) -> Any:
        """Validate and overwrite the whole document, returning the validated value"""
        try:
            value = self.adapter.validate_python(value)
        except PydanticValidationError as e:
            raise ValidationError(f"Refusing to write invalid {self.name}: {describe_validation_error(e)}")
        payload = self.adapter.dump_json(value, indent=2)
        self.object_store.write(self.path, payload, JSON_MIME_TYPE)
        return value
