"""Tests for typed JSON documents over the object store"""
from typing import List

import pytest

from valuation_app.core.exceptions import ValidationError
from valuation_app.services.json_documents import JsonDocument


def test_missing_document_is_initialized_with_default(object_store):
    doc = JsonDocument(object_store, "numbers.json", List[int], lambda: [1, 2])

    assert doc.load() == [1, 2]
    assert object_store.blobs["json/numbers.json"].replace(b" ", b"").replace(b"\n", b"") == b"[1,2]"
    assert object_store.content_types["json/numbers.json"] == "application/json"


def test_stored_document_is_validated_on_load(object_store):
    object_store.write("json/numbers.json", b'["one"]')
    doc = JsonDocument(object_store, "numbers.json", List[int], list)

    with pytest.raises(ValidationError) as exc:
        doc.load()
    assert "numbers.json is invalid" in str(exc.value)


def test_invalid_value_is_never_written(object_store):
    doc = JsonDocument(object_store, "numbers.json", List[int], list)

    with pytest.raises(ValidationError):
        doc.save(["one"])
    assert "json/numbers.json" not in object_store.blobs


def test_save_replaces_whole_document(object_store):
    doc = JsonDocument(object_store, "numbers.json", List[int], list)
    doc.save([1, 2, 3])
    doc.save([4])

    assert doc.load() == [4]
