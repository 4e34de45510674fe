"""Tests for blob key helpers"""
from datetime import datetime, timezone

import pytest

from valuation_app.azure.storage_paths import (
    build_report_file_name,
    ensure_safe_name,
    image_blob_key,
    json_document_key,
    report_blob_key,
    template_blob_key,
)
from valuation_app.core.exceptions import InvalidInputError


def test_keys_are_grouped_by_prefix():
    assert json_document_key("drafts.json") == "json/drafts.json"
    assert template_blob_key("Standard.docx") == "templates/Standard.docx"
    assert image_blob_key("abc.png") == "images/abc.png"
    assert report_blob_key("r.docx") == "reports/r.docx"


@pytest.mark.parametrize("name", ["", "   ", "../secrets.json", "a/b.docx", "a\\b.docx", "..docx"])
def test_unsafe_names_are_rejected(name):
    with pytest.raises(InvalidInputError):
        ensure_safe_name(name)


def test_unsafe_name_is_rejected_before_building_a_key():
    with pytest.raises(InvalidInputError):
        template_blob_key("../json/drafts.json")


def test_report_file_name_uses_sanitised_address_and_utc_stamp():
    now = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    name = build_report_file_name("12 Test St, Auckland", now=now)
    assert name == "12_Test_St_Auckland_20250102T030405678000Z.docx"


def test_report_file_name_falls_back_when_nothing_is_left():
    now = datetime(2025, 1, 2, tzinfo=timezone.utc)
    assert build_report_file_name("!!!", now=now).startswith("report_20250102T")
