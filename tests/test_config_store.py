"""Tests for configuration documents"""
import json

import pytest

from valuation_app.core.exceptions import InvalidInputError
from valuation_app.schemas.options import AiConfig, ImageConfig, OptionCard, OptionItem
from valuation_app.services.config_store import DEFAULT_JSON_STRUCTURE, ConfigStore, card_text


@pytest.fixture
def config(object_store):
    return ConfigStore(object_store)


def test_ai_config_defaults_are_persisted(config, object_store):
    ai_config = config.get_ai_config()

    assert ai_config.model == "gemini-2.5-pro"
    assert ai_config.temperature == 0.2
    assert ai_config.maxOutputTokens == 8192
    assert json.loads(object_store.blobs["json/ai-config.json"])["model"] == "gemini-2.5-pro"


def test_empty_collections_default(config):
    assert config.get_commentary_options() == {}
    assert config.get_multi_options() == []
    assert config.get_commentary_cards() == []
    assert config.get_image_options() == []
    assert config.get_global_content().nzEconomicOverview == ""
    assert config.get_construction_brief().brief == ""


def test_saved_cards_get_ids(config):
    saved = config.save_multi_options([
        OptionCard(cardName="Zoning", placeholder="Replace_Zoning", options=[OptionItem(label="A", option="Residential")]),
    ])

    loaded = config.get_multi_options()
    assert loaded[0].id == saved[0].id
    assert loaded[0].options[0].id


def test_image_sizes_are_keyed_by_normalized_placeholder(config):
    config.save_image_options([
        ImageConfig(cardName="Front", placeholder="{%Image1}", width=400, height=250),
    ])

    sizes = config.image_sizes()
    assert list(sizes) == ["Image1"]
    assert sizes["Image1"].width == 400


def test_default_extraction_config(config):
    extraction = config.get_extraction_config()

    assert json.loads(extraction.jsonStructure) == DEFAULT_JSON_STRUCTURE
    assert extraction.systemPrompt == ""


def test_save_extraction_config(config, object_store):
    structure = {"Info": {"Property Address": "[extracted_Address]"}}
    config.save_extraction_config(
        json.dumps(structure),
        system_prompt="You are a valuer",
        extraction_hints_title="Hints",
        extraction_hints="Land area is in square metres",
    )

    extraction = config.get_extraction_config()
    assert json.loads(extraction.jsonStructure) == structure
    assert extraction.systemPrompt == "You are a valuer"
    assert extraction.extractionHints == "Land area is in square metres"
    assert json.loads(object_store.blobs["json/prompts.json"])["system_prompt"] == "You are a valuer"


@pytest.mark.parametrize("structure", ["{broken", "[1, 2]", '"text"'])
def test_invalid_extraction_structure_writes_nothing(config, object_store, structure):
    with pytest.raises(InvalidInputError):
        config.save_extraction_config(structure, system_prompt="ignored")

    assert "json/json-structure.json" not in object_store.blobs
    assert "json/prompts.json" not in object_store.blobs


def test_ai_config_rejects_out_of_range_values():
    with pytest.raises(ValueError):
        AiConfig(model="gemini-2.5-pro", temperature=3)


def test_card_text_joins_selected_options_in_selection_order():
    cards = [
        OptionCard(
            id="card-1",
            cardName="Condition",
            placeholder="[Replace_Condition]",
            options=[OptionItem(id="o1", label="Good", option="Well maintained"),
                     OptionItem(id="o2", label="Tidy", option="Tidy throughout")],
        ),
        OptionCard(id="card-2", cardName="Unused", placeholder="Replace_Unused"),
    ]

    text = card_text(cards, {"card-1": ["o2", "missing", "o1"], "card-2": []})
    assert text == {"Replace_Condition": "Tidy throughout\n\nWell maintained"}
