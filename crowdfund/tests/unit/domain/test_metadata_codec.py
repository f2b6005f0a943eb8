import json

from crowdfund.domain.entities import CampaignMetadata
from crowdfund.domain.metadata import EMPTY_METADATA, encode_metadata, parse_metadata


def test_parse_metadata_reads_json_object():
    meta = parse_metadata('{"title": "Solar roof", "description": "Panels for the school"}')
    assert meta == CampaignMetadata(title="Solar roof", description="Panels for the school")


def test_parse_metadata_decodes_hex_vector_u8():
    blob = "0x" + json.dumps({"title": "Café", "description": "Beans"}).encode("utf-8").hex()
    meta = parse_metadata(blob)
    assert meta.title == "Café"
    assert meta.description == "Beans"


def test_parse_metadata_accepts_bytes_and_dicts():
    assert parse_metadata(b'{"title": "Bytes"}').title == "Bytes"
    assert parse_metadata({"title": " Dict ", "description": None}) == CampaignMetadata("Dict", "")


def test_parse_metadata_falls_back_to_empty_fields():
    for blob in ("not json", "[1, 2]", "", "0xzz", None, 42, b"\xff\xfe", '"just a string"'):
        assert parse_metadata(blob) == EMPTY_METADATA


def test_parse_metadata_ignores_non_string_fields():
    meta = parse_metadata('{"title": {"nested": true}, "description": ["a"]}')
    assert meta == EMPTY_METADATA
    assert parse_metadata('{"title": 5}').title == "5"


def test_encode_metadata_trims_and_parses_back():
    blob = encode_metadata("  Garden  ", " Seeds and tools ")
    assert json.loads(blob) == {"title": "Garden", "description": "Seeds and tools"}
    assert parse_metadata(blob) == CampaignMetadata("Garden", "Seeds and tools")


def test_parse_metadata_survives_deeply_nested_json():
    blob = "[" * 100000 + "]" * 100000
    assert parse_metadata(blob) == EMPTY_METADATA
    assert parse_metadata(blob.encode("utf-8")) == EMPTY_METADATA
