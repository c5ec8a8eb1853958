"""Tests for transport references and URL unwrapping."""

import pytest

from common.exceptions import ValidationError
from common.references import (
    BlobRef,
    CacheRef,
    DbRowRef,
    DirectFileRef,
    InlineRef,
    format_reference,
    parse_reference,
)
from relay.resolver import unwrap_url


class TestParseReference:
    """Test wire string parsing."""

    @pytest.mark.parametrize("reference", [
        CacheRef(cache_id="18f3a2b4c5d-9f1c2e3a"),
        DbRowRef(row_id="3f1c2e3a-0000-4000-8000-000000000000"),
        BlobRef(url="https://blobs.example.com:9000/blobs/encoded-1-abc.bin"),
        DirectFileRef(url="https://blobs.example.com:9000/blobs/direct-1", file_name="report.zip"),
        InlineRef(payload="eyJmaWxlcyI6W119"),
    ])
    def test_format_then_parse(self, reference):
        assert parse_reference(format_reference(reference)) == reference

    def test_file_reference_splits_on_last_colon(self):
        ref = parse_reference("FILE:http://host:9000/blobs/x:archive.zip")
        assert ref == DirectFileRef(url="http://host:9000/blobs/x", file_name="archive.zip")

    def test_file_reference_without_name_uses_last_segment(self):
        ref = parse_reference("FILE:http://host:9000/blobs/archive.zip")
        assert ref == DirectFileRef(url="http://host:9000/blobs/archive.zip", file_name="archive.zip")

    def test_file_reference_port_is_not_a_file_name(self):
        ref = parse_reference("FILE:https://host:8080")
        assert ref == DirectFileRef(url="https://host:8080", file_name="download")

    @pytest.mark.parametrize("tag", ["S3:", "SUPABASE:"])
    def test_legacy_blob_tags(self, tag):
        assert parse_reference(f"{tag}https://x/y") == BlobRef(url="https://x/y")

    def test_untagged_is_inline(self):
        assert parse_reference("  abc123==  ") == InlineRef(payload="abc123==")

    def test_unknown_tag_is_inline(self):
        assert isinstance(parse_reference("FOO:bar"), InlineRef)

    def test_file_name_with_colon_rejected(self):
        with pytest.raises(ValidationError):
            format_reference(DirectFileRef(url="http://x", file_name="a:b"))


class TestUnwrapUrl:
    """Test reduction of landing URLs to references."""

    def test_ref_parameter(self):
        url = "http://relay:8000/decode?ref=DB%3Aabc-123"
        assert unwrap_url(url) == "DB:abc-123"

    def test_data_parameter_restores_plus(self):
        url = "http://relay:8000/decode?data=ab+cd=="
        assert unwrap_url(url) == "ab+cd=="

    def test_data_parameter_percent_encoded(self):
        url = "http://relay:8000/decode?data=ab%2Bcd%3D%3D"
        assert unwrap_url(url) == "ab+cd=="

    def test_stream_path(self):
        assert unwrap_url("https://relay/stream/18f-abcd1234") == "CACHE:18f-abcd1234"

    def test_other_urls_unchanged(self):
        assert unwrap_url("https://example.com/file.zip") == "https://example.com/file.zip"

    def test_non_url_unchanged(self):
        assert unwrap_url("CACHE:1-2") == "CACHE:1-2"
