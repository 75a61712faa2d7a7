"""Unit tests for the path codec."""

import base64

import pytest

from gitlearn.core.codec import (
    DECODE_FAILED,
    ContentKind,
    classify,
    collation_key,
    decode_text,
    is_decode_failure,
    language_for,
    looks_binary,
    mime_type_for,
    strip_transport,
    to_display_text,
    to_image_data_url,
    to_transport_base64,
)
from gitlearn.core.errors import DecodeFailure


class TestClassify:
    @pytest.mark.parametrize("path", ["a.png", "dir/b.JPG", "c.jpeg", "d.gif", "e.bmp", "f.svg", "g.ico", "h.WebP"])
    def test_image_extensions(self, path):
        assert classify(path) == ContentKind.IMAGE

    @pytest.mark.parametrize("path", ["notes.md", "main.go", "Makefile", "archive.tar.gz", "png"])
    def test_everything_else_is_text(self, path):
        assert classify(path) == ContentKind.TEXT

    def test_extension_of_dotted_directory_is_ignored(self):
        assert classify("img.png/readme") == ContentKind.TEXT


class TestMimeAndLanguage:
    def test_known_mime_types(self):
        assert mime_type_for("x.png") == "image/png"
        assert mime_type_for("x.jpg") == "image/jpeg"
        assert mime_type_for("x.svg") == "image/svg+xml"
        assert mime_type_for("README.md") == "text/markdown"

    def test_unknown_mime_type_falls_back(self):
        assert mime_type_for("x.xyz") == "application/octet-stream"
        assert mime_type_for("noext") == "application/octet-stream"

    def test_language_hints(self):
        assert language_for("src/app.py") == "python"
        assert language_for("docs/guide.md") == "markdown"
        assert language_for("Dockerfile") == "docker"
        assert language_for("build/Dockerfile") == "docker"
        assert language_for("notes.unknown") == "plaintext"


class TestTransport:
    def test_round_trip_unicode(self):
        for text in ["", "hello", "héllo wörld", "日本語のテキスト", "emoji 🚀\nline two\ttab"]:
            assert to_display_text(to_transport_base64(text)) == text

    def test_bytes_are_encoded_as_is(self):
        assert to_transport_base64(b"\x00\x01\xff") == base64.b64encode(b"\x00\x01\xff").decode()

    def test_github_line_breaks_are_stripped(self):
        encoded = base64.b64encode(("x" * 100).encode()).decode()
        wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"
        assert strip_transport(wrapped) == encoded
        assert to_display_text(wrapped) == "x" * 100

    def test_invalid_utf8_gives_sentinel(self):
        text = to_display_text(base64.b64encode(b"\xff\xfe\xfd").decode())
        assert text == DECODE_FAILED
        assert is_decode_failure(text)

    def test_malformed_base64_gives_sentinel(self):
        assert to_display_text("not base64!!") == DECODE_FAILED

    def test_decode_text_raises_typed_failure(self):
        with pytest.raises(DecodeFailure):
            decode_text(base64.b64encode(b"\xc3\x28").decode())

    def test_binary_sniffing(self):
        assert looks_binary(b"abc\x00def")
        assert not looks_binary(b"plain text")
        # only the first 8000 bytes are inspected
        assert not looks_binary(b"a" * 8000 + b"\x00")


class TestImageDataUrl:
    def test_wraps_with_mime(self):
        assert to_image_data_url("iVBO\nRw0K\n", "pic.png") == "data:image/png;base64,iVBORw0K"

    def test_unknown_extension_uses_octet_stream(self):
        assert to_image_data_url("AAAA", "blob.raw").startswith("data:application/octet-stream;base64,")

    def test_existing_data_url_passes_through(self):
        url = "data:image/gif;base64,R0lGOD"
        assert to_image_data_url(url, "x.png") == url


class TestCollationKey:
    def test_case_insensitive_primary_order(self):
        titles = ["banana", "Apple", "cherry"]
        assert sorted(titles, key=collation_key) == ["Apple", "banana", "cherry"]

    def test_accents_sort_next_to_base_letter(self):
        titles = ["zeta", "éclair", "eagle"]
        assert sorted(titles, key=collation_key) == ["eagle", "éclair", "zeta"]

    def test_lowercase_before_uppercase_on_tie(self):
        assert sorted(["Go", "go"], key=collation_key) == ["go", "Go"]
