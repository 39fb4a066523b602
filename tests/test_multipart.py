"""
Tests for multipart/form-data encoding.
"""

import pytest

from asnetkit.multipart import MultipartFormData, make_boundary, parse_multipart

BOUNDARY = "asnk-test-boundary"


@pytest.fixture
def form():
    form = MultipartFormData()
    form.append_text("Arindam", name="author")
    form.append(b"hello world", name="file", filename="hello.txt", mime_type="text/plain")
    return form


class TestMultipartFormData:
    """Test multipart body encoding."""

    def test_exact_layout(self, form):
        expected = (
            b"--asnk-test-boundary\r\n"
            b'Content-Disposition: form-data; name="author"\r\n'
            b"\r\n"
            b"Arindam\r\n"
            b"--asnk-test-boundary\r\n"
            b'Content-Disposition: form-data; name="file"; filename="hello.txt"\r\n'
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"hello world\r\n"
            b"--asnk-test-boundary--\r\n"
        )
        assert form.encode(BOUNDARY) == expected

    def test_parse_recovers_parts(self, form):
        parts = parse_multipart(form.encode(BOUNDARY), BOUNDARY)
        assert len(parts) == 2

        author, upload = parts
        assert author.name == "author"
        assert author.filename is None
        assert author.data == b"Arindam"
        assert upload.name == "file"
        assert upload.filename == "hello.txt"
        assert upload.headers["Content-Type"] == "text/plain"
        assert upload.data == b"hello world"

    def test_binary_data_with_crlf(self):
        data = b"\r\n\x00line\r\n"
        form = MultipartFormData(lambda f: f.append(data, name="blob"))
        assert parse_multipart(form.encode(BOUNDARY), BOUNDARY)[0].data == data

    def test_empty_form(self):
        form = MultipartFormData()
        assert len(form) == 0
        assert form.encode(BOUNDARY) == b"--asnk-test-boundary--\r\n"
        assert parse_multipart(form.encode(BOUNDARY), BOUNDARY) == []

    def test_content_type(self, form):
        assert form.content_type(BOUNDARY) == "multipart/form-data; boundary=asnk-test-boundary"

    def test_missing_closing_delimiter(self, form):
        with pytest.raises(ValueError):
            parse_multipart(form.encode(BOUNDARY)[:-10], BOUNDARY)

    def test_boundaries_are_unique(self):
        assert make_boundary() != make_boundary()
