"""
Tests for multipart.py
"""
from kintone_transport.multipart import encode_file_body


class TestEncodeFileBody:
    def test_single_part(self):
        body = encode_file_body("a.txt", b"hello")

        assert body.content_type.startswith("multipart/form-data; boundary=")
        boundary = body.content_type.split("boundary=", 1)[1]
        assert body.content.startswith(f"--{boundary}\r\n".encode())
        assert body.content.endswith(f"--{boundary}--\r\n".encode())
        assert body.content.count(b"Content-Disposition") == 1
        assert b'form-data; name="file"; filename="a.txt"' in body.content
        assert b"\r\n\r\nhello\r\n" in body.content

    # Path: text content encoded as UTF-8
    def test_text_content(self):
        body = encode_file_body("memo.txt", "こんにちは")
        assert "こんにちは".encode("utf-8") in body.content

    def test_custom_field_name(self):
        body = encode_file_body("a.txt", b"x", field_name="attachment")
        assert b'name="attachment"' in body.content

    # Path: boundary differs per body
    def test_fresh_boundary(self):
        assert encode_file_body("a.txt", b"x").content_type != encode_file_body("a.txt", b"x").content_type
