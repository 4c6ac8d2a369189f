"""Tests for request body encoding helpers."""

import json

from pytest import raises

from dcli import NewTokens
from dcli.utils import encode_json, encode_upload, print_json


def split_parts(body: bytes, content_type: str) -> list[bytes]:
    """Split a multipart body into its parts (headers + content)."""
    boundary = content_type.split("boundary=", 1)[1].encode("ascii")
    chunks = body.split(b"--" + boundary)
    # First chunk is the empty preamble, last is the closing "--\r\n"
    assert chunks[0] == b""
    assert chunks[-1] == b"--\r\n"
    return [chunk.strip(b"\r\n") for chunk in chunks[1:-1]]


def test_encode_upload_two_parts(upload_file):
    body, content_type = encode_upload("4.0.1", upload_file)

    parts = split_parts(body, content_type)

    assert len(parts) == 2
    file_headers, file_content = parts[0].split(b"\r\n\r\n", 1)
    assert (
        b'Content-Disposition: form-data; name="file"; '
        b'filename="demisto-4.0.1.tar.gz"' in file_headers
    )
    assert file_content == upload_file.read_bytes()

    name_headers, name_content = parts[1].split(b"\r\n\r\n", 1)
    assert name_headers == b'Content-Disposition: form-data; name="name"'
    assert name_content == b"4.0.1"


def test_encode_upload_uses_base_name(tmp_path):
    nested = tmp_path / "builds" / "nightly"
    nested.mkdir(parents=True)
    path = nested / "server.bin"
    path.write_bytes(b"x")

    body, _ = encode_upload("nightly", str(path))

    assert b'filename="server.bin"' in body
    assert str(nested).encode() not in body


def test_encode_upload_missing_file(tmp_path):
    with raises(FileNotFoundError):
        encode_upload("4.0.1", tmp_path / "missing")


def test_encode_json_record():
    assert json.loads(encode_json(NewTokens(count=3, downloads=5))) == {
        "count": 3,
        "downloads": 5,
    }


def test_encode_json_plain_data():
    assert encode_json({"a": 1}) == b'{"a": 1}'


def test_print_json_list(capsys):
    print_json([NewTokens(count=1, downloads=2), {"raw": True}])
    assert json.loads(capsys.readouterr().out) == [
        {"count": 1, "downloads": 2},
        {"raw": True},
    ]
