"""Global test fixtures for the download client."""

import json
from http import HTTPStatus
from io import BytesIO
from unittest.mock import patch

import pytest
from pytest import fixture
from requests import Response, Session

from dcli import DownloadSession

SERVER = "https://dl.example.com/"


def pytest_addoption(parser):
    """Add custom pytest command line options."""
    parser.addoption(
        "--e2e",
        action="store_true",
        default=False,
        help="run end-to-end tests",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "e2e: mark test as end-to-end test")


def pytest_collection_modifyitems(config, items):
    """Skip end-to-end tests unless --e2e option is used."""
    if config.getoption("--e2e"):
        # When --e2e is used, run all tests including end-to-end tests
        return

    skip_e2e = pytest.mark.skip(reason="need --e2e option to run")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


def build_response(
    status_code: int = 200, body=b"", cookies: dict | None = None, url: str = SERVER
) -> Response:
    """Build a real requests.Response with the given status, body and cookies.

    Non-bytes bodies are JSON encoded.
    """
    if not isinstance(body, bytes):
        body = json.dumps(body).encode("utf-8")
    response = Response()
    response.status_code = status_code
    try:
        response.reason = HTTPStatus(status_code).phrase
    except ValueError:
        response.reason = ""
    response.raw = BytesIO(body)
    response.url = url
    for name, value in (cookies or {}).items():
        response.cookies.set(name, value)
    return response


@fixture
def mock_request():
    """Patch Session.request so no test touches the network."""
    with patch.object(Session, "request") as request:
        yield request


@fixture
def session(mock_request) -> DownloadSession:
    """DownloadSession bootstrapped against a server that sets XSRF-TOKEN."""
    mock_request.return_value = build_response(cookies={"XSRF-TOKEN": "abc123"})
    session = DownloadSession("admin", "secret", SERVER)
    mock_request.reset_mock(return_value=True)
    return session


@fixture
def upload_file(tmp_path):
    """Small local file to upload."""
    path = tmp_path / "demisto-4.0.1.tar.gz"
    path.write_bytes(b"\x1f\x8bfake archive bytes")
    return path


@fixture
def make_response():
    """Factory for canned responses, see build_response."""
    return build_response
