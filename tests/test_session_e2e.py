"""End-to-end tests against a live download server.

Run with --e2e and DCLI_SERVER, DCLI_USERNAME and DCLI_PASSWORD set.
DCLI_INSECURE=1 skips certificate checks for development servers.
"""

import os

import pytest

from dcli import DownloadSession, Token, User
from dcli.config import as_bool


@pytest.fixture(scope="module")
def live_session():
    server = os.environ.get("DCLI_SERVER")
    if not server:
        pytest.skip("DCLI_SERVER not set")
    session = DownloadSession(
        os.environ.get("DCLI_USERNAME", ""),
        os.environ.get("DCLI_PASSWORD", ""),
        server,
        as_bool(os.environ.get("DCLI_INSECURE", "")),
    )
    with session:
        yield session


@pytest.mark.e2e
def test_login_and_list(live_session):
    user = live_session.login()
    try:
        assert isinstance(user, User)
        tokens = live_session.tokens()
        assert all(isinstance(token, Token) for token in tokens)
        assert isinstance(live_session.list_downloads(), list)
    finally:
        live_session.logout()
