"""DownloadSession class for talking to the download server."""

import logging
import warnings
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from pathlib import Path
from typing import Any, BinaryIO, Generic, TypeVar

import urllib3
from requests import JSONDecodeError, Response, Session

from .models import (
    Credentials,
    Download,
    DownloadLog,
    NewEmailToken,
    NewTokens,
    Quiz,
    Token,
    User,
    UserDetails,
)
from .utils import JSON_CONTENT_TYPE, encode_json, encode_upload

logger = logging.getLogger(__name__)

XSRF_TOKEN_HEADER = "X-XSRF-TOKEN"
XSRF_COOKIE_NAME = "XSRF-TOKEN"
CHUNK_SIZE = 64 * 1024

T = TypeVar("T")


@dataclass(frozen=True)
class RawSink:
    """Destination that receives the raw response body."""

    stream: BinaryIO


@dataclass(frozen=True)
class JsonTarget(Generic[T]):
    """Destination that decodes the JSON response body with decode."""

    decode: Callable[[Any], T]


def list_of(decode: Callable[[Any], T]) -> JsonTarget[list[T]]:
    """JsonTarget for a JSON array whose items are decoded with decode."""

    def decode_list(data: Any) -> list[T]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise TypeError(f"expected an array, got {type(data).__name__}")
        return [decode(item) for item in data]

    return JsonTarget(decode_list)


class DownloadResponseError(ValueError):
    """Exception raised when the server answers with a non-2xx status."""

    def __init__(self, message: str, response: Response = None):
        super().__init__(message)
        self.response = response
        self.status_code = getattr(response, "status_code", None)
        self.reason = getattr(response, "reason", None)


class DownloadDecodeError(DownloadResponseError):
    """Exception raised when a response body is not the expected JSON."""


def status_phrase(status_code: int) -> str:
    """Return the standard reason phrase for status_code ("" if unknown)."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def check_response(response: Response) -> None:
    """Raise DownloadResponseError unless response has a 2xx status."""
    if not 200 <= response.status_code < 300:
        raise DownloadResponseError(
            f"Unexpected status code: {response.status_code} "
            f"({status_phrase(response.status_code)})",
            response,
        )


class DownloadSession(Session):
    """Session class for interacting with the download server.

    Constructing a session fetches the server root once to pick up the
    anti-forgery token from the XSRF-TOKEN cookie. Nothing is logged in
    until login() is called.
    """

    def __init__(self, username: str, password: str, server: str, insecure=False):
        if not username or not password or not server:
            raise ValueError("Please provide all the parameters")
        super().__init__()
        self.credentials = Credentials(user=username, password=password)
        self.server: str = server.rstrip("/") + "/"
        self.token: str = ""
        if insecure:
            logger.warning(f"TLS certificate verification disabled for {self.server}")
            self.verify = False
        self.fetch_token()

    def request(self, method, url, *args, **kwargs) -> Response:
        """Send a request, muting InsecureRequestWarning while verify is off."""
        if self.verify is not False:
            return super().request(method, url, *args, **kwargs)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", urllib3.exceptions.InsecureRequestWarning)
            return super().request(method, url, *args, **kwargs)

    def fetch_token(self) -> None:
        """GET the server root and keep the anti-forgery token cookie."""
        token = ""
        with self.get(self.server) as response:
            for cookie in response.cookies:
                if cookie.name == XSRF_COOKIE_NAME:
                    token = cookie.value
        if token:
            self.token = token
            logger.debug("Received anti-forgery token")
        else:
            logger.debug(f"No {XSRF_COOKIE_NAME} cookie from {self.server}")

    def dispatch(
        self,
        method: str,
        path: str,
        body: bytes | BinaryIO | None = None,
        content_type: str | None = None,
        destination: RawSink | JsonTarget | None = None,
    ) -> Any:
        """Send one authenticated request and materialize the response.

        Args:
            method: HTTP method
            path: Path relative to the server URL
            body: Request body, may be empty
            content_type: Content-Type header, JSON unless given
            destination: RawSink to stream the body, JsonTarget to decode it,
                or None to ignore it

        Returns:
            Bytes written for a RawSink, the decoded value for a JsonTarget,
            otherwise None

        Raises:
            DownloadResponseError: If the status is not 2xx
            DownloadDecodeError: If a JsonTarget was given and the body is not JSON
                or not the shape the target expects
        """
        url = self.server + path
        headers = {
            "Accept": JSON_CONTENT_TYPE,
            "Content-Type": content_type or JSON_CONTENT_TYPE,
            XSRF_TOKEN_HEADER: self.token,
        }
        stream = isinstance(destination, RawSink)
        with self.request(
            method, url, data=body, headers=headers, stream=stream
        ) as response:
            logger.debug(f"{method} {url} -> {response.status_code}")
            check_response(response)
            if isinstance(destination, RawSink):
                return self._copy_body(response, destination.stream)
            if isinstance(destination, JsonTarget):
                try:
                    data = response.json()
                except JSONDecodeError as e:
                    raise DownloadDecodeError(
                        f"Invalid JSON from {method} {url}: {e}", response
                    ) from e
                try:
                    return destination.decode(data)
                except (AttributeError, TypeError, ValueError) as e:
                    raise DownloadDecodeError(
                        f"Unexpected JSON from {method} {url}: {e}", response
                    ) from e
        return None

    @staticmethod
    def _copy_body(response: Response, stream: BinaryIO) -> int:
        written = 0
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            stream.write(chunk)
            written += len(chunk)
        return written

    def login(self) -> User:
        """Log in with the stored credentials."""
        user = self.dispatch(
            "POST",
            "login",
            encode_json(self.credentials),
            destination=JsonTarget(User.from_dict),
        )
        logger.info(f"Logged in to {self.server} as {self.credentials.user}")
        return user

    def logout(self) -> None:
        """Log out of the server."""
        self.dispatch("POST", "logout")
        logger.info(f"Logged out of {self.server}")

    def tokens(self) -> list[Token]:
        return self.dispatch("GET", "token", destination=list_of(Token.from_dict))

    def download_log(self) -> list[DownloadLog]:
        return self.dispatch("GET", "log", destination=list_of(DownloadLog.from_dict))

    def list_downloads(self) -> list[Download]:
        return self.dispatch(
            "GET", "list-downloads", destination=list_of(Download.from_dict)
        )

    def set_user(self, details: UserDetails) -> User:
        """Create or update a user."""
        return self.dispatch(
            "POST", "user", encode_json(details), destination=JsonTarget(User.from_dict)
        )

    def upload(self, name: str, file_path: str | Path) -> None:
        """Upload file_path as a new version called name.

        The file is read before anything is sent, so a missing file raises
        OSError without touching the network.
        """
        body, content_type = encode_upload(name, file_path)
        logger.info(f"Uploading {file_path} as {name}")
        self.dispatch("POST", "upload", body, content_type=content_type)

    def generate(self, count: int, downloads: int) -> list[Token]:
        """Generate count tokens, each good for downloads downloads."""
        body = encode_json(NewTokens(count=count, downloads=downloads))
        return self.dispatch(
            "POST", "tokens/generate", body, destination=list_of(Token.from_dict)
        )

    def generate_for_email(self, email: str, downloads: int) -> Token:
        """Generate a single token bound to email."""
        body = encode_json(NewEmailToken(email=email, downloads=downloads))
        return self.dispatch(
            "POST", "tokens/email", body, destination=JsonTarget(Token.from_dict)
        )

    def questions(self) -> list[Quiz]:
        return self.dispatch("GET", "quizall", destination=list_of(Quiz.from_dict))

    def download(self, path: str, stream: BinaryIO) -> int:
        """Stream the body of GET path into stream and return the byte count."""
        return self.dispatch("GET", path, destination=RawSink(stream))
