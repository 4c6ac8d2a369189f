"""Client package for the download server HTTP API."""

from importlib.metadata import PackageNotFoundError, version

from .config import Settings, resolve_settings
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
    UserType,
)
from .session import (
    DownloadDecodeError,
    DownloadResponseError,
    DownloadSession,
    JsonTarget,
    RawSink,
)

try:
    __version__ = version("dcli")
except PackageNotFoundError:
    # Package is not installed, use fallback version
    __version__ = "UNKNOWN"

__all__ = [
    "Credentials",
    "Download",
    "DownloadDecodeError",
    "DownloadLog",
    "DownloadResponseError",
    "DownloadSession",
    "JsonTarget",
    "NewEmailToken",
    "NewTokens",
    "Quiz",
    "RawSink",
    "Settings",
    "Token",
    "User",
    "UserDetails",
    "UserType",
    "resolve_settings",
]
