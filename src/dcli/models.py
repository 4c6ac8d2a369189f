"""Wire records exchanged with the download server."""

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any


class UserType(str, Enum):
    """Role of a user account on the download server."""

    ADMIN = "admin"
    USER = "user"


def _user_type(value: Any) -> UserType | str:
    # Keep values this client doesn't know about instead of rejecting them
    try:
        return UserType(value)
    except ValueError:
        return value


def _known(cls, data: dict[str, Any] | None) -> dict[str, Any]:
    """Return only the keys of data that are fields of cls.

    JSON null decodes to an empty record; anything else that is not an
    object raises TypeError.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(
            f"expected an object for {cls.__name__}, got {type(data).__name__}"
        )
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass(frozen=True)
class Credentials:
    """Username/password pair sent as the login body."""

    user: str
    password: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class User:
    """User record returned by login and set-user."""

    username: str = ""
    email: str = ""
    name: str = ""
    type: UserType | str = UserType.USER
    token: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        user = cls(**_known(cls, data))
        user.type = _user_type(user.type)
        return user

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = _enum_value(self.type)
        return data


@dataclass
class Token:
    """Download token with its remaining download allowance."""

    name: str = ""
    downloads: int = 0
    email: str = ""
    created: str = ""
    last_download: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        return cls(**_known(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DownloadLog:
    """One entry of the server's download log."""

    user: str = ""
    token: str = ""
    download: str = ""
    ip: str = ""
    country: str = ""
    date: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DownloadLog":
        return cls(**_known(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Download:
    """An uploaded version available for download."""

    name: str = ""
    path: str = ""
    size: int = 0
    modified: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Download":
        return cls(**_known(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Quiz:
    """A quiz question with its candidate answers."""

    id: str = ""
    question: str = ""
    answers: list[str] = field(default_factory=list)
    correct: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quiz":
        quiz = cls(**_known(cls, data))
        quiz.answers = list(quiz.answers or [])
        return quiz

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class UserDetails:
    """Fields accepted by the user create/edit endpoint."""

    username: str
    password: str = ""
    email: str = ""
    name: str = ""
    type: UserType | str = UserType.USER
    token: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = _enum_value(self.type)
        return data


@dataclass
class NewTokens:
    """Request body for bulk token generation."""

    count: int
    downloads: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NewEmailToken:
    """Request body for generating a token bound to an email address."""

    email: str
    downloads: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _enum_value(value: UserType | str) -> str:
    return value.value if isinstance(value, UserType) else value
