"""Utility functions for the download client."""

import json
import logging
from pathlib import Path
from typing import Any

from urllib3 import encode_multipart_formdata

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def encode_json(record: Any) -> bytes:
    """Serialize a record (anything with to_dict, or plain data) as a JSON body."""
    if hasattr(record, "to_dict"):
        record = record.to_dict()
    return json.dumps(record).encode("utf-8")


def encode_upload(name: str, file_path: str | Path) -> tuple[bytes, str]:
    """Build the multipart body for an upload.

    The body holds two parts, in order: the file contents under the ``file``
    field (filename is the base name of file_path) and the plain ``name``
    field.

    Returns:
        (body, content_type) where content_type carries the boundary

    Raises:
        OSError: If file_path cannot be opened or read
    """
    file_path = Path(file_path)
    with open(file_path, "rb") as f:
        data = f.read()
    logger.debug(f"Read {len(data)} bytes from {file_path}")
    fields = [
        ("file", (file_path.name, data)),
        ("name", name),
    ]
    return encode_multipart_formdata(fields)


def print_json(data: Any) -> None:
    """Print records (or lists of records) as indented JSON on stdout."""
    if isinstance(data, list):
        data = [item.to_dict() if hasattr(item, "to_dict") else item for item in data]
    elif hasattr(data, "to_dict"):
        data = data.to_dict()
    print(json.dumps(data, indent=2))

