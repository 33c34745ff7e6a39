# billed/validation.py
from __future__ import annotations

import re

from .errors import InvalidFileError

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png"}

_PATH_SEP = re.compile(r"[\\/]")


def file_name_from_path(file_path: str) -> str:
    """Last segment of a browser-style path ("C:\\fakepath\\file.png" -> "file.png")."""
    return _PATH_SEP.split(file_path or "")[-1]


def file_extension(file_name: str) -> str:
    if not file_name or "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1]


def is_valid_file_name(file_name: str) -> bool:
    # case-sensitive: "PNG" is rejected
    return file_extension(file_name) in ALLOWED_EXTENSIONS


def ensure_valid_file_name(file_name: str) -> str:
    if not is_valid_file_name(file_name):
        raise InvalidFileError(file_name)
    return file_name
