"""
Typed exceptions for the bill submission and listing pipeline.

    BilledError
    +-- InvalidFileError   receipt extension rejected before upload
    +-- UploadError        store create call failed
    +-- SubmissionError    store update call failed
    +-- FormatError        one record's date could not be rendered
    +-- StoreError         store call failed (HTTP status or transport)
"""
from __future__ import annotations

from typing import Any, Optional

INVALID_EXTENSION_MESSAGE = (
    "Seuls les fichiers avec les extensions jpg, jpeg ou png sont acceptés."
)


class BilledError(Exception):
    code: str = "BILLED_ERROR"


class InvalidFileError(BilledError):
    code = "INVALID_FILE"

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(INVALID_EXTENSION_MESSAGE)


class UploadError(BilledError):
    code = "UPLOAD_FAILED"


class SubmissionError(BilledError):
    code = "SUBMISSION_FAILED"


class FormatError(BilledError, ValueError):
    code = "FORMAT_FAILED"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid ISO date: {value!r}")


class StoreError(BilledError):
    code = "STORE_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)

    @classmethod
    def from_status(cls, status_code: int, detail: Any = None) -> "StoreError":
        return cls(f"Erreur {status_code}", status_code=status_code, detail=detail)
