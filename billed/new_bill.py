# billed/new_bill.py
from __future__ import annotations

import enum
import logging
import mimetypes
from typing import Any, BinaryIO, Callable, Mapping, Optional, Union

from .errors import INVALID_EXTENSION_MESSAGE, SubmissionError, UploadError
from .routes import ROUTES_PATH
from .schemas import Bill, BillForm, SessionUser, UploadOut
from .store import BillStore
from .validation import file_name_from_path, is_valid_file_name

logger = logging.getLogger(__name__)

FileContent = Union[bytes, BinaryIO]


class SubmissionState(str, enum.Enum):
    IDLE = "IDLE"
    FILE_SELECTED = "FILE_SELECTED"
    UPLOADING = "UPLOADING"
    UPLOADED = "UPLOADED"
    FIELDS_SUBMITTED = "FIELDS_SUBMITTED"
    NAVIGATED = "NAVIGATED"
    FAILED = "FAILED"


IN_FLIGHT = (SubmissionState.UPLOADING, SubmissionState.FIELDS_SUBMITTED)


def _default_alert(message: str) -> None:
    logger.warning("alert: %s", message)


class NewBill:
    """
    New-bill submission: the receipt is uploaded first (store create), then the
    form fields are saved against the returned key (store update).

    One operation at a time per instance; calls arriving while another one is
    in flight are ignored.
    """

    def __init__(
        self,
        store: BillStore,
        session: SessionUser,
        on_navigate: Callable[[str], Any],
        alert: Optional[Callable[[str], Any]] = None,
    ):
        self.store = store
        self.session = session
        self.on_navigate = on_navigate
        self.alert = alert or _default_alert

        self.state = SubmissionState.IDLE
        self.bill_id: Optional[str] = None
        self.file_url: Optional[str] = None
        self.file_name: Optional[str] = None

    # -----------------------------
    # Phase 1: receipt upload
    # -----------------------------
    async def handle_file_selection(self, file: FileContent, file_path: str) -> bool:
        if self.state in IN_FLIGHT or self.state is SubmissionState.NAVIGATED:
            logger.warning("File selection ignored (state=%s)", self.state.value)
            return False

        file_name = file_name_from_path(file_path)
        if not is_valid_file_name(file_name):
            self.alert(INVALID_EXTENSION_MESSAGE)
            return False

        self.state = SubmissionState.FILE_SELECTED
        content_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
        data = {
            "file": (file_name, file, content_type),
            "email": self.session.email,
        }

        self.state = SubmissionState.UPLOADING
        try:
            created = UploadOut.model_validate(await self.store.bills().create(data=data))
        except Exception as exc:
            logger.exception("Receipt upload failed for %s", file_name)
            self.bill_id = self.file_url = self.file_name = None
            self.state = SubmissionState.FAILED
            raise UploadError(str(exc)) from exc

        self.bill_id = created.key
        self.file_url = created.file_url
        self.file_name = file_name
        self.state = SubmissionState.UPLOADED
        logger.info("Receipt %s uploaded as bill %s", file_name, self.bill_id)
        return True

    # -----------------------------
    # Phase 2: field update
    # -----------------------------
    def can_submit(self) -> bool:
        if self.bill_id is None:
            return False
        return self.state in (SubmissionState.UPLOADED, SubmissionState.FAILED)

    def build_bill(self, form_values: Mapping[str, Any]) -> Bill:
        form = BillForm.from_mapping(form_values)
        return Bill(
            email=self.session.email,
            **form.model_dump(),
            file_url=self.file_url,
            file_name=self.file_name,
            status="pending",
        )

    async def handle_submit(self, form_values: Mapping[str, Any]) -> bool:
        if not self.can_submit():
            logger.warning("Submit ignored (state=%s, bill_id=%s)", self.state.value, self.bill_id)
            return False

        bill = self.build_bill(form_values)

        self.state = SubmissionState.FIELDS_SUBMITTED
        try:
            await self.store.bills().update(data=bill.payload_json(), selector=self.bill_id)
        except Exception as exc:
            logger.exception("Bill %s update failed", self.bill_id)
            self.state = SubmissionState.FAILED
            raise SubmissionError(str(exc)) from exc

        self.state = SubmissionState.NAVIGATED
        self.on_navigate(ROUTES_PATH["Bills"])
        return True
