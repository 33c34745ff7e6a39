# billed/bills.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import FormatError
from .format import format_date, format_status
from .routes import ROUTES_PATH
from .schemas import SessionUser
from .store import BillStore

logger = logging.getLogger(__name__)


def anti_chrono(records: Iterable[Dict[str, Any]], key: str = "date") -> List[Dict[str, Any]]:
    """
    Newest first. Compares raw "YYYY-MM-DD" strings, which order the same way
    as the dates they hold; equal dates keep their input order.
    """
    return sorted(records, key=lambda r: str(r.get(key) or ""), reverse=True)


class Bills:
    def __init__(
        self,
        store: BillStore,
        session: Optional[SessionUser] = None,
        on_navigate: Optional[Callable[[str], Any]] = None,
    ):
        self.store = store
        self.session = session
        self.on_navigate = on_navigate

    def handle_click_new_bill(self) -> None:
        if self.on_navigate:
            self.on_navigate(ROUTES_PATH["NewBill"])

    async def get_bills(self, sort: bool = False) -> List[Dict[str, Any]]:
        """
        Fetch the bills (only the session user's when a session is set) and
        format them for display.

        A record whose date cannot be formatted keeps its raw date and is
        logged; the rest of the list is unaffected. Store failures propagate
        unchanged.
        """
        if self.session:
            snapshot = await self.store.bills().list(params={"email": self.session.email})
        else:
            snapshot = await self.store.bills().list()
        if sort:
            snapshot = anti_chrono(snapshot)

        bills = []
        for doc in snapshot:
            try:
                date = format_date(doc.get("date"))
            except FormatError as e:
                logger.warning("%s for %r", e, doc, extra={"bill": doc})
                date = doc.get("date")
            bills.append({**doc, "date": date, "status": format_status(doc.get("status"))})
        return bills
