from unittest.mock import AsyncMock, MagicMock

import pytest

from billed.schemas import SessionUser


def make_store(create=None, update=None, list_=None):
    """Store double: store.bills() always hands back the same collection."""
    collection = MagicMock()
    collection.create = AsyncMock(**(create or {}))
    collection.update = AsyncMock(**(update or {}))
    collection.list = AsyncMock(**(list_ or {}))
    store = MagicMock()
    store.bills.return_value = collection
    return store


@pytest.fixture
def session_user():
    return SessionUser(email="employee@test.tld", type="Employee")


@pytest.fixture
def bills_fixture():
    return [
        {"id": "a1", "email": "a@a", "type": "Hôtel et logement", "name": "encore", "amount": 400,
         "date": "2004-04-04", "vat": "80", "pct": 20, "commentary": "séminaire billed",
         "fileUrl": "https://localhost:3456/images/test.jpg", "fileName": "preview-facture.jpg",
         "status": "pending"},
        {"id": "b2", "email": "a@a", "type": "Restaurants et bars", "name": "test1", "amount": 100,
         "date": "2001-01-01", "vat": "", "pct": 20, "commentary": "plop",
         "fileUrl": "https://localhost:3456/images/test.jpg", "fileName": "1592770761.jpeg",
         "status": "refused"},
        {"id": "c3", "email": "a@a", "type": "Services en ligne", "name": "test3", "amount": 300,
         "date": "2003-03-03", "vat": "60", "pct": 20, "commentary": "",
         "fileUrl": "https://localhost:3456/images/test.jpg", "fileName": "facture-client-php.jpg",
         "status": "accepted"},
        {"id": "d4", "email": "a@a", "type": "Transports", "name": "test2", "amount": 200,
         "date": "2002-02-02", "vat": "40", "pct": 20, "commentary": "test2",
         "fileUrl": "https://localhost:3456/images/test.jpg", "fileName": "preview-facture.jpg",
         "status": "accepted"},
    ]


@pytest.fixture
def store_factory():
    return make_store
