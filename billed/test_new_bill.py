import asyncio
import json
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from billed.errors import INVALID_EXTENSION_MESSAGE, StoreError, SubmissionError, UploadError
from billed.new_bill import NewBill, SubmissionState
from billed.routes import ROUTES_PATH
from billed.schemas import SessionUser

CREATED = {"fileUrl": "https://localhost:3456/images/test.png", "key": "1234"}

FORM = {
    "type": "Restaurants et bars",
    "name": "Dinner",
    "date": "2023-10-10",
    "amount": "100",
    "vat": "20",
    "pct": "10",
    "commentary": "Business dinner",
}


def _new_bill(store, session_user, alert=None):
    on_navigate = MagicMock()
    return NewBill(store=store, session=session_user, on_navigate=on_navigate, alert=alert), on_navigate


@pytest.mark.asyncio
async def test_invalid_extension_alerts_and_skips_upload(store_factory, session_user):
    store = store_factory()
    alert = MagicMock()
    new_bill, _ = _new_bill(store, session_user, alert=alert)

    ok = await new_bill.handle_file_selection(b"file content", "C:\\fakepath\\file.txt")

    assert ok is False
    alert.assert_called_once_with(INVALID_EXTENSION_MESSAGE)
    store.bills.return_value.create.assert_not_called()
    assert new_bill.state is SubmissionState.IDLE
    assert new_bill.file_name is None


@pytest.mark.asyncio
async def test_valid_file_is_uploaded_with_session_email(store_factory, session_user):
    store = store_factory(create={"return_value": CREATED})
    new_bill, _ = _new_bill(store, session_user)

    ok = await new_bill.handle_file_selection(b"file content", "C:\\fakepath\\file.png")

    assert ok is True
    assert new_bill.state is SubmissionState.UPLOADED
    assert new_bill.file_name == "file.png"
    assert new_bill.file_url == CREATED["fileUrl"]
    assert new_bill.bill_id == "1234"

    data = store.bills.return_value.create.call_args.kwargs["data"]
    assert data["email"] == "employee@test.tld"
    assert data["file"] == ("file.png", b"file content", "image/png")


@pytest.mark.asyncio
async def test_full_submission_updates_then_navigates(store_factory, session_user):
    calls = []
    store = store_factory(
        create={"side_effect": lambda **kw: calls.append("create") or CREATED},
        update={"side_effect": lambda **kw: calls.append("update") or {}},
    )
    new_bill, on_navigate = _new_bill(store, session_user)

    await new_bill.handle_file_selection(b"png bytes", "C:\\fakepath\\file.png")
    ok = await new_bill.handle_submit(FORM)

    assert ok is True
    assert calls == ["create", "update"]
    update = store.bills.return_value.update
    assert update.call_args.kwargs["selector"] == "1234"
    assert json.loads(update.call_args.kwargs["data"]) == {
        "email": "employee@test.tld",
        "type": "Restaurants et bars",
        "name": "Dinner",
        "amount": 100,
        "date": "2023-10-10",
        "vat": "20",
        "pct": 10,
        "commentary": "Business dinner",
        "fileUrl": CREATED["fileUrl"],
        "fileName": "file.png",
        "status": "pending",
    }
    on_navigate.assert_called_once_with(ROUTES_PATH["Bills"])
    assert new_bill.state is SubmissionState.NAVIGATED


@pytest.mark.asyncio
async def test_email_comes_from_session_not_form(store_factory, session_user):
    store = store_factory(create={"return_value": CREATED})
    new_bill, _ = _new_bill(store, session_user)
    await new_bill.handle_file_selection(b"x", "r.jpg")

    await new_bill.handle_submit({**FORM, "email": "intruder@evil.tld", "status": "accepted"})

    payload = json.loads(store.bills.return_value.update.call_args.kwargs["data"])
    assert payload["email"] == "employee@test.tld"
    assert payload["status"] == "pending"


@pytest.mark.asyncio
async def test_pct_defaults_to_20_when_left_empty(store_factory, session_user):
    store = store_factory(create={"return_value": CREATED})
    new_bill, _ = _new_bill(store, session_user)
    await new_bill.handle_file_selection(b"x", "r.jpeg")

    await new_bill.handle_submit({**FORM, "pct": "", "amount": "12.5", "vat": 7})

    payload = json.loads(store.bills.return_value.update.call_args.kwargs["data"])
    assert payload["pct"] == 20
    assert payload["amount"] == 12.5
    assert payload["vat"] == "7"


@pytest.mark.asyncio
async def test_failed_create_never_updates(store_factory, session_user):
    store = store_factory(create={"side_effect": StoreError("Erreur 500", status_code=500)})
    new_bill, on_navigate = _new_bill(store, session_user)

    with pytest.raises(UploadError) as exc:
        await new_bill.handle_file_selection(b"x", "file.png")
    assert "Erreur 500" in str(exc.value)
    assert new_bill.state is SubmissionState.FAILED

    assert await new_bill.handle_submit(FORM) is False
    store.bills.return_value.update.assert_not_called()
    on_navigate.assert_not_called()


@pytest.mark.asyncio
async def test_submit_before_upload_is_ignored(store_factory, session_user):
    store = store_factory()
    new_bill, on_navigate = _new_bill(store, session_user)

    assert await new_bill.handle_submit(FORM) is False
    store.bills.return_value.update.assert_not_called()
    on_navigate.assert_not_called()


@pytest.mark.asyncio
async def test_failed_update_keeps_form_state_and_allows_retry(store_factory, session_user):
    store = store_factory(create={"return_value": CREATED})
    store.bills.return_value.update.side_effect = [StoreError("Erreur 500", status_code=500), {}]
    new_bill, on_navigate = _new_bill(store, session_user)
    await new_bill.handle_file_selection(b"x", "file.png")

    with pytest.raises(SubmissionError):
        await new_bill.handle_submit(FORM)
    on_navigate.assert_not_called()
    assert new_bill.state is SubmissionState.FAILED
    assert new_bill.bill_id == "1234"
    assert new_bill.file_url == CREATED["fileUrl"]

    assert await new_bill.handle_submit(FORM) is True
    on_navigate.assert_called_once_with(ROUTES_PATH["Bills"])


@pytest.mark.asyncio
async def test_double_submit_fires_a_single_update(store_factory, session_user):
    release = asyncio.Event()

    async def slow_update(**kwargs):
        await release.wait()
        return {}

    store = store_factory(create={"return_value": CREATED}, update={"side_effect": slow_update})
    new_bill, on_navigate = _new_bill(store, session_user)
    await new_bill.handle_file_selection(b"x", "file.png")

    first = asyncio.create_task(new_bill.handle_submit(FORM))
    await asyncio.sleep(0)
    assert new_bill.state is SubmissionState.FIELDS_SUBMITTED
    assert await new_bill.handle_submit(FORM) is False

    release.set()
    assert await first is True
    assert store.bills.return_value.update.await_count == 1
    on_navigate.assert_called_once()


@pytest.mark.asyncio
async def test_file_selection_ignored_while_uploading(store_factory, session_user):
    release = asyncio.Event()

    async def slow_create(**kwargs):
        await release.wait()
        return CREATED

    store = store_factory(create={"side_effect": slow_create})
    new_bill, _ = _new_bill(store, session_user)

    first = asyncio.create_task(new_bill.handle_file_selection(b"x", "a.png"))
    await asyncio.sleep(0)
    assert new_bill.state is SubmissionState.UPLOADING
    assert await new_bill.handle_file_selection(b"y", "b.png") is False
    assert await new_bill.handle_submit(FORM) is False

    release.set()
    assert await first is True
    assert store.bills.return_value.create.await_count == 1
    assert new_bill.file_name == "a.png"


@pytest.mark.asyncio
async def test_invalid_form_raises_before_network(store_factory, session_user):
    store = store_factory(create={"return_value": CREATED})
    new_bill, _ = _new_bill(store, session_user)
    await new_bill.handle_file_selection(b"x", "file.png")

    with pytest.raises(ValidationError):
        await new_bill.handle_submit({**FORM, "type": "Vacances"})
    with pytest.raises(ValidationError):
        await new_bill.handle_submit({**FORM, "amount": "-5"})
    with pytest.raises(ValidationError):
        await new_bill.handle_submit({**FORM, "date": "10/10/2023"})
    with pytest.raises(ValidationError):
        await new_bill.handle_submit({**FORM, "date": "2023-1-5"})

    store.bills.return_value.update.assert_not_called()
    assert new_bill.state is SubmissionState.UPLOADED


def test_session_user_parsed_from_stored_json():
    user = SessionUser.from_json('{"type": "Employee", "email": "u@u"}')
    assert user.email == "u@u"
    assert user.type == "Employee"


@pytest.mark.asyncio
@pytest.mark.parametrize("field,value", [
    ("amount", "nan"),
    ("amount", "inf"),
    ("amount", float("nan")),
    ("pct", "nan"),
    ("pct", "-inf"),
])
async def test_non_finite_numbers_are_rejected(store_factory, session_user, field, value):
    store = store_factory(create={"return_value": CREATED})
    new_bill, on_navigate = _new_bill(store, session_user)
    await new_bill.handle_file_selection(b"x", "file.png")

    with pytest.raises(ValidationError):
        await new_bill.handle_submit({**FORM, field: value})

    store.bills.return_value.update.assert_not_called()
    on_navigate.assert_not_called()
