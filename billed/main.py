# billed/main.py
# Development backend for the bills collection the Store client talks to.
import os
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, UploadFile, File, Form, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db, init_db
from .errors import InvalidFileError
from .models import new_bill_key
from .validation import ensure_valid_file_name, file_extension
from . import crud, schemas

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Billed API", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:8080", "http://127.0.0.1:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.mount("/public", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="public")


@app.on_event("startup")
def _startup():
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    init_db()


@app.get("/health")
def health():
    return {"ok": True, "service": "billed-api"}


# ------------------- BILLS -------------------
@app.post("/bills", response_model=schemas.UploadOut)
def create_bill(
    file: UploadFile = File(...),
    email: str = Form(...),
    db: Session = Depends(get_db),
):
    file_name = ensure_valid_file_name(os.path.basename(file.filename or ""))
    key = new_bill_key()
    stored_name = f"{key}.{file_extension(file_name)}"

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    dest_path = os.path.join(settings.UPLOAD_DIR, stored_name)
    with open(dest_path, "wb") as f:
        f.write(file.file.read())

    file_url = f"{settings.PUBLIC_URL.rstrip('/')}/{stored_name}"
    bill = crud.create_bill(db, email=email, file_name=file_name, file_url=file_url, key=key)
    logger.info("Receipt %s stored for %s as bill %s", file_name, email, bill.id)
    return {"fileUrl": bill.file_url, "key": bill.id}


@app.patch("/bills/{key}", response_model=schemas.Bill)
def update_bill(key: str, bill_in: schemas.Bill, db: Session = Depends(get_db)):
    bill = crud.update_bill(db, key, bill_in)
    if not bill:
        raise HTTPException(404, "Bill not found")
    return crud.bill_to_dict(bill)


@app.get("/bills")
def list_bills(email: Optional[str] = None, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    # raw rows: consumers format and tolerate incomplete records themselves
    return [crud.bill_to_dict(b) for b in crud.list_bills(db, email=email)]


@app.get("/bills/{key}")
def get_bill(key: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    bill = crud.get_bill(db, key)
    if not bill:
        raise HTTPException(404, "Bill not found")
    return crud.bill_to_dict(bill)


# ------------------- ERROR HANDLERS -------------------
@app.exception_handler(InvalidFileError)
def invalid_file_handler(request, exc: InvalidFileError):
    logger.warning("Rejected upload %r at %s", exc.file_name, request.url)
    return JSONResponse(status_code=400, content={"ok": False, "error": exc.code, "detail": str(exc)})
