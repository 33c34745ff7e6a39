from typing import Optional, List, Dict, Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models, schemas


# ============================================================
# Helpers
# ============================================================
def _num(value):
    """Floats read back from the db lose their int-ness; 100.0 -> 100."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def bill_to_dict(bill: models.Bill) -> Dict[str, Any]:
    """Wire shape of a stored bill (camelCase keys)."""
    return {
        "id": bill.id,
        "email": bill.email,
        "type": bill.type,
        "name": bill.name,
        "amount": _num(bill.amount),
        "date": bill.date,
        "vat": bill.vat,
        "pct": _num(bill.pct),
        "commentary": bill.commentary,
        "fileUrl": bill.file_url,
        "fileName": bill.file_name,
        "status": bill.status,
    }


# ============================================================
# Bills
# ============================================================
def get_bill(db: Session, key: str) -> Optional[models.Bill]:
    return db.get(models.Bill, key)


def list_bills(db: Session, email: Optional[str] = None) -> List[models.Bill]:
    stmt = select(models.Bill)
    if email:
        stmt = stmt.where(models.Bill.email == email)
    return db.execute(stmt).scalars().all()


def create_bill(db: Session, email: str, file_name: str, file_url: str, key: Optional[str] = None) -> models.Bill:
    """Placeholder row holding only the receipt; fields come with the update."""
    bill = models.Bill(email=email, file_name=file_name, file_url=file_url, status="pending")
    if key:
        bill.id = key
    db.add(bill)
    db.commit()
    db.refresh(bill)
    return bill


def update_bill(db: Session, key: str, bill_in: schemas.Bill) -> Optional[models.Bill]:
    bill = db.get(models.Bill, key)
    if not bill:
        return None
    # owner and status stay as stored: employees cannot accept or reassign bills
    data = bill_in.model_dump(exclude={"id", "email", "status"})
    for field, value in data.items():
        # a partial body must not wipe the receipt stored at creation
        if field in ("file_url", "file_name") and not value:
            continue
        setattr(bill, field, value)
    db.add(bill)
    db.commit()
    db.refresh(bill)
    return bill
