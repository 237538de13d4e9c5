import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from retail_ledger.core.errors import StateConflictError, ValidationError
from retail_ledger.core.pagination import normalize_page
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.customer import Customer
from retail_ledger.models.sale import Sale
from retail_ledger.services.lookups import get_customer

logger = logging.getLogger(__name__)

CNIC_LENGTH = 13
PHONE_MIN_LENGTH = 9
PHONE_MAX_LENGTH = 11


def _clean_fields(fields: dict) -> dict:
    cleaned = {}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        cleaned[key] = value

    if "name" in cleaned:
        cleaned["name"] = cleaned["name"].lower()
        if len(cleaned["name"]) < 2:
            raise ValidationError("Name must be at least 2 characters")
    if "cnic" in cleaned and len(cleaned["cnic"]) != CNIC_LENGTH:
        raise ValidationError("CNIC must be exactly {} characters".format(CNIC_LENGTH))
    if "phone" in cleaned and not PHONE_MIN_LENGTH <= len(cleaned["phone"]) <= PHONE_MAX_LENGTH:
        raise ValidationError(
            "Phone must be between {} and {} digits".format(PHONE_MIN_LENGTH, PHONE_MAX_LENGTH)
        )
    if "email" in cleaned and "@" not in cleaned["email"]:
        raise ValidationError("Email is invalid")
    return cleaned


def _ensure_unique_cnic(db: Session, cnic: str, exclude_id: int | None = None) -> None:
    stmt = select(Customer.id).where(Customer.cnic == cnic)
    if exclude_id is not None:
        stmt = stmt.where(Customer.id != exclude_id)
    if db.execute(stmt.limit(1)).first():
        raise StateConflictError("Customer with CNIC {} already exists".format(cnic))


def create_customer(db: Session, *, name: str, cnic: str, phone: str, address: str, email: str | None = None) -> Customer:
    fields = _clean_fields(
        {"name": name, "cnic": cnic, "phone": phone, "address": address, "email": email}
    )
    with unit_of_work(db):
        _ensure_unique_cnic(db, fields["cnic"])
        customer = Customer(**fields)
        db.add(customer)
    logger.info("Registered customer %s", customer.id)
    return customer


def update_customer(db: Session, customer_id: int, **changes) -> Customer:
    fields = _clean_fields(changes)
    with unit_of_work(db):
        customer = get_customer(db, customer_id)
        if "cnic" in fields:
            _ensure_unique_cnic(db, fields["cnic"], exclude_id=customer_id)
        for key, value in fields.items():
            setattr(customer, key, value)
    return customer


def delete_customer(db: Session, customer_id: int) -> Customer:
    with unit_of_work(db):
        customer = get_customer(db, customer_id)
        if db.execute(select(Sale.id).where(Sale.customer_id == customer_id).limit(1)).first():
            raise StateConflictError("Cannot delete a customer that has sales")
        db.delete(customer)
    logger.info("Deleted customer %s", customer_id)
    return customer


def list_customers(db: Session, *, query: str | None = None, page: int = 1, limit: int | None = None) -> dict:
    page, limit, offset = normalize_page(page, limit)
    filters = []
    if query:
        text = query.strip()
        filters.append(
            or_(
                Customer.name.contains(text.lower()),
                Customer.cnic.contains(text),
                Customer.phone.contains(text),
            )
        )
    rows = db.execute(
        select(Customer).where(*filters).order_by(Customer.id.desc()).offset(offset).limit(limit)
    ).scalars()
    total = db.execute(select(func.count(Customer.id)).where(*filters)).scalar_one()
    return {"customers": list(rows), "total": total, "page": page, "limit": limit}
