import logging
import math
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError
from sqlalchemy import String, cast, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Customer, Invoice
from ..models.base import utc_today
from ..schemas import (
    DEFAULT_RULES,
    ActionResult,
    Failure,
    InvoiceInput,
    InvoiceRules,
    Navigate,
    NotFound,
    StayAndRevalidate,
    ValidationFailure,
)
from .revalidation import ViewCache

logger = logging.getLogger(__name__)

FORM_FIELDS = ("customerId", "amount", "status")

CREATE_FAILED = "Database Error: Failed to Create Invoice."
UPDATE_FAILED = "Database Error: Failed to Update Invoice."
DELETE_FAILED = "Database Error: Failed to Delete Invoice."


def get_invoice_rules() -> InvoiceRules:
    return DEFAULT_RULES


def validate_invoice_form(
    form: Mapping[str, Any],
    rules: InvoiceRules = DEFAULT_RULES,
    action: str = "Create",
) -> InvoiceInput | ValidationFailure:
    """Parse a raw form submission into an :class:`InvoiceInput`.

    Anything other than the three invoice fields is ignored, so a posted
    ``date`` or ``id`` never reaches the store. Failures come back as a
    :class:`ValidationFailure` keyed by form field name.
    """
    raw = {field: _form_value(form, field) for field in FORM_FIELDS}
    try:
        return InvoiceInput.model_validate(raw, context={"rules": rules})
    except ValidationError as exc:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            message = rules.message_for(field)
            if message is None:
                raise
            messages = errors.setdefault(field, [])
            if message not in messages:
                messages.append(message)
        logger.debug("Invoice form rejected: %s", sorted(errors))
        return ValidationFailure(errors=errors, message=rules.summary(action))


def create_invoice(
    db: Session,
    record: InvoiceInput,
    views: ViewCache,
    rules: InvoiceRules = DEFAULT_RULES,
    today: date | None = None,
) -> ActionResult:
    invoice = Invoice(
        customer_id=record.customer_id,
        amount=rules.to_minor_units(record.amount),
        status=record.status,
        date=today or utc_today(),
    )
    try:
        db.add(invoice)
        db.flush()
        invoice_id = invoice.id
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Invoice create failed")
        return Failure(message=CREATE_FAILED)

    logger.info("Invoice %s created for customer %s", invoice_id, record.customer_id)
    views.revalidate_path(settings.invoices_path)
    return Navigate(target=settings.invoices_path)


def update_invoice(
    db: Session,
    invoice_id: str,
    record: InvoiceInput,
    views: ViewCache,
    rules: InvoiceRules = DEFAULT_RULES,
) -> ActionResult:
    try:
        result = db.execute(
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(
                customer_id=record.customer_id,
                amount=rules.to_minor_units(record.amount),
                status=record.status,
            )
        )
        if result.rowcount == 0:
            db.rollback()
            logger.info("Invoice %s not found for update", invoice_id)
            return NotFound()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Invoice update failed for %s", invoice_id)
        return Failure(message=UPDATE_FAILED)

    logger.info("Invoice %s updated", invoice_id)
    views.revalidate_path(settings.invoices_path)
    return Navigate(target=settings.invoices_path)


def delete_invoice(db: Session, invoice_id: str, views: ViewCache) -> ActionResult:
    try:
        result = db.execute(delete(Invoice).where(Invoice.id == invoice_id))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Invoice delete failed for %s", invoice_id)
        return Failure(message=DELETE_FAILED)

    if result.rowcount == 0:
        logger.info("Invoice %s already absent", invoice_id)
    else:
        logger.info("Invoice %s deleted", invoice_id)
    views.revalidate_path(settings.invoices_path)
    return StayAndRevalidate(path=settings.invoices_path)


def submit_create_form(
    db: Session,
    form: Mapping[str, Any],
    views: ViewCache,
    rules: InvoiceRules = DEFAULT_RULES,
    today: date | None = None,
) -> ActionResult:
    record = validate_invoice_form(form, rules, action="Create")
    if isinstance(record, ValidationFailure):
        return record
    return create_invoice(db, record, views, rules, today=today)


def submit_update_form(
    db: Session,
    invoice_id: str,
    form: Mapping[str, Any],
    views: ViewCache,
    rules: InvoiceRules = DEFAULT_RULES,
) -> ActionResult:
    record = validate_invoice_form(form, rules, action="Update")
    if isinstance(record, ValidationFailure):
        return record
    return update_invoice(db, invoice_id, record, views, rules)


def get_invoice(db: Session, invoice_id: str) -> Invoice | None:
    return db.get(Invoice, invoice_id)


def list_customers(db: Session) -> list[Customer]:
    return list(db.scalars(select(Customer).order_by(Customer.name)))


def list_invoices(db: Session, query: str = "", page: int = 1):
    per_page = settings.items_per_page
    offset = (max(page, 1) - 1) * per_page
    stmt = (
        select(Invoice, Customer)
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(_search_filter(query))
        .order_by(Invoice.date.desc(), Invoice.id)
        .limit(per_page)
        .offset(offset)
    )
    return db.execute(stmt).all()


def count_invoice_pages(db: Session, query: str = "") -> int:
    total = db.execute(
        select(func.count(Invoice.id))
        .select_from(Invoice)
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(_search_filter(query))
    ).scalar_one()
    return math.ceil(total / settings.items_per_page)


def _search_filter(query: str):
    like = f"%{query.strip()}%"
    return or_(
        Customer.name.ilike(like),
        Customer.email.ilike(like),
        cast(Invoice.amount, String).ilike(like),
        cast(Invoice.date, String).ilike(like),
        cast(Invoice.status, String).ilike(like),
    )


def _form_value(form: Mapping[str, Any], key: str) -> str | None:
    value = form.get(key)
    if isinstance(value, str):
        return value.strip()
    return None
