from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..models import Invoice
from ..schemas import (
    ActionResult,
    Failure,
    InvoiceRules,
    Navigate,
    NotFound,
    StayAndRevalidate,
    ValidationFailure,
)
from ..services import invoices as invoices_service
from ..services.revalidation import ViewCache, get_view_cache

router = APIRouter(prefix="/dashboard/invoices")
templates = Jinja2Templates(directory="app/templates")


def format_currency(cents: int | None) -> str:
    return f"${Decimal(cents or 0) / 100:,.2f}"


templates.env.filters["currency"] = format_currency


@router.get("", response_class=HTMLResponse)
def invoices_list(
    request: Request,
    query: str | None = None,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    views: ViewCache = Depends(get_view_cache),
) -> Response:
    etag = views.etag(settings.invoices_path)
    if request.headers.get("if-none-match") == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response = _render_list(request, db, query or "", page)
    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "no-cache"
    return response


@router.get("/create", response_class=HTMLResponse)
def invoices_new(request: Request, db: Session = Depends(get_db)) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "invoices/create.html",
        {
            "form": _empty_form(),
            "state": _empty_state(),
            "customers": invoices_service.list_customers(db),
        },
    )


@router.post("/create", response_class=HTMLResponse)
async def invoices_create(
    request: Request,
    db: Session = Depends(get_db),
    views: ViewCache = Depends(get_view_cache),
    rules: InvoiceRules = Depends(invoices_service.get_invoice_rules),
) -> Response:
    form = await request.form()
    result = invoices_service.submit_create_form(db, form, views, rules)
    if isinstance(result, Navigate):
        return RedirectResponse(url=result.target, status_code=303)
    return templates.TemplateResponse(
        request,
        "invoices/create.html",
        {
            "form": _form_echo(form),
            "state": result.state(),
            "customers": invoices_service.list_customers(db),
        },
        status_code=_status_for(result),
    )


@router.get("/{invoice_id}/edit", response_class=HTMLResponse)
def invoices_edit(
    invoice_id: str, request: Request, db: Session = Depends(get_db)
) -> HTMLResponse:
    invoice = invoices_service.get_invoice(db, invoice_id)
    if not invoice:
        return _not_found(request, invoice_id)
    return templates.TemplateResponse(
        request,
        "invoices/edit.html",
        {
            "invoice": invoice,
            "form": _invoice_to_form(invoice),
            "state": _empty_state(),
            "customers": invoices_service.list_customers(db),
        },
    )


@router.post("/{invoice_id}/edit", response_class=HTMLResponse)
async def invoices_update(
    invoice_id: str,
    request: Request,
    db: Session = Depends(get_db),
    views: ViewCache = Depends(get_view_cache),
    rules: InvoiceRules = Depends(invoices_service.get_invoice_rules),
) -> Response:
    form = await request.form()
    result = invoices_service.submit_update_form(db, invoice_id, form, views, rules)
    if isinstance(result, Navigate):
        return RedirectResponse(url=result.target, status_code=303)
    if isinstance(result, NotFound):
        return _not_found(request, invoice_id)
    return templates.TemplateResponse(
        request,
        "invoices/edit.html",
        {
            "invoice": invoices_service.get_invoice(db, invoice_id),
            "form": _form_echo(form),
            "state": result.state(),
            "customers": invoices_service.list_customers(db),
        },
        status_code=_status_for(result),
    )


@router.post("/{invoice_id}/delete", response_class=HTMLResponse)
def invoices_delete(
    invoice_id: str,
    request: Request,
    db: Session = Depends(get_db),
    views: ViewCache = Depends(get_view_cache),
) -> Response:
    result = invoices_service.delete_invoice(db, invoice_id, views)
    if isinstance(result, StayAndRevalidate):
        # Back to the listing the delete was posted from.
        return RedirectResponse(url=result.path, status_code=303)
    return _render_list(request, db, "", 1, state=result.state(), status_code=500)


def _render_list(
    request: Request,
    db: Session,
    query: str,
    page: int,
    state: dict | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    rows = invoices_service.list_invoices(db, query, page)
    total_pages = invoices_service.count_invoice_pages(db, query)
    return templates.TemplateResponse(
        request,
        "invoices/list.html",
        {
            "rows": rows,
            "query": query,
            "page": page,
            "total_pages": total_pages,
            "state": state or _empty_state(),
        },
        status_code=status_code,
    )


def _not_found(request: Request, invoice_id: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "invoices/not_found.html",
        {"invoice_id": invoice_id},
        status_code=404,
    )


def _status_for(result: ActionResult) -> int:
    if isinstance(result, ValidationFailure):
        return 400
    if isinstance(result, Failure):
        return 500
    return 200


def _empty_state() -> dict:
    return {"errors": {}, "message": None}


def _empty_form() -> dict:
    return {"customerId": "", "amount": "", "status": ""}


def _form_echo(form) -> dict:
    def value(key: str) -> str:
        return str(form.get(key, "")).strip()

    return {key: value(key) for key in invoices_service.FORM_FIELDS}


def _invoice_to_form(invoice: Invoice) -> dict:
    return {
        "customerId": invoice.customer_id,
        "amount": f"{Decimal(invoice.amount) / 100:.2f}",
        "status": invoice.status.value,
    }
