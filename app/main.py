from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from .config import settings
from .logging_config import setup_logging
from .routes import api_router

setup_logging(settings.log_level)

app = FastAPI(title="invoice_dashboard", debug=settings.debug)

app.include_router(api_router)


@app.get("/health", tags=["health"])
def health_check() -> dict:
    return {"status": "ok"}


@app.get("/", include_in_schema=False)
def index() -> RedirectResponse:
    return RedirectResponse(url=settings.invoices_path, status_code=307)


@app.get("/dashboard", include_in_schema=False)
def dashboard() -> RedirectResponse:
    return RedirectResponse(url=settings.invoices_path, status_code=307)
