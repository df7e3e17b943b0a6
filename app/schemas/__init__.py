from .actions import (
    ActionResult,
    Failure,
    Navigate,
    NotFound,
    StayAndRevalidate,
    ValidationFailure,
)
from .invoice import DEFAULT_RULES, InvoiceInput, InvoiceRules, to_minor_units

__all__ = [
    "ActionResult",
    "Failure",
    "Navigate",
    "NotFound",
    "StayAndRevalidate",
    "ValidationFailure",
    "DEFAULT_RULES",
    "InvoiceInput",
    "InvoiceRules",
    "to_minor_units",
]
