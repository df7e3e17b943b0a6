from decimal import ROUND_HALF_EVEN, Decimal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..models import InvoiceStatusEnum

# Largest value a Postgres ``integer`` column holds.
MAX_MINOR_UNITS = 2**31 - 1


def to_minor_units(amount: Decimal, factor: int = 100) -> int:
    """Convert a major-unit amount (dollars) to whole minor units (cents)."""
    return int(
        (amount * Decimal(factor)).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)
    )


class InvoiceRules(BaseModel):
    """Messages and limits applied to the invoice form.

    A single instance is shared by every action; it cannot be mutated.
    """

    customer_message: str = "Please select a customer."
    amount_message: str = "Please enter an amount greater than $0"
    status_message: str = "Please select an invoice status."
    missing_fields_message: str = "Missing Fields. Failed to {action} Invoice."
    statuses: tuple[InvoiceStatusEnum, ...] = (
        InvoiceStatusEnum.PENDING,
        InvoiceStatusEnum.PAID,
    )
    minor_units: int = Field(default=100, gt=0)
    max_minor_units: int = Field(default=MAX_MINOR_UNITS, gt=0)

    model_config = ConfigDict(frozen=True)

    def message_for(self, field: str) -> str | None:
        return {
            "customerId": self.customer_message,
            "amount": self.amount_message,
            "status": self.status_message,
        }.get(field)

    def summary(self, action: str) -> str:
        return self.missing_fields_message.format(action=action)

    def to_minor_units(self, amount: Decimal) -> int:
        return to_minor_units(amount, self.minor_units)


DEFAULT_RULES = InvoiceRules()


def _rules(info: ValidationInfo) -> InvoiceRules:
    if info.context and "rules" in info.context:
        return info.context["rules"]
    return DEFAULT_RULES


class InvoiceInput(BaseModel):
    customer_id: str = Field(alias="customerId", min_length=1)
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    status: InvoiceStatusEnum

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("amount")
    @classmethod
    def amount_fits_store(cls, value: Decimal, info: ValidationInfo) -> Decimal:
        rules = _rules(info)
        try:
            minor = rules.to_minor_units(value)
        except ArithmeticError as exc:
            raise ValueError("amount out of range") from exc
        if minor <= 0:
            raise ValueError("amount rounds to zero")
        if minor > rules.max_minor_units:
            raise ValueError("amount too large")
        return value

    @field_validator("status")
    @classmethod
    def status_allowed(
        cls, value: InvoiceStatusEnum, info: ValidationInfo
    ) -> InvoiceStatusEnum:
        if value not in _rules(info).statuses:
            raise ValueError("status not allowed")
        return value
