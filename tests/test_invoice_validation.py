from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.models import InvoiceStatusEnum
from app.schemas import InvoiceInput, InvoiceRules, ValidationFailure, to_minor_units
from app.services.invoices import DEFAULT_RULES, validate_invoice_form

CUSTOMER_MSG = "Please select a customer."
AMOUNT_MSG = "Please enter an amount greater than $0"
STATUS_MSG = "Please select an invoice status."


def _form(**overrides):
    form = {"customerId": "c1", "amount": "9.99", "status": "pending"}
    form.update(overrides)
    return {key: value for key, value in form.items() if value is not None}


def test_valid_form_is_coerced():
    record = validate_invoice_form(_form(), DEFAULT_RULES)

    assert isinstance(record, InvoiceInput)
    assert record.customer_id == "c1"
    assert record.amount == Decimal("9.99")
    assert record.status is InvoiceStatusEnum.PENDING
    assert DEFAULT_RULES.to_minor_units(record.amount) == 999


def test_surrounding_whitespace_is_ignored():
    record = validate_invoice_form(
        _form(customerId="  c1 ", amount=" 10 ", status=" paid ")
    )

    assert isinstance(record, InvoiceInput)
    assert record.customer_id == "c1"
    assert DEFAULT_RULES.to_minor_units(record.amount) == 1000
    assert record.status is InvoiceStatusEnum.PAID


def test_extra_fields_do_not_survive_validation():
    record = validate_invoice_form(_form(date="1999-01-01", id="forged"))

    assert isinstance(record, InvoiceInput)
    assert set(record.model_dump()) == {"customer_id", "amount", "status"}


@pytest.mark.parametrize("customer_id", ["", "   ", None])
def test_customer_is_required(customer_id):
    result = validate_invoice_form(_form(customerId=customer_id))

    assert isinstance(result, ValidationFailure)
    assert result.errors == {"customerId": [CUSTOMER_MSG]}
    assert result.message == "Missing Fields. Failed to Create Invoice."


@pytest.mark.parametrize(
    "amount", ["0", "0.00", "-5", "abc", "", "NaN", "Infinity", "0.001", None]
)
def test_amount_must_be_positive(amount):
    result = validate_invoice_form(_form(amount=amount))

    assert isinstance(result, ValidationFailure)
    assert result.errors == {"amount": [AMOUNT_MSG]}


@pytest.mark.parametrize("status", ["", "draft", "PAID", "overdue", None])
def test_status_must_be_pending_or_paid(status):
    result = validate_invoice_form(_form(status=status))

    assert isinstance(result, ValidationFailure)
    assert result.errors == {"status": [STATUS_MSG]}


def test_every_failing_field_is_reported():
    result = validate_invoice_form({}, action="Update")

    assert isinstance(result, ValidationFailure)
    assert result.errors == {
        "customerId": [CUSTOMER_MSG],
        "amount": [AMOUNT_MSG],
        "status": [STATUS_MSG],
    }
    assert result.message == "Missing Fields. Failed to Update Invoice."
    assert result.state() == {"errors": result.errors, "message": result.message}


def test_custom_rules_supply_the_messages():
    rules = InvoiceRules(customer_message="Pick a customer first.")

    result = validate_invoice_form(_form(customerId=""), rules)

    assert result.errors == {"customerId": ["Pick a customer first."]}


def test_rules_are_immutable():
    with pytest.raises(ValidationError):
        DEFAULT_RULES.customer_message = "changed"

    assert DEFAULT_RULES.customer_message == CUSTOMER_MSG


@pytest.mark.parametrize(
    "amount, cents",
    [
        ("0.01", 1),
        ("1.10", 110),
        ("9.99", 999),
        ("19.99", 1999),
        ("1234.5", 123450),
        ("0.015", 2),
        ("0.025", 2),
        ("19.995", 2000),
    ],
)
def test_minor_units_use_exact_decimal_rounding(amount, cents):
    assert to_minor_units(Decimal(amount)) == cents


@pytest.mark.parametrize(
    "amount", ["1e30", "1e20", "21474836.48", "99999999999", "1E+999999"]
)
def test_amount_beyond_integer_column_is_rejected(amount):
    result = validate_invoice_form(_form(amount=amount))

    assert isinstance(result, ValidationFailure)
    assert result.errors == {"amount": [AMOUNT_MSG]}


def test_largest_storable_amount_is_accepted():
    record = validate_invoice_form(_form(amount="21474836.47"))

    assert isinstance(record, InvoiceInput)
    assert DEFAULT_RULES.to_minor_units(record.amount) == 2**31 - 1


def test_substituted_statuses_restrict_the_form():
    rules = InvoiceRules(statuses=(InvoiceStatusEnum.PENDING,))

    assert isinstance(validate_invoice_form(_form(status="pending"), rules), InvoiceInput)
    result = validate_invoice_form(_form(status="paid"), rules)
    assert result.errors == {"status": [STATUS_MSG]}


def test_substituted_minor_units_drive_conversion_and_limits():
    rules = InvoiceRules(minor_units=1, max_minor_units=500)

    record = validate_invoice_form(_form(amount="9.99"), rules)
    assert rules.to_minor_units(record.amount) == 10

    assert validate_invoice_form(_form(amount="0.4"), rules).errors == {
        "amount": [AMOUNT_MSG]
    }
    assert validate_invoice_form(_form(amount="501"), rules).errors == {
        "amount": [AMOUNT_MSG]
    }
