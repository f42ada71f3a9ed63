from __future__ import annotations

from typing import Any, List, Mapping

CUSTOMER_TYPES = ("consumer", "business")


class VatValidationError(Exception):
    """Malformed calculation request; carries every violated constraint."""

    def __init__(self, violations: List[str], status_code: int = 400):
        super().__init__("; ".join(violations))
        self.violations = list(violations)
        self.status_code = status_code


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_calculation_request(payload: Mapping[str, Any]) -> List[str]:
    """Return all violations found in a calculation request; empty means valid."""
    errors: List[str] = []

    amount = payload.get("amount")
    if not _is_int(amount):
        errors.append("Amount must be an integer number of cents")
    elif amount < 0:
        errors.append("Amount must be positive")

    shipping = payload.get("shipping_amount")
    if shipping is not None:
        if not _is_int(shipping):
            errors.append("Shipping amount must be an integer number of cents")
        elif shipping < 0:
            errors.append("Shipping amount must be positive")

    country = payload.get("country_code")
    if not (
        isinstance(country, str)
        and len(country) == 2
        and country.isascii()
        and country.isalpha()
    ):
        errors.append("Valid country code is required")

    customer_type = payload.get("customer_type")
    if customer_type is not None and customer_type not in CUSTOMER_TYPES:
        errors.append("Customer type must be business or consumer")

    return errors


def ensure_valid(payload: Mapping[str, Any]) -> None:
    errors = validate_calculation_request(payload)
    if errors:
        raise VatValidationError(errors)
