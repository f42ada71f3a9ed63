from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from vat_service.core.config import settings
from vat_service.services.tax_rates import TaxRate, TaxRateRegistry, default_registry
from vat_service.services.validation import (
    VatValidationError,
    ensure_valid,
    validate_calculation_request,
)
from vat_service.services.vat_id import (
    StructuralVatIdValidator,
    VatIdValidator,
    ViesVatIdValidator,
)

logger = logging.getLogger("vat")

EXEMPTION_NON_EU = "non-eu country"
EXEMPTION_REVERSE_CHARGE = "reverse charge — B2B transaction"
UNKNOWN_COUNTRY_NAME = "Unknown"
ZERO_RATE = Decimal("0")


@dataclass(frozen=True)
class CalculationRequest:
    amount: int
    country_code: str
    shipping_amount: Optional[int] = 0
    customer_type: str = "consumer"
    business_vat_number: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CalculationRequest":
        return cls(
            amount=payload.get("amount"),
            country_code=payload.get("country_code"),
            shipping_amount=payload.get("shipping_amount") or 0,
            customer_type=payload.get("customer_type") or "consumer",
            business_vat_number=payload.get("business_vat_number"),
        )


@dataclass(frozen=True)
class VatBreakdown:
    product_vat: int
    shipping_vat: int


@dataclass(frozen=True)
class CalculationResult:
    base_amount: int
    shipping_amount: int
    country_code: str
    country_name: str
    vat_rate: Decimal
    vat_amount: int
    total_amount: int
    is_reverse_charge: bool
    exemption_reason: Optional[str]
    breakdown: VatBreakdown

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["vat_rate"] = float(self.vat_rate)
        return data


LineItem = Union[int, Mapping[str, Any]]


def vat_for(amount_cents: int, rate: Decimal) -> int:
    """
    amount_cents * rate rounded to the nearest cent, ties away from zero.
    Exact integer arithmetic, so no Decimal context precision limit applies.
    Both operands are non-negative.
    """
    numerator, denominator = rate.as_integer_ratio()
    return (2 * amount_cents * numerator + denominator) // (2 * denominator)


class VatCalculator:
    def __init__(
        self,
        registry: TaxRateRegistry = default_registry,
        home_country: str = "FR",
        vat_id_validator: Optional[VatIdValidator] = None,
    ):
        self.registry = registry
        self.home_country = home_country.strip().upper()
        self.vat_id_validator = vat_id_validator or StructuralVatIdValidator()

    def should_apply_reverse_charge(
        self,
        entry: Optional[TaxRate],
        customer_type: str,
        business_vat_number: Optional[str],
    ) -> bool:
        """
        Intra-EU B2B supply to a country other than the seller's, backed by
        a VAT number the configured validator accepts.
        """
        if customer_type != "business":
            return False
        if entry is None or not entry.is_eu_member:
            return False
        if entry.country_code == self.home_country:
            return False
        if not business_vat_number or not business_vat_number.strip():
            return False
        return self.vat_id_validator.is_valid(business_vat_number, entry.country_code)

    def calculate(self, request: CalculationRequest) -> CalculationResult:
        ensure_valid(asdict(request))
        shipping_amount = request.shipping_amount or 0

        country_code = request.country_code.upper()
        entry = self.registry.get_rate(country_code)

        is_reverse_charge = False
        if entry is None:
            vat_rate = ZERO_RATE
            country_name = UNKNOWN_COUNTRY_NAME
            exemption_reason = EXEMPTION_NON_EU
        else:
            country_name = entry.country_name
            is_reverse_charge = self.should_apply_reverse_charge(
                entry, request.customer_type, request.business_vat_number
            )
            if is_reverse_charge:
                vat_rate = ZERO_RATE
                exemption_reason = EXEMPTION_REVERSE_CHARGE
            else:
                vat_rate = entry.rate
                exemption_reason = None
                if not entry.is_eu_member and entry.rate == ZERO_RATE:
                    exemption_reason = EXEMPTION_NON_EU

        product_vat = vat_for(request.amount, vat_rate)
        shipping_vat = vat_for(shipping_amount, vat_rate)
        vat_amount = product_vat + shipping_vat

        logger.debug(
            "VAT %s rate=%s reverse_charge=%s base=%s shipping=%s vat=%s",
            country_code,
            vat_rate,
            is_reverse_charge,
            request.amount,
            shipping_amount,
            vat_amount,
        )

        return CalculationResult(
            base_amount=request.amount,
            shipping_amount=shipping_amount,
            country_code=country_code,
            country_name=country_name,
            vat_rate=vat_rate,
            vat_amount=vat_amount,
            total_amount=request.amount + shipping_amount + vat_amount,
            is_reverse_charge=is_reverse_charge,
            exemption_reason=exemption_reason,
            breakdown=VatBreakdown(product_vat=product_vat, shipping_vat=shipping_vat),
        )

    def calculate_for_line_items(
        self,
        items: Sequence[LineItem],
        *,
        country_code: str,
        shipping_amount: Optional[int] = 0,
        customer_type: str = "consumer",
        business_vat_number: Optional[str] = None,
    ) -> CalculationResult:
        """
        Sum the line amounts first and tax the aggregate once, so a
        multi-line cart rounds exactly like a single line of the same total.
        """
        amounts: List[Any] = []
        errors: List[str] = []
        for index, item in enumerate(items, start=1):
            amount = item.get("amount") if isinstance(item, Mapping) else item
            if not isinstance(amount, int) or isinstance(amount, bool):
                errors.append(f"Item {index}: amount must be an integer number of cents")
            elif amount < 0:
                errors.append(f"Item {index}: amount must be positive")
            amounts.append(amount)

        total = sum(amounts) if not errors else 0
        request = CalculationRequest(
            amount=total,
            country_code=country_code,
            shipping_amount=shipping_amount,
            customer_type=customer_type,
            business_vat_number=business_vat_number,
        )
        errors.extend(validate_calculation_request(asdict(request)))
        if errors:
            raise VatValidationError(errors)
        return self.calculate(request)

    def get_all_rates(self) -> List[TaxRate]:
        return self.registry.list_active()

    def get_eu_countries(self) -> List[TaxRate]:
        return self.registry.list_eu_members()

    def is_eu_country(self, country_code: str) -> bool:
        return self.registry.is_eu_member(country_code)


def build_vat_id_validator(name: Optional[str] = None) -> VatIdValidator:
    name = (name or settings.VAT_ID_VALIDATOR).lower()
    if name == "vies":
        return ViesVatIdValidator(
            api_base=settings.VIES_API_BASE,
            timeout=settings.VIES_TIMEOUT_SECONDS,
        )
    if name != "structural":
        logger.warning("Unknown VAT id validator '%s', using structural", name)
    return StructuralVatIdValidator()


def build_default_calculator() -> VatCalculator:
    registry = default_registry
    if settings.VAT_RATE_OVERRIDES or settings.VAT_INACTIVE_COUNTRIES:
        registry = default_registry.with_overrides(
            settings.VAT_RATE_OVERRIDES, settings.VAT_INACTIVE_COUNTRIES
        )
    return VatCalculator(
        registry=registry,
        home_country=settings.VAT_HOME_COUNTRY,
        vat_id_validator=build_vat_id_validator(),
    )


vat_calculator = build_default_calculator()


def calculate_vat(payload: Mapping[str, Any]) -> CalculationResult:
    ensure_valid(payload)
    return vat_calculator.calculate(CalculationRequest.from_payload(payload))


def calculate_vat_for_items(
    items: Sequence[LineItem], context: Mapping[str, Any]
) -> CalculationResult:
    return vat_calculator.calculate_for_line_items(
        items,
        country_code=context.get("country_code"),
        shipping_amount=context.get("shipping_amount") or 0,
        customer_type=context.get("customer_type") or "consumer",
        business_vat_number=context.get("business_vat_number"),
    )


def get_eu_countries() -> List[TaxRate]:
    return vat_calculator.get_eu_countries()


def is_eu_country(country_code: str) -> bool:
    return vat_calculator.is_eu_country(country_code)
