import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from vat_service.core.config import settings
from vat_service.schemas.models import (
    TaxRateOut,
    VatCalculationRequest,
    VatItemsCalculationRequest,
    VerifyTotalsRequest,
    VerifyTotalsResponse,
)
from vat_service.services.order_totals import reconcile_totals
from vat_service.services.tax_rates import TaxRate
from vat_service.services.vat_calculator import (
    CalculationRequest,
    CalculationResult,
    VatCalculator,
    vat_calculator,
)
from vat_service.utils.formatting import format_currency, format_percentage


router = APIRouter(prefix="/api/vat", tags=["VAT"])
logger = logging.getLogger("vat_routes")


def get_calculator() -> VatCalculator:
    return vat_calculator


def _serialize_calculation(result: CalculationResult) -> dict:
    currency = settings.VAT_DEFAULT_CURRENCY
    data = result.to_dict()
    data["formatted"] = {
        "base_amount": format_currency(result.base_amount, currency),
        "shipping_amount": format_currency(result.shipping_amount, currency),
        "vat_amount": format_currency(result.vat_amount, currency),
        "total_amount": format_currency(result.total_amount, currency),
        "vat_rate": format_percentage(result.vat_rate),
    }
    return data


def _serialize_rate(entry: TaxRate) -> TaxRateOut:
    return TaxRateOut(
        country_code=entry.country_code,
        country_name=entry.country_name,
        rate=float(entry.rate),
        rate_display=format_percentage(entry.rate),
        is_eu_member=entry.is_eu_member,
    )


@router.post("/calculate")
def calculate(
    payload: VatCalculationRequest,
    calculator: VatCalculator = Depends(get_calculator),
):
    result = calculator.calculate(
        CalculationRequest.from_payload(payload.model_dump())
    )
    return {"calculation": _serialize_calculation(result)}


@router.post("/calculate-items")
def calculate_items(
    payload: VatItemsCalculationRequest,
    calculator: VatCalculator = Depends(get_calculator),
):
    result = calculator.calculate_for_line_items(
        [item.amount for item in payload.items],
        country_code=payload.country_code,
        shipping_amount=payload.shipping_amount or 0,
        customer_type=payload.customer_type or "consumer",
        business_vat_number=payload.business_vat_number,
    )
    return {
        "calculation": _serialize_calculation(result),
        "item_count": len(payload.items),
    }


@router.get("/countries")
def list_eu_countries(calculator: VatCalculator = Depends(get_calculator)):
    return [_serialize_rate(entry) for entry in calculator.get_eu_countries()]


@router.get("/countries/{country_code}")
def get_country(
    country_code: str, calculator: VatCalculator = Depends(get_calculator)
):
    entry = calculator.registry.get_rate(country_code)
    if not entry:
        raise HTTPException(status_code=404, detail="No VAT rate for country")
    return _serialize_rate(entry)


@router.post("/verify-totals")
def verify_totals(
    payload: VerifyTotalsRequest,
    calculator: VatCalculator = Depends(get_calculator),
):
    result = calculator.calculate(
        CalculationRequest.from_payload(payload.order.model_dump())
    )
    check = reconcile_totals(payload.provided.model_dump(), result)
    body = VerifyTotalsResponse(
        matches=check.matches,
        tolerance_cents=check.tolerance_cents,
        calculated=check.calculated,
        mismatches={
            name: {
                "provided": m.provided,
                "calculated": m.calculated,
                "diff": m.diff,
            }
            for name, m in check.mismatches.items()
        },
    )
    if not check.matches:
        logger.info("Rejecting order totals for %s", result.country_code)
        return JSONResponse(status_code=409, content=body.model_dump())
    return body
