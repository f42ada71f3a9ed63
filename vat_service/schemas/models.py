from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


# Amount, shipping, country and customer type are checked by
# validate_calculation_request so every violation is reported together.
class VatCalculationRequest(BaseModel):
    amount: Any = None
    shipping_amount: Any = None
    country_code: Any = None
    customer_type: Any = None  # "consumer" | "business"
    business_vat_number: Optional[str] = None


class LineItemAmount(BaseModel):
    amount: Any = None


class VatItemsCalculationRequest(BaseModel):
    items: List[LineItemAmount] = Field(default_factory=list)
    shipping_amount: Any = None
    country_code: Any = None
    customer_type: Any = None
    business_vat_number: Optional[str] = None


class ProvidedTotals(BaseModel):
    subtotal: Optional[int] = None
    shipping: Optional[int] = None
    vat: Optional[int] = None
    total: Optional[int] = None


class VerifyTotalsRequest(BaseModel):
    order: VatCalculationRequest
    provided: ProvidedTotals


class TaxRateOut(BaseModel):
    country_code: str
    country_name: str
    rate: float
    rate_display: str
    is_eu_member: bool


class FieldMismatchOut(BaseModel):
    provided: Optional[int] = None
    calculated: int
    diff: Optional[int] = None


class VerifyTotalsResponse(BaseModel):
    matches: bool
    tolerance_cents: int
    calculated: Dict[str, int]
    mismatches: Dict[str, FieldMismatchOut] = Field(default_factory=dict)
