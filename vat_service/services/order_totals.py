from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from vat_service.core.config import settings
from vat_service.services.vat_calculator import CalculationResult

logger = logging.getLogger("vat.totals")

TOTAL_FIELDS = ("subtotal", "shipping", "vat", "total")


@dataclass(frozen=True)
class FieldMismatch:
    provided: Optional[int]
    calculated: int
    diff: Optional[int]


@dataclass
class TotalsCheck:
    tolerance_cents: int
    calculated: Dict[str, int]
    mismatches: Dict[str, FieldMismatch] = field(default_factory=dict)

    @property
    def matches(self) -> bool:
        return not self.mismatches


def calculated_totals(result: CalculationResult) -> Dict[str, int]:
    return {
        "subtotal": result.base_amount,
        "shipping": result.shipping_amount,
        "vat": result.vat_amount,
        "total": result.total_amount,
    }


def reconcile_totals(
    provided: Mapping[str, Any],
    result: CalculationResult,
    tolerance_cents: Optional[int] = None,
) -> TotalsCheck:
    """
    Compare totals quoted to the client against the authoritative server
    computation. A missing or non-integer provided value always mismatches.
    """
    if tolerance_cents is None:
        tolerance_cents = settings.ORDER_TOTAL_TOLERANCE_CENTS

    calculated = calculated_totals(result)
    check = TotalsCheck(tolerance_cents=tolerance_cents, calculated=calculated)

    for name in TOTAL_FIELDS:
        value = provided.get(name)
        if not isinstance(value, int) or isinstance(value, bool):
            check.mismatches[name] = FieldMismatch(
                provided=None, calculated=calculated[name], diff=None
            )
            continue
        diff = abs(value - calculated[name])
        if diff > tolerance_cents:
            check.mismatches[name] = FieldMismatch(
                provided=value, calculated=calculated[name], diff=diff
            )

    if check.mismatches:
        logger.warning(
            "Order total mismatch for %s: %s",
            result.country_code,
            {name: m.diff for name, m in check.mismatches.items()},
        )
    return check
