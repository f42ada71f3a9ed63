from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional


@dataclass(frozen=True)
class TaxRate:
    country_code: str
    country_name: str
    rate: Decimal
    is_eu_member: bool
    is_active: bool = True


def _rate(code: str, name: str, rate: str) -> TaxRate:
    return TaxRate(
        country_code=code,
        country_name=name,
        rate=Decimal(rate),
        is_eu_member=True,
    )


# Standard EU rates applied to wine (2024).
EU_VAT_RATES = (
    _rate("AT", "Austria", "0.20"),
    _rate("BE", "Belgium", "0.21"),
    _rate("BG", "Bulgaria", "0.20"),
    _rate("HR", "Croatia", "0.25"),
    _rate("CY", "Cyprus", "0.19"),
    _rate("CZ", "Czech Republic", "0.21"),
    _rate("DK", "Denmark", "0.25"),
    _rate("EE", "Estonia", "0.20"),
    _rate("FI", "Finland", "0.24"),
    _rate("FR", "France", "0.20"),
    _rate("DE", "Germany", "0.19"),
    _rate("GR", "Greece", "0.24"),
    _rate("HU", "Hungary", "0.27"),
    _rate("IE", "Ireland", "0.23"),
    _rate("IT", "Italy", "0.22"),
    _rate("LV", "Latvia", "0.21"),
    _rate("LT", "Lithuania", "0.21"),
    _rate("LU", "Luxembourg", "0.17"),
    _rate("MT", "Malta", "0.18"),
    _rate("NL", "Netherlands", "0.21"),
    _rate("PL", "Poland", "0.23"),
    _rate("PT", "Portugal", "0.23"),
    _rate("RO", "Romania", "0.19"),
    _rate("SK", "Slovakia", "0.20"),
    _rate("SI", "Slovenia", "0.22"),
    _rate("ES", "Spain", "0.21"),
    _rate("SE", "Sweden", "0.25"),
)


class TaxRateRegistry:
    """
    Read-only country -> VAT rate table.
    Inactive entries behave exactly like missing ones for every lookup.
    """

    def __init__(self, rates: Iterable[TaxRate]):
        table: Dict[str, TaxRate] = {}
        for entry in rates:
            code = entry.country_code.strip().upper()
            if code in table:
                raise ValueError(f"Duplicate tax rate for country '{code}'")
            if not Decimal("0") <= entry.rate < Decimal("1"):
                raise ValueError(f"Tax rate for '{code}' must be within [0, 1)")
            table[code] = replace(entry, country_code=code)
        self._rates: Mapping[str, TaxRate] = MappingProxyType(table)

    def __len__(self) -> int:
        return len(self._rates)

    def __contains__(self, country_code: object) -> bool:
        return isinstance(country_code, str) and self.get_rate(country_code) is not None

    def get_rate(self, country_code: Optional[str]) -> Optional[TaxRate]:
        if not country_code:
            return None
        entry = self._rates.get(country_code.strip().upper())
        if entry is None or not entry.is_active:
            return None
        return entry

    def is_eu_member(self, country_code: Optional[str]) -> bool:
        entry = self.get_rate(country_code)
        return bool(entry and entry.is_eu_member)

    def list_active(self) -> List[TaxRate]:
        return [entry for entry in self._rates.values() if entry.is_active]

    def list_eu_members(self) -> List[TaxRate]:
        return [entry for entry in self.list_active() if entry.is_eu_member]

    def with_overrides(
        self,
        rates: Optional[Mapping[str, object]] = None,
        inactive: Iterable[str] = (),
    ) -> "TaxRateRegistry":
        """
        Build a new registry with some rates replaced and some countries
        switched off. Unknown codes in ``rates`` are ignored; this registry
        is left untouched.
        """
        rates = {code.strip().upper(): value for code, value in (rates or {}).items()}
        inactive_codes = {code.strip().upper() for code in inactive}

        entries = []
        for code, entry in self._rates.items():
            if code in rates:
                try:
                    entry = replace(entry, rate=Decimal(str(rates[code])))
                except InvalidOperation as exc:
                    raise ValueError(f"Invalid tax rate override for '{code}'") from exc
            if code in inactive_codes:
                entry = replace(entry, is_active=False)
            entries.append(entry)
        return TaxRateRegistry(entries)


default_registry = TaxRateRegistry(EU_VAT_RATES)
