from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

import httpx

logger = logging.getLogger("vat.vies")

_SEPARATORS = re.compile(r"[\s\-.]")
_BODY = re.compile(r"^[A-Z0-9]+$")

MIN_VAT_ID_LENGTH = 8
MAX_VAT_ID_LENGTH = 13

# Plausible total lengths, prefix included. Countries not listed fall back
# to MIN_VAT_ID_LENGTH..MAX_VAT_ID_LENGTH.
VAT_ID_LENGTHS = {
    "AT": (11, 11),
    "BE": (12, 12),
    "BG": (11, 12),
    "CY": (11, 11),
    "CZ": (10, 12),
    "DE": (11, 11),
    "DK": (10, 10),
    "EE": (11, 11),
    "ES": (11, 11),
    "FI": (10, 10),
    "FR": (13, 13),
    "GR": (11, 11),
    "HR": (13, 13),
    "HU": (10, 10),
    "IE": (10, 11),
    "IT": (13, 13),
    "LT": (11, 14),
    "LU": (10, 10),
    "LV": (13, 13),
    "MT": (10, 10),
    "NL": (14, 14),
    "PL": (12, 12),
    "PT": (11, 11),
    "RO": (8, 12),
    "SE": (14, 14),
    "SI": (10, 10),
    "SK": (12, 12),
}

# Greek VAT numbers are issued with the EL prefix.
PREFIX_ALIASES = {"GR": ("GR", "EL")}


def normalize_vat_id(vat_id: Optional[str]) -> str:
    return _SEPARATORS.sub("", vat_id or "").upper()


def is_plausible_vat_id(vat_id: Optional[str], country_code: str) -> bool:
    """
    Structural plausibility only: country prefix, alphanumeric body and a
    plausible overall length for the country. No registry lookup is done here.
    """
    cleaned = normalize_vat_id(vat_id)
    country = (country_code or "").strip().upper()
    if not cleaned or len(country) != 2:
        return False
    shortest, longest = VAT_ID_LENGTHS.get(
        country, (MIN_VAT_ID_LENGTH, MAX_VAT_ID_LENGTH)
    )
    if not shortest <= len(cleaned) <= longest:
        return False
    if cleaned[:2] not in PREFIX_ALIASES.get(country, (country,)):
        return False
    return bool(_BODY.match(cleaned[2:]))


class VatIdValidator(ABC):
    name: str = "base"

    @abstractmethod
    def is_valid(self, vat_id: Optional[str], country_code: str) -> bool:
        raise NotImplementedError


class StructuralVatIdValidator(VatIdValidator):
    name = "structural"

    def is_valid(self, vat_id: Optional[str], country_code: str) -> bool:
        return is_plausible_vat_id(vat_id, country_code)


class ViesVatIdValidator(VatIdValidator):
    """
    Checks a VAT number against the EU VIES REST service after the
    structural check passes. Any transport or payload problem counts as
    "not valid" so the order falls back to normal taxation.
    """

    name = "vies"

    def __init__(
        self,
        api_base: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(url)

    def is_valid(self, vat_id: Optional[str], country_code: str) -> bool:
        if not is_plausible_vat_id(vat_id, country_code):
            return False

        cleaned = normalize_vat_id(vat_id)
        prefix, number = cleaned[:2], cleaned[2:]
        url = f"{self.api_base}/ms/{prefix}/vat/{number}"
        try:
            resp = self._get(url)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("VIES lookup failed for %s: %s", prefix, exc)
            return False

        if not isinstance(payload, dict):
            logger.warning("Unexpected VIES payload for %s", prefix)
            return False
        valid = payload.get("isValid", payload.get("valid"))
        logger.info("VIES lookup %s%s -> %s", prefix, "*" * len(number), valid)
        return valid is True
