import os
import json
import logging
from decimal import Decimal, InvalidOperation
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("config")


def _parse_rate_overrides(raw: str) -> dict:
    try:
        parsed = json.loads(raw or "{}")
    except json.JSONDecodeError:
        logger.warning("VAT_RATE_OVERRIDES is not valid JSON, ignoring it")
        return {}
    if not isinstance(parsed, dict):
        logger.warning("VAT_RATE_OVERRIDES must be a JSON object, ignoring it")
        return {}

    overrides = {}
    for code, rate in parsed.items():
        code = str(code).strip().upper()
        if isinstance(rate, bool) or not isinstance(rate, (int, float, str)):
            logger.warning("Ignoring VAT rate override for %s: %r", code, rate)
            continue
        try:
            value = Decimal(str(rate))
        except InvalidOperation:
            logger.warning("Ignoring VAT rate override for %s: %r", code, rate)
            continue
        if not value.is_finite() or not Decimal("0") <= value < Decimal("1"):
            logger.warning("Ignoring out-of-range VAT rate override for %s: %r", code, rate)
            continue
        overrides[code] = str(value)
    return overrides


class Settings:
    VAT_HOME_COUNTRY: str = os.getenv("VAT_HOME_COUNTRY", "FR").strip().upper()
    VAT_DEFAULT_CURRENCY: str = os.getenv("VAT_DEFAULT_CURRENCY", "EUR").upper()
    VAT_DISPLAY_LOCALE: str = os.getenv("VAT_DISPLAY_LOCALE", "fr_FR")
    # Rates are kept as strings so they reach Decimal without a float detour.
    VAT_RATE_OVERRIDES = _parse_rate_overrides(os.getenv("VAT_RATE_OVERRIDES", "{}"))
    VAT_INACTIVE_COUNTRIES = [
        code.strip().upper()
        for code in os.getenv("VAT_INACTIVE_COUNTRIES", "").split(",")
        if code.strip()
    ]
    VAT_ID_VALIDATOR: str = os.getenv("VAT_ID_VALIDATOR", "structural").lower()
    VIES_API_BASE: str = os.getenv(
        "VIES_API_BASE",
        "https://ec.europa.eu/taxation_customs/vies/rest-api",
    )
    VIES_TIMEOUT_SECONDS: float = float(os.getenv("VIES_TIMEOUT_SECONDS", "5"))
    ORDER_TOTAL_TOLERANCE_CENTS: int = int(
        os.getenv("ORDER_TOTAL_TOLERANCE_CENTS", "0")
    )
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    class Config:
        env_file = ".env"


settings = Settings()
