from decimal import Decimal

import httpx

import pytest
from fastapi.testclient import TestClient

from vat_service.main import app
from vat_service.api import vat_routes
from vat_service.services.tax_rates import TaxRate, TaxRateRegistry
from vat_service.services.vat_calculator import VatCalculator


def make_rate(code, name, rate, eu=True, active=True):
    return TaxRate(
        country_code=code,
        country_name=name,
        rate=Decimal(rate),
        is_eu_member=eu,
        is_active=active,
    )


@pytest.fixture
def calculator():
    return VatCalculator(home_country="FR")


@pytest.fixture
def small_registry():
    return TaxRateRegistry(
        [
            make_rate("FR", "France", "0.20"),
            make_rate("DE", "Germany", "0.19"),
            make_rate("BE", "Belgium", "0.21", active=False),
            make_rate("CH", "Switzerland", "0.081", eu=False),
            make_rate("NO", "Norway", "0", eu=False),
        ]
    )


@pytest.fixture
def override_calculator():
    def _override(calc):
        app.dependency_overrides[vat_routes.get_calculator] = lambda: calc
        return calc

    yield _override
    app.dependency_overrides.pop(vat_routes.get_calculator, None)


@pytest.fixture
def sync_client():
    return TestClient(app)


@pytest.fixture
async def async_client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
