from decimal import Decimal

import pytest

from vat_service.services.tax_rates import (
    EU_VAT_RATES,
    TaxRate,
    TaxRateRegistry,
    default_registry,
)


def test_default_registry_has_all_member_states():
    assert len(default_registry) == 27
    assert len(default_registry.list_eu_members()) == 27


def test_get_rate_is_case_insensitive():
    entry = default_registry.get_rate("de")
    assert entry is not None
    assert entry.country_code == "DE"
    assert entry.rate == Decimal("0.19")
    assert default_registry.get_rate(" fr ").country_name == "France"


def test_get_rate_unknown_country_returns_none():
    assert default_registry.get_rate("XX") is None
    assert default_registry.get_rate("") is None
    assert default_registry.get_rate(None) is None


def test_inactive_entries_behave_like_missing(small_registry):
    assert small_registry.get_rate("BE") is None
    assert small_registry.is_eu_member("BE") is False
    assert "BE" not in small_registry
    assert all(entry.country_code != "BE" for entry in small_registry.list_active())


def test_is_eu_member(small_registry):
    assert small_registry.is_eu_member("fr") is True
    assert small_registry.is_eu_member("CH") is False
    assert small_registry.is_eu_member("US") is False


def test_list_eu_members_keeps_insertion_order(small_registry):
    codes = [entry.country_code for entry in small_registry.list_eu_members()]
    assert codes == ["FR", "DE"]
    assert codes == [entry.country_code for entry in small_registry.list_eu_members()]


def test_default_order_follows_table():
    codes = [entry.country_code for entry in default_registry.list_eu_members()]
    assert codes == [entry.country_code for entry in EU_VAT_RATES]


def test_lowest_and_highest_standard_rates():
    rates = {entry.country_code: entry.rate for entry in default_registry.list_active()}
    assert min(rates.values()) == rates["LU"] == Decimal("0.17")
    assert max(rates.values()) == rates["HU"] == Decimal("0.27")


def test_duplicate_country_rejected():
    entry = TaxRate("FR", "France", Decimal("0.20"), True)
    with pytest.raises(ValueError):
        TaxRateRegistry([entry, TaxRate("fr", "France", Decimal("0.10"), True)])


@pytest.mark.parametrize("rate", ["1", "1.5", "-0.01"])
def test_out_of_range_rate_rejected(rate):
    with pytest.raises(ValueError):
        TaxRateRegistry([TaxRate("FR", "France", Decimal(rate), True)])


def test_with_overrides_returns_new_registry():
    updated = default_registry.with_overrides({"de": "0.16"}, inactive=["lu"])
    assert updated.get_rate("DE").rate == Decimal("0.16")
    assert updated.get_rate("LU") is None
    assert default_registry.get_rate("DE").rate == Decimal("0.19")
    assert default_registry.get_rate("LU") is not None


def test_with_overrides_rejects_garbage_rate():
    with pytest.raises(ValueError):
        default_registry.with_overrides({"DE": "nineteen"})


def test_registry_table_is_read_only():
    with pytest.raises(TypeError):
        default_registry._rates["XX"] = None
