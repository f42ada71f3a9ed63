from vat_service.services.order_totals import calculated_totals, reconcile_totals
from vat_service.services.vat_calculator import CalculationRequest


def _result(calculator):
    return calculator.calculate(
        CalculationRequest(amount=2500, shipping_amount=500, country_code="FR")
    )


def test_calculated_totals(calculator):
    assert calculated_totals(_result(calculator)) == {
        "subtotal": 2500,
        "shipping": 500,
        "vat": 600,
        "total": 3600,
    }


def test_matching_client_quote(calculator):
    check = reconcile_totals(
        {"subtotal": 2500, "shipping": 500, "vat": 600, "total": 3600},
        _result(calculator),
        tolerance_cents=0,
    )
    assert check.matches is True
    assert check.mismatches == {}


def test_off_by_one_cent_is_rejected_without_tolerance(calculator):
    # A client rounding base+shipping once would quote 1 cent less here.
    result = calculator.calculate(
        CalculationRequest(amount=50, shipping_amount=50, country_code="DE")
    )
    check = reconcile_totals(
        {"subtotal": 50, "shipping": 50, "vat": 19, "total": 119},
        result,
        tolerance_cents=0,
    )
    assert check.matches is False
    assert set(check.mismatches) == {"vat", "total"}
    assert check.mismatches["vat"].provided == 19
    assert check.mismatches["vat"].calculated == 20
    assert check.mismatches["vat"].diff == 1


def test_tolerance_allows_small_differences(calculator):
    check = reconcile_totals(
        {"subtotal": 2500, "shipping": 500, "vat": 605, "total": 3605},
        _result(calculator),
        tolerance_cents=10,
    )
    assert check.matches is True


def test_missing_provided_values_mismatch(calculator):
    check = reconcile_totals({"subtotal": 2500, "total": "3600"}, _result(calculator), 0)
    assert set(check.mismatches) == {"shipping", "vat", "total"}
    assert check.mismatches["shipping"].provided is None
    assert check.mismatches["shipping"].diff is None


def test_default_tolerance_comes_from_settings(calculator):
    check = reconcile_totals(
        {"subtotal": 2500, "shipping": 500, "vat": 600, "total": 3600},
        _result(calculator),
    )
    assert check.tolerance_cents == 0
