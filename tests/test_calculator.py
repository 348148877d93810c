import math

import pytest

from packing import calculator


@pytest.mark.parametrize("value, expected", [
    (None, 0.0),
    ("", 0.0),
    ("  ", 0.0),
    ("abc", 0.0),
    (True, 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    ("12.5", 12.5),
    (" 7 ", 7.0),
    (3, 3.0),
])
def test_to_number_coerces_form_input(value, expected):
    assert calculator.to_number(value) == expected


def test_round2_is_half_up_on_the_binary_value():
    assert calculator.round2(0.125) == 0.13
    assert calculator.round2(2.675) == 2.67  # 2.675 is stored as 2.67499999...
    assert calculator.round2(27.7777) == 27.78
    assert calculator.round2("bad") == 0.0


def test_small_box_is_charged_by_actual_weight():
    vol, vol_weight, final = calculator.box_weights(10, 10, 10, 5)
    assert vol == 1000
    assert vol_weight == 0.22
    assert final == 5.0


def test_large_light_box_is_charged_by_volume():
    vol, vol_weight, final = calculator.box_weights(50, 50, 50, 1)
    assert vol == 125000
    assert vol_weight == 27.78
    assert final == 27.78


def test_missing_dimension_gives_zero_volume():
    vol, vol_weight, final = calculator.box_weights(10, None, "x", 4)
    assert vol == 0
    assert vol_weight == 0
    assert final == 4


def test_charged_weight_compares_aggregates():
    # Per-box maxima would sum to 10 + 27.78 = 37.78
    assert calculator.charged_weight([10, 1], [0.22, 27.78]) == 28.0
    assert calculator.charged_weight([40, 2], [0.22, 27.78]) == 42.0
    assert calculator.charged_weight([], []) == 0.0


def test_volumetric_divisor():
    assert calculator.VOLUMETRIC_DIVISOR == 4500
    assert math.isclose(calculator.volumetric_weight(9000), 2.0)
