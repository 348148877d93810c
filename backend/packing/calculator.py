# backend/packing/calculator.py
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Tuple

# Industry-standard volumetric divisor (cm^3 per kg)
VOLUMETRIC_DIVISOR = 4500

_CENT = Decimal("0.01")


def to_number(value: Any) -> float:
    """Coerce any form input to a finite float; everything else becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    return num if math.isfinite(num) else 0.0


def round2(value: Any) -> float:
    # Half-up on the exact binary value, same as Number.toFixed(2)
    return float(Decimal(to_number(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def volume(length: Any, height: Any, width: Any) -> float:
    return round2(to_number(length) * to_number(height) * to_number(width))


def volumetric_weight(box_volume: Any) -> float:
    return round2(to_number(box_volume) / VOLUMETRIC_DIVISOR)


def final_weight(actual_weight: Any, volume_weight: Any) -> float:
    return round2(max(to_number(actual_weight), to_number(volume_weight)))


def box_weights(length: Any, height: Any, width: Any, weight: Any) -> Tuple[float, float, float]:
    """Return (volume, volumeWeight, finalWeight) for one box."""
    vol = volume(length, height, width)
    # Divide the unrounded volume, the rounded one can shift the second decimal
    vol_weight = round2(to_number(length) * to_number(height) * to_number(width) / VOLUMETRIC_DIVISOR)
    return vol, vol_weight, final_weight(weight, vol_weight)


def charged_weight(actual_weights: Iterable[Any], volume_weights: Iterable[Any]) -> float:
    """Shipment chargeable weight.

    Compares the aggregate actual weight with the aggregate volumetric weight.
    This is not the sum of per-box final weights.
    """
    total_actual = sum(to_number(w) for w in actual_weights)
    total_volume = sum(to_number(w) for w in volume_weights)
    return round2(max(total_actual, total_volume))
