# backend/packing/aggregator.py
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from packing import calculator
from packing.domain import (
    Box, CustomerStats, QuantityCheck, ReportSummary, ShipmentDocument, ShipmentTotals,
)


def recompute_box(box: Box) -> Box:
    """Return a copy of ``box`` with derived weights taken from its own fields.

    Stored derived values are never trusted. A short box always reads as zero.
    """
    if box.is_short_box:
        dims = (0.0, 0.0, 0.0, 0.0)
    else:
        dims = tuple(calculator.to_number(v) for v in (box.length, box.height, box.width, box.weight))
    length, height, width, weight = dims
    vol, vol_weight, final = calculator.box_weights(length, height, width, weight)
    return box.model_copy(update={
        "length": length, "height": height, "width": width, "weight": weight,
        "volume": vol, "volume_weight": vol_weight, "final_weight": final,
    })


def summarize(boxes: Sequence[Box]) -> ShipmentTotals:
    boxes = [recompute_box(b) for b in boxes]
    available = sum(b.pieces for b in boxes if not b.is_short_box)
    short = sum(b.pieces for b in boxes if b.is_short_box)
    return ShipmentTotals(
        box_count=len(boxes),
        total_pieces=available + short,
        total_weight=calculator.round2(sum(b.weight for b in boxes)),
        total_volume=calculator.round2(sum(b.volume for b in boxes)),
        total_volume_weight=calculator.round2(sum(b.volume_weight for b in boxes)),
        charged_weight=calculator.charged_weight(
            [b.weight for b in boxes], [b.volume_weight for b in boxes]
        ),
        available_qty=available,
        short_qty=short,
    )


def quantity_check(total_pieces: int, required_qty: Optional[int]) -> QuantityCheck:
    # Advisory only; a mismatch never blocks submission
    if required_qty is None:
        return QuantityCheck(total_pieces=total_pieces)
    return QuantityCheck(
        total_pieces=total_pieces,
        required_qty=required_qty,
        difference=total_pieces - required_qty,
        matches=total_pieces == required_qty,
    )


def packing_minutes(start_time: Optional[str], end_time: Optional[str]) -> Optional[int]:
    """Minutes between two "HH:MM" strings, or None when missing or negative."""
    if not start_time or not end_time:
        return None
    try:
        sh, sm = (int(p) for p in start_time.split(":")[:2])
        eh, em = (int(p) for p in end_time.split(":")[:2])
    except ValueError:
        return None
    minutes = (eh * 60 + em) - (sh * 60 + sm)
    return minutes if minutes >= 0 else None


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def in_range(shipment_date, start_date: Optional[date], end_date: Optional[date]) -> bool:
    d = _as_date(shipment_date)
    if start_date and d < start_date:
        return False
    if end_date and d > end_date:
        return False
    return True


def customer_summary(
    shipments: Iterable[ShipmentDocument],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> ReportSummary:
    """Group shipments by party name within an inclusive date range.

    The key is the denormalised party name string, not the customer id, so
    differently spelled names for one customer stay separate.
    """
    stats: Dict[str, CustomerStats] = {}
    durations: List[int] = []
    total_boxes = 0
    total_weight = 0.0
    count = 0

    for shipment in shipments:
        if not in_range(shipment.date, start_date, end_date):
            continue
        count += 1
        boxes = [recompute_box(b) for b in shipment.boxes]
        weight = sum(b.final_weight for b in boxes)
        total_boxes += len(boxes)
        total_weight += weight

        name = shipment.party_name or "Unknown"
        entry = stats.setdefault(name, CustomerStats(party_name=name))
        entry.shipments += 1
        entry.boxes += len(boxes)
        entry.total_weight = calculator.round2(entry.total_weight + weight)

        minutes = packing_minutes(shipment.start_time, shipment.end_time)
        if minutes is not None:
            entry.total_duration_minutes += minutes
            durations.append(minutes)

    return ReportSummary(
        start_date=start_date,
        end_date=end_date,
        total_shipments=count,
        total_boxes=total_boxes,
        total_weight=calculator.round2(total_weight),
        avg_duration_minutes=round(sum(durations) / len(durations), 2) if durations else None,
        customers=sorted(stats.values(), key=lambda s: s.party_name),
    )
