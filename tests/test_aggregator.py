from datetime import date

from packing.aggregator import (
    customer_summary, in_range, packing_minutes, quantity_check, recompute_box, summarize,
)
from packing.domain import Box, ProductLine, ShipmentDocument


def _line(qty, sku="PROD001"):
    return ProductLine(product=1, sku=sku, product_name="Sample Product 1", quantity=qty)


def _box(no, l=0, h=0, w=0, weight=0, qty=1, short=False, **stored):
    return Box(box_no=str(no), is_short_box=short, length=l, height=h, width=w,
               weight=weight, products=[_line(qty)], **stored)


def _shipment(party, day, boxes, start=None, end=None, invoice="INV-1"):
    return ShipmentDocument(
        invoice_no=invoice, customer=1, party_name=party, date=day,
        required_qty=1, start_time=start, end_time=end, boxes=boxes,
    )


def test_worked_example_totals():
    totals = summarize([_box(1, 10, 10, 10, 5), _box(2, 50, 50, 50, 1)])
    assert totals.box_count == 2
    assert totals.total_weight == 6.0
    assert totals.total_volume == 126000.0
    assert totals.total_volume_weight == 28.0
    assert totals.charged_weight == 28.0


def test_charged_weight_is_not_the_sum_of_final_weights():
    boxes = [_box(1, 10, 10, 10, 10), _box(2, 50, 50, 50, 1)]
    final_sum = sum(recompute_box(b).final_weight for b in boxes)
    assert round(final_sum, 2) == 37.78
    assert summarize(boxes).charged_weight == 28.0


def test_stored_derived_values_are_ignored():
    stale = _box(1, 10, 10, 10, 5, volume=999, volume_weight=999, final_weight=999)
    box = recompute_box(stale)
    assert (box.volume, box.volume_weight, box.final_weight) == (1000.0, 0.22, 5.0)


def test_short_box_always_reads_as_zero():
    box = recompute_box(_box(1, 40, 40, 40, 12, short=True))
    assert (box.length, box.height, box.width, box.weight) == (0, 0, 0, 0)
    assert (box.volume, box.volume_weight, box.final_weight) == (0, 0, 0)


def test_pieces_split_into_available_and_short():
    boxes = [_box(1, 10, 10, 10, 1, qty=4), _box(2, 10, 10, 10, 1, qty=6), _box(3, qty=3, short=True)]
    totals = summarize(boxes)
    assert totals.available_qty == 10
    assert totals.short_qty == 3
    assert totals.total_pieces == totals.available_qty + totals.short_qty == 13


def test_empty_shipment_totals():
    totals = summarize([])
    assert totals.box_count == 0
    assert totals.charged_weight == 0


def test_quantity_check():
    assert quantity_check(10, 10).matches is True
    check = quantity_check(8, 10)
    assert check.matches is False
    assert check.difference == -2
    assert quantity_check(8, None).required_qty is None


def test_packing_minutes():
    assert packing_minutes("09:15", "10:45") == 90
    assert packing_minutes("10:00", "09:00") is None
    assert packing_minutes(None, "09:00") is None
    assert packing_minutes("nine", "10:00") is None


def test_in_range_is_inclusive():
    assert in_range(date(2026, 3, 1), date(2026, 3, 1), date(2026, 3, 31))
    assert in_range(date(2026, 3, 31), date(2026, 3, 1), date(2026, 3, 31))
    assert not in_range(date(2026, 4, 1), date(2026, 3, 1), date(2026, 3, 31))
    assert in_range(date(2020, 1, 1), None, None)


def test_customer_summary_groups_by_party_name_string():
    shipments = [
        _shipment("Acme Traders", date(2026, 3, 2), [_box(1, 10, 10, 10, 5)], "09:00", "09:30"),
        _shipment("ACME Traders", date(2026, 3, 3), [_box(1, 50, 50, 50, 1)], "10:00", "11:00"),
        _shipment("Acme Traders", date(2026, 3, 4), [_box(1, 10, 10, 10, 2), _box(2, qty=1, short=True)],
                  "12:00", "11:00"),
        _shipment("Acme Traders", date(2026, 5, 1), [_box(1, 10, 10, 10, 7)]),
    ]
    report = customer_summary(shipments, date(2026, 3, 1), date(2026, 3, 31))

    assert report.total_shipments == 3
    assert report.total_boxes == 4
    assert report.total_weight == 34.78
    assert [c.party_name for c in report.customers] == ["ACME Traders", "Acme Traders"]

    acme = report.customers[1]
    assert acme.shipments == 2
    assert acme.boxes == 3
    assert acme.total_weight == 7.0
    # End before start is left out of duration stats
    assert acme.total_duration_minutes == 30
    assert report.avg_duration_minutes == 45.0


def test_customer_summary_names_missing_party_unknown():
    doc = _shipment("Acme", date(2026, 3, 2), [_box(1, 10, 10, 10, 5)]).model_copy(update={"party_name": ""})
    report = customer_summary([doc])
    assert report.customers[0].party_name == "Unknown"
    assert report.avg_duration_minutes is None
