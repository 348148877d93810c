# backend/packing/validator.py
import re
from typing import Any, List, Optional, Sequence, Tuple

from packing import calculator
from packing.domain import Box, BoxSpec, CustomerRef, ProductLine, ProductLineSpec, new_id
from packing.errors import ErrorKind, ShipmentValidationError
from packing.lookups import CatalogLookup, safe_resolve_sku

_INT_RE = re.compile(r"^\+?\d+$")

Dimensions = Tuple[float, float, float, float]


def parse_quantity(value: Any) -> int:
    """Parse an operator-entered quantity into an integer >= 1."""
    qty: Optional[int] = None
    if isinstance(value, bool) or value is None:
        qty = None
    elif isinstance(value, int):
        qty = value
    elif isinstance(value, float):
        qty = int(value) if value.is_integer() else None
    elif isinstance(value, str) and _INT_RE.match(value.strip()):
        qty = int(value.strip())

    if qty is None or qty < 1:
        raise ShipmentValidationError(ErrorKind.INVALID_QUANTITY, quantity=value)
    return qty


def validate_line(spec: ProductLineSpec, catalog: CatalogLookup) -> ProductLine:
    sku = (spec.sku or "").strip().upper()
    if not sku:
        raise ShipmentValidationError(
            ErrorKind.UNKNOWN_SKU, "Please fill in SKU and quantity for the product.", sku=spec.sku
        )
    quantity = parse_quantity(spec.quantity)

    product = safe_resolve_sku(catalog, sku)
    if product is None:
        raise ShipmentValidationError(ErrorKind.UNKNOWN_SKU, f"Product with SKU {sku} not found.", sku=sku)

    external_sku = (spec.external_sku or "").strip() or None
    return ProductLine(
        id=spec.id or new_id(),
        product=product.id,
        sku=product.sku,
        product_name=product.product_name,
        external_sku=external_sku,
        quantity=quantity,
    )


def check_dimensions(spec: BoxSpec) -> Dimensions:
    """Return (length, height, width, weight) for a box, forced to zero for a short box."""
    if spec.is_short_box:
        return 0.0, 0.0, 0.0, 0.0

    raw = {"length": spec.length, "height": spec.height, "width": spec.width, "weight": spec.weight}
    # Every field must be filled with a positive number; zero counts as empty
    missing = [name for name, value in raw.items() if calculator.to_number(value) <= 0]
    if missing:
        raise ShipmentValidationError(ErrorKind.INVALID_DIMENSIONS, fields=missing)
    return tuple(calculator.to_number(raw[k]) for k in ("length", "height", "width", "weight"))


def check_short_box(spec: BoxSpec, boxes: Sequence[Box], exclude_id: Optional[str] = None) -> None:
    if not spec.is_short_box:
        return
    for box in boxes:
        if box.is_short_box and box.id != exclude_id:
            raise ShipmentValidationError(ErrorKind.DUPLICATE_SHORT_BOX, existing_box_no=box.box_no)


def validate_box(
    spec: BoxSpec,
    boxes: Sequence[Box],
    catalog: CatalogLookup,
    exclude_id: Optional[str] = None,
) -> Tuple[Dimensions, List[ProductLine]]:
    """Check a box before it is committed to a shipment.

    ``boxes`` are the shipment's committed boxes; ``exclude_id`` names the box
    being edited so it does not count against itself.
    """
    check_short_box(spec, boxes, exclude_id)
    dims = check_dimensions(spec)
    if not spec.products:
        raise ShipmentValidationError(ErrorKind.EMPTY_BOX)
    lines = [validate_line(line, catalog) for line in spec.products]
    return dims, lines


def check_party_name(party_name: str, customer: CustomerRef) -> None:
    """The party name must be the resolved customer's name, ignoring case and outer spaces."""
    if (party_name or "").strip().casefold() != customer.name.strip().casefold():
        raise ShipmentValidationError(
            ErrorKind.UNKNOWN_CUSTOMER,
            f"Party name {party_name!r} does not match customer {customer.code} ({customer.name}).",
            party_name=party_name, customer=customer.id,
        )
