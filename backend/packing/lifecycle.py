# backend/packing/lifecycle.py
import enum
import logging
from datetime import date
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from packing.aggregator import quantity_check, recompute_box, summarize
from packing.domain import (
    Box, BoxPatch, BoxSpec, ProductLine, ProductLineSpec, QuantityCheck,
    ShipmentDocument, ShipmentHeader, ShipmentTotals, new_id,
)
from packing.draft_store import DraftStore
from packing.errors import ErrorKind, ShipmentValidationError
from packing.guard import RemovalGuard
from packing.lookups import CatalogLookup, CustomerLookup, safe_resolve_customer, safe_resolve_sku
from packing.validator import (
    check_party_name, check_short_box, parse_quantity, validate_box, validate_line,
)

logger = logging.getLogger(__name__)

DRAFT_KEY = "tempBoxes"

M = TypeVar("M", bound=BaseModel)


class DraftState(str, enum.Enum):
    EMPTY = "Empty"
    HAS_BOXES = "HasBoxes"
    SUBMITTED = "Submitted"


def _coerce(model: Type[M], value: Any) -> M:
    return value if isinstance(value, model) else model.model_validate(value)


def renumber(boxes: List[Box]) -> List[Box]:
    """Box numbers are always 1..N in list order."""
    return [b if b.box_no == str(i) else b.model_copy(update={"box_no": str(i)})
            for i, b in enumerate(boxes, start=1)]


def _build_box(box_id: str, box_no: str, is_short_box: bool, dims, lines: List[ProductLine]) -> Box:
    length, height, width, weight = dims
    box = Box(
        id=box_id, box_no=box_no, is_short_box=is_short_box,
        length=length, height=height, width=width, weight=weight, products=lines,
    )
    return recompute_box(box)


class ShipmentDraft:
    """The single in-progress shipment of one operator.

    Every mutation is validated first and then applied as a whole: the box
    list is rebuilt, renumbered, written to the draft store and only then
    swapped in, so a rejected operation leaves the draft exactly as it was.
    """

    def __init__(
        self,
        catalog: CatalogLookup,
        customers: CustomerLookup,
        store: DraftStore,
        key: str = DRAFT_KEY,
        guard: Optional[RemovalGuard] = None,
    ):
        self.catalog = catalog
        self.customers = customers
        self.store = store
        self.key = key
        self.guard = guard or RemovalGuard()
        self._submitted = False
        self._boxes: List[Box] = self._load()

    # ---- state ----
    def _load(self) -> List[Box]:
        saved = self.store.get(self.key) or []
        return renumber([recompute_box(Box.model_validate(b)) for b in saved])

    def _commit(self, boxes: List[Box]) -> None:
        boxes = renumber(boxes)
        self.store.set(self.key, [b.model_dump(by_alias=True) for b in boxes])
        self._boxes = boxes

    def _ensure_open(self) -> None:
        if self._submitted:
            raise ShipmentValidationError(ErrorKind.DRAFT_SUBMITTED)

    def _find(self, box_id: str) -> Tuple[int, Box]:
        for i, box in enumerate(self._boxes):
            if box.id == box_id:
                return i, box
        raise ShipmentValidationError(ErrorKind.UNKNOWN_BOX, box_id=box_id)

    def _replace(self, index: int, box: Box) -> List[Box]:
        boxes = list(self._boxes)
        boxes[index] = box
        return boxes

    @property
    def state(self) -> DraftState:
        if self._submitted:
            return DraftState.SUBMITTED
        return DraftState.HAS_BOXES if self._boxes else DraftState.EMPTY

    @property
    def boxes(self) -> List[Box]:
        return [b.model_copy(deep=True) for b in self._boxes]

    def get_box(self, box_id: str) -> Box:
        return self._find(box_id)[1].model_copy(deep=True)

    def totals(self) -> ShipmentTotals:
        return summarize(self._boxes)

    def quantity_check(self, required_qty: Any = None) -> QuantityCheck:
        required = None
        if required_qty not in (None, ""):
            required = parse_quantity(required_qty)
        return quantity_check(self.totals().total_pieces, required)

    # ---- box operations ----
    def add_box(self, spec) -> Box:
        self._ensure_open()
        spec = _coerce(BoxSpec, spec)
        try:
            dims, lines = validate_box(spec, self._boxes, self.catalog)
        except ShipmentValidationError as e:
            logger.info("Rejected box add: %s", e.kind.value)
            raise
        box = _build_box(new_id(), str(len(self._boxes) + 1), spec.is_short_box, dims, lines)
        self._commit(self._boxes + [box])
        return box

    def edit_box(self, box_id: str, patch) -> Box:
        self._ensure_open()
        index, current = self._find(box_id)
        # null means "leave as is"
        changes = _coerce(BoxPatch, patch).model_dump(exclude_unset=True, exclude_none=True)

        merged = current.to_spec().model_dump()
        merged.update(changes)
        spec = BoxSpec.model_validate(merged)

        dims, lines = validate_box(spec, self._boxes, self.catalog, exclude_id=box_id)
        box = _build_box(current.id, current.box_no, spec.is_short_box, dims, lines)
        self._commit(self._replace(index, box))
        return box

    def copy_box(self, box_id: str) -> Box:
        self._ensure_open()
        _, source = self._find(box_id)
        check_short_box(BoxSpec(is_short_box=source.is_short_box), self._boxes)
        copied = source.model_copy(deep=True, update={
            "id": new_id(),
            "box_no": str(len(self._boxes) + 1),
            "products": [line.model_copy(update={"id": new_id()}) for line in source.products],
        })
        copied = recompute_box(copied)
        self._commit(self._boxes + [copied])
        return copied

    def remove_box(self, box_id: str) -> None:
        self._ensure_open()
        with self.guard.hold() as acquired:
            if not acquired:
                logger.warning("Remove operation already in progress for draft %s, ignoring", self.key)
                raise ShipmentValidationError(ErrorKind.REMOVAL_IN_PROGRESS, box_id=box_id)
            # Another session may have committed since this draft was loaded
            self._boxes = self._load()
            self._find(box_id)
            self._commit([b for b in self._boxes if b.id != box_id])

    # ---- product operations ----
    def add_product_to_box(self, box_id: str, line_spec) -> ProductLine:
        self._ensure_open()
        index, box = self._find(box_id)
        line = validate_line(_coerce(ProductLineSpec, line_spec), self.catalog)
        updated = recompute_box(box.model_copy(update={"products": box.products + [line]}))
        self._commit(self._replace(index, updated))
        return line

    def remove_product_from_box(self, box_id: str, line_id: str) -> None:
        self._ensure_open()
        index, box = self._find(box_id)
        remaining = [l for l in box.products if l.id != line_id]
        if len(remaining) == len(box.products):
            raise ShipmentValidationError(ErrorKind.UNKNOWN_LINE, box_id=box_id, line_id=line_id)
        if not remaining:
            raise ShipmentValidationError(ErrorKind.EMPTY_BOX, box_id=box_id)
        updated = recompute_box(box.model_copy(update={"products": remaining}))
        self._commit(self._replace(index, updated))

    # ---- submit ----
    def _finalize_box(self, box: Box) -> Box:
        # Denormalised SKU and name must match the catalog at submit time
        lines = []
        for line in box.products:
            product = safe_resolve_sku(self.catalog, line.sku)
            if product is None:
                raise ShipmentValidationError(
                    ErrorKind.UNKNOWN_SKU, f"Product with SKU {line.sku} not found.",
                    sku=line.sku, box_no=box.box_no,
                )
            lines.append(line.model_copy(update={
                "product": product.id, "sku": product.sku, "product_name": product.product_name,
            }))
        return recompute_box(box.model_copy(update={"products": lines}))

    def build_document(self, header) -> ShipmentDocument:
        """Validate the header against the current boxes and return the final document."""
        self._ensure_open()
        header = _coerce(ShipmentHeader, header)
        invoice_no = (header.invoice_no or "").strip().upper()
        party_name = (header.party_name or "").strip()

        missing = [
            name for name, value in (
                ("invoiceNo", invoice_no), ("partyName", party_name), ("requiredQty", header.required_qty),
            )
            if value in (None, "")
        ]
        if missing:
            raise ShipmentValidationError(ErrorKind.MISSING_HEADER, fields=missing)
        required_qty = parse_quantity(header.required_qty)

        if not self._boxes:
            raise ShipmentValidationError(ErrorKind.EMPTY_SHIPMENT)

        customer = None
        if header.customer not in (None, ""):
            customer = safe_resolve_customer(self.customers, header.customer)
        if customer is None:
            raise ShipmentValidationError(
                ErrorKind.UNKNOWN_CUSTOMER, party_name=party_name, customer=header.customer
            )
        check_party_name(party_name, customer)

        return ShipmentDocument(
            invoice_no=invoice_no,
            customer=customer.id,
            party_name=party_name,
            date=header.date or date.today(),
            required_qty=required_qty,
            start_time=header.start_time or None,
            end_time=header.end_time or None,
            status=header.status,
            notes=header.notes,
            boxes=[self._finalize_box(b) for b in self._boxes],
        )

    def submit(self, header, persist: Optional[Callable[[ShipmentDocument], Any]] = None) -> ShipmentDocument:
        """Finalise the draft.

        ``persist`` receives the document before the draft is cleared; if it
        raises, the error propagates and the draft is kept unchanged.
        """
        document = self.build_document(header)
        check = quantity_check(summarize(document.boxes).total_pieces, document.required_qty)
        if not check.matches:
            logger.info(
                "Submitting %s with quantity mismatch: packed %s, required %s",
                document.invoice_no, check.total_pieces, check.required_qty,
            )
        if persist is not None:
            persist(document)
        self.store.remove(self.key)
        self._boxes = []
        self._submitted = True
        logger.info("Draft %s submitted as invoice %s", self.key, document.invoice_no)
        return document

    def discard(self) -> None:
        self.store.remove(self.key)
        self._boxes = []
