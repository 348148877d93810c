# utils/shipments.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.shipment import Shipment
from packing.aggregator import quantity_check, recompute_box, summarize
from packing.domain import Box, ShipmentDocument
from packing.errors import DuplicateInvoiceError

logger = logging.getLogger(__name__)


def invoice_taken(db: Session, invoice_no: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Shipment.id).filter(Shipment.invoice_no == invoice_no.strip().upper())
    if exclude_id is not None:
        q = q.filter(Shipment.id != exclude_id)
    return q.first() is not None


def row_to_document(row: Shipment) -> ShipmentDocument:
    """Rebuild the core document from a stored row, recomputing box weights."""
    boxes = [recompute_box(Box.model_validate(b)) for b in (row.boxes or [])]
    return ShipmentDocument(
        invoice_no=row.invoice_no,
        customer=row.customer_id,
        party_name=row.party_name,
        date=row.date,
        required_qty=row.required_qty,
        start_time=row.start_time,
        end_time=row.end_time,
        status=row.status,
        notes=row.notes,
        boxes=boxes,
    )


def shipment_view(row: Shipment) -> dict:
    doc = row_to_document(row)
    totals = summarize(doc.boxes)
    data = doc.to_document()
    data.update({
        "id": row.id,
        "totals": totals.model_dump(by_alias=True),
        "quantityCheck": quantity_check(totals.total_pieces, doc.required_qty).model_dump(by_alias=True),
        "createdBy": row.created_by,
        "updatedBy": row.updated_by,
        "createdAt": row.created_at,
        "updatedAt": row.updated_at,
    })
    return data


def _apply(row: Shipment, doc: ShipmentDocument) -> None:
    row.invoice_no = doc.invoice_no
    row.customer_id = doc.customer
    row.party_name = doc.party_name
    row.date = doc.date
    row.required_qty = doc.required_qty
    row.start_time = doc.start_time
    row.end_time = doc.end_time
    row.status = doc.status
    row.notes = doc.notes
    row.boxes = doc.boxes_document()


def _commit(db: Session, invoice_no: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # The unique index is the source of truth when two saves race
        if "invoice_no" in str(e.orig):
            raise DuplicateInvoiceError(invoice_no) from e
        raise


def insert_shipment(db: Session, doc: ShipmentDocument, user_id: Optional[int]) -> Shipment:
    if invoice_taken(db, doc.invoice_no):
        raise DuplicateInvoiceError(doc.invoice_no)
    row = Shipment(created_by=user_id)
    _apply(row, doc)
    db.add(row)
    _commit(db, doc.invoice_no)
    db.refresh(row)
    logger.info("Shipment %s stored with %d boxes", row.invoice_no, len(doc.boxes))
    return row


def save_shipment(db: Session, row: Shipment, doc: ShipmentDocument, user_id: Optional[int]) -> Shipment:
    """Whole-document write; concurrent editors of one shipment are last-writer-wins."""
    if invoice_taken(db, doc.invoice_no, exclude_id=row.id):
        raise DuplicateInvoiceError(doc.invoice_no)
    _apply(row, doc)
    row.updated_by = user_id
    _commit(db, doc.invoice_no)
    db.refresh(row)
    return row
