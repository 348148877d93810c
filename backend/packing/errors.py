# backend/packing/errors.py
import enum
from typing import Any, Dict


class ErrorKind(str, enum.Enum):
    EMPTY_BOX = "EmptyBox"
    DUPLICATE_SHORT_BOX = "DuplicateShortBox"
    INVALID_DIMENSIONS = "InvalidDimensions"
    UNKNOWN_SKU = "UnknownSku"
    INVALID_QUANTITY = "InvalidQuantity"
    UNKNOWN_CUSTOMER = "UnknownCustomer"
    DUPLICATE_INVOICE = "DuplicateInvoice"
    MISSING_HEADER = "MissingHeader"
    EMPTY_SHIPMENT = "EmptyShipment"
    UNKNOWN_BOX = "UnknownBox"
    UNKNOWN_LINE = "UnknownLine"
    REMOVAL_IN_PROGRESS = "RemovalInProgress"
    DRAFT_SUBMITTED = "DraftSubmitted"
    INVALID_STATUS_TRANSITION = "InvalidStatusTransition"


# Default user-facing messages per error kind
MESSAGES = {
    ErrorKind.EMPTY_BOX: "Please add at least one product to the box.",
    ErrorKind.DUPLICATE_SHORT_BOX: "Only one short box is allowed per shipment.",
    ErrorKind.INVALID_DIMENSIONS: "Please fill in all box dimensions and weight.",
    ErrorKind.UNKNOWN_SKU: "Product not found.",
    ErrorKind.INVALID_QUANTITY: "Quantity must be a whole number of at least 1.",
    ErrorKind.UNKNOWN_CUSTOMER: "Please select a customer from the customer list.",
    ErrorKind.DUPLICATE_INVOICE: "Shipment with this invoice number already exists.",
    ErrorKind.MISSING_HEADER: "Please fill in all required fields.",
    ErrorKind.EMPTY_SHIPMENT: "Please add at least one box.",
    ErrorKind.UNKNOWN_BOX: "Box not found.",
    ErrorKind.UNKNOWN_LINE: "Product line not found in box.",
    ErrorKind.REMOVAL_IN_PROGRESS: "Remove operation already in progress.",
    ErrorKind.DRAFT_SUBMITTED: "This draft has already been submitted.",
    ErrorKind.INVALID_STATUS_TRANSITION: "Shipment status cannot move backwards.",
}


class ShipmentValidationError(Exception):
    """A rejected shipment operation. Carries a kind plus context for rendering."""

    def __init__(self, kind: ErrorKind, message: str = None, **context: Any):
        self.kind = kind
        self.message = message or MESSAGES[kind]
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.context}


class DuplicateInvoiceError(ShipmentValidationError):
    def __init__(self, invoice_no: str):
        super().__init__(
            ErrorKind.DUPLICATE_INVOICE,
            f"Shipment with invoice number {invoice_no} already exists.",
            invoice_no=invoice_no,
        )


class LookupFailed(Exception):
    """The catalog or customer store could not be reached."""
