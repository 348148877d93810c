# utils/errors.py
from fastapi import HTTPException

from packing.errors import ErrorKind, ShipmentValidationError

# Uniqueness clashes are conflicts; every other rejected operation is a bad request
_CONFLICT_KINDS = {ErrorKind.DUPLICATE_INVOICE, ErrorKind.REMOVAL_IN_PROGRESS}

def http_error(e: ShipmentValidationError) -> HTTPException:
    status_code = 409 if e.kind in _CONFLICT_KINDS else 400
    if e.kind in (ErrorKind.UNKNOWN_BOX, ErrorKind.UNKNOWN_LINE):
        status_code = 404
    return HTTPException(status_code=status_code, detail=e.to_dict())
