# utils/draft_store.py
from typing import Any, Optional

from sqlalchemy.orm import Session

from models.draft import ShipmentDraftRecord


# Draft store persisted in the shipment_drafts table, one row per key
class DbDraftStore:
    def __init__(self, db: Session, prefix: str = ""):
        self.db = db
        self.prefix = prefix

    def _row(self, key: str) -> Optional[ShipmentDraftRecord]:
        return (self.db.query(ShipmentDraftRecord)
                .filter(ShipmentDraftRecord.key == self.prefix + key)
                .first())

    def get(self, key: str) -> Optional[Any]:
        row = self._row(key)
        return row.payload if row else None

    def set(self, key: str, value: Any) -> None:
        row = self._row(key)
        if row is None:
            row = ShipmentDraftRecord(key=self.prefix + key)
            self.db.add(row)
        row.payload = value
        self.db.commit()

    def remove(self, key: str) -> None:
        row = self._row(key)
        if row is not None:
            self.db.delete(row)
            self.db.commit()
