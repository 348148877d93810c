# utils/lookups.py
import logging
from typing import Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.customer import Customer
from models.product import Product
from packing.domain import CatalogProduct, CustomerRef
from packing.errors import LookupFailed

logger = logging.getLogger(__name__)


def _norm_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


# Catalog lookup over the products table
class DbCatalogLookup:
    def __init__(self, db: Session):
        self.db = db

    def resolve_sku(self, sku: str) -> Optional[CatalogProduct]:
        code = _norm_code(sku)
        if not code:
            return None
        try:
            product = (self.db.query(Product)
                       .filter(Product.sku == code, Product.is_active.is_(True))
                       .first())
            if product is None:
                # Deactivated products still resolve so old boxes stay editable
                product = self.db.query(Product).filter(Product.sku == code).first()
        except SQLAlchemyError as e:
            logger.error("Catalog lookup error for %s: %s", code, e)
            raise LookupFailed(str(e)) from e

        if product is None:
            return None
        return CatalogProduct(
            id=product.id, sku=product.sku, product_name=product.product_name,
            category_id=product.category_id,
        )


# Customer lookup by id or by customer code
class DbCustomerLookup:
    def __init__(self, db: Session):
        self.db = db

    def resolve_customer(self, ref: Union[int, str]) -> Optional[CustomerRef]:
        try:
            customer = None
            if isinstance(ref, int) and not isinstance(ref, bool):
                customer = self.db.query(Customer).filter(Customer.id == ref).first()
            else:
                code = _norm_code(str(ref))
                customer = self.db.query(Customer).filter(func.upper(Customer.code) == code).first()
                if customer is None and code.isdigit():
                    customer = self.db.query(Customer).filter(Customer.id == int(code)).first()
        except SQLAlchemyError as e:
            logger.error("Customer lookup error for %r: %s", ref, e)
            raise LookupFailed(str(e)) from e

        if customer is None:
            return None
        return CustomerRef(id=customer.id, code=customer.code, name=customer.name)
