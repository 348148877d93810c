# backend/packing/lookups.py
import logging
from typing import Dict, Iterable, Optional, Protocol, Union

from packing.domain import CatalogProduct, CustomerRef
from packing.errors import LookupFailed

logger = logging.getLogger(__name__)


class CatalogLookup(Protocol):
    def resolve_sku(self, sku: str) -> Optional[CatalogProduct]:
        ...


class CustomerLookup(Protocol):
    def resolve_customer(self, ref: Union[int, str]) -> Optional[CustomerRef]:
        ...


def safe_resolve_sku(catalog: CatalogLookup, sku: str) -> Optional[CatalogProduct]:
    # No retry: an unreachable catalog counts as an unknown SKU
    try:
        return catalog.resolve_sku(sku)
    except LookupFailed as e:
        logger.warning("Catalog lookup failed for SKU %s: %s", sku, e)
        return None


def safe_resolve_customer(customers: CustomerLookup, ref: Union[int, str]) -> Optional[CustomerRef]:
    try:
        return customers.resolve_customer(ref)
    except LookupFailed as e:
        logger.warning("Customer lookup failed for %r: %s", ref, e)
        return None


# In-process lookups over fixed records, keyed case-insensitively
class StaticCatalog:
    def __init__(self, products: Iterable[CatalogProduct] = ()):
        self._by_sku: Dict[str, CatalogProduct] = {p.sku.upper(): p for p in products}

    def resolve_sku(self, sku: str) -> Optional[CatalogProduct]:
        return self._by_sku.get((sku or "").strip().upper())


class StaticCustomers:
    def __init__(self, customers: Iterable[CustomerRef] = ()):
        self._customers = list(customers)

    def resolve_customer(self, ref: Union[int, str]) -> Optional[CustomerRef]:
        for c in self._customers:
            if isinstance(ref, int) and not isinstance(ref, bool):
                if c.id == ref:
                    return c
            elif str(ref).strip().upper() == c.code.upper():
                return c
        return None
