"""Static product catalog data."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from pos_terminal.constant import PRODUCT_ROWS
from pos_terminal.models import Product


class ProductCatalog:
    """In-memory product lookup used by the search bar."""

    def __init__(self, products: Iterable[Product]) -> None:
        self._products = list(products)

    def list_all(self) -> list[Product]:
        return list(self._products)

    def find_by_sku_or_name(self, term: str) -> Product | None:
        """Exact, case-insensitive match on SKU first, then on name."""
        needle = term.strip().lower()
        if not needle:
            return None
        for product in self._products:
            if product.sku.lower() == needle:
                return product
        for product in self._products:
            if product.name.lower() == needle:
                return product
        return None

    def search(self, term: str) -> list[Product]:
        needle = term.strip().lower()
        if not needle:
            return self.list_all()
        return [p for p in self._products if needle in p.name.lower() or needle in p.sku.lower()]


DEFAULT_CATALOG = ProductCatalog(
    Product(sku=str(row["sku"]), name=str(row["name"]), price=Decimal(str(row["price"])))
    for row in PRODUCT_ROWS
)
