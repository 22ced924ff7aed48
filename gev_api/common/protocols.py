"""
Storage interfaces the sale pipeline and the reports depend on.

The SQLAlchemy repositories in each feature package implement them; services
only ever see these protocols so a different store can be plugged in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable


@dataclass
class SalesSummary:
    """Scalar sums over a window of sales."""

    count: int
    receita: Decimal
    custo: Decimal
    lucro: Decimal


@dataclass
class DailyTotals:
    """Sales of one calendar day."""

    dia: date
    receita: Decimal
    lucro: Decimal
    quantidade: int


@dataclass
class ProductRanking:
    """Units sold and revenue attributed to one product."""

    produto_id: Optional[int]
    produto_nome: str
    total_vendido: int
    receita_total: Decimal


@runtime_checkable
class CatalogStore(Protocol):
    """Product lookups and stock movements used by the sale pipeline."""

    def get_many(self, product_ids: Iterable[int]) -> Dict[int, "Product"]:  # noqa: F821
        """Return the products found for the given ids, keyed by id."""
        ...

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomically subtract ``quantity`` from the product stock.

        Returns False, without changing anything, when the product does not
        have that many units.
        """
        ...


@runtime_checkable
class CustomerLedger(Protocol):
    """Customer lookups and purchase bookkeeping used by the sale pipeline."""

    def get(self, customer_id: int) -> Optional["Customer"]:  # noqa: F821
        ...

    def register_purchase(self, customer_id: int, amount: Decimal, when: datetime) -> None:
        ...


@runtime_checkable
class SalesStore(Protocol):
    """Persistence and read-only aggregations over sales."""

    def add(self, sale: "Sale") -> "Sale":  # noqa: F821
        """Stage a sale and its items in the current transaction."""
        ...

    def commit(self) -> None:
        """Commit the unit of work shared with the catalog and the ledger."""
        ...

    def rollback(self) -> None:
        ...

    def summarize(self, start: Optional[datetime], end: Optional[datetime]) -> SalesSummary:
        ...

    def daily_totals(self, start: Optional[datetime], end: Optional[datetime]) -> List[DailyTotals]:
        """Per-day sums, only for days that have at least one sale."""
        ...

    def top_products(self, start: Optional[datetime], end: Optional[datetime],
                     limit: int) -> List[ProductRanking]:
        ...

    def first_sale_at(self) -> Optional[datetime]:
        ...

    def count_by_status(self, status: str) -> int:
        ...
