# cardreco/domain/repositories/base.py
from __future__ import annotations
from typing import Iterable, List, Optional, Protocol

from cardreco.domain.models.card import (
    CatalogItem,
    Customer,
    CustomerPurchases,
    PurchaseLine,
    PurchaseRecord,
)

"""
Read-only collaborator interfaces consumed by the recommenders.
The Mongo repositories implement them; tests plug in-memory fakes.
"""


class CatalogReader(Protocol):
    async def get_by_card_id(self, card_id: int) -> Optional[CatalogItem]: ...

    async def list_in_stock(
        self,
        exclude_ids: Optional[Iterable[int]] = None,
        limit: Optional[int] = None,
    ) -> List[CatalogItem]:
        """Items with stock > 0, catalog order (card_id ascending)."""
        ...

    async def get_many(self, card_ids: Iterable[int], in_stock_only: bool = True) -> List[CatalogItem]: ...


class OrderHistoryReader(Protocol):
    async def list_for_customer(self, customer_id: str, limit: Optional[int] = None) -> List[PurchaseRecord]:
        """Orders of one customer, newest first, lines joined with item details."""
        ...

    async def list_all_lines(self) -> List[PurchaseLine]: ...

    async def list_customer_purchases(self, exclude_customer_id: Optional[str] = None) -> List[CustomerPurchases]: ...


class CustomerReader(Protocol):
    async def get_by_customer_id(self, customer_id: str) -> Optional[Customer]: ...
