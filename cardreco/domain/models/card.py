from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Dict, FrozenSet, Iterable, List, Optional
from datetime import datetime

class CatalogItem(BaseModel):
    card_id: int
    name: str
    type: str
    rarity: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None

    model_config = {"frozen": True}  # immuable = safe

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class PurchaseLine(BaseModel):
    card_id: int
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    card: Optional[CatalogItem] = None  # joined item details

    model_config = {"frozen": True}


class PurchaseRecord(BaseModel):
    order_id: str
    customer_id: str
    created_at: datetime
    lines: List[PurchaseLine] = []

    model_config = {"frozen": True}


class Customer(BaseModel):
    customer_id: str
    name: str
    email: Optional[str] = None

    model_config = {"frozen": True}


class CustomerPurchases(BaseModel):
    """Every item id one customer ever bought (collaborative filtering row)."""
    customer_id: str
    card_ids: FrozenSet[int] = frozenset()

    model_config = {"frozen": True}


class ScoredItem(BaseModel):
    card: CatalogItem
    score: float = Field(ge=0)
    reasons: List[str] = []

    model_config = {"frozen": True}

    @property
    def card_id(self) -> int:
        return self.card.card_id


class CustomerProfile(BaseModel):
    """
    Transient purchase profile of one customer, computed fresh per request.

    Counts are quantity weighted and keep first-encountered order, so the
    favourites resolve ties towards what the customer bought most recently
    (history is scanned newest order first).
    """
    purchased_ids: FrozenSet[int]
    type_counts: Dict[str, int]
    rarity_counts: Dict[str, int]
    min_price: float
    max_price: float

    model_config = {"frozen": True}

    @classmethod
    def from_history(cls, records: Iterable[PurchaseRecord]) -> Optional["CustomerProfile"]:
        purchased: set[int] = set()
        type_counts: Dict[str, int] = {}
        rarity_counts: Dict[str, int] = {}
        prices: List[float] = []

        for record in records:
            for line in record.lines:
                purchased.add(line.card_id)
                card = line.card
                if card is None:
                    # item deleted from the catalog: still "bought", no attributes
                    continue
                type_counts[card.type] = type_counts.get(card.type, 0) + line.quantity
                rarity_counts[card.rarity] = rarity_counts.get(card.rarity, 0) + line.quantity
                prices.append(card.price)

        if not purchased:
            return None
        return cls(
            purchased_ids=frozenset(purchased),
            type_counts=type_counts,
            rarity_counts=rarity_counts,
            min_price=min(prices) if prices else 0.0,
            max_price=max(prices) if prices else 0.0,
        )

    @staticmethod
    def _top(counts: Dict[str, int]) -> Optional[str]:
        # max() keeps the first key among equal counts
        return max(counts, key=counts.__getitem__) if counts else None

    @property
    def favorite_type(self) -> Optional[str]:
        return self._top(self.type_counts)

    @property
    def favorite_rarity(self) -> Optional[str]:
        return self._top(self.rarity_counts)


class RecommendationResult(BaseModel):
    strategy: str
    customer_id: Optional[str] = None
    reference_item_id: Optional[int] = None
    items: List[ScoredItem]
    count: int
    model_config = {"frozen": True} # immuable = safe


class ChatResult(BaseModel):
    text: str
    items: List[ScoredItem]
    model_config = {"frozen": True}
