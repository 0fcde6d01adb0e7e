# cardreco/domain/services/features.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple
import math

from cardreco.domain.models.card import CatalogItem
from cardreco.domain.services.constants import (
    PRICE_BUDGET_MAX,
    PRICE_MID_MAX,
    RARITY_TIERS,
    TYPE_RANKS,
)


def rarity_rank(rarity: Optional[str], default: int = 0) -> int:
    """Tier of a rarity label (case-insensitive); `default` for unknown labels."""
    if not rarity:
        return default
    return RARITY_TIERS.get(rarity.strip().lower(), default)


def type_rank(card_type: Optional[str]) -> int:
    if not card_type:
        return 0
    return TYPE_RANKS.get(card_type.strip().lower(), 0)


def price_bucket(price: float) -> str:
    if price < PRICE_BUDGET_MAX:
        return "budget"
    if price < PRICE_MID_MAX:
        return "mid"
    return "premium"


@dataclass(frozen=True)
class CardFeatures:
    rarity_rank: int
    type_rank: int
    price_bucket: str
    stock_ratio: float
    vector: Tuple[float, float, float, float]


def extract_features(card: CatalogItem) -> CardFeatures:
    """
    Fixed-order feature vector of a card:
      [rarity rank, type rank, log10(price + 1), min(stock / 100, 1)]
    Unknown rarities count as the lowest tier, unknown types as 0.
    """
    r = rarity_rank(card.rarity, default=1)
    t = type_rank(card.type)
    stock_ratio = min(card.stock / 100, 1.0)
    return CardFeatures(
        rarity_rank=r,
        type_rank=t,
        price_bucket=price_bucket(card.price),
        stock_ratio=stock_ratio,
        vector=(float(r), float(t), math.log10(card.price + 1), stock_ratio),
    )
