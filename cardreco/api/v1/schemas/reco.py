# api/v1/schemas/reco.py
from pydantic import BaseModel, Field
from typing import List, Optional

from cardreco.domain.models.card import ChatResult, RecommendationResult, ScoredItem


class ScoredItemOut(BaseModel):
    card_id: int
    name: str
    type: str
    rarity: str
    price: float
    stock: int
    description: Optional[str] = None
    image_url: Optional[str] = None
    score: float
    reasons: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, item: ScoredItem) -> "ScoredItemOut":
        return cls(**item.card.model_dump(), score=item.score, reasons=list(item.reasons))


class RecommendationResponse(BaseModel):
    strategy: str
    customer_id: Optional[str] = None
    reference_item_id: Optional[int] = None
    items: List[ScoredItemOut]
    count: int

    @classmethod
    def from_domain(cls, res: RecommendationResult) -> "RecommendationResponse":
        return cls(
            strategy=res.strategy,
            customer_id=res.customer_id,
            reference_item_id=res.reference_item_id,
            items=[ScoredItemOut.from_domain(i) for i in res.items],
            count=res.count,
        )


class ChatRequest(BaseModel):
    model_config = {"str_strip_whitespace": True}

    message: str = Field(min_length=1, max_length=2000)
    customer_id: Optional[str] = None


class ChatResponse(BaseModel):
    text: str
    cards: List[ScoredItemOut]

    @classmethod
    def from_domain(cls, res: ChatResult) -> "ChatResponse":
        return cls(text=res.text, cards=[ScoredItemOut.from_domain(i) for i in res.items])
