import logging
import time
from typing import List

from cardreco.domain.models.card import ScoredItem
from cardreco.domain.services.constants import (
    REASON_SAME_RARITY,
    REASON_SAME_TYPE,
    REASON_SIMILAR_PRICE,
    SIMILAR_PRICE_RATIO,
)
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.features import extract_features
from cardreco.domain.services.similarity import cosine_similarity

logger = logging.getLogger(__name__)


async def get_content_recommendations(ctx: RecoContext, reference_item_id: int, limit: int) -> List[ScoredItem]:
    """
    In-stock cards ranked by feature-vector cosine similarity to one reference card.
    Unknown reference -> empty list. Ties resolve by card_id ascending.
    """
    t0 = time.perf_counter()
    ref = await ctx.catalog.get_by_card_id(reference_item_id)
    if ref is None:
        logger.info("content reference not found card_id=%s", reference_item_id)
        return []

    ref_vec = extract_features(ref).vector
    candidates = await ctx.catalog.list_in_stock(exclude_ids=[ref.card_id])

    scored: List[ScoredItem] = []
    for card in candidates:
        if card.card_id == ref.card_id:
            continue
        reasons = []
        if card.type == ref.type:
            reasons.append(REASON_SAME_TYPE)
        if card.rarity == ref.rarity:
            reasons.append(REASON_SAME_RARITY)
        if abs(card.price - ref.price) < ref.price * SIMILAR_PRICE_RATIO:
            reasons.append(REASON_SIMILAR_PRICE)
        sim = cosine_similarity(ref_vec, extract_features(card).vector)
        scored.append(ScoredItem(card=card, score=max(sim, 0.0), reasons=reasons))

    scored.sort(key=lambda s: (-s.score, s.card_id))
    logger.info(
        "content done ref=%s candidates=%s returned=%s time=%.3fs",
        reference_item_id, len(candidates), min(limit, len(scored)), time.perf_counter() - t0,
    )
    return scored[:limit]
